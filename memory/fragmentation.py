from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple
import math

@dataclass
class FragMetrics:
    total_free: int
    lfe: int
    external_frag: float
    entropy: float
    hole_count: int

def _entropy(hole_sizes: List[int]) -> float:
    total = sum(hole_sizes)
    if total <= 0:
        return 0.0
    ps = [s/total for s in hole_sizes if s>0]
    return -sum(p*math.log2(p) for p in ps) + 0.0

def compute_metrics(free_extents: List[Tuple[int,int]]) -> FragMetrics:
    """Summarize free holes given as (start, size) pairs."""
    sizes=[s for _,s in free_extents if s>0]
    total_free=sum(sizes)
    lfe=max(sizes, default=0)
    external = 0.0 if total_free==0 else 1.0 - (lfe/total_free)
    return FragMetrics(total_free, lfe, external, _entropy(sizes), len(sizes))

def is_fragmented(m: FragMetrics, size: int) -> bool:
    # enough free space overall, but no single hole holds the request
    return m.lfe < size <= m.total_free
