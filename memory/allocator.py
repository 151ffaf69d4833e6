from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, Union

logger = logging.getLogger(__name__)

@dataclass
class Block:
    start: int
    end: int
    owner: Optional[str] = None

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    @property
    def is_free(self) -> bool:
        return self.owner is None

class StatusEntry(NamedTuple):
    start: int
    end: int
    owner: Optional[str]   # None means free

class Failure(Enum):
    INSUFFICIENT_SPACE = 'insufficient_space'
    UNKNOWN_STRATEGY = 'unknown_strategy'
    OWNER_NOT_FOUND = 'owner_not_found'
    INVALID_REQUEST = 'invalid_request'

class Strategy(Enum):
    FIRST_FIT = 'F'
    BEST_FIT = 'B'
    WORST_FIT = 'W'

    @classmethod
    def parse(cls, code: Union[str, Strategy, None]) -> Optional[Strategy]:
        if isinstance(code, Strategy):
            return code
        if not isinstance(code, str):
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None

# Lower rank wins; the scan keeps the first block with the strictly lowest rank,
# so ties go to the lowest address.
_RANK: Dict[Strategy, Callable[[Block], int]] = {
    Strategy.FIRST_FIT: lambda b: 0,
    Strategy.BEST_FIT: lambda b: b.size,
    Strategy.WORST_FIT: lambda b: -b.size,
}

class RegionAllocator:
    """Variable-partition allocator over [0, capacity-1].

    The block list always tiles the whole address space in start order.
    Runtime operations never raise: they return False and record the reason
    in ``last_failure``.
    """
    def __init__(self, capacity: int):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f'capacity must be a positive integer, got {capacity!r}')
        self.capacity = capacity
        self.blocks: List[Block] = [Block(0, capacity-1)]
        self.last_failure: Optional[Failure] = None
        self.moved_total = 0

    def __len__(self) -> int:
        return len(self.blocks)

    def _fail(self, reason: Failure) -> bool:
        self.last_failure = reason
        return False

    def _select(self, size: int, strategy: Strategy) -> Optional[int]:
        rank = _RANK[strategy]
        best_i, best_rank = None, None
        for i, b in enumerate(self.blocks):
            if not b.is_free or b.size < size:
                continue
            r = rank(b)
            if best_rank is None or r < best_rank:
                best_i, best_rank = i, r
                if strategy is Strategy.FIRST_FIT:
                    break
        return best_i

    def allocate(self, owner: str, size: int, strategy: Union[str, Strategy]) -> bool:
        strat = Strategy.parse(strategy)
        if strat is None:
            return self._fail(Failure.UNKNOWN_STRATEGY)
        if not isinstance(owner, str) or not owner:
            return self._fail(Failure.INVALID_REQUEST)
        # bool is an int subclass
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            return self._fail(Failure.INVALID_REQUEST)
        i = self._select(size, strat)
        if i is None:
            logger.debug('no %s candidate for %s (%d units)', strat.name, owner, size)
            return self._fail(Failure.INSUFFICIENT_SPACE)

        hole = self.blocks[i]
        placed = Block(hole.start, hole.start+size-1, owner)
        if hole.size > size:
            hole.start = placed.end + 1
            self.blocks.insert(i, placed)
        else:
            self.blocks[i] = placed
        logger.debug('%s: %s -> [%d:%d]', strat.name, owner, placed.start, placed.end)
        self.last_failure = None
        return True

    def release(self, owner: str) -> bool:
        found = 0
        for b in self.blocks:
            if owner and b.owner == owner:
                b.owner = None
                found += 1
        if not found:
            return self._fail(Failure.OWNER_NOT_FOUND)
        logger.debug('released %d block(s) of %s', found, owner)
        self.merge_adjacent_free()
        self.last_failure = None
        return True

    def merge_adjacent_free(self) -> None:
        self.blocks.sort(key=lambda b: b.start)
        merged: List[Block] = []
        for b in self.blocks:
            prev = merged[-1] if merged else None
            if prev is not None and prev.is_free and b.is_free:
                prev.end = b.end
            else:
                merged.append(b)
        self.blocks = merged

    def compact(self) -> None:
        cursor = 0
        rebuilt: List[Block] = []
        for b in sorted(self.blocks, key=lambda b: b.start):
            if b.is_free:
                continue
            if b.start != cursor:
                self.moved_total += b.size
            rebuilt.append(Block(cursor, cursor+b.size-1, b.owner))
            cursor += b.size
        if cursor < self.capacity:
            rebuilt.append(Block(cursor, self.capacity-1))
        self.blocks = rebuilt
        logger.debug('compacted: owned [0:%d], moved_total=%d', cursor-1, self.moved_total)

    def status(self) -> List[StatusEntry]:
        return [StatusEntry(b.start, b.end, b.owner) for b in self.blocks]

    def owners(self) -> List[str]:
        seen: List[str] = []
        for b in self.blocks:
            if b.owner is not None and b.owner not in seen:
                seen.append(b.owner)
        return seen

    def used(self) -> int:
        return sum(b.size for b in self.blocks if not b.is_free)

    def free_units(self) -> int:
        return self.capacity - self.used()

    def extents_free(self) -> List[Tuple[int,int]]:
        return [(b.start, b.size) for b in self.blocks if b.is_free]

    def largest_free_extent(self) -> int:
        return max((s for _,s in self.extents_free()), default=0)
