"""
Region Allocator - Occupancy Visualizer

Replays a command script (RQ / RL / C / STAT / X) against a RegionAllocator and
draws a Matplotlib heatmap of address-space occupancy over time. Compaction
events are marked as horizontal lines.

How to run (recommended, from repo root):
    python -m tools.visualize_fragmentation --script traces/fragmentation_stressor.txt --capacity 1000 --out out_fragmentation.png

Notes:
- Output lines of the commands themselves are suppressed; only the image and
  the final fragmentation caption are produced.
"""

from __future__ import annotations

import argparse
import contextlib
import io
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script:
# (python -m tools.visualize_fragmentation already works without this,
#  but this makes `python tools/visualize_fragmentation.py ...` work too.)
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from memory.allocator import RegionAllocator, Strategy
from memory.fragmentation import compute_metrics
from run_sim import load_script, new_stats, run_command


def render_state(alloc: RegionAllocator, width: int) -> np.ndarray:
    """
    Return a 1D occupancy array over the address space, binned to 'width'.
    A bin is 1.0 when any owned block touches it.
    """
    cap = alloc.capacity
    bins = np.zeros(width, dtype=np.float32)
    scale = cap / width

    for entry in alloc.status():
        if entry.owner is None:
            continue
        a = int(entry.start / scale)
        b = int(entry.end / scale)
        a = max(0, min(width - 1, a))
        b = max(0, min(width - 1, b))
        bins[a : b + 1] = 1.0

    return bins


def replay(alloc: RegionAllocator, lines, width: int, every: int = 1, strategy=None):
    """Run commands, returning (frames, compaction_marks)."""
    frames: list[np.ndarray] = []
    compact_marks: list[int] = []
    stats = new_stats()

    for i, line in enumerate(lines, start=1):
        before = stats["compact"]
        with contextlib.redirect_stdout(io.StringIO()):
            keep_going = run_command(alloc, line, stats, strategy)
        if stats["compact"] > before:
            compact_marks.append(len(frames))
        if every <= 1 or (i % every == 0):
            frames.append(render_state(alloc, width))
        if not keep_going:
            break

    return frames, compact_marks


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--script", required=True, help="Path to a command script")
    ap.add_argument("--out", default="out_fragmentation.png", help="Output image file")
    ap.add_argument("--capacity", type=int, default=1000, help="Total memory size (units)")
    ap.add_argument("--strategy", choices=[s.value for s in Strategy], default=None,
                    help="Override the placement strategy of every RQ command")
    ap.add_argument("--width", type=int, default=140, help="Heatmap width (bins)")
    ap.add_argument("--every", type=int, default=1, help="Record every N commands")
    args = ap.parse_args(argv)

    script_path = Path(args.script)
    if not script_path.exists():
        raise SystemExit(f"Script not found: {script_path}")
    try:
        alloc = RegionAllocator(args.capacity)
    except ValueError as e:
        raise SystemExit(str(e))

    frames, compact_marks = replay(
        alloc, load_script(str(script_path)), args.width, args.every, args.strategy
    )
    if not frames:
        raise SystemExit("No frames captured. Check script path and --every.")

    H = np.stack(frames, axis=0)  # (time, width)

    fig = plt.figure(figsize=(10.5, 4.6))
    ax = fig.add_subplot(111)
    ax.imshow(H, aspect="auto", interpolation="nearest")
    ax.set_title("Address-space Occupancy Heatmap (script-driven)")
    ax.set_xlabel("address (binned)")
    ax.set_ylabel("time (frames)")

    for t in compact_marks:
        ax.axhline(t, linewidth=1)

    m = compute_metrics(alloc.extents_free())
    caption = (
        f"Final fragmentation: LFE={m.lfe}, holes={m.hole_count}, "
        f"external_frag={m.external_frag:.3f}, entropy={m.entropy:.3f}"
    )
    fig.text(0.01, 0.01, caption, fontsize=9)

    fig.tight_layout()
    out_path = Path(args.out)
    fig.savefig(str(out_path), dpi=220)
    plt.close(fig)
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
