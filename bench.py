from __future__ import annotations
import subprocess
import sys
import re
from pathlib import Path

PY = sys.executable  # respects venv if activated, otherwise uses current python

SCENARIOS = [
    ("F", "first-fit"),
    ("B", "best-fit"),
    ("W", "worst-fit"),
]

TRACE = str(Path("traces") / "fragmentation_stressor.txt")
CAPACITY = 1000

PATTERNS = {
    "requests": re.compile(r"Requests:\s+(\d+)"),
    "insufficient": re.compile(r"insufficient=(\d+)"),
    "compactions": re.compile(r"Compactions:\s+(\d+)"),
    "moved": re.compile(r"Units moved:\s+(\d+)"),
    "used": re.compile(r"Used:\s+(\d+)"),
    "lfe": re.compile(r"Fragmentation: LFE=(\d+)"),
    "holes": re.compile(r"holes=(\d+)"),
    "external_frag": re.compile(r"external_frag=([0-9\.]+)"),
}

def run(strategy: str, auto_compact: bool=False) -> str:
    cmd = [PY, "run_sim.py", "--capacity", str(CAPACITY), "--script", TRACE, "--strategy", strategy]
    if auto_compact:
        cmd.append("--auto-compact")
    out = subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True)
    return out

def parse(out: str):
    def get(key, default=None):
        m = PATTERNS[key].search(out)
        return m.group(1) if m else default
    return {
        "requests": int(get("requests", 0)),
        "insufficient": int(get("insufficient", 0)),
        "compactions": int(get("compactions", 0)),
        "moved": int(get("moved", 0)),
        "used": int(get("used", 0)),
        "lfe": int(get("lfe", 0)),
        "holes": int(get("holes", 0)),
        "external_frag": float(get("external_frag", 0.0)),
    }

def main():
    rows=[]
    for strategy, name in SCENARIOS:
        for auto in (False, True):
            rows.append((name, auto, parse(run(strategy, auto))))

    header = ["strategy","auto","requests","failed","compact","moved","used","LFE","holes","ext_frag"]
    print("="*96)
    print("Region Allocator - Strategy Benchmark ({})".format(TRACE))
    print("="*96)
    print("{:<10} {:<5} {:>8} {:>7} {:>8} {:>7} {:>6} {:>6} {:>6} {:>8}".format(*header))
    for name, auto, m in rows:
        print("{:<10} {:<5} {:>8} {:>7} {:>8} {:>7} {:>6} {:>6} {:>6} {:>8.3f}".format(
            name, "yes" if auto else "no", m["requests"], m["insufficient"], m["compactions"],
            m["moved"], m["used"], m["lfe"], m["holes"], m["external_frag"]
        ))
    print("="*96)
    print("Tip: replay a single strategy with the memory map shown:")
    print(f"  python run_sim.py --capacity {CAPACITY} --script {TRACE} --strategy B --show-map")

if __name__ == "__main__":
    main()
