from __future__ import annotations
import argparse, logging, re, sys
from pathlib import Path
from typing import Dict, Iterator, Optional
from memory.allocator import RegionAllocator, Failure, Strategy
from memory.fragmentation import compute_metrics, is_fragmented
from viz.ascii_map import render_map

logger = logging.getLogger(__name__)

# '#' starts a comment only at line start or after whitespace
_COMMENT = re.compile(r'(?:^|\s)#')

def new_stats() -> Dict[str,int]:
    stats={'requests':0,'releases':0,'compact':0,'auto_compact':0}
    for f in Failure:
        stats[f.value]=0
    return stats

def load_script(path: str) -> Iterator[str]:
    with open(path,'r',encoding='utf-8') as f:
        for line in f:
            line=_COMMENT.split(line, 1)[0].strip()
            if line:
                yield line

def read_interactive() -> Iterator[str]:
    while True:
        try:
            line=input('allocator> ')
        except EOFError:
            return
        yield line

def run_command(alloc: RegionAllocator, line: str, stats: Dict[str,int],
                strategy: Optional[str]=None, auto_compact: bool=False) -> bool:
    """Execute one command line. Returns False when the session should end."""
    parts=line.split()
    if not parts:
        return True
    cmd=parts[0]

    if cmd=='X':
        return False

    if cmd=='RQ':
        if len(parts)!=4:
            print('Usage: RQ <process> <size> <F|B|W>')
            return True
        proc, raw_size, code = parts[1], parts[2], strategy or parts[3]
        try:
            size=int(raw_size)
        except ValueError:
            print(f'Error: Invalid size {raw_size}')
            return True
        stats['requests'] += 1
        ok=alloc.allocate(proc, size, code)
        if not ok and auto_compact and alloc.last_failure is Failure.INSUFFICIENT_SPACE:
            m=compute_metrics(alloc.extents_free())
            if is_fragmented(m, size):
                logger.info('fragmented (lfe=%d, free=%d), compacting before retry', m.lfe, m.total_free)
                alloc.compact()
                stats['compact'] += 1
                stats['auto_compact'] += 1
                ok=alloc.allocate(proc, size, code)
        if ok:
            print(f'Successfully allocated {size} bytes to {proc}')
            return True
        stats[alloc.last_failure.value] += 1
        if alloc.last_failure is Failure.UNKNOWN_STRATEGY:
            print('Invalid allocation strategy')
        print(f'Error: Cannot allocate {size} bytes to {proc}')
        return True

    if cmd=='RL':
        if len(parts)!=2:
            print('Usage: RL <process>')
            return True
        stats['releases'] += 1
        if alloc.release(parts[1]):
            print(f'Successfully released memory for {parts[1]}')
        else:
            stats[Failure.OWNER_NOT_FOUND.value] += 1
            print(f'Error: Process {parts[1]} not found')
        return True

    if cmd=='C':
        alloc.compact()
        stats['compact'] += 1
        print('Memory compacted')
        return True

    if cmd=='STAT':
        for e in alloc.status():
            who='Unused' if e.owner is None else f'Process {e.owner}'
            print(f'Addresses [{e.start}:{e.end}] {who}')
        return True

    print('Unknown command')
    return True

def print_summary(alloc: RegionAllocator, stats: Dict[str,int], show_map: bool=False):
    m=compute_metrics(alloc.extents_free())
    print("="*72)
    print("Region Allocator Simulator - Session Summary")
    print("="*72)
    print(f"Capacity: {alloc.capacity}  Used: {alloc.used()}  Free: {alloc.free_units()}  Blocks: {len(alloc)}")
    print(f"Requests: {stats['requests']}  Releases: {stats['releases']}  Owners: {len(alloc.owners())}")
    print(f"Failures: insufficient={stats[Failure.INSUFFICIENT_SPACE.value]} "
          f"strategy={stats[Failure.UNKNOWN_STRATEGY.value]} "
          f"not_found={stats[Failure.OWNER_NOT_FOUND.value]} "
          f"invalid={stats[Failure.INVALID_REQUEST.value]}")
    print(f"Compactions: {stats['compact']}  Auto: {stats['auto_compact']}  Units moved: {alloc.moved_total}")
    print("-"*72)
    print(f"Fragmentation: LFE={m.lfe} holes={m.hole_count} external_frag={m.external_frag:.3f} entropy={m.entropy:.3f}")
    if show_map:
        print("-"*72)
        print("Memory map (ASCII):")
        print(render_map(alloc))
    print("="*72)

def main(argv=None):
    ap=argparse.ArgumentParser(description='Variable-partition memory allocation simulator.')
    ap.add_argument('--capacity', type=int, default=None,
                    help='Total memory size; prompted for when omitted.')
    ap.add_argument('--script', default=None,
                    help='Replay commands from a file instead of reading stdin.')
    ap.add_argument('--strategy', choices=[s.value for s in Strategy], default=None,
                    help='Override the placement strategy of every RQ command.')
    ap.add_argument('--auto-compact', action='store_true',
                    help='Compact and retry once when a request fails only because of fragmentation.')
    ap.add_argument('--show-map', action='store_true')
    ap.add_argument('--verbose', '-v', action='store_true')
    args=ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    capacity=args.capacity
    if capacity is None:
        try:
            capacity=int(input('Enter total memory size: '))
        except (EOFError, ValueError):
            raise SystemExit('A positive integer memory size is required')
    try:
        alloc=RegionAllocator(capacity)
    except ValueError as e:
        raise SystemExit(str(e))

    if args.script:
        if not Path(args.script).exists():
            raise SystemExit(f'Script not found: {args.script}')
        lines=load_script(args.script)
    else:
        lines=read_interactive()

    stats=new_stats()
    for line in lines:
        if not run_command(alloc, line, stats, args.strategy, args.auto_compact):
            break

    if args.script:
        print_summary(alloc, stats, args.show_map)

if __name__=='__main__':
    sys.exit(main())
