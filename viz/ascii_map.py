from __future__ import annotations
from memory.allocator import RegionAllocator

def render_map(alloc: RegionAllocator, width: int=80) -> str:
    cap=alloc.capacity
    buf=['.']*width
    for entry in alloc.status():
        if entry.owner is None:
            continue
        s=int((entry.start/cap)*width)
        e=int(((entry.end+1)/cap)*width)
        ch=entry.owner[0].upper()
        for i in range(max(0,s), min(width, max(s+1,e))):
            buf[i]=ch
    return ''.join(buf)
