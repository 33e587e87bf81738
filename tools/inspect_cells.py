#!/usr/bin/env python3
"""Print the raw cell state behind each of the first N offsets of a medium file."""
import sys
from cellbuf.binary.codecs.address import to_address
from cellbuf.binary.codecs.cell_codec import decode_byte
from cellbuf.errors import CorruptCellError
from cellbuf.mediumio.read import read_medium_file

path = sys.argv[1] if len(sys.argv) > 1 else "medium.json"
count = int(sys.argv[2]) if len(sys.argv) > 2 else 32

medium, width = read_medium_file(path)
print(f"grid_width={width}, occupied={len(medium)}")
for off in range(count):
    addr = to_address(off, width)
    state = medium.get_cell_state(*addr)
    if state is None:
        print(f"{off:6d} {tuple(addr)}  <empty>")
        break
    try:
        value = f"{decode_byte(state):3d}"
    except CorruptCellError:
        value = "???"
    print(f"{off:6d} {tuple(addr)}  {value}  {state.kind.value}:{state.magnitude}")
