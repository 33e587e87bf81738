from __future__ import annotations
import argparse, json, logging, sys
from .binary.buffer import Buffer
from .errors import CellBufferError
from .mediumio.read import read_medium_file
from .mediumio.write import write_medium_file
from .models.config import DEFAULT_GRID_WIDTH, BufferConfig
from .storage.memory import InMemoryMedium

logger = logging.getLogger(__name__)

# Record layout used by the demo commands: u8 header, u16 count, count x (i32, i32, i32)
DEMO_HEADER = 20
DEMO_POINTS = [(5, -64, 4), (5, -64, 5)]


def _open(path: str) -> Buffer:
    medium, width = read_medium_file(path)
    return Buffer(medium, BufferConfig(grid_width=width))


def _save(buf: Buffer, path: str) -> None:
    write_medium_file(buf.medium, path, grid_width=buf.config.grid_width)  # type: ignore[arg-type]


def cmd_init(args):
    write_medium_file(InMemoryMedium(), args.medium, grid_width=args.grid_width)
    print(f"initialized {args.medium} (capacity={BufferConfig(grid_width=args.grid_width).capacity})")
    return 0


def cmd_info(args):
    buf = _open(args.medium)
    out = {
        "grid_width": buf.config.grid_width,
        "capacity": buf.capacity,
        "used_bytes": buf.get_used_byte_count(),
        "occupied_cells": len(buf.medium),  # type: ignore[arg-type]
    }
    print(json.dumps(out, indent=2))
    return 0


def cmd_dump(args):
    buf = _open(args.medium)
    length = args.length
    if length is None:
        length = max(buf.get_used_byte_count() - args.offset, 0)
    if length == 0:
        return 0
    data = buf.read_bytes(length, args.offset)
    for i in range(0, len(data), 16):
        chunk = data[i:i + 16]
        print(f"{args.offset + i:08x}  {chunk.hex(' ')}")
    return 0


def cmd_write_demo(args):
    buf = _open(args.medium)
    points = [tuple(p) for p in args.point] if args.point else DEMO_POINTS
    buf.write_u8(DEMO_HEADER, 0)
    buf.write_u16(len(points))
    for x, y, z in points:
        buf.write_i32(x)
        buf.write_i32(y)
        buf.write_i32(z)
    _save(buf, args.medium)
    print(f"wrote {len(points)} points ({buf.get_offset()} bytes)")
    return 0


def cmd_read_demo(args):
    buf = _open(args.medium)
    header = buf.read_u8(0)
    if header != DEMO_HEADER:
        print(f"Invalid header. Expected {DEMO_HEADER}, got {header}", file=sys.stderr)
        return 1
    count = buf.read_u16()
    points = [[buf.read_i32(), buf.read_i32(), buf.read_i32()] for _ in range(count)]
    print(json.dumps(points))
    return 0


def cmd_plot(args):
    from .viz import plot_occupancy
    medium, width = read_medium_file(args.medium)
    plot_occupancy(medium, width)
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="cellbuf", description="Typed binary buffer over a cell medium")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("init", help="create an empty medium file")
    sp.add_argument("medium", help="Path to the medium JSON file")
    sp.add_argument("--grid-width", type=int, default=DEFAULT_GRID_WIDTH, help="Grid cells per side")
    sp.set_defaults(func=cmd_init)

    sp = sub.add_parser("info", help="print capacity and usage as JSON")
    sp.add_argument("medium")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("dump", help="hex dump of stored bytes")
    sp.add_argument("medium")
    sp.add_argument("--offset", type=int, default=0)
    sp.add_argument("--length", type=int, default=None, help="Defaults to the rest of the used bytes")
    sp.set_defaults(func=cmd_dump)

    sp = sub.add_parser("write-demo", help="write the header/count/points demo record")
    sp.add_argument("medium")
    sp.add_argument("--point", type=int, nargs=3, action="append", metavar=("X", "Y", "Z"))
    sp.set_defaults(func=cmd_write_demo)

    sp = sub.add_parser("read-demo", help="read back the demo record as JSON")
    sp.add_argument("medium")
    sp.set_defaults(func=cmd_read_demo)

    sp = sub.add_parser("plot", help="occupancy heat map of the medium")
    sp.add_argument("medium")
    sp.set_defaults(func=cmd_plot)

    return p


def main(argv=None):
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, ns.log_level))
    try:
        return ns.func(ns)
    except (CellBufferError, OSError) as e:
        logger.debug("command %s failed", ns.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
