from __future__ import annotations
import math
import struct
from dataclasses import dataclass
from typing import Dict, Tuple, Union
from cellbuf.errors import ValueRangeError

Number = Union[int, float]

BYTEORDERS = {"big": ">", "little": "<"}


@dataclass(frozen=True)
class Primitive:
    name: str
    size: int       # bytes on the medium
    code: str       # struct format code, byte order prefix added at pack time
    lo: Number
    hi: Number
    is_float: bool = False


FLOAT32_MAX = struct.unpack(">f", bytes.fromhex("7f7fffff"))[0]

# ---- Typed primitive plan ----
# Integers use two's complement, floats IEEE-754. Byte order is chosen per call.
PRIMITIVES: Tuple[Primitive, ...] = (
    Primitive("u8",  1, "B", 0, 0xFF),
    Primitive("i8",  1, "b", -0x80, 0x7F),
    Primitive("u16", 2, "H", 0, 0xFFFF),
    Primitive("i16", 2, "h", -0x8000, 0x7FFF),
    Primitive("u32", 4, "I", 0, 0xFFFF_FFFF),
    Primitive("i32", 4, "i", -0x8000_0000, 0x7FFF_FFFF),
    Primitive("u64", 8, "Q", 0, 0xFFFF_FFFF_FFFF_FFFF),
    Primitive("i64", 8, "q", -0x8000_0000_0000_0000, 0x7FFF_FFFF_FFFF_FFFF),
    Primitive("f32", 4, "f", -FLOAT32_MAX, FLOAT32_MAX, is_float=True),
    Primitive("f64", 8, "d", -math.inf, math.inf, is_float=True),
)

BY_NAME: Dict[str, Primitive] = {p.name: p for p in PRIMITIVES}


def struct_prefix(byteorder: str) -> str:
    try:
        return BYTEORDERS[byteorder]
    except KeyError:
        raise ValueError(f"byteorder must be 'big' or 'little', got {byteorder!r}") from None


def check_byteorder(byteorder: str) -> str:
    struct_prefix(byteorder)
    return byteorder


def check_value(prim: Primitive, value: Number) -> None:
    """Reject values outside the legal domain of `prim` before anything is written."""
    if isinstance(value, bool):
        value = int(value)
    if prim.is_float:
        if not isinstance(value, (int, float)):
            raise TypeError(f"{prim.name} expects a number, got {type(value).__name__}")
        try:
            value = float(value)
        except OverflowError:
            raise ValueRangeError(f"value too large for type {prim.name}") from None
        # NaN and infinities have IEEE-754 encodings; only finite overflow is rejected.
        if math.isfinite(value) and not (prim.lo <= value <= prim.hi):
            raise ValueRangeError(
                f"invalid value for type {prim.name}: must be between {prim.lo} and {prim.hi}, got {value}"
            )
        return
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueRangeError(f"{prim.name} expects an integral value, got {value}")
    elif not isinstance(value, int):
        raise TypeError(f"{prim.name} expects an int, got {type(value).__name__}")
    if not (prim.lo <= value <= prim.hi):
        raise ValueRangeError(
            f"invalid value for type {prim.name}: must be between {prim.lo:,} and {prim.hi:,}, got {value}"
        )


def pack(prim: Primitive, value: Number, byteorder: str = "big") -> bytes:
    check_value(prim, value)
    if not prim.is_float:
        value = int(value)
    return struct.pack(struct_prefix(byteorder) + prim.code, value)


def unpack(prim: Primitive, data: bytes, byteorder: str = "big") -> Number:
    """
    Assemble `data` as the signed representation, then normalize unsigned
    types into [0, 2**bits).
    """
    prefix = struct_prefix(byteorder)
    if len(data) != prim.size:
        raise ValueError(f"{prim.name} needs {prim.size} bytes, got {len(data)}")
    if prim.is_float:
        return struct.unpack(prefix + prim.code, data)[0]
    value = int.from_bytes(data, byteorder, signed=True)  # type: ignore[arg-type]
    if prim.lo == 0 and value < 0:
        value += 1 << (8 * prim.size)
    return value
