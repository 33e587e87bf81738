from __future__ import annotations
from enum import Enum
from typing import List, Union
from cellbuf.binary.codecs.primitives import BY_NAME, check_byteorder, pack, unpack
from cellbuf.errors import InvalidCharsetError, StringDecodeError, ValueRangeError

LENGTH_PREFIX_BYTES = 2
MAX_BODY_BYTES = 0xFFFF


class CharSet(str, Enum):
    UTF8 = "utf8"
    UTF16 = "utf16"


CharSetLike = Union[CharSet, str]

_ALIASES = {"utf-8": CharSet.UTF8, "utf-16": CharSet.UTF16}


def resolve_charset(charset: CharSetLike) -> CharSet:
    if isinstance(charset, CharSet):
        return charset
    if isinstance(charset, str):
        tag = charset.strip().lower()
        if tag in _ALIASES:
            return _ALIASES[tag]
        try:
            return CharSet(tag)
        except ValueError:
            pass
    raise InvalidCharsetError(f"{charset!r} is not a valid charset")


def _unit(data: bytes, i: int, byteorder: str) -> int:
    return int.from_bytes(data[i:i + 2], byteorder)  # type: ignore[arg-type]


# -----------------------------
# UTF-8
# -----------------------------

def _encode_utf8(text: str) -> bytes:
    out = bytearray()
    for ch in text:
        cp = ord(ch)
        if cp <= 0x7F:
            out.append(cp)
        elif cp <= 0x7FF:
            out += bytes((0xC0 | (cp >> 6), 0x80 | (cp & 0x3F)))
        elif cp <= 0xFFFF:
            out += bytes((0xE0 | (cp >> 12), 0x80 | ((cp >> 6) & 0x3F), 0x80 | (cp & 0x3F)))
        else:
            out += bytes((
                0xF0 | (cp >> 18),
                0x80 | ((cp >> 12) & 0x3F),
                0x80 | ((cp >> 6) & 0x3F),
                0x80 | (cp & 0x3F),
            ))
    return bytes(out)


def _utf8_sequence(lead: int):
    """Return (total length, payload bits of the lead byte) from its high bits."""
    if lead & 0x80 == 0x00:
        return 1, lead
    if lead & 0xE0 == 0xC0:
        return 2, lead & 0x1F
    if lead & 0xF0 == 0xE0:
        return 3, lead & 0x0F
    if lead & 0xF8 == 0xF0:
        return 4, lead & 0x07
    return 0, 0


def _decode_utf8(data: bytes) -> str:
    chars: List[str] = []
    i, n = 0, len(data)
    while i < n:
        length, cp = _utf8_sequence(data[i])
        if length == 0:
            raise StringDecodeError(f"invalid UTF-8 lead byte 0x{data[i]:02x} at {i}")
        if i + length > n:
            raise StringDecodeError(f"truncated UTF-8 sequence at {i}: need {length} bytes, have {n - i}")
        for b in data[i + 1:i + length]:
            if b & 0xC0 != 0x80:
                raise StringDecodeError(f"invalid UTF-8 continuation byte 0x{b:02x} in sequence at {i}")
            cp = (cp << 6) | (b & 0x3F)
        if cp > 0x10FFFF:
            raise StringDecodeError(f"code point 0x{cp:x} out of range at {i}")
        chars.append(chr(cp))
        i += length
    return "".join(chars)


# -----------------------------
# UTF-16
# -----------------------------

def _encode_utf16(text: str, byteorder: str) -> bytes:
    out = bytearray()
    for ch in text:
        cp = ord(ch)
        if cp > 0xFFFF:
            v = cp - 0x10000
            out += (0xD800 | (v >> 10)).to_bytes(2, byteorder)  # type: ignore[arg-type]
            out += (0xDC00 | (v & 0x3FF)).to_bytes(2, byteorder)  # type: ignore[arg-type]
        else:
            out += cp.to_bytes(2, byteorder)  # type: ignore[arg-type]
    return bytes(out)


def _decode_utf16(data: bytes, byteorder: str) -> str:
    if len(data) % 2:
        raise StringDecodeError(f"UTF-16 data must have an even length, got {len(data)}")
    chars: List[str] = []
    i, n = 0, len(data)
    while i < n:
        unit = _unit(data, i, byteorder)
        i += 2
        if 0xD800 <= unit <= 0xDBFF:
            if i >= n:
                raise StringDecodeError(f"high surrogate 0x{unit:04x} at end of data")
            low = _unit(data, i, byteorder)
            if not (0xDC00 <= low <= 0xDFFF):
                raise StringDecodeError(f"high surrogate 0x{unit:04x} not followed by a low surrogate")
            i += 2
            chars.append(chr(0x10000 + ((unit - 0xD800) << 10) + (low - 0xDC00)))
            continue
        chars.append(chr(unit))
    return "".join(chars)


# -----------------------------
# Public API
# -----------------------------

def encode_body(text: str, charset: CharSetLike = CharSet.UTF8, byteorder: str = "big") -> bytes:
    """Encode without the length prefix. Byte order only affects UTF-16."""
    cs = resolve_charset(charset)
    byteorder = check_byteorder(byteorder)
    if cs is CharSet.UTF8:
        return _encode_utf8(text)
    return _encode_utf16(text, byteorder)


def decode_body(data: bytes, charset: CharSetLike = CharSet.UTF8, byteorder: str = "big") -> str:
    cs = resolve_charset(charset)
    byteorder = check_byteorder(byteorder)
    if cs is CharSet.UTF8:
        return _decode_utf8(bytes(data))
    return _decode_utf16(bytes(data), byteorder)


def encode(text: str, charset: CharSetLike = CharSet.UTF8, byteorder: str = "big") -> bytes:
    """
    Encode `text` as a length-prefixed string: a u16 holding the byte length
    of the body (in `byteorder`), followed by the body.
    """
    body = encode_body(text, charset, byteorder)
    if len(body) > MAX_BODY_BYTES:
        raise ValueRangeError(
            f"encoded string is {len(body)} bytes, the length prefix allows at most {MAX_BODY_BYTES}"
        )
    return pack(BY_NAME["u16"], len(body), byteorder) + body


def decode(data: bytes, charset: CharSetLike = CharSet.UTF8, byteorder: str = "big") -> str:
    if len(data) < LENGTH_PREFIX_BYTES:
        raise StringDecodeError("missing length prefix")
    length = unpack(BY_NAME["u16"], bytes(data[:LENGTH_PREFIX_BYTES]), byteorder)
    body = data[LENGTH_PREFIX_BYTES:]
    if len(body) != length:
        raise StringDecodeError(f"length prefix says {length} bytes, body has {len(body)}")
    return decode_body(body, charset, byteorder)
