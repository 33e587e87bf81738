from __future__ import annotations
import logging
from typing import Optional
from cellbuf.binary.codecs import string_codec
from cellbuf.binary.codecs.address import to_address
from cellbuf.binary.codecs.cell_codec import decode_byte, encode_byte
from cellbuf.binary.codecs.primitives import BY_NAME, Number, check_byteorder, pack, unpack
from cellbuf.binary.codecs.string_codec import LENGTH_PREFIX_BYTES, CharSet, CharSetLike
from cellbuf.errors import (
    BufferOverflowError,
    ClosedBufferError,
    EmptyBufferError,
    FeatureDisabledError,
    OutOfBoundsError,
    OutOfRangeError,
    PartialWriteError,
    ValueRangeError,
)
from cellbuf.models.cell import Address
from cellbuf.models.config import BufferConfig
from cellbuf.storage.adapter import StorageAdapter

logger = logging.getLogger(__name__)


class Buffer:
    """
    Cursor-based typed reader/writer over a grid of medium cells.

    Every read/write takes an optional explicit `offset`. When it is None the
    current cursor is used; either way a successful call leaves the cursor
    just past the bytes it consumed or produced. Failed calls leave the
    cursor alone, and writes validate value, offset and free space before
    the first cell is touched.

    A buffer must be the only writer of its region; two buffers over the
    same medium region will overwrite each other.
    """
    __slots__ = ("medium", "_config", "_capacity", "_offset", "_closed")

    def __init__(self, medium: StorageAdapter, config: Optional[BufferConfig] = None):
        self.medium = medium
        self._config = config or BufferConfig()
        self._capacity = medium.capacity_for(self._config.grid_width)
        self._offset = 0
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Buffer {state} offset={self._offset} capacity={self._capacity}>"

    @property
    def capacity(self) -> int: return self._capacity
    @property
    def config(self) -> BufferConfig: return self._config
    @property
    def closed(self) -> bool: return self._closed

    # -----------------------------
    # Cursor
    # -----------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClosedBufferError("unable to do operation, buffer is closed")

    def _check_offset(self, offset: int) -> int:
        if not (0 <= offset < self._capacity):
            raise OutOfRangeError(offset, self._capacity)
        return offset

    def _resolve(self, offset: Optional[int]) -> int:
        return self._offset if offset is None else self._check_offset(offset)

    def get_offset(self) -> int:
        self._ensure_open()
        return self._offset

    def set_offset(self, offset: int) -> None:
        self._ensure_open()
        self._offset = self._check_offset(offset)

    def remaining(self) -> int:
        self._ensure_open()
        return max(self._capacity - self._offset, 0)

    def get_offset_address(self, offset: Optional[int] = None) -> Address:
        self._ensure_open()
        start = self._offset if offset is None else offset
        return to_address(self._check_offset(start), self._config.grid_width)

    def get_used_byte_count(self) -> int:
        """Number of bytes from offset 0 up to the first empty cell."""
        self._ensure_open()
        return self._run_end(0)

    def _run_end(self, start: int) -> int:
        width = self._config.grid_width
        for i in range(start, self._capacity):
            if self.medium.get_cell_state(*to_address(i, width)) is None:
                return i
        return self._capacity

    # -----------------------------
    # Raw cell access
    # -----------------------------

    def _read_raw(self, start: int, n: int) -> bytes:
        width = self._config.grid_width
        out = bytearray()
        for i in range(start, start + n):
            if i >= self._capacity:
                raise OutOfBoundsError(i)
            state = self.medium.get_cell_state(*to_address(i, width))
            if state is None:
                raise OutOfBoundsError(i)
            out.append(decode_byte(state))
        return bytes(out)

    def _write_raw(self, start: int, data: bytes) -> None:
        width = self._config.grid_width
        states = [encode_byte(b) for b in data]
        for i, state in enumerate(states):
            try:
                self.medium.set_cell_state(*to_address(start + i, width), state)
            except Exception as e:
                logger.warning("medium failed after %d of %d bytes at offset %d: %s", i, len(data), start, e)
                raise PartialWriteError(start, i, len(data)) from e

    def _ensure_space(self, start: int, needed: int) -> None:
        if self._capacity - start < needed:
            raise BufferOverflowError(start, needed, self._capacity)

    def _take(self, n: int, offset: Optional[int]) -> bytes:
        self._ensure_open()
        start = self._resolve(offset)
        data = self._read_raw(start, n)
        self._offset = start + n
        return data

    def _put(self, data: bytes, offset: Optional[int]) -> None:
        self._ensure_open()
        start = self._resolve(offset)
        self._ensure_space(start, len(data))
        self._write_raw(start, data)
        self._offset = start + len(data)

    def read_bytes(self, length: int, offset: Optional[int] = None) -> bytes:
        if length < 0:
            raise ValueRangeError(f"length must be >= 0, got {length}")
        return self._take(length, offset)

    def write_bytes(self, data: bytes, offset: Optional[int] = None) -> None:
        self._put(bytes(data), offset)

    # -----------------------------
    # Typed primitives
    # -----------------------------

    def _read(self, name: str, offset: Optional[int], byteorder: str = "big") -> Number:
        prim = BY_NAME[name]
        check_byteorder(byteorder)
        return unpack(prim, self._take(prim.size, offset), byteorder)

    def _write(self, name: str, value: Number, offset: Optional[int], byteorder: str = "big") -> None:
        self._ensure_open()
        self._put(pack(BY_NAME[name], value, byteorder), offset)

    def read_bool(self, offset: Optional[int] = None) -> bool:
        return self._take(1, offset)[0] == 1

    def read_u8(self, offset: Optional[int] = None) -> int: return self._read("u8", offset)
    def read_i8(self, offset: Optional[int] = None) -> int: return self._read("i8", offset)
    def read_u16(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("u16", offset, byteorder)
    def read_i16(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("i16", offset, byteorder)
    def read_u32(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("u32", offset, byteorder)
    def read_i32(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("i32", offset, byteorder)
    def read_u64(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("u64", offset, byteorder)
    def read_i64(self, offset: Optional[int] = None, *, byteorder: str = "big") -> int: return self._read("i64", offset, byteorder)
    def read_f32(self, offset: Optional[int] = None, *, byteorder: str = "big") -> float: return self._read("f32", offset, byteorder)
    def read_f64(self, offset: Optional[int] = None, *, byteorder: str = "big") -> float: return self._read("f64", offset, byteorder)

    def write_bool(self, value: bool, offset: Optional[int] = None) -> None:
        self._write("u8", 1 if value else 0, offset)

    def write_u8(self, value: int, offset: Optional[int] = None) -> None: self._write("u8", value, offset)
    def write_i8(self, value: int, offset: Optional[int] = None) -> None: self._write("i8", value, offset)
    def write_u16(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("u16", value, offset, byteorder)
    def write_i16(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("i16", value, offset, byteorder)
    def write_u32(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("u32", value, offset, byteorder)
    def write_i32(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("i32", value, offset, byteorder)
    def write_u64(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("u64", value, offset, byteorder)
    def write_i64(self, value: int, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("i64", value, offset, byteorder)
    def write_f32(self, value: float, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("f32", value, offset, byteorder)
    def write_f64(self, value: float, offset: Optional[int] = None, *, byteorder: str = "big") -> None: self._write("f64", value, offset, byteorder)

    # -----------------------------
    # Strings
    # -----------------------------

    def read_string(
        self,
        offset: Optional[int] = None,
        *,
        charset: CharSetLike = CharSet.UTF8,
        byteorder: str = "big",
    ) -> str:
        """
        Read a length-prefixed string: a u16 body length in `byteorder`,
        then the body. The cursor ends after the body.
        """
        self._ensure_open()
        cs = string_codec.resolve_charset(charset)
        start = self._resolve(offset)
        length = unpack(BY_NAME["u16"], self._read_raw(start, LENGTH_PREFIX_BYTES), byteorder)
        body = self._read_raw(start + LENGTH_PREFIX_BYTES, length)
        text = string_codec.decode_body(body, cs, byteorder)
        self._offset = start + LENGTH_PREFIX_BYTES + length
        return text

    def write_string(
        self,
        value: str,
        offset: Optional[int] = None,
        *,
        charset: CharSetLike = CharSet.UTF8,
        byteorder: str = "big",
    ) -> None:
        self._ensure_open()
        self._put(string_codec.encode(value, charset, byteorder), offset)

    # -----------------------------
    # Region management
    # -----------------------------

    def clear(self) -> None:
        """Empty every cell of the region and reset the cursor to 0."""
        self._ensure_open()
        self.medium.clear_region(self._config.grid_width)
        self._offset = 0
        logger.debug("buffer cleared (capacity=%d)", self._capacity)

    def remove(self, count: int = 1, offset: Optional[int] = None) -> int:
        """
        Delete `count` bytes at `offset` and shift the rest of the contiguous
        run left, emptying the vacated tail. Returns the number of bytes removed.
        """
        self._ensure_open()
        if count < 1:
            raise ValueRangeError(f"count must be >= 1, got {count}")
        start = self._resolve(offset)
        if start >= self._capacity or self.medium.get_cell_state(*to_address(start, self._config.grid_width)) is None:
            raise OutOfBoundsError(start)

        run_end = self._run_end(start)
        removed = min(count, run_end - start)
        tail = self._read_raw(start + removed, run_end - start - removed)
        self._write_raw(start, tail)
        width = self._config.grid_width
        for i in range(run_end - removed, run_end):
            self.medium.clear_cell(*to_address(i, width))

        if self._offset >= start + removed:
            self._offset -= removed
        elif self._offset > start:
            self._offset = start
        logger.debug("removed %d bytes at offset %d, shifted %d", removed, start, len(tail))
        return removed

    def _region_has_data(self) -> bool:
        width = self._config.grid_width
        return any(
            self.medium.get_cell_state(*to_address(i, width)) is not None
            for i in range(self._capacity)
        )

    def close(self) -> None:
        """
        Clear the region and shut the buffer down for good. Only available
        when the config enables it, and only while the region holds data.
        """
        if not self._config.allow_close:
            raise FeatureDisabledError("allow_close was not enabled when the buffer was created")
        if self._closed:
            raise ClosedBufferError("buffer is already closed")
        if not self._region_has_data():
            raise EmptyBufferError("buffer is already clear")
        self.medium.clear_region(self._config.grid_width)
        self._closed = True
        logger.debug("buffer closed")
