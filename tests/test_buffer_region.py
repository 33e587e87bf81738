import pytest
from cellbuf.binary.buffer import Buffer
from cellbuf.errors import (
    ClosedBufferError,
    EmptyBufferError,
    FeatureDisabledError,
    OutOfBoundsError,
    PartialWriteError,
    ValueRangeError,
)
from cellbuf.models.config import BufferConfig
from cellbuf.storage.adapter import StorageAdapter
from cellbuf.storage.memory import InMemoryMedium


class FlakyMedium(InMemoryMedium):
    """Fails on the n-th cell write."""

    def __init__(self, fail_at: int):
        super().__init__()
        self.fail_at = fail_at
        self.writes = 0

    def set_cell_state(self, row, col, slot, state):
        if self.writes == self.fail_at:
            raise IOError("medium unavailable")
        self.writes += 1
        super().set_cell_state(row, col, slot, state)


def test_memory_medium_satisfies_protocol():
    assert isinstance(InMemoryMedium(), StorageAdapter)


def test_used_byte_count_stops_at_first_gap():
    buf = Buffer(InMemoryMedium())
    assert buf.get_used_byte_count() == 0
    buf.write_u32(1)
    buf.write_u8(2, 10)
    assert buf.get_used_byte_count() == 4


def test_used_byte_count_full_region():
    buf = Buffer(InMemoryMedium(), BufferConfig(grid_width=1))
    buf.write_bytes(bytes(27))
    assert buf.get_used_byte_count() == 27


def test_clear_resets_cursor_and_cells():
    medium = InMemoryMedium()
    buf = Buffer(medium)
    buf.write_string("something")
    buf.clear()
    assert buf.get_offset() == 0
    assert len(medium) == 0
    assert buf.get_used_byte_count() == 0


def test_clear_leaves_cells_outside_region():
    medium = InMemoryMedium()
    wide = Buffer(medium, BufferConfig(grid_width=2))
    wide.write_u8(9, 27 * 3)          # row 1, col 1
    narrow = Buffer(medium, BufferConfig(grid_width=1))
    narrow.write_u8(1, 0)
    narrow.clear()
    assert medium.get_cell_state(1, 1, 0) is not None
    assert medium.get_cell_state(0, 0, 0) is None


def test_remove_shifts_tail_left():
    buf = Buffer(InMemoryMedium())
    buf.write_bytes(b"\x01\x02\x03\x04\x05")
    assert buf.remove(2, 1) == 2
    assert buf.get_used_byte_count() == 3
    assert buf.read_bytes(3, 0) == b"\x01\x04\x05"
    assert buf.get_offset() == 3


def test_remove_clamps_to_stored_run():
    buf = Buffer(InMemoryMedium())
    buf.write_bytes(b"\x01\x02\x03")
    assert buf.remove(10, 1) == 2
    assert buf.get_used_byte_count() == 1
    assert buf.get_offset() == 1


def test_remove_cursor_inside_removed_span():
    buf = Buffer(InMemoryMedium())
    buf.write_bytes(b"abcdef")
    buf.set_offset(2)
    buf.remove(3, 1)
    assert buf.get_offset() == 1
    assert buf.read_bytes(3, 0) == b"aef"


def test_remove_errors():
    buf = Buffer(InMemoryMedium())
    with pytest.raises(OutOfBoundsError):
        buf.remove(1, 0)
    buf.write_u8(1)
    with pytest.raises(ValueRangeError):
        buf.remove(0, 0)


def test_partial_write_is_surfaced():
    medium = FlakyMedium(fail_at=2)
    buf = Buffer(medium)
    with pytest.raises(PartialWriteError) as ei:
        buf.write_u32(0x01020304, 5)
    err = ei.value
    assert (err.offset, err.written, err.expected) == (5, 2, 4)
    assert isinstance(err.__cause__, IOError)
    assert buf.get_offset() == 0
    assert buf.read_bytes(2, 5) == b"\x01\x02"


def test_close_requires_opt_in():
    buf = Buffer(InMemoryMedium())
    buf.write_u8(1)
    with pytest.raises(FeatureDisabledError):
        buf.close()
    assert not buf.closed


def test_close_empty_region():
    buf = Buffer(InMemoryMedium(), BufferConfig(allow_close=True))
    with pytest.raises(EmptyBufferError):
        buf.close()
    assert not buf.closed


def test_close_clears_and_locks():
    medium = InMemoryMedium()
    buf = Buffer(medium, BufferConfig(allow_close=True))
    buf.write_u8(1, 100)
    buf.close()
    assert buf.closed
    assert len(medium) == 0
    for op in (buf.get_offset, buf.clear, buf.get_used_byte_count, lambda: buf.read_u8(0),
               lambda: buf.write_u8(1), lambda: buf.set_offset(0), buf.close):
        with pytest.raises(ClosedBufferError):
            op()
