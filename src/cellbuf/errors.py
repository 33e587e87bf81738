from __future__ import annotations


class CellBufferError(Exception):
    """Base class for every error raised by the buffer engine."""


class ClosedBufferError(CellBufferError, RuntimeError):
    pass


class FeatureDisabledError(CellBufferError, RuntimeError):
    pass


class EmptyBufferError(CellBufferError, RuntimeError):
    pass


class OutOfRangeError(CellBufferError, IndexError):
    """Offset outside [0, capacity)."""

    def __init__(self, offset: int, capacity: int):
        super().__init__(f"invalid offset {offset}: must be between 0 and {capacity - 1}")
        self.offset = offset
        self.capacity = capacity


class BufferOverflowError(CellBufferError, OverflowError):
    def __init__(self, offset: int, needed: int, capacity: int):
        super().__init__(
            f"buffer overflow: need {needed} bytes at offset {offset}, "
            f"only {max(capacity - offset, 0)} left"
        )
        self.offset = offset
        self.needed = needed
        self.capacity = capacity


class ValueRangeError(CellBufferError, ValueError):
    pass


class OutOfBoundsError(CellBufferError, IndexError):
    """Nothing has been written at the requested offset."""

    def __init__(self, offset: int):
        super().__init__(f"offset out of bounds, nothing to read at {offset}")
        self.offset = offset


class CorruptCellError(CellBufferError, ValueError):
    pass


class InvalidCharsetError(CellBufferError, ValueError):
    pass


class StringDecodeError(CellBufferError, ValueError):
    pass


class PartialWriteError(CellBufferError):
    """The medium failed after some bytes of a multi-byte value were stored."""

    def __init__(self, offset: int, written: int, expected: int):
        super().__init__(
            f"partial write at offset {offset}: {written} of {expected} bytes stored"
        )
        self.offset = offset
        self.written = written
        self.expected = expected
