from __future__ import annotations
from typing import Dict, Tuple
from cellbuf.errors import CorruptCellError, ValueRangeError
from cellbuf.models.cell import CellKind, CellState

# Bands in byte order: (kind, first byte value). Byte 0 is the ZERO state.
BANDS: Tuple[Tuple[CellKind, int], ...] = (
    (CellKind.BAND_A, 1),     #   1..64
    (CellKind.BAND_B, 65),    #  65..128
    (CellKind.BAND_C, 129),   # 129..192
    (CellKind.BAND_D, 193),   # 193..255
)

ZERO_STATE = CellState(kind=CellKind.ZERO)


def _build_tables() -> Tuple[Tuple[CellState, ...], Dict[CellState, int]]:
    states = [ZERO_STATE]
    for value in range(1, 256):
        kind, first = next(b for b in reversed(BANDS) if value >= b[1])
        states.append(CellState(kind=kind, magnitude=value - first + 1))
    return tuple(states), {s: v for v, s in enumerate(states)}


_STATES, _VALUES = _build_tables()


def encode_byte(value: int) -> CellState:
    """Map a byte value 0..255 onto its cell state."""
    if not (0 <= value <= 255):
        raise ValueRangeError(f"byte value must be between 0 and 255, got {value}")
    return _STATES[value]


def decode_byte(state: object) -> int:
    """Inverse of encode_byte; anything outside the 256 known states is corrupt."""
    try:
        return _VALUES[state]  # type: ignore[index]
    except (KeyError, TypeError):
        raise CorruptCellError(f"unknown cell state: {state!r}") from None


def all_states() -> Tuple[CellState, ...]:
    return _STATES
