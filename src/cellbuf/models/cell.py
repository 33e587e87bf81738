from __future__ import annotations
from enum import Enum
from typing import NamedTuple, Optional
from pydantic import BaseModel, ConfigDict

SLOTS_PER_GROUP = 27
BAND_SIZE = 64


class CellKind(str, Enum):
    ZERO = "zero"
    BAND_A = "band_a"
    BAND_B = "band_b"
    BAND_C = "band_c"
    BAND_D = "band_d"


class CellState(BaseModel):
    """
    One storable state of a medium cell: a kind tag and, for the four
    bands, a magnitude. Magnitude is not range-checked here so that states
    written by something else can still be loaded and reported as corrupt.
    """
    model_config = ConfigDict(frozen=True)

    kind: CellKind
    magnitude: Optional[int] = None


class Address(NamedTuple):
    row: int
    col: int
    slot: int
