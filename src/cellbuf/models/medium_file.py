from __future__ import annotations
from pydantic import BaseModel, Field, model_validator
from typing import List
from .cell import CellState, SLOTS_PER_GROUP
from .config import DEFAULT_GRID_WIDTH

FORMAT_VERSION = 1


class CellRecord(BaseModel):
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
    slot: int = Field(..., ge=0, lt=SLOTS_PER_GROUP)
    state: CellState


class MediumFile(BaseModel):
    """On-disk JSON image of a medium region."""
    version: int = FORMAT_VERSION
    grid_width: int = Field(DEFAULT_GRID_WIDTH, ge=1)
    cells: List[CellRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _cells_inside_grid(self) -> "MediumFile":
        for c in self.cells:
            if c.row >= self.grid_width or c.col >= self.grid_width:
                raise ValueError(
                    f"cell ({c.row}, {c.col}, {c.slot}) lies outside a {self.grid_width}x{self.grid_width} grid"
                )
        return self

    # Convenience constructors (implemented in the mediumio layer)
    @classmethod
    def from_json(cls, src) -> "MediumFile":
        from ..mediumio.read import read_medium_document
        return read_medium_document(src)

    def to_json(self, *, pretty: bool = True) -> str:
        from ..mediumio.write import write_medium_document
        return write_medium_document(self, pretty=pretty)
