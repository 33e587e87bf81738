from __future__ import annotations
from pydantic import BaseModel, Field
from .cell import SLOTS_PER_GROUP

DEFAULT_GRID_WIDTH = 16


class BufferConfig(BaseModel):
    grid_width: int = Field(DEFAULT_GRID_WIDTH, ge=1)
    allow_close: bool = False   # opt-in explicit shutdown

    @property
    def capacity(self) -> int:
        return self.grid_width * self.grid_width * SLOTS_PER_GROUP
