from __future__ import annotations
from typing import Optional, Protocol, runtime_checkable
from cellbuf.models.cell import CellState


@runtime_checkable
class StorageAdapter(Protocol):
    """
    Boundary to the persistent medium. Calls are synchronous and a buffer
    assumes it is the only writer of its region.
    """

    def get_cell_state(self, row: int, col: int, slot: int) -> Optional[CellState]:
        """Return the stored state, or None if nothing was ever written there."""
        ...

    def set_cell_state(self, row: int, col: int, slot: int, state: CellState) -> None: ...

    def clear_cell(self, row: int, col: int, slot: int) -> None: ...

    def clear_region(self, grid_width: int) -> None:
        """Reset every address of a grid_width x grid_width x 27 region to empty."""
        ...

    def capacity_for(self, grid_width: int) -> int: ...
