from __future__ import annotations
import logging
from typing import Dict, Iterator, Optional, Tuple
from cellbuf.binary.codecs.address import capacity_for
from cellbuf.models.cell import Address, CellState, SLOTS_PER_GROUP

logger = logging.getLogger(__name__)


class InMemoryMedium:
    """Dict-backed medium. Used in tests and as the CLI's working copy of a medium file."""

    def __init__(self, cells: Optional[Dict[Address, object]] = None):
        self._cells: Dict[Address, object] = dict(cells or {})

    def __len__(self) -> int:
        return len(self._cells)

    def get_cell_state(self, row: int, col: int, slot: int) -> Optional[CellState]:
        return self._cells.get(Address(row, col, slot))  # type: ignore[return-value]

    def set_cell_state(self, row: int, col: int, slot: int, state: CellState) -> None:
        self._cells[Address(row, col, slot)] = state

    def clear_cell(self, row: int, col: int, slot: int) -> None:
        self._cells.pop(Address(row, col, slot), None)

    def clear_region(self, grid_width: int) -> None:
        before = len(self._cells)
        self._cells = {
            a: s for a, s in self._cells.items()
            if not (a.row < grid_width and a.col < grid_width and a.slot < SLOTS_PER_GROUP)
        }
        logger.debug("cleared region width=%d (%d cells dropped)", grid_width, before - len(self._cells))

    def capacity_for(self, grid_width: int) -> int:
        return capacity_for(grid_width)

    def cells(self) -> Iterator[Tuple[Address, object]]:
        """Occupied cells in address order."""
        return iter(sorted(self._cells.items()))
