from __future__ import annotations
import logging
from pathlib import Path
from typing import Union
from ..models.medium_file import CellRecord, MediumFile
from ..storage.memory import InMemoryMedium

logger = logging.getLogger(__name__)


def to_document(medium: InMemoryMedium, grid_width: int) -> MediumFile:
    cells = [
        CellRecord(row=a.row, col=a.col, slot=a.slot, state=s)
        for a, s in medium.cells()
    ]
    return MediumFile(grid_width=grid_width, cells=cells)


def write_medium_document(doc: MediumFile, *, pretty: bool = True) -> str:
    return doc.model_dump_json(indent=2 if pretty else None)


def write_medium_file(
    medium: InMemoryMedium,
    dest: Union[str, Path],
    *,
    grid_width: int,
    pretty: bool = True,
) -> None:
    doc = to_document(medium, grid_width)
    Path(dest).write_text(write_medium_document(doc, pretty=pretty), encoding="utf-8")
    logger.debug("wrote %d cells to %s", len(doc.cells), dest)
