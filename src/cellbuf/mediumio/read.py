from __future__ import annotations
import logging
from pathlib import Path
from typing import Tuple, Union
from pydantic import ValidationError
from ..errors import CellBufferError
from ..models.cell import Address
from ..models.medium_file import FORMAT_VERSION, MediumFile
from ..storage.memory import InMemoryMedium

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray]


class MediumFileError(CellBufferError, ValueError):
    pass


def _load_text(src: Source) -> str:
    if isinstance(src, (bytes, bytearray)):
        return bytes(src).decode("utf-8")
    if isinstance(src, str) and src.lstrip().startswith("{"):
        return src
    return Path(str(src)).read_text(encoding="utf-8")


def read_medium_document(src: Source) -> MediumFile:
    """Parse a medium JSON image from a path, JSON text or raw bytes."""
    try:
        text = _load_text(src)
    except UnicodeDecodeError as e:
        raise MediumFileError(f"medium file is not valid UTF-8: {e}") from e
    try:
        doc = MediumFile.model_validate_json(text)
    except ValidationError as e:
        raise MediumFileError(f"invalid medium file: {e}") from e
    if doc.version != FORMAT_VERSION:
        raise MediumFileError(f"unsupported medium file version {doc.version}")
    return doc


def read_medium_file(src: Source) -> Tuple[InMemoryMedium, int]:
    """Load a medium image; returns the medium and the grid width it was written with."""
    doc = read_medium_document(src)
    medium = InMemoryMedium({Address(c.row, c.col, c.slot): c.state for c in doc.cells})
    logger.debug("loaded %d cells (grid_width=%d)", len(medium), doc.grid_width)
    return medium, doc.grid_width
