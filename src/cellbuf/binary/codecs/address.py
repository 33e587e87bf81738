from __future__ import annotations
from cellbuf.models.cell import Address, SLOTS_PER_GROUP


def to_address(offset: int, grid_width: int) -> Address:
    """
    Linear offset -> (row, col, slot). Every group of 27 consecutive bytes
    shares one grid cell; groups fill a row before moving to the next.
    The offset is not range-checked here.
    """
    group, slot = divmod(offset, SLOTS_PER_GROUP)
    row, col = divmod(group, grid_width)
    return Address(row, col, slot)


def from_address(address: Address, grid_width: int) -> int:
    row, col, slot = address
    return (row * grid_width + col) * SLOTS_PER_GROUP + slot


def capacity_for(grid_width: int) -> int:
    return grid_width * grid_width * SLOTS_PER_GROUP
