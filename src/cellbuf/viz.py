from __future__ import annotations
from cellbuf.models.cell import SLOTS_PER_GROUP
from cellbuf.storage.memory import InMemoryMedium


def occupancy_grid(medium: InMemoryMedium, grid_width: int):
    """Per (row, col) count of occupied slots, as a list of rows."""
    grid = [[0] * grid_width for _ in range(grid_width)]
    for addr, _state in medium.cells():
        if addr.row < grid_width and addr.col < grid_width:
            grid[addr.row][addr.col] += 1
    return grid


def plot_occupancy(medium: InMemoryMedium, grid_width: int):
    """Minimal heat map of filled slots per grid cell for sanity-checking."""
    import matplotlib.pyplot as plt
    grid = occupancy_grid(medium, grid_width)
    plt.figure()
    plt.imshow(grid, vmin=0, vmax=SLOTS_PER_GROUP, cmap="Greys", origin="upper")
    plt.colorbar(label="occupied slots")
    plt.xlabel("Column")
    plt.ylabel("Row")
    plt.title(f"Medium occupancy ({grid_width}x{grid_width})")
    plt.show()
