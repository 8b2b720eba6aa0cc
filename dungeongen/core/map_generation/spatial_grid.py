"""Occupancy map used for overlap testing while rooms are placed."""
from typing import Dict, Optional, Tuple

from dungeongen.core.errors import ConfigurationError
from .models import Room


class SpatialGrid:
    """
    A bounded width x height grid of cells, each empty or owned by a room.

    One grid belongs to one floor build; it is never shared between floors
    or between concurrent generations.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                "grid", f"Grid dimensions must be positive, got {width}x{height}",
                {"width": width, "height": height},
            )
        self.width = width
        self.height = height
        self._cells: Dict[Tuple[int, int], str] = {}

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def can_place(self, x: int, y: int, w: int, h: int) -> bool:
        """
        Check whether a w x h room fits with its top-left at (x, y).

        The rectangle must lie entirely inside the grid, and no cell of the
        rectangle grown by one cell on every side (clamped to the grid) may
        already be occupied.
        """
        if w < 1 or h < 1:
            return False
        if not (self.in_bounds(x, y) and self.in_bounds(x + w - 1, y + h - 1)):
            return False

        x0, y0 = max(0, x - 1), max(0, y - 1)
        x1, y1 = min(self.width - 1, x + w), min(self.height - 1, y + h)
        for cy in range(y0, y1 + 1):
            for cx in range(x0, x1 + 1):
                if (cx, cy) in self._cells:
                    return False
        return True

    def mark(self, room: Room) -> None:
        """Occupy every cell of the room's rectangle. Call only after can_place succeeded."""
        for cell in room.cells():
            self._cells[cell] = room.id

    def occupant(self, x: int, y: int) -> Optional[str]:
        """Id of the room owning a cell, or None."""
        return self._cells.get((x, y))

    def occupied_cells(self) -> int:
        return len(self._cells)
