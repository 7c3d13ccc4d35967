"""
Sparse cell storage for a single frame.
"""

import logging
from typing import Iterator, Optional, Set, Tuple

from .flood_fill import find_fill_area
from .models import DEFAULT_CELL, Cell, MatchCriteria, Point, Snapshot

logger = logging.getLogger(__name__)


class Grid:
    """A fixed-size canvas holding only non-default cells."""

    def __init__(self, width: int, height: int, cells: Optional[Snapshot] = None):
        self.width = width
        self.height = height
        self._cells: Snapshot = {}
        if cells:
            self.set_canvas_data(cells)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x: int, y: int) -> Cell:
        return self._cells.get((x, y), DEFAULT_CELL)

    def has_cell(self, x: int, y: int) -> bool:
        return (x, y) in self._cells

    def set_cell(self, x: int, y: int, cell: Cell) -> bool:
        """Write a cell. Returns False when the write was out of bounds."""
        if not self.in_bounds(x, y):
            return False
        # An empty glyph never carries colours; drop it instead of storing.
        if cell.is_empty():
            self._cells.pop((x, y), None)
        else:
            self._cells[(x, y)] = cell
        return True

    def clear_cell(self, x: int, y: int) -> None:
        self._cells.pop((x, y), None)

    def clear(self) -> None:
        self._cells.clear()

    def snapshot(self) -> Snapshot:
        return dict(self._cells)

    def set_canvas_data(self, data: Snapshot) -> None:
        """Replace the whole canvas with a snapshot, dropping out-of-bounds keys."""
        self._cells = {}
        dropped = 0
        for (x, y), cell in data.items():
            if not self.set_cell(x, y, cell):
                dropped += 1
        if dropped:
            logger.debug("Dropped %d out-of-bounds cells while loading canvas", dropped)

    def fill_area(
        self,
        x: int,
        y: int,
        cell: Cell,
        contiguous: bool = True,
        criteria: Optional[MatchCriteria] = None,
    ) -> Set[Point]:
        """Write `cell` over every cell matching the one at (x, y)."""
        area = find_fill_area(self, x, y, criteria or MatchCriteria(), contiguous)
        for px, py in area:
            self.set_cell(px, py, cell)
        return area

    def items(self) -> Iterator[Tuple[Point, Cell]]:
        return iter(sorted(self._cells.items(), key=lambda item: (item[0][1], item[0][0])))

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._cells == other._cells
        )

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, {len(self._cells)} cells)"
