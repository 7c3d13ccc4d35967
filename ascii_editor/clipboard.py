"""
Copy, paste and delete for any selection kind.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .models import Snapshot, bounds_of

if TYPE_CHECKING:
    from .grid import Grid
    from .selection import SelectionModel

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], None]


def snapshot_to_text(cells: Snapshot, width: int, height: int) -> str:
    lines = []
    for y in range(height):
        row = "".join(cells[(x, y)].char if (x, y) in cells else " " for x in range(width))
        lines.append(row.rstrip())
    return "\n".join(lines).rstrip("\n")


class Clipboard:
    """Holds copied cells relative to the top-left of their selection."""

    def __init__(self, writer: Optional[ClipboardWriter] = None):
        self.writer = writer
        self.data: Snapshot = {}
        self.size: Tuple[int, int] = (0, 0)

    @property
    def has_data(self) -> bool:
        return bool(self.data)

    def copy(self, grid: "Grid", selection: "SelectionModel") -> int:
        """Copy non-empty selected cells. Returns how many were copied."""
        points = [p for p in selection.cells() if grid.has_cell(*p)]
        bounds = selection.bounds()
        if not points or bounds is None:
            return 0

        self.data = {
            (x - bounds.min_x, y - bounds.min_y): grid.get_cell(x, y) for x, y in points
        }
        self.size = (bounds.width, bounds.height)
        self._export_text()
        logger.debug("Copied %d cells", len(self.data))
        return len(self.data)

    def _export_text(self) -> None:
        if self.writer is None:
            return
        text = snapshot_to_text(self.data, *self.size)
        try:
            self.writer(text)
        except Exception as e:
            logger.warning("Failed to write to system clipboard: %s", e)

    def paste_preview(self, x: int, y: int) -> Snapshot:
        """Absolute cells that pasting at (x, y) would write."""
        return {(x + dx, y + dy): cell for (dx, dy), cell in self.data.items()}

    def paste(self, grid: "Grid", x: int, y: int) -> int:
        written = 0
        for (px, py), cell in self.paste_preview(x, y).items():
            if grid.set_cell(px, py, cell):
                written += 1
        return written

    def pasted_bounds(self, x: int, y: int):
        return bounds_of(self.paste_preview(x, y))


def delete_selection(grid: "Grid", selection: "SelectionModel") -> int:
    """Clear every selected cell. Returns how many stored cells were removed."""
    removed = 0
    for x, y in selection.cells():
        if grid.has_cell(x, y):
            grid.clear_cell(x, y)
            removed += 1
    return removed
