"""
Staged relocation of selected content.

States: IDLE -> STAGED -> DRAGGING -> STAGED -> (commit | cancel) -> IDLE.
The grid is only written on commit; until then the displaced content lives
in the transaction and is shown as a preview.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from .actions import GridEdit
from .models import Point, Snapshot

if TYPE_CHECKING:
    from .grid import Grid
    from .selection import SelectionModel
    from .undo_manager import UndoManager

logger = logging.getLogger(__name__)


class MoveState(Enum):
    IDLE = "idle"
    STAGED = "staged"
    DRAGGING = "dragging"


@dataclass
class MoveTransaction:
    original_data: Snapshot
    anchor_pos: Point
    base_offset: Tuple[int, int] = (0, 0)
    current_offset: Tuple[int, int] = (0, 0)

    @property
    def total_offset(self) -> Tuple[int, int]:
        return (
            self.base_offset[0] + self.current_offset[0],
            self.base_offset[1] + self.current_offset[1],
        )

    def moved_cells(self) -> Snapshot:
        """Original cells at their displaced coordinates (unclipped)."""
        ox, oy = self.total_offset
        return {(x + ox, y + oy): cell for (x, y), cell in self.original_data.items()}


class MoveController:
    def __init__(
        self,
        grid: "Grid",
        selection: "SelectionModel",
        history: "UndoManager",
        frame_index: Callable[[], int],
    ):
        self.grid = grid
        self.selection = selection
        self.history = history
        self.frame_index = frame_index
        self.transaction: Optional[MoveTransaction] = None
        self.state = MoveState.IDLE

    @property
    def is_active(self) -> bool:
        return self.transaction is not None

    @property
    def total_offset(self) -> Tuple[int, int]:
        return self.transaction.total_offset if self.transaction else (0, 0)

    def _capture(self, anchor: Point) -> MoveTransaction:
        original = {}
        for x, y in self.selection.cells():
            if self.grid.has_cell(x, y):
                original[(x, y)] = self.grid.get_cell(x, y)
        self.transaction = MoveTransaction(original_data=original, anchor_pos=anchor)
        logger.debug("Move started with %d cells", len(original))
        return self.transaction

    def begin_drag(self, x: int, y: int) -> bool:
        if not self.selection.is_active:
            return False
        if self.transaction is None:
            self._capture((x, y))
        else:
            cx, cy = self.transaction.current_offset
            self.transaction.anchor_pos = (x - cx, y - cy)
        self.state = MoveState.DRAGGING
        return True

    def drag_to(self, x: int, y: int) -> None:
        if self.state is not MoveState.DRAGGING or self.transaction is None:
            return
        ax, ay = self.transaction.anchor_pos
        self.transaction.current_offset = (x - ax, y - ay)

    def end_drag(self) -> None:
        if self.state is not MoveState.DRAGGING or self.transaction is None:
            return
        t = self.transaction
        t.base_offset = t.total_offset
        t.current_offset = (0, 0)
        self.state = MoveState.STAGED

    def step(self, dx: int, dy: int) -> bool:
        """Nudge the content by (dx, dy), starting a transaction if needed."""
        if not self.selection.is_active:
            return False
        if self.transaction is None:
            self._capture((0, 0))
            self.state = MoveState.STAGED
        cx, cy = self.transaction.current_offset
        self.transaction.current_offset = (cx + dx, cy + dy)
        return True

    def contains(self, x: int, y: int) -> bool:
        """Hit test against the selection at its displaced position."""
        return self.selection.contains(x, y, self.total_offset)

    def commit(self) -> bool:
        t = self.transaction
        if t is None:
            return False

        before = self.grid.snapshot()
        for x, y in t.original_data:
            self.grid.clear_cell(x, y)
        for (x, y), cell in t.moved_cells().items():
            self.grid.set_cell(x, y, cell)

        # A move that lands where it started is not an edit.
        if self.grid.snapshot() != before:
            self.history.push(GridEdit(snapshot=before, frame_index=self.frame_index(), description="Move selection"))
            logger.debug("Committed move of %d cells by %s", len(t.original_data), t.total_offset)
        self.transaction = None
        self.state = MoveState.IDLE
        return True

    def cancel(self) -> bool:
        if self.transaction is None:
            return False
        self.transaction = None
        self.state = MoveState.IDLE
        logger.debug("Move cancelled")
        return True
