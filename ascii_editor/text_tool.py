"""
Typing onto the canvas with word-level undo batching.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .models import EMPTY_CHAR, Cell, Point, ToolSettings

if TYPE_CHECKING:
    from .grid import Grid
    from .undo_manager import UndoManager

logger = logging.getLogger(__name__)

WORD_BOUNDARY_CHARS = frozenset(" \t\n.,;:!?\"'()[]{}<>/\\|@#$%^&*+=-_~`")


def is_word_boundary(char: str) -> bool:
    return char in WORD_BOUNDARY_CHARS


class TextTool:
    def __init__(
        self,
        grid: "Grid",
        history: "UndoManager",
        settings: ToolSettings,
        frame_index: Callable[[], int],
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.grid = grid
        self.history = history
        self.settings = settings
        self.frame_index = frame_index
        self.on_change = on_change or (lambda: None)

        self.is_typing = False
        self.cursor: Optional[Point] = None
        self.line_start_x = 0

    def _text_cell(self, char: str) -> Cell:
        if char == EMPTY_CHAR:
            return Cell()
        return Cell(char, self.settings.selected_color, self.settings.selected_bg_color)

    def _open_batch(self) -> None:
        self.history.start_batch(self.grid.snapshot(), self.frame_index(), "Type text")

    def commit_word(self) -> bool:
        """Push the pending typing batch as one history entry."""
        return self.history.end_batch(self.grid.snapshot())

    def _write(self, x: int, y: int, char: str) -> None:
        self._open_batch()
        self.grid.set_cell(x, y, self._text_cell(char))
        self.on_change()

    # --- Session ---

    def start(self, x: int, y: int) -> None:
        if self.is_typing:
            self.commit_word()
        self.is_typing = True
        self.cursor = (x, y)
        self.line_start_x = x

    def stop(self) -> None:
        if not self.is_typing:
            return
        self.commit_word()
        self.is_typing = False
        self.cursor = None

    # --- Keys ---

    def insert(self, char: str) -> None:
        if not self.is_typing or self.cursor is None:
            return
        if is_word_boundary(char):
            self.commit_word()

        x, y = self.cursor
        self._write(x, y, char)
        if x + 1 < self.grid.width:
            self.cursor = (x + 1, y)

    def enter(self) -> None:
        if not self.is_typing or self.cursor is None:
            return
        self.commit_word()
        y = self.cursor[1] + 1
        if y < self.grid.height:
            self.cursor = (self.line_start_x, y)

    def backspace(self) -> None:
        """Clear the previous cell on this line. Never wraps to the line above."""
        if not self.is_typing or self.cursor is None:
            return
        x, y = self.cursor
        if x == 0:
            return
        target = x - 1
        if is_word_boundary(self.grid.get_cell(target, y).char):
            self.commit_word()
        self._write(target, y, EMPTY_CHAR)
        self.cursor = (target, y)

    def move_cursor(self, dx: int, dy: int) -> bool:
        if not self.is_typing or self.cursor is None:
            return False
        nx, ny = self.cursor[0] + dx, self.cursor[1] + dy
        if not self.grid.in_bounds(nx, ny):
            return False
        self.cursor = (nx, ny)
        return True

    def paste(self, text: str) -> None:
        """Write a block of text at the cursor as a single history entry."""
        if not self.is_typing or self.cursor is None or not text:
            return
        self.commit_word()

        x, y = self.cursor
        self._open_batch()
        for char in text:
            if char in "\r\n":
                if char == "\r":
                    continue
                y += 1
                x = self.line_start_x
                if y >= self.grid.height:
                    break
                continue
            if x < self.grid.width:
                self.grid.set_cell(x, y, self._text_cell(char))
                x += 1
        self.on_change()

        if y < self.grid.height:
            self.cursor = (min(x, self.grid.width - 1), y)
        self.commit_word()
