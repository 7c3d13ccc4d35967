"""
Undo and redo management for the ASCII editor.
A single action list with a cursor; batches coalesce many edits into one GridEdit.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from .actions import Action, GridEdit
from .models import Snapshot

if TYPE_CHECKING:
    from .editor import Editor

logger = logging.getLogger(__name__)


class UndoManager:
    def __init__(self, max_history: int = 50):
        self.max_history = max_history
        self.history: List[Action] = []
        self.position = -1  # index of the last applied action
        self._batch: Optional[GridEdit] = None

    @property
    def can_undo(self) -> bool:
        return self.position >= 0

    @property
    def can_redo(self) -> bool:
        return self.position < len(self.history) - 1

    @property
    def in_batch(self) -> bool:
        return self._batch is not None

    def push(self, action: Action) -> None:
        # A new action after undo discards the redo tail.
        del self.history[self.position + 1:]
        self.history.append(action)
        if len(self.history) > self.max_history:
            self.history.pop(0)
        self.position = len(self.history) - 1
        logger.debug("Pushed %s (%d in history)", action.description, len(self.history))

    def start_batch(self, snapshot: Snapshot, frame_index: int, description: str = "Edit canvas") -> bool:
        """Open a batch capturing the pre-edit snapshot. No-op if one is already open."""
        if self._batch is not None:
            return False
        self._batch = GridEdit(snapshot=snapshot, frame_index=frame_index, description=description)
        return True

    def end_batch(self, current: Snapshot) -> bool:
        """Close the open batch, pushing it only if the canvas actually changed."""
        batch, self._batch = self._batch, None
        if batch is None or batch.snapshot == current:
            return False
        self.push(batch)
        return True

    def undo(self, target: "Editor") -> Optional[Action]:
        if not self.can_undo:
            return None
        action = self.history[self.position]
        self.position -= 1
        action.undo(target)
        logger.debug("Undo %s", action.description)
        return action

    def redo(self, target: "Editor") -> Optional[Action]:
        if not self.can_redo:
            return None
        self.position += 1
        action = self.history[self.position]
        action.redo(target)
        logger.debug("Redo %s", action.description)
        return action

    def clear(self) -> None:
        self.history.clear()
        self.position = -1
        self._batch = None
