"""
Invertible history actions.

Each action is replayed against a target exposing:

    grid            the live canvas for the current frame
    frames          the FrameManager
    persist_grid()  write the live canvas into the current frame now
    load_frame(i)   make frame i current and load it into the canvas,
                    returning the (clamped) index actually loaded
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .models import Frame, Snapshot

if TYPE_CHECKING:
    from .editor import Editor

logger = logging.getLogger(__name__)


@dataclass
class Action(ABC):
    description: str = ""
    timestamp: float = field(default_factory=time.time, compare=False)

    @abstractmethod
    def undo(self, target: "Editor") -> bool:
        """Revert the action. Returns False when it could not be applied."""

    @abstractmethod
    def redo(self, target: "Editor") -> bool:
        """Re-apply the action. Returns False when it could not be applied."""

    def _frame_exists(self, target: "Editor", index: int) -> bool:
        if target.frames.is_valid_index(index):
            return True
        logger.warning(
            "Skipping %s: frame %d no longer exists (%d frames)",
            type(self).__name__,
            index,
            target.frames.frame_count,
        )
        return False


@dataclass
class GridEdit(Action):
    snapshot: Snapshot = field(default_factory=dict)
    frame_index: int = 0
    redo_snapshot: Optional[Snapshot] = None
    description: str = "Edit canvas"

    def undo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.frame_index):
            return False
        target.persist_grid()
        target.load_frame(self.frame_index)
        self.redo_snapshot = target.grid.snapshot()
        target.grid.set_canvas_data(self.snapshot)
        target.persist_grid()
        return True

    def redo(self, target: "Editor") -> bool:
        if self.redo_snapshot is None:
            logger.warning("Skipping redo of %r: no post-edit snapshot recorded", self.description)
            return False
        if not self._frame_exists(target, self.frame_index):
            return False
        target.persist_grid()
        target.load_frame(self.frame_index)
        target.grid.set_canvas_data(self.redo_snapshot)
        target.persist_grid()
        return True


@dataclass
class AddFrame(Action):
    index: int = 0
    frame: Optional[Frame] = None
    previous_index: int = 0
    description: str = "Add frame"

    def undo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.persist_grid()
        target.frames.remove_frame(self.index)
        target.load_frame(self.previous_index)
        return True

    def redo(self, target: "Editor") -> bool:
        target.persist_grid()
        index = target.frames.insert_frame(self.index, self.frame.copy())
        target.load_frame(index)
        return True


@dataclass
class DuplicateFrame(AddFrame):
    source_index: int = 0
    description: str = "Duplicate frame"


@dataclass
class DeleteFrame(Action):
    index: int = 0
    frame: Optional[Frame] = None
    previous_index: int = 0
    new_index: int = 0
    description: str = "Delete frame"

    def undo(self, target: "Editor") -> bool:
        target.persist_grid()
        target.frames.insert_frame(self.index, self.frame.copy())
        target.load_frame(self.previous_index)
        return True

    def redo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.persist_grid()
        target.frames.remove_frame(self.index)
        target.load_frame(self.new_index)
        return True


@dataclass
class ReorderFrames(Action):
    from_index: int = 0
    to_index: int = 0
    final_index: int = 0
    previous_index: int = 0
    new_index: int = 0
    description: str = "Reorder frames"

    def undo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.final_index):
            return False
        target.persist_grid()
        target.frames.move_frame(self.final_index, self.from_index)
        target.load_frame(self.previous_index)
        return True

    def redo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.from_index):
            return False
        target.persist_grid()
        target.frames.move_frame(self.from_index, self.to_index)
        target.load_frame(self.new_index)
        return True


@dataclass
class UpdateDuration(Action):
    index: int = 0
    old_duration: int = 0
    new_duration: int = 0
    description: str = "Change frame duration"

    def undo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.frames.set_duration(self.index, self.old_duration)
        return True

    def redo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.frames.set_duration(self.index, self.new_duration)
        return True


@dataclass
class UpdateName(Action):
    index: int = 0
    old_name: str = ""
    new_name: str = ""
    description: str = "Rename frame"

    def undo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.frames.set_name(self.index, self.old_name)
        return True

    def redo(self, target: "Editor") -> bool:
        if not self._frame_exists(target, self.index):
            return False
        target.frames.set_name(self.index, self.new_name)
        return True


@dataclass
class NavigateFrame(Action):
    previous_index: int = 0
    new_index: int = 0
    description: str = "Change frame"

    def undo(self, target: "Editor") -> bool:
        target.persist_grid()
        target.load_frame(self.previous_index)
        return True

    def redo(self, target: "Editor") -> bool:
        target.persist_grid()
        target.load_frame(self.new_index)
        return True
