"""
Frame storage and session file I/O.
Holds one canvas snapshot per animation frame.
"""

import itertools
import logging
import os
from typing import List, Optional

import toml

from .errors import InvalidCellError
from .models import DEFAULT_FRAME_DURATION, Cell, Frame, Snapshot, clamp_duration

logger = logging.getLogger(__name__)


class FrameManager:
    def __init__(self, width: int = 80, height: int = 24, default_duration: int = DEFAULT_FRAME_DURATION):
        self.width = width
        self.height = height
        self.default_duration = clamp_duration(default_duration)
        self.frames: List[Frame] = []
        self.current_index = 0
        self._ids = itertools.count(1)

        # Always start with one empty frame
        self.frames.append(self._new_frame())

    def _new_frame(self, data: Optional[Snapshot] = None, name: Optional[str] = None, duration: Optional[int] = None) -> Frame:
        n = next(self._ids)
        return Frame(
            id=f"frame-{n}",
            name=name or f"Frame {len(self.frames) + 1}",
            duration=clamp_duration(duration if duration is not None else self.default_duration),
            data=dict(data or {}),
        )

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def current_frame(self) -> Frame:
        return self.frames[self.current_index]

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self.frames)

    def clamp_index(self, index: int) -> int:
        return max(0, min(len(self.frames) - 1, index))

    # --- Snapshot access ---

    def get_frame_data(self, index: int) -> Optional[Snapshot]:
        if not self.is_valid_index(index):
            return None
        return dict(self.frames[index].data)

    def set_frame_data(self, index: int, data: Snapshot) -> bool:
        if not self.is_valid_index(index):
            logger.warning("Ignoring write to missing frame %d", index)
            return False
        self.frames[index].data = dict(data)
        return True

    def get_frame(self, index: int) -> Optional[Frame]:
        return self.frames[index] if self.is_valid_index(index) else None

    # --- Structure ---

    def add_frame(self, index: Optional[int] = None, data: Optional[Snapshot] = None) -> int:
        """Create a new frame after `index` (default: after the current one)."""
        at = (self.current_index if index is None else index) + 1
        return self.insert_frame(at, self._new_frame(data))

    def insert_frame(self, index: int, frame: Frame) -> int:
        index = max(0, min(len(self.frames), index))
        self.frames.insert(index, frame)
        if index <= self.current_index and len(self.frames) > 1:
            self.current_index += 1
        return index

    def duplicate_frame(self, index: int) -> Optional[int]:
        source = self.get_frame(index)
        if source is None:
            return None
        copy = self._new_frame(source.data, name=f"{source.name} (Copy)", duration=source.duration)
        return self.insert_frame(index + 1, copy)

    def remove_frame(self, index: int) -> Optional[Frame]:
        """Remove a frame. The last remaining frame is never removed."""
        if len(self.frames) <= 1 or not self.is_valid_index(index):
            return None
        frame = self.frames.pop(index)
        if index < self.current_index or self.current_index >= len(self.frames):
            self.current_index -= 1
        return frame

    def move_frame(self, from_index: int, to_index: int) -> Optional[int]:
        """Move a frame, returning where it ended up. The current frame stays current."""
        if not self.is_valid_index(from_index):
            return None
        current_id = self.current_frame.id
        frame = self.frames.pop(from_index)
        to_index = max(0, min(len(self.frames), to_index))
        self.frames.insert(to_index, frame)
        self.current_index = next(i for i, f in enumerate(self.frames) if f.id == current_id)
        return to_index

    def set_duration(self, index: int, duration: int) -> Optional[int]:
        frame = self.get_frame(index)
        if frame is None:
            return None
        frame.duration = clamp_duration(duration)
        return frame.duration

    def set_name(self, index: int, name: str) -> bool:
        frame = self.get_frame(index)
        if frame is None:
            return False
        frame.name = name
        return True

    def go_to(self, index: int) -> int:
        self.current_index = self.clamp_index(index)
        return self.current_index

    # --- Timing ---

    def total_duration(self) -> int:
        return sum(f.duration for f in self.frames)

    def frame_at_time(self, ms: int) -> int:
        """Index of the frame showing at `ms` into a looping playback."""
        total = self.total_duration()
        if total <= 0:
            return 0
        ms %= total
        for i, frame in enumerate(self.frames):
            if ms < frame.duration:
                return i
            ms -= frame.duration
        return len(self.frames) - 1

    # --- Session I/O ---

    def to_dict(self) -> dict:
        return {
            "canvas": {"width": self.width, "height": self.height},
            "frames": [
                {
                    "name": f.name,
                    "duration": f.duration,
                    "cells": [
                        dict(x=x, y=y, **cell.to_dict())
                        for (x, y), cell in sorted(f.data.items(), key=lambda item: (item[0][1], item[0][0]))
                    ],
                }
                for f in self.frames
            ],
        }

    def save(self, path: str) -> bool:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            with open(path, "w") as f:
                f.write("# ASCII editor session\n\n")
                toml.dump(self.to_dict(), f)
            logger.info("Saved %d frames to %s", len(self.frames), path)
            return True
        except OSError as e:
            logger.error("Error saving session file %s: %s", path, e)
            return False

    def load(self, path: str) -> bool:
        if not os.path.exists(path):
            logger.warning("Session file %s not found", path)
            return False
        try:
            with open(path, "r") as f:
                data = toml.load(f)
        except toml.TomlDecodeError as e:
            logger.error("Error parsing TOML file %s: %s", path, e)
            return False
        except OSError as e:
            logger.error("Error loading session file %s: %s", path, e)
            return False

        canvas = data.get("canvas", {})
        self.width = canvas.get("width", self.width)
        self.height = canvas.get("height", self.height)

        frames = []
        for entry in data.get("frames", []):
            cells = {}
            for c in entry.get("cells", []):
                x, y = c.get("x", -1), c.get("y", -1)
                if not (0 <= x < self.width and 0 <= y < self.height):
                    continue
                try:
                    cell = Cell.from_dict(c)
                except InvalidCellError as e:
                    logger.warning("Skipping cell at (%s, %s) in %s: %s", x, y, path, e)
                    continue
                if not cell.is_empty():
                    cells[(x, y)] = cell
            frames.append(self._new_frame(cells, name=entry.get("name"), duration=entry.get("duration")))

        self.frames = frames or [self._new_frame()]
        self.current_index = 0
        return True
