"""
Debounced persistence of the live canvas into the frame store.
"""

import logging
from typing import TYPE_CHECKING, Optional

from .clock import CancellationToken, Scheduler

if TYPE_CHECKING:
    from .frame_manager import FrameManager
    from .grid import Grid

logger = logging.getLogger(__name__)


class FrameSynchronizer:
    """Coalesces canvas edits into one frame write after a quiet period."""

    def __init__(self, grid: "Grid", frames: "FrameManager", scheduler: Scheduler, debounce_ms: int = 150):
        self.grid = grid
        self.frames = frames
        self.scheduler = scheduler
        self.debounce = debounce_ms / 1000.0
        self.suspended = False
        self._pending: Optional[CancellationToken] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    def notify_change(self) -> None:
        """Restart the debounce window."""
        if self.suspended:
            return
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self.scheduler.schedule(self.flush, self.debounce)

    def flush(self) -> None:
        """Write the canvas into the current frame immediately."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self.frames.set_frame_data(self.frames.current_index, self.grid.snapshot())

    def discard(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
