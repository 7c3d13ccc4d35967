"""
Cooperative timing for the editor: delayed callbacks and animation playback.
Nothing here blocks or sleeps; the host loop calls `process_due()` / `tick()`.
"""

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

if TYPE_CHECKING:
    from .frame_manager import FrameManager

logger = logging.getLogger(__name__)

TimeSource = Callable[[], float]

FRAME_CHECK_INTERVAL = 1 / 60  # seconds


class CancellationToken:
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Runs callbacks once their due time has passed."""

    def __init__(self, time_source: TimeSource = time.monotonic):
        self.time_source = time_source
        self.action_queue: List[Tuple[float, Callable[[], None], CancellationToken]] = []

    def now(self) -> float:
        return self.time_source()

    def schedule(
        self,
        callback: Callable[[], None],
        delay: float = 0.0,
        token: Optional[CancellationToken] = None,
    ) -> CancellationToken:
        """Schedule a callback after `delay` seconds. Cancel the returned token to drop it."""
        token = token or CancellationToken()
        self.action_queue.append((self.now() + delay, callback, token))
        return token

    def process_due(self) -> int:
        """Run every due, uncancelled callback. Returns how many ran."""
        current_time = self.now()
        due = [item for item in self.action_queue if item[2].cancelled or current_time >= item[0]]
        for item in due:
            self.action_queue.remove(item)

        ran = 0
        for _, callback, token in due:
            if token.cancelled:
                continue
            callback()
            ran += 1
        return ran

    @property
    def pending(self) -> int:
        return sum(1 for _, _, token in self.action_queue if not token.cancelled)

    def clear(self) -> None:
        for _, _, token in self.action_queue:
            token.cancel()
        self.action_queue.clear()


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackScheduler:
    """Steps through frames by their durations while playing."""

    def __init__(
        self,
        frames: "FrameManager",
        scheduler: Scheduler,
        on_frame: Callable[[int], None],
        loop: bool = True,
    ):
        self.frames = frames
        self.scheduler = scheduler
        self.on_frame = on_frame
        self.loop = loop
        self.state = PlaybackState.STOPPED
        self.frame_started_at = 0.0
        self._token: Optional[CancellationToken] = None

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def play(self) -> None:
        if self.is_playing:
            return
        if self._token is not None:
            self._token.cancel()
        self._token = CancellationToken()
        self.state = PlaybackState.PLAYING
        self.frame_started_at = self.scheduler.now()
        self.scheduler.schedule(self._run, FRAME_CHECK_INTERVAL, self._token)
        logger.debug("Playback started at frame %d", self.frames.current_index)

    def pause(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self.is_playing:
            self.state = PlaybackState.PAUSED

    def stop(self) -> None:
        self.pause()
        self.state = PlaybackState.STOPPED

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def _run(self) -> None:
        token = self._token
        if token is None or token.cancelled:
            return
        self.tick(self.scheduler.now())
        if not token.cancelled:
            self.scheduler.schedule(self._run, FRAME_CHECK_INTERVAL, token)

    def tick(self, now: float) -> bool:
        """Advance when the current frame's duration has elapsed. Returns True on advance."""
        if not self.is_playing:
            return False
        duration = self.frames.current_frame.duration / 1000.0
        if now - self.frame_started_at < duration:
            return False

        next_index = self.frames.current_index + 1
        if next_index >= self.frames.frame_count:
            if not self.loop:
                self.stop()
                return False
            next_index = 0

        self.frame_started_at = now
        self.on_frame(next_index)
        return True
