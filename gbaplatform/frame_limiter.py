"""Paces emulation to a target frame rate and measures the achieved rate."""

from __future__ import annotations

import time
from typing import Callable, Optional

_MILLISECONDS_PER_SECOND = 1000
_MICROSECONDS_PER_SECOND = 1_000_000


class FrameLimiter:
    """Runs frames at a fixed rate unless fast-forward is enabled.

    ``clock`` returns monotonic time in seconds and ``sleep`` blocks for a
    number of seconds; both default to the ``time`` module.
    """

    def __init__(
        self,
        fps: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self.frames_per_second = fps
        self.reset(fps)

    def reset(self, fps: Optional[float] = None) -> None:
        """Restart pacing, optionally at a new frame rate; disables fast-forward."""
        if fps is None:
            fps = self.frames_per_second
        self._frame_count = 0
        self.frame_duration = int(_MICROSECONDS_PER_SECOND / fps)
        self.frames_per_second = fps
        self._fast_forward = False
        now = self._clock()
        self._timestamp_target = now
        self._timestamp_fps_update = now

    @property
    def fast_forward(self) -> bool:
        return self._fast_forward

    @fast_forward.setter
    def fast_forward(self, value: bool) -> None:
        value = bool(value)
        if self._fast_forward != value:
            self._fast_forward = value
            if not value:
                self._timestamp_target = self._clock()

    def run(
        self,
        frame_advance: Callable[[], None],
        update_fps: Callable[[float], None],
    ) -> None:
        """Advance one frame, report the frame rate once a second, then wait."""
        if not self._fast_forward:
            self._timestamp_target += self.frame_duration / _MICROSECONDS_PER_SECOND

        frame_advance()
        self._frame_count += 1

        now = self._clock()
        delta_ms = int((now - self._timestamp_fps_update) * _MILLISECONDS_PER_SECOND)
        if delta_ms >= _MILLISECONDS_PER_SECOND:
            update_fps(self._frame_count * float(_MILLISECONDS_PER_SECOND) / delta_ms)
            self._frame_count = 0
            self._timestamp_fps_update = self._clock()

        if not self._fast_forward:
            remaining = self._timestamp_target - self._clock()
            if remaining > 0:
                self._sleep(remaining)