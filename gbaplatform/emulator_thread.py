"""Runs an emulator core on a background thread, paced by a frame limiter."""

from __future__ import annotations

import enum
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Optional, Protocol

from gbaplatform.frame_limiter import FrameLimiter


class Core(Protocol):
    def run(self, cycles: int) -> None: ...

    def reset(self) -> None: ...

    def set_key_status(self, key: Any, pressed: bool) -> None: ...


class _MessageType(enum.Enum):
    RESET = enum.auto()
    SET_KEY_STATUS = enum.auto()


@dataclass(frozen=True)
class _Message:
    type: _MessageType
    key: Any = None
    pressed: bool = False


class EmulatorThread:
    """Owns a core while running it; control messages are queued to its thread."""

    NUMBER_OF_INPUT_SUBFRAMES = 4
    CYCLES_PER_SECOND = 16777216
    CYCLES_PER_FRAME = 280896
    CYCLES_PER_SUBFRAME = CYCLES_PER_FRAME // NUMBER_OF_INPUT_SUBFRAMES

    def __init__(self, frame_limiter: Optional[FrameLimiter] = None) -> None:
        self._frame_limiter = frame_limiter if frame_limiter is not None else FrameLimiter()
        self._frame_limiter.reset(self.CYCLES_PER_SECOND / self.CYCLES_PER_SUBFRAME)
        self._messages: Deque[_Message] = deque()
        self._lock = threading.Lock()
        self._core: Optional[Core] = None
        self._thread: Optional[threading.Thread] = None
        self._running = threading.Event()
        self.paused = False
        self._frame_rate_cb: Callable[[float], None] = lambda fps: None
        self._per_frame_cb: Callable[[], None] = lambda: None

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def fast_forward(self) -> bool:
        return self._frame_limiter.fast_forward

    @fast_forward.setter
    def fast_forward(self, enabled: bool) -> None:
        self._frame_limiter.fast_forward = enabled

    def set_frame_rate_callback(self, callback: Callable[[float], None]) -> None:
        """Set the function receiving the measured frames per second."""
        self._frame_rate_cb = callback

    def set_per_frame_callback(self, callback: Callable[[], None]) -> None:
        """Set the function called on the emulator thread before each subframe."""
        self._per_frame_cb = callback

    def start(self, core: Core) -> None:
        if self.running:
            raise RuntimeError("Started an emulator thread which was already running")
        self._core = core
        self._running.set()
        self._thread = threading.Thread(target=self._main, name="emulator", daemon=True)
        self._thread.start()

    def stop(self) -> Optional[Core]:
        """Stop the thread and hand back the core."""
        if self.running:
            self._running.clear()
            if self._thread is not None:
                self._thread.join()
        core, self._core = self._core, None
        return core

    def reset(self) -> None:
        self._push(_Message(_MessageType.RESET))

    def set_key_status(self, key: Any, pressed: bool) -> None:
        self._push(_Message(_MessageType.SET_KEY_STATUS, key, bool(pressed)))

    def __enter__(self) -> "EmulatorThread":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _main(self) -> None:
        self._frame_limiter.reset()
        while self._running.is_set():
            self._process_messages()
            self._frame_limiter.run(self._advance, self._report_fps)
        # Handle everything sent before stopping.
        self._process_messages()

    def _advance(self) -> None:
        if not self.paused:
            self._per_frame_cb()
            self._core.run(self.CYCLES_PER_SUBFRAME)

    def _report_fps(self, fps: float) -> None:
        real_fps = 0.0 if self.paused else fps / self.NUMBER_OF_INPUT_SUBFRAMES
        self._frame_rate_cb(real_fps)

    def _push(self, message: _Message) -> None:
        if not self.running:
            return
        if threading.current_thread() is self._thread:
            # Sent from a callback on the emulator thread: no need to queue.
            self._process(message)
        else:
            with self._lock:
                self._messages.append(message)

    def _process_messages(self) -> None:
        with self._lock:
            while self._messages:
                self._process(self._messages.popleft())

    def _process(self, message: _Message) -> None:
        if message.type is _MessageType.RESET:
            self._core.reset()
        elif message.type is _MessageType.SET_KEY_STATUS:
            self._core.set_key_status(message.key, message.pressed)
        else:
            raise ValueError(f"unhandled message type: {message.type}")