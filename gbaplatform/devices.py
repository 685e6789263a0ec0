"""Audio and video output device interfaces with silent null devices."""

from __future__ import annotations

import abc
from typing import Callable, Optional, Sequence

# Receives a buffer of interleaved stereo 16-bit samples to fill.
AudioCallback = Callable[[memoryview], None]


class AudioDevice(abc.ABC):
    """An audio sink that pulls samples through a callback."""

    @property
    @abc.abstractmethod
    def sample_rate(self) -> int:
        """Output sample rate in Hz."""

    @property
    @abc.abstractmethod
    def block_size(self) -> int:
        """Number of samples requested per callback."""

    @abc.abstractmethod
    def open(self, callback: AudioCallback) -> bool:
        """Start the device; return whether it could be opened."""

    @abc.abstractmethod
    def set_pause(self, value: bool) -> None:
        """Pause or resume playback."""

    @abc.abstractmethod
    def close(self) -> None:
        """Stop the device."""


class NullAudioDevice(AudioDevice):
    """An audio device that keeps track of its state but plays nothing."""

    def __init__(self) -> None:
        self.callback: Optional[AudioCallback] = None
        self.opened = False
        self.paused = False

    @property
    def sample_rate(self) -> int:
        return 32768

    @property
    def block_size(self) -> int:
        return 4096

    def open(self, callback: AudioCallback) -> bool:
        self.callback = callback
        self.opened = True
        return True

    def set_pause(self, value: bool) -> None:
        self.paused = bool(value)

    def close(self) -> None:
        self.opened = False
        self.callback = None


class VideoDevice(abc.ABC):
    """A display receiving finished frames of 32-bit pixels."""

    @abc.abstractmethod
    def draw(self, buffer: Sequence[int]) -> None:
        """Present one frame."""


class NullVideoDevice(VideoDevice):
    """A video device that shows nothing but counts the frames it gets."""

    def __init__(self) -> None:
        self.frames_drawn = 0
        self.last_frame: Optional[Sequence[int]] = None

    def draw(self, buffer: Sequence[int]) -> None:
        self.frames_drawn += 1
        self.last_frame = buffer