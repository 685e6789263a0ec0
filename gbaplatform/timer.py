"""The four hardware timers, driven by a cycle scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Protocol

REG_TMXCNT_L = 0
REG_TMXCNT_H = 2

_TICKS_SHIFT = (0, 6, 8, 10)
_TICKS_MASK = (0, 0x3F, 0xFF, 0x3FF)

_U32 = 0xFFFFFFFF
_U64 = 0xFFFFFFFFFFFFFFFF


class _Scheduler(Protocol):
    timestamp_now: int

    def add(self, cycles: int, callback: Callable[[], None], priority: int = 0) -> object: ...

    def cancel(self, event: object) -> None: ...


@dataclass
class _Channel:
    id: int
    reload: int = 0
    counter: int = 0
    pending_reload: int = 0
    pending_control: int = 0
    frequency: int = 0
    cascade: bool = False
    interrupt: bool = False
    enable: bool = False
    running: bool = False
    shift: int = 0
    mask: int = 0
    timestamp_started: int = 0
    event_overflow: Optional[object] = None


class Timer:
    """Timer unit with prescalers, cascading and overflow interrupts.

    ``raise_irq(channel_id)`` is called when an interrupt-enabled timer
    overflows; ``on_timer_overflow(channel_id, times)`` is told about
    overflows of timers 0 and 1, which clock the sound FIFOs.
    """

    def __init__(
        self,
        scheduler: _Scheduler,
        raise_irq: Callable[[int], None],
        on_timer_overflow: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self.scheduler = scheduler
        self._raise_irq = raise_irq
        self._on_timer_overflow = on_timer_overflow
        self.channels: List[_Channel] = []
        self.reset()

    def reset(self) -> None:
        self.channels = [_Channel(id=channel_id) for channel_id in range(4)]

    def read_byte(self, chan_id: int, offset: int) -> int:
        channel = self.channels[chan_id]
        if offset == REG_TMXCNT_L:
            return self._read_counter(channel) & 0xFF
        if offset == REG_TMXCNT_L | 1:
            return (self._read_counter(channel) >> 8) & 0xFF
        if offset == REG_TMXCNT_H:
            return self._read_control(channel) & 0xFF
        return 0

    def read_half(self, chan_id: int, offset: int) -> int:
        channel = self.channels[chan_id]
        if offset == REG_TMXCNT_L:
            return self._read_counter(channel)
        if offset == REG_TMXCNT_H:
            return self._read_control(channel)
        return 0

    def read_word(self, chan_id: int) -> int:
        channel = self.channels[chan_id]
        return (self._read_control(channel) << 16) | self._read_counter(channel)

    def write_byte(self, chan_id: int, offset: int, value: int) -> None:
        channel = self.channels[chan_id]
        value &= 0xFF
        if offset == REG_TMXCNT_L:
            self._write_reload(channel, (channel.pending_reload & 0xFF00) | value)
        elif offset == REG_TMXCNT_L | 1:
            self._write_reload(channel, (channel.pending_reload & 0x00FF) | (value << 8))
        elif offset == REG_TMXCNT_H:
            self._write_control(channel, value)

    def write_half(self, chan_id: int, offset: int, value: int) -> None:
        channel = self.channels[chan_id]
        value &= 0xFFFF
        if offset == REG_TMXCNT_L:
            self._write_reload(channel, value)
        elif offset == REG_TMXCNT_H:
            self._write_control(channel, value)

    def write_word(self, chan_id: int, value: int) -> None:
        channel = self.channels[chan_id]
        self._write_reload(channel, value & 0xFFFF)
        self._write_control(channel, (value >> 16) & 0xFFFF)

    def _read_counter(self, channel: _Channel) -> int:
        counter = channel.counter
        # A running timer has ticked since its counter was last stored.
        if channel.running:
            counter += self._counter_delta(channel)
        return counter & 0xFFFF

    def _write_reload(self, channel: _Channel, value: int) -> None:
        channel.pending_reload = value
        self.scheduler.add(1, partial(self._on_reload_written, channel.id), 1)

    @staticmethod
    def _read_control(channel: _Channel) -> int:
        return (
            channel.frequency
            | (4 if channel.cascade else 0)
            | (64 if channel.interrupt else 0)
            | (128 if channel.enable else 0)
        )

    def _write_control(self, channel: _Channel, value: int) -> None:
        channel.pending_control = value
        self.scheduler.add(1, partial(self._on_control_written, channel.id), 2)

    def _on_reload_written(self, chan_id: int) -> None:
        channel = self.channels[chan_id]
        channel.reload = channel.pending_reload

    def _on_control_written(self, chan_id: int) -> None:
        channel = self.channels[chan_id]
        enable_previous = channel.enable
        value = channel.pending_control

        if channel.running:
            self._stop_channel(channel)

        channel.frequency = value & 3
        channel.interrupt = bool(value & 64)
        channel.enable = bool(value & 128)
        if channel.id != 0:
            channel.cascade = bool(value & 4)

        channel.shift = _TICKS_SHIFT[channel.frequency]
        channel.mask = _TICKS_MASK[channel.frequency]

        if not channel.enable:
            return

        # Cycles elapsed since the last prescaler tick.
        prescaler_offset = self.scheduler.timestamp_now & channel.mask

        if enable_previous:
            if not channel.cascade:
                self._start_channel(channel, prescaler_offset)
        elif channel.cascade:
            channel.counter = channel.reload
        elif channel.counter == 0xFFFF and prescaler_offset == 0:
            # Loading the reload value takes a cycle, during which the
            # counter may still tick and overflow.
            self._start_channel(channel, 0)
        else:
            channel.counter = channel.reload
            self._start_channel(channel, prescaler_offset - 1)

    def _counter_delta(self, channel: _Channel) -> int:
        elapsed = (self.scheduler.timestamp_now - channel.timestamp_started) & _U64
        return (elapsed >> channel.shift) & _U32

    def _start_channel(self, channel: _Channel, cycle_offset: int) -> None:
        cycles = ((0x10000 - channel.counter) << channel.shift) - cycle_offset
        channel.running = True
        channel.timestamp_started = self.scheduler.timestamp_now - cycle_offset
        channel.event_overflow = self.scheduler.add(
            cycles, partial(self._on_overflow, channel.id), 0
        )

    def _stop_channel(self, channel: _Channel) -> None:
        channel.counter = (channel.counter + self._counter_delta(channel)) & _U32
        if channel.counter >= 0x10000:
            self._reload_cascade_and_request_irq(channel)
        if channel.event_overflow is not None:
            self.scheduler.cancel(channel.event_overflow)
        channel.event_overflow = None
        channel.running = False

    def _reload_cascade_and_request_irq(self, channel: _Channel) -> None:
        channel.counter = channel.reload

        if channel.interrupt:
            self._raise_irq(channel.id)

        if channel.id <= 1 and self._on_timer_overflow is not None:
            self._on_timer_overflow(channel.id, 1)

        if channel.id != 3:
            following = self.channels[channel.id + 1]
            if following.enable and following.cascade:
                following.counter = (following.counter + 1) & _U32
                if following.counter == 0x10000:
                    self._reload_cascade_and_request_irq(following)

    def _on_overflow(self, chan_id: int) -> None:
        channel = self.channels[chan_id]
        self._reload_cascade_and_request_irq(channel)
        self._start_channel(channel, 0)