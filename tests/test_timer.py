from dataclasses import dataclass
from typing import Callable

from gbaplatform.timer import Timer


@dataclass
class _Event:
    time: int
    priority: int
    seq: int
    callback: Callable[[], None]
    active: bool = True


class FakeScheduler:
    def __init__(self):
        self.timestamp_now = 0
        self.events = []
        self._seq = 0

    def add(self, cycles, callback, priority=0):
        event = _Event(self.timestamp_now + cycles, priority, self._seq, callback)
        self._seq += 1
        self.events.append(event)
        return event

    def cancel(self, event):
        event.active = False

    def advance(self, cycles):
        target = self.timestamp_now + cycles
        while True:
            pending = [e for e in self.events if e.active and e.time <= target]
            if not pending:
                break
            event = min(pending, key=lambda e: (e.time, e.priority, e.seq))
            event.active = False
            self.timestamp_now = event.time
            event.callback()
        self.timestamp_now = target


def make_timer():
    scheduler = FakeScheduler()
    irqs = []
    apu = []
    timer = Timer(scheduler, irqs.append, lambda chan, times: apu.append((chan, times)))
    return timer, scheduler, irqs, apu


def test_control_write_takes_effect_after_scheduler_runs():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(1, 2, 0xC5)
    assert timer.read_half(1, 2) == 0
    scheduler.advance(1)
    assert timer.read_half(1, 2) == 0xC5


def test_channel_zero_ignores_cascade_bit():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(0, 2, 0x84)
    scheduler.advance(1)
    assert timer.read_half(0, 2) == 0x84 & ~4


def test_byte_writes_combine_into_reload():
    timer, scheduler, _, _ = make_timer()
    timer.write_byte(1, 0, 0x34)
    timer.write_byte(1, 1, 0x12)
    timer.write_half(1, 2, 0x84)
    scheduler.advance(1)
    assert timer.read_half(1, 0) == 0x1234
    assert timer.read_byte(1, 0) == 0x34
    assert timer.read_byte(1, 1) == 0x12


def test_read_word_combines_control_and_counter():
    timer, scheduler, _, _ = make_timer()
    timer.write_word(2, (0x84 << 16) | 0xABCD)
    scheduler.advance(1)
    assert timer.read_word(2) == (timer.read_half(2, 2) << 16) | timer.read_half(2, 0)
    assert timer.read_half(2, 0) == 0xABCD


def test_counter_advances_one_per_cycle_without_prescaler():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(0, 2, 0x80)
    scheduler.advance(5)
    first = timer.read_half(0, 0)
    scheduler.advance(3)
    assert timer.read_half(0, 0) - first == 3


def test_prescaler_divides_by_1024():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(0, 2, 0x83)
    scheduler.advance(1)
    scheduler.advance(1024 * 5 - 1)
    before = timer.read_half(0, 0)
    scheduler.advance(1)
    after = timer.read_half(0, 0)
    assert after - before == 1
    scheduler.advance(1023)
    assert timer.read_half(0, 0) == after


def test_overflow_raises_irq_and_reloads():
    timer, scheduler, irqs, apu = make_timer()
    timer.write_half(0, 0, 0xFFF0)
    timer.write_half(0, 2, 0xC0)
    scheduler.advance(17)
    assert irqs == []
    scheduler.advance(1)
    assert irqs == [0]
    assert apu == [(0, 1)]
    assert timer.read_half(0, 0) == 0xFFF0


def test_no_irq_without_interrupt_enable():
    timer, scheduler, irqs, apu = make_timer()
    timer.write_half(0, 0, 0xFFF0)
    timer.write_half(0, 2, 0x80)
    scheduler.advance(100)
    assert irqs == []
    assert len(apu) > 0


def test_cascade_counts_overflows_of_previous_channel():
    timer, scheduler, irqs, apu = make_timer()
    timer.write_half(1, 0, 0xFFFF)
    timer.write_half(1, 2, 0xC4)
    timer.write_half(0, 0, 0xFFFE)
    timer.write_half(0, 2, 0x80)
    scheduler.advance(4)
    assert irqs == [1]
    assert apu == [(0, 1), (1, 1)]
    assert timer.read_half(1, 0) == 0xFFFF


def test_disabled_timer_stops_counting():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(0, 2, 0x80)
    scheduler.advance(10)
    timer.write_half(0, 2, 0x00)
    scheduler.advance(1)
    frozen = timer.read_half(0, 0)
    scheduler.advance(500)
    assert timer.read_half(0, 0) == frozen
    assert frozen > 0


def test_reset_clears_all_channels():
    timer, scheduler, _, _ = make_timer()
    timer.write_word(3, (0x84 << 16) | 0x1111)
    scheduler.advance(1)
    timer.reset()
    assert [timer.read_word(i) for i in range(4)] == [0, 0, 0, 0]


def test_unknown_offsets_read_zero():
    timer, scheduler, _, _ = make_timer()
    timer.write_half(1, 2, 0xC4)
    scheduler.advance(1)
    assert timer.read_byte(1, 3) == 0
    assert timer.read_half(1, 1) == 0