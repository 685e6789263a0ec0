"""Real-time clock chip connected through the cartridge GPIO port."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List

from gbaplatform.gpio import GPIODevice, PortDirection

_log = logging.getLogger(__name__)


class _Port(enum.IntEnum):
    SCK = 0
    SIO = 1
    CS = 2


class _State(enum.Enum):
    COMMAND = enum.auto()
    SENDING = enum.auto()
    RECEIVING = enum.auto()
    COMPLETE = enum.auto()


class RTCRegister(enum.IntEnum):
    FORCE_RESET = 0
    DATE_TIME = 2
    FORCE_IRQ = 3
    CONTROL = 4
    TIME = 6
    FREE = 7


# Number of argument bytes for each of the eight register numbers.
_ARGUMENT_COUNT = (0, 0, 7, 0, 1, 0, 3, 0)


@dataclass
class RTCControl:
    unknown1: bool = False
    per_minute_irq: bool = False
    unknown2: bool = False
    mode_24h: bool = False
    poweroff: bool = False


def _to_bcd(value: int) -> int:
    result = 0
    shift = 0
    while value > 0:
        result |= (value % 10) << shift
        value //= 10
        shift += 4
    return result & 0xFF


class RTC(GPIODevice):
    """Serial RTC speaking the three-wire protocol over SCK, SIO and CS."""

    def __init__(
        self,
        raise_irq: Callable[[], None],
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__()
        self._raise_irq = raise_irq
        self._clock = clock
        self._reg = 0
        self.reset()

    def reset(self) -> None:
        self._current_bit = 0
        self._current_byte = 0
        self._data = 0
        self._buffer: List[int] = [0] * 7
        self._sck = 0
        self._sio = 0
        self._cs = 0
        self._state = _State.COMPLETE
        # Some games refuse to boot unless 24-hour mode is enabled.
        self.control = RTCControl(mode_24h=True)

    def read(self) -> int:
        return (self._sio & self._cs) << _Port.SIO

    def write(self, value: int) -> None:
        old_sck = self._sck
        old_cs = self._cs

        if self.get_port_direction(_Port.CS) == PortDirection.OUT:
            self._cs = (value >> _Port.CS) & 1
        else:
            _log.error("RTC: CS port should be set to 'output' but configured as 'input'.")

        if self.get_port_direction(_Port.SCK) == PortDirection.OUT:
            self._sck = (value >> _Port.SCK) & 1
        else:
            _log.error("RTC: SCK port should be set to 'output' but configured as 'input'.")

        if self.get_port_direction(_Port.SIO) == PortDirection.OUT:
            self._sio = (value >> _Port.SIO) & 1

        if not self._cs:
            return

        if not old_cs:
            self._state = _State.COMMAND
            self._current_bit = 0
            self._current_byte = 0
            return

        if not old_sck and self._sck:
            if self._state == _State.COMMAND:
                self._receive_command_sio()
            elif self._state == _State.RECEIVING:
                self._receive_buffer_sio()
            elif self._state == _State.SENDING:
                self._transmit_buffer_sio()

    def _read_sio(self) -> bool:
        self._data &= ~(1 << self._current_bit) & 0xFF
        self._data |= self._sio << self._current_bit
        self._current_bit += 1
        if self._current_bit == 8:
            self._current_bit = 0
            return True
        return False

    def _receive_command_sio(self) -> None:
        if not self._read_sio():
            return

        data = self._data
        if (data >> 4) == 6:
            data = ((data << 4) | (data >> 4)) & 0xFF
            data = ((data & 0x33) << 2) | ((data & 0xCC) >> 2)
            data = ((data & 0x55) << 1) | ((data & 0xAA) >> 1)
            self._data = data
            _log.debug("RTC: received command in REV format, data=0x%X", data)
        elif (data & 15) != 6:
            _log.error("RTC: received command in unknown format, data=0x%X", data)
            return

        self._reg = (data >> 4) & 7
        self._current_bit = 0
        self._current_byte = 0
        has_arguments = _ARGUMENT_COUNT[self._reg] > 0

        if data & 0x80:
            self._read_register()
            self._state = _State.SENDING if has_arguments else _State.COMPLETE
        elif has_arguments:
            self._state = _State.RECEIVING
        else:
            self._write_register()
            self._state = _State.COMPLETE

    def _receive_buffer_sio(self) -> None:
        count = _ARGUMENT_COUNT[self._reg]
        if self._current_byte < count and self._read_sio():
            self._buffer[self._current_byte] = self._data
            self._current_byte += 1
            if self._current_byte == count:
                self._write_register()
                self._state = _State.COMPLETE

    def _transmit_buffer_sio(self) -> None:
        self._sio = self._buffer[self._current_byte] & 1
        self._buffer[self._current_byte] >>= 1
        self._current_bit += 1
        if self._current_bit == 8:
            self._current_bit = 0
            self._current_byte += 1
            if self._current_byte == _ARGUMENT_COUNT[self._reg]:
                self._state = _State.COMPLETE

    def _adjust_hour(self, hour: int) -> int:
        if not self.control.mode_24h and hour >= 12:
            return (hour - 12) | 64
        return hour

    def _read_register(self) -> None:
        control = self.control
        if self._reg == RTCRegister.CONTROL:
            self._buffer[0] = (
                (2 if control.unknown1 else 0)
                | (8 if control.per_minute_irq else 0)
                | (32 if control.unknown2 else 0)
                | (64 if control.mode_24h else 0)
                | (128 if control.poweroff else 0)
            )
        elif self._reg == RTCRegister.DATE_TIME:
            now = self._clock()
            self._buffer[:7] = [
                _to_bcd(now.year - 2000),
                _to_bcd(now.month),
                _to_bcd(now.day),
                _to_bcd((now.weekday() + 1) % 7),
                _to_bcd(self._adjust_hour(now.hour)),
                _to_bcd(now.minute),
                _to_bcd(now.second),
            ]
        elif self._reg == RTCRegister.TIME:
            now = self._clock()
            self._buffer[:3] = [
                _to_bcd(self._adjust_hour(now.hour)),
                _to_bcd(now.minute),
                _to_bcd(now.second),
            ]

    def _write_register(self) -> None:
        if self._reg == RTCRegister.CONTROL:
            value = self._buffer[0]
            self.control.unknown1 = bool(value & 2)
            self.control.per_minute_irq = bool(value & 8)
            self.control.unknown2 = bool(value & 32)
            self.control.mode_24h = bool(value & 64)
            if self.control.per_minute_irq:
                _log.error("RTC: enabled the unimplemented per-minute IRQ.")
        elif self._reg == RTCRegister.FORCE_RESET:
            self.control = RTCControl()
        elif self._reg == RTCRegister.FORCE_IRQ:
            self._raise_irq()
        else:
            _log.error("RTC: unhandled register write: %d", self._reg)