"""Serial EEPROM save memory (512 bytes or 8 KiB)."""

from __future__ import annotations

import enum
from typing import Callable, Optional, Protocol

from gbaplatform.backup_file import BackupFile, PathLike

# Cycles the chip needs to program a block (~6 ms).
EEPROM_WRITE_CYCLES = 101400


class EEPROMSize(enum.IntEnum):
    SIZE_4K = 0
    SIZE_64K = 1
    DETECT = 2


_ADDRESS_BITS = {EEPROMSize.SIZE_4K: 6, EEPROMSize.SIZE_64K: 14}
_SAVE_SIZE = {EEPROMSize.SIZE_4K: 512, EEPROMSize.SIZE_64K: 8192}


class _Scheduler(Protocol):
    def add(self, cycles: int, callback: Callable[[], None]) -> object: ...


class _State(enum.IntFlag):
    ACCEPT_COMMAND = 1
    READ_MODE = 2
    WRITE_MODE = 4
    GET_ADDRESS = 8
    READING = 16
    DUMMY_NIBBLE = 32
    WRITING = 64
    EAT_DUMMY = 128
    BUSY = 256


class EEPROM:
    """EEPROM chip accessed one bit at a time.

    After a block write the chip stays busy until ``on_ready_after_write``
    runs; it is handed to ``scheduler.add`` with the programming delay.
    """

    def __init__(self, save_path: PathLike, size_hint: EEPROMSize, scheduler: _Scheduler) -> None:
        self.save_path = save_path
        self.size = EEPROMSize(size_hint)
        self.scheduler = scheduler
        self.file: Optional[BackupFile] = None
        self.reset()

    def reset(self) -> None:
        self._state = _State.ACCEPT_COMMAND
        self._address = 0
        self._reset_serial_buffer()

        if self.size == EEPROMSize.DETECT:
            self.size = EEPROMSize.SIZE_64K
            self.detect_size = True
        else:
            self.detect_size = False

        self._open_file(list(_SAVE_SIZE.values()), _SAVE_SIZE[self.size])

        if self.file.size == _SAVE_SIZE[EEPROMSize.SIZE_4K]:
            self.size = EEPROMSize.SIZE_4K
        else:
            self.size = EEPROMSize.SIZE_64K

    def _open_file(self, valid_sizes: list, default_size: int) -> None:
        if self.file is not None:
            self.file.close()
        self.file = BackupFile.open_or_create(self.save_path, valid_sizes, default_size)

    def _reset_serial_buffer(self) -> None:
        self._serial_buffer = 0
        self._transmitted_bits = 0

    def read(self, address: int) -> int:
        """Return the next serial bit (1 when idle, 0 while busy)."""
        state = self._state
        if state & _State.READING:
            if state & _State.DUMMY_NIBBLE:
                self._transmitted_bits += 1
                if self._transmitted_bits == 4:
                    self._state &= ~_State.DUMMY_NIBBLE
                    self._reset_serial_buffer()
                return 0

            bit = self._transmitted_bits % 8
            index = self._transmitted_bits // 8

            self._transmitted_bits += 1
            if self._transmitted_bits == 64:
                self._state = _State.ACCEPT_COMMAND
                self._reset_serial_buffer()

            return (self.file.read(self._address + index) >> (7 - bit)) & 1

        return 0 if state & _State.BUSY else 1

    def write(self, address: int, value: int) -> None:
        """Clock one serial bit into the chip."""
        if self._state & (_State.READING | _State.BUSY):
            return

        value &= 1
        self._serial_buffer = (self._serial_buffer << 1) | value
        self._transmitted_bits += 1
        state = self._state

        if state == _State.ACCEPT_COMMAND and self._transmitted_bits == 2:
            if self._serial_buffer == 2:
                self._state = (
                    _State.WRITE_MODE | _State.GET_ADDRESS | _State.WRITING | _State.EAT_DUMMY
                )
            elif self._serial_buffer == 3:
                self._state = _State.READ_MODE | _State.GET_ADDRESS | _State.EAT_DUMMY
            self._reset_serial_buffer()
        elif state & _State.GET_ADDRESS:
            if self._transmitted_bits == _ADDRESS_BITS[self.size]:
                self._address = (self._serial_buffer * 8) & 0x1FFF
                if state & _State.WRITE_MODE:
                    self.file.memory_set(self._address, 8, 0)
                self._state &= ~_State.GET_ADDRESS
                self._reset_serial_buffer()
        elif state & _State.WRITING:
            bit = (self._transmitted_bits - 1) % 8
            index = (self._transmitted_bits - 1) // 8

            current = self.file.read(self._address + index)
            self.file.write(self._address + index, current | (value << (7 - bit)))

            if self._transmitted_bits == 64:
                self._state &= ~_State.WRITING
                self._reset_serial_buffer()
        elif state & _State.EAT_DUMMY:
            self._state &= ~_State.EAT_DUMMY
            if self._state & _State.READ_MODE:
                self._state |= _State.READING | _State.DUMMY_NIBBLE
            elif self._state & _State.WRITE_MODE:
                self._state = _State.BUSY
                self.scheduler.add(EEPROM_WRITE_CYCLES, self.on_ready_after_write)
            self._reset_serial_buffer()

    def set_size_hint(self, size: EEPROMSize) -> None:
        """Fix the chip size if it is still being auto-detected."""
        if not self.detect_size:
            return
        size = EEPROMSize(size)
        size_bytes = _SAVE_SIZE[size]
        self.size = size
        self.detect_size = False
        if self.file.size != size_bytes:
            self._open_file([size_bytes], size_bytes)

    def on_ready_after_write(self) -> None:
        self._state = _State.ACCEPT_COMMAND