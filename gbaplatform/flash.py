"""FLASH save memory (64 KiB and 128 KiB chips)."""

from __future__ import annotations

import enum
from typing import Optional

from gbaplatform.backup_file import BackupFile, PathLike


class FlashSize(enum.IntEnum):
    SIZE_64K = 0
    SIZE_128K = 1

    @property
    def bytes(self) -> int:
        return _SAVE_SIZE[self]


_SAVE_SIZE = {FlashSize.SIZE_64K: 65536, FlashSize.SIZE_128K: 131072}


class _Command(enum.IntEnum):
    READ_CHIP_ID = 0x90
    FINISH_CHIP_ID = 0xF0
    ERASE = 0x80
    ERASE_CHIP = 0x10
    ERASE_SECTOR = 0x30
    WRITE_BYTE = 0xA0
    SELECT_BANK = 0xB0


_COMMAND_ADDRESS = 0x0E005555
_UNLOCK_ADDRESS = 0x0E002AAA
_BANK_ADDRESS = 0x0E000000


class Flash:
    """A FLASH chip driven through the command sequence protocol."""

    def __init__(self, save_path: PathLike, size_hint: FlashSize) -> None:
        self.save_path = save_path
        self.size = FlashSize(size_hint)
        self.file: Optional[BackupFile] = None
        self.reset()

    def reset(self) -> None:
        self.current_bank = 0
        self.phase = 0
        self.enable_chip_id = False
        self.enable_erase = False
        self.enable_write = False
        self.enable_select = False

        if self.file is not None:
            self.file.close()
        self.file = BackupFile.open_or_create(
            self.save_path, list(_SAVE_SIZE.values()), self.size.bytes
        )
        if self.file.size == _SAVE_SIZE[FlashSize.SIZE_64K]:
            self.size = FlashSize.SIZE_64K
        else:
            self.size = FlashSize.SIZE_128K

    def _physical(self, address: int) -> int:
        return (self.current_bank << 16) | address

    def read(self, address: int) -> int:
        address &= 0xFFFF

        if self.enable_chip_id and address < 2:
            # Macronix 128K: 09C2, SST 64K: D4BF
            if self.size == FlashSize.SIZE_128K:
                return 0xC2 if address == 0 else 0x09
            return 0xBF if address == 0 else 0xD4

        return self.file.read(self._physical(address))

    def write(self, address: int, value: int) -> None:
        if self.phase == 0:
            if address == _COMMAND_ADDRESS and value == 0xAA:
                self.phase = 1
        elif self.phase == 1:
            if address == _UNLOCK_ADDRESS and value == 0x55:
                self.phase = 2
        elif self.phase == 2:
            self._handle_command(address, value)
        elif self.phase == 3:
            self._handle_extended(address, value)

    def _handle_command(self, address: int, value: int) -> None:
        if address == _COMMAND_ADDRESS:
            if value == _Command.READ_CHIP_ID:
                self.enable_chip_id = True
                self.phase = 0
            elif value == _Command.FINISH_CHIP_ID:
                self.enable_chip_id = False
                self.phase = 0
            elif value == _Command.ERASE:
                self.enable_erase = True
                self.phase = 0
            elif value == _Command.ERASE_CHIP:
                if self.enable_erase:
                    self.file.memory_set(0, self.size.bytes, 0xFF)
                    self.enable_erase = False
                self.phase = 0
            elif value == _Command.WRITE_BYTE:
                self.enable_write = True
                self.phase = 3
            elif value == _Command.SELECT_BANK:
                if self.size == FlashSize.SIZE_128K:
                    self.enable_select = True
                    self.phase = 3
                else:
                    self.phase = 0
        elif (
            self.enable_erase
            and (address & ~0xF000) == _BANK_ADDRESS
            and value == _Command.ERASE_SECTOR
        ):
            base = address & 0xF000
            self.file.memory_set(self._physical(base), 0x1000, 0xFF)
            self.enable_erase = False
            self.phase = 0

    def _handle_extended(self, address: int, value: int) -> None:
        if self.enable_write:
            self.file.write(self._physical(address & 0xFFFF), value)
            self.enable_write = False
        elif self.enable_select and address == _BANK_ADDRESS:
            self.current_bank = value & 1
            self.enable_select = False
        self.phase = 0