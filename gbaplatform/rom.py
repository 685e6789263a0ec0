"""Game Pak ROM bus: ROM data, save memory and GPIO port."""

from __future__ import annotations

from typing import Optional, Protocol, Type, TypeVar

from gbaplatform.eeprom import EEPROM, EEPROMSize
from gbaplatform.gpio import GPIO, GPIODevice

DEFAULT_ROM_MASK = 0x01FFFFFF

_Device = TypeVar("_Device", bound=GPIODevice)


class Backup(Protocol):
    def read(self, address: int) -> int: ...

    def write(self, address: int, value: int) -> None: ...


class ROM:
    """Cartridge as seen from the bus, with open-bus and EEPROM decoding."""

    def __init__(
        self,
        data: bytes = b"",
        backup: Optional[Backup] = None,
        gpio: Optional[GPIO] = None,
        rom_mask: int = DEFAULT_ROM_MASK,
    ) -> None:
        self.data = bytes(data)
        self.gpio = gpio
        self.rom_mask = rom_mask
        self.backup_sram: Optional[Backup] = None
        self.backup_eeprom: Optional[EEPROM] = None
        self.eeprom_mask = 0
        self.rom_address_latch = 0

        if backup is not None:
            if isinstance(backup, EEPROM):
                self.backup_eeprom = backup
                if len(self.data) >= 0x01000001:
                    self.eeprom_mask = 0x01FFFF00
                else:
                    self.eeprom_mask = 0x01000000
            else:
                self.backup_sram = backup

    def get_gpio_device(self, device_type: Type[_Device]) -> Optional[_Device]:
        if self.gpio is not None:
            return self.gpio.get(device_type)
        return None

    def set_eeprom_size_hint(self, size: EEPROMSize) -> None:
        if self.backup_eeprom is not None:
            self.backup_eeprom.set_size_hint(size)

    def _is_gpio(self, address: int) -> bool:
        return self.gpio is not None and 0xC4 <= address <= 0xC8

    def _is_eeprom(self, address: int) -> bool:
        return (
            self.backup_eeprom is not None
            and (address & self.eeprom_mask) == self.eeprom_mask
        )

    def _read_data(self, offset: int, size: int) -> int:
        return int.from_bytes(self.data[offset:offset + size], "little")

    def read_rom16(self, address: int, sequential: bool) -> int:
        address &= 0x01FFFFFE

        if self._is_gpio(address) and self.gpio.readable:
            return self.gpio.read(address)

        if self._is_eeprom(address):
            return self.backup_eeprom.read(0)

        if not sequential:
            self.rom_address_latch = address & self.rom_mask

        latch = self.rom_address_latch
        if latch < len(self.data):
            data = self._read_data(latch, 2)
        else:
            data = (latch >> 1) & 0xFFFF

        self.rom_address_latch = (latch + 2) & self.rom_mask
        return data

    def read_rom32(self, address: int, sequential: bool) -> int:
        address &= 0x01FFFFFC

        if self._is_gpio(address) and self.gpio.readable:
            lsw = self.gpio.read(address | 0)
            msw = self.gpio.read(address | 2)
            return (msw << 16) | lsw

        if self._is_eeprom(address):
            lsw = self.backup_eeprom.read(0)
            msw = self.backup_eeprom.read(0)
            return (msw << 16) | lsw

        if not sequential:
            self.rom_address_latch = address & self.rom_mask

        latch = self.rom_address_latch
        if latch < len(self.data):
            data = self._read_data(latch, 4)
        else:
            lsw = (latch >> 1) & 0xFFFF
            msw = (lsw + 1) & 0xFFFF
            data = (msw << 16) | lsw

        self.rom_address_latch = (latch + 4) & self.rom_mask
        return data

    def write_rom(self, address: int, value: int, sequential: bool) -> None:
        address &= 0x01FFFFFE

        if self._is_gpio(address):
            self.gpio.write(address, value & 0xFF)

        if self._is_eeprom(address):
            self.backup_eeprom.write(0, value & 0xFF)
        elif not sequential:
            self.rom_address_latch = address & self.rom_mask

    def read_sram(self, address: int) -> int:
        if self.backup_sram is not None:
            return self.backup_sram.read(address & 0x0EFFFFFF)
        return 0xFF

    def write_sram(self, address: int, value: int) -> None:
        if self.backup_sram is not None:
            self.backup_sram.write(address & 0x0EFFFFFF, value & 0xFF)