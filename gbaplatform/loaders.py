"""Loading BIOS images and cartridge ROMs (plain or inside archives)."""

from __future__ import annotations

import errno
import logging
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Optional, Union

from gbaplatform.config import BackupType
from gbaplatform.eeprom import EEPROM, EEPROMSize
from gbaplatform.flash import Flash, FlashSize
from gbaplatform.game_db import GPIODeviceType, lookup_game
from gbaplatform.gpio import GPIO
from gbaplatform.rom import ROM
from gbaplatform.rtc import RTC
from gbaplatform.solar_sensor import SolarSensor
from gbaplatform.sram import SRAM

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]

BIOS_SIZE = 0x4000
MAX_ROM_SIZE = 32 * 1024 * 1024
_HEADER_SIZE = 0xC0
_GAME_CODE_OFFSET = 0xAC

_SIGNATURES = (
    (b"EEPROM_V", BackupType.EEPROM_DETECT),
    (b"SRAM_V", BackupType.SRAM),
    (b"SRAM_F_V", BackupType.SRAM),
    (b"FLASH_V", BackupType.FLASH_64),
    (b"FLASH512_V", BackupType.FLASH_64),
    (b"FLASH1M_V", BackupType.FLASH_128),
)


class LoaderError(Exception):
    """A file could not be loaded."""


class CannotOpenFileError(LoaderError):
    """The file exists but could not be opened or read."""


class BadImageError(LoaderError):
    """The file does not hold a usable image."""


def _check_path(path: PathLike) -> Path:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(errno.ENOENT, "cannot find file", str(p))
    if p.is_dir():
        raise CannotOpenFileError(f"cannot open file: {p}")
    return p


def _read_bytes(p: Path) -> bytes:
    try:
        return p.read_bytes()
    except OSError as ex:
        raise CannotOpenFileError(f"cannot open file: {p}") from ex


def load_bios(path: PathLike) -> bytes:
    """Return the contents of a 16 KiB BIOS image."""
    p = _check_path(path)
    if p.stat().st_size != BIOS_SIZE:
        raise BadImageError(f"BIOS image must be {BIOS_SIZE} bytes: {p}")
    return _read_bytes(p)


def _is_gba(name: str) -> bool:
    return PurePosixPath(name).suffix in (".gba", ".GBA")


def _read_from_archive(p: Path) -> Optional[bytes]:
    """Return the first .gba entry of an archive, or None if ``p`` is no archive."""
    try:
        if zipfile.is_zipfile(p):
            with zipfile.ZipFile(p) as archive:
                for info in archive.infolist():
                    if not info.is_dir() and _is_gba(info.filename):
                        return archive.read(info)
            raise BadImageError(f"archive holds no GBA file: {p}")
        if tarfile.is_tarfile(p):
            with tarfile.open(p) as archive:
                members = archive.getmembers()
                if not members:
                    return None
                for member in members:
                    if member.isfile() and _is_gba(member.name):
                        extracted = archive.extractfile(member)
                        if extracted is not None:
                            return extracted.read()
            raise BadImageError(f"archive holds no GBA file: {p}")
    except (OSError, zipfile.BadZipFile, tarfile.TarError):
        return None
    return None


def read_rom_file(path: PathLike) -> bytes:
    """Read a ROM image, taking the first .gba file out of a zip or tar archive."""
    p = _check_path(path)
    data = _read_from_archive(p)
    if data is not None:
        return data
    return _read_bytes(p)


def detect_backup_type(data: bytes) -> BackupType:
    """Find the save type from library signatures at word-aligned offsets."""
    best = None
    for order, (signature, backup_type) in enumerate(_SIGNATURES):
        pos = data.find(signature)
        while pos != -1 and pos % 4:
            pos = data.find(signature, pos + 1)
        if pos != -1 and (best is None or pos < best[0]):
            best = (pos, order, backup_type)
    return best[2] if best is not None else BackupType.DETECT


def round_to_power_of_two(size: int) -> int:
    pot_size = 1
    while pot_size < size:
        pot_size *= 2
    return pot_size


def _create_backup(backup_type: BackupType, save_path: Path, scheduler: Any) -> Any:
    if backup_type == BackupType.SRAM:
        return SRAM(save_path)
    if backup_type == BackupType.FLASH_64:
        return Flash(save_path, FlashSize.SIZE_64K)
    if backup_type == BackupType.FLASH_128:
        return Flash(save_path, FlashSize.SIZE_128K)
    if backup_type == BackupType.EEPROM_4:
        return EEPROM(save_path, EEPROMSize.SIZE_4K, scheduler)
    if backup_type == BackupType.EEPROM_64:
        return EEPROM(save_path, EEPROMSize.SIZE_64K, scheduler)
    if backup_type == BackupType.EEPROM_DETECT:
        return EEPROM(save_path, EEPROMSize.DETECT, scheduler)
    return None


def load_rom(
    rom_path: PathLike,
    scheduler: Any = None,
    save_path: Optional[PathLike] = None,
    backup_type: BackupType = BackupType.DETECT,
    force_gpio: GPIODeviceType = GPIODeviceType.NONE,
    raise_irq: Optional[Callable[[], None]] = None,
) -> ROM:
    """Build a cartridge from a ROM file, with save memory and GPIO devices.

    The save file defaults to the ROM path with a ``.sav`` extension.
    ``scheduler`` is needed by EEPROM saves, ``raise_irq`` by the RTC.
    """
    rom_path = Path(rom_path)
    save = Path(save_path) if save_path is not None else rom_path.with_suffix(".sav")

    data = read_rom_file(rom_path)
    size = len(data)
    if size < _HEADER_SIZE or size > MAX_ROM_SIZE:
        raise BadImageError(f"bad ROM size ({size} bytes): {rom_path}")

    game_info = lookup_game(data[_GAME_CODE_OFFSET:_GAME_CODE_OFFSET + 4])

    if backup_type == BackupType.DETECT:
        if game_info.backup_type != BackupType.DETECT:
            backup_type = game_info.backup_type
        else:
            backup_type = detect_backup_type(data)
            if backup_type == BackupType.DETECT:
                _log.warning("ROMLoader: failed to detect backup type!")
                backup_type = BackupType.SRAM

    backup = _create_backup(backup_type, save, scheduler)

    gpio = None
    gpio_devices = game_info.gpio | force_gpio
    if gpio_devices != GPIODeviceType.NONE:
        gpio = GPIO()
        if gpio_devices & GPIODeviceType.RTC:
            gpio.attach(RTC(raise_irq if raise_irq is not None else (lambda: None)))
        if gpio_devices & GPIODeviceType.SOLAR_SENSOR:
            gpio.attach(SolarSensor())

    rom_mask = MAX_ROM_SIZE - 1
    if game_info.mirror:
        rom_mask = round_to_power_of_two(size) - 1

    return ROM(data, backup, gpio, rom_mask)