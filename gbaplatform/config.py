"""Front-end configuration stored as a TOML file."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import tomlkit
from tomlkit.exceptions import TOMLKitError

_log = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BackupType(enum.Enum):
    DETECT = enum.auto()
    NONE = enum.auto()
    SRAM = enum.auto()
    FLASH_64 = enum.auto()
    FLASH_128 = enum.auto()
    EEPROM_4 = enum.auto()
    EEPROM_64 = enum.auto()
    EEPROM_DETECT = enum.auto()


class VideoFilter(enum.Enum):
    NEAREST = enum.auto()
    LINEAR = enum.auto()
    SHARP = enum.auto()
    XBRZ = enum.auto()
    LCD1X = enum.auto()


class ColorCorrection(enum.Enum):
    NONE = enum.auto()
    HIGAN = enum.auto()
    AGB = enum.auto()


class Interpolation(enum.Enum):
    COSINE = enum.auto()
    CUBIC = enum.auto()
    SINC_64 = enum.auto()
    SINC_128 = enum.auto()
    SINC_256 = enum.auto()


_SAVE_TYPES: Dict[str, BackupType] = {
    "detect": BackupType.DETECT,
    "none": BackupType.NONE,
    "sram": BackupType.SRAM,
    "flash64": BackupType.FLASH_64,
    "flash128": BackupType.FLASH_128,
    "eeprom512": BackupType.EEPROM_4,
    "eeprom8192": BackupType.EEPROM_64,
}

_FILTERS: Dict[str, VideoFilter] = {
    "nearest": VideoFilter.NEAREST,
    "linear": VideoFilter.LINEAR,
    "sharp": VideoFilter.SHARP,
    "xbrz": VideoFilter.XBRZ,
    "lcd1x": VideoFilter.LCD1X,
}

_COLOR_CORRECTIONS: Dict[str, ColorCorrection] = {
    "none": ColorCorrection.NONE,
    "higan": ColorCorrection.HIGAN,
    "agb": ColorCorrection.AGB,
}

_RESAMPLERS: Dict[str, Interpolation] = {
    "cosine": Interpolation.COSINE,
    "cubic": Interpolation.CUBIC,
    "sinc64": Interpolation.SINC_64,
    "sinc128": Interpolation.SINC_128,
    "sinc256": Interpolation.SINC_256,
}


def _names(mapping: Mapping[str, Any]) -> Dict[Any, str]:
    return {value: name for name, value in mapping.items()}


@dataclass
class CartridgeConfig:
    backup_type: BackupType = BackupType.DETECT
    force_rtc: bool = True
    force_solar_sensor: bool = False
    solar_sensor_level: int = 23


@dataclass
class VideoConfig:
    filter: VideoFilter = VideoFilter.LINEAR
    color: ColorCorrection = ColorCorrection.AGB
    lcd_ghosting: bool = True


@dataclass
class AudioConfig:
    interpolation: Interpolation = Interpolation.COSINE
    volume: int = 100
    mp2k_hle_enable: bool = False
    mp2k_hle_cubic: bool = True
    mp2k_hle_force_reverb: bool = True


def _find_or(table: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    """Return ``table[key]`` if present and of type ``kind``, else ``default``."""
    value = table.get(key, default)
    if kind is int and isinstance(value, bool):
        return default
    return value if isinstance(value, kind) else default


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _table(doc: Any, name: str) -> Any:
    if name not in doc or not isinstance(doc[name], dict):
        doc[name] = tomlkit.table()
    return doc[name]


@dataclass
class PlatformConfig:
    """Settings shared by the front-ends, loadable from and savable to TOML."""

    bios_path: str = "bios.bin"
    skip_bios: bool = False
    save_folder: str = ""
    cartridge: CartridgeConfig = field(default_factory=CartridgeConfig)
    video: VideoConfig = field(default_factory=VideoConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)

    def load(self, path: PathLike) -> None:
        """Read settings from ``path``; a missing file is created with the current values."""
        path = Path(path)
        if not path.exists():
            self.save(path)
            return

        try:
            data = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
        except (OSError, UnicodeDecodeError, TOMLKitError) as ex:
            _log.error("Config: error while parsing TOML configuration: %s", ex)
            return

        if "general" in data:
            general = _section(data, "general")
            self.bios_path = _find_or(general, "bios_path", str, "bios.bin")
            self.skip_bios = _find_or(general, "bios_skip", bool, False)
            self.save_folder = _find_or(general, "save_folder", str, "")

        if "cartridge" in data:
            cartridge = _section(data, "cartridge")
            save_type = _find_or(cartridge, "save_type", str, "detect")
            backup_type = _SAVE_TYPES.get(save_type)
            if backup_type is None:
                _log.warning(
                    "Config: backup type '%s' is not valid, defaulting to auto-detect.", save_type
                )
                backup_type = BackupType.DETECT
            self.cartridge.backup_type = backup_type
            self.cartridge.force_rtc = _find_or(cartridge, "force_rtc", bool, False)
            self.cartridge.force_solar_sensor = _find_or(
                cartridge, "force_solar_sensor", bool, False
            )
            self.cartridge.solar_sensor_level = (
                _find_or(cartridge, "solar_sensor_level", int, 156) & 0xFF
            )

        if "video" in data:
            video = _section(data, "video")
            video_filter = _FILTERS.get(_find_or(video, "filter", str, "nearest"))
            if video_filter is not None:
                self.video.filter = video_filter
            color = _COLOR_CORRECTIONS.get(_find_or(video, "color_correction", str, "ags"))
            if color is not None:
                self.video.color = color
            self.video.lcd_ghosting = _find_or(video, "lcd_ghosting", bool, True)

        if "audio" in data:
            audio = _section(data, "audio")
            resampler = _find_or(audio, "resampler", str, "cosine")
            interpolation = _RESAMPLERS.get(resampler)
            if interpolation is None:
                _log.warning(
                    "Config: unknown resampling algorithm: %s (defaulting to cosine).", resampler
                )
                interpolation = Interpolation.COSINE
            self.audio.interpolation = interpolation
            self.audio.volume = _find_or(audio, "volume", int, 100)
            self.audio.mp2k_hle_enable = _find_or(audio, "mp2k_hle_enable", bool, False)
            self.audio.mp2k_hle_cubic = _find_or(audio, "mp2k_hle_cubic", bool, True)
            self.audio.mp2k_hle_force_reverb = _find_or(
                audio, "mp2k_hle_force_reverb", bool, True
            )

        self.load_custom_data(data)

    def save(self, path: PathLike) -> None:
        """Write settings to ``path``, keeping comments and unknown keys of an existing file."""
        path = Path(path)
        doc: Any = tomlkit.document()

        if path.exists():
            try:
                doc = tomlkit.parse(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, TOMLKitError) as ex:
                _log.error("Config: error while parsing TOML configuration: %s", ex)
                return

        general = _table(doc, "general")
        general["bios_path"] = self.bios_path
        general["bios_skip"] = self.skip_bios
        general["save_folder"] = self.save_folder

        cartridge = _table(doc, "cartridge")
        cartridge["save_type"] = _names(_SAVE_TYPES).get(self.cartridge.backup_type, "")
        cartridge["force_rtc"] = self.cartridge.force_rtc
        cartridge["force_solar_sensor"] = self.cartridge.force_solar_sensor
        cartridge["solar_sensor_level"] = self.cartridge.solar_sensor_level

        video = _table(doc, "video")
        video["filter"] = _names(_FILTERS).get(self.video.filter, "")
        video["color_correction"] = _names(_COLOR_CORRECTIONS).get(self.video.color, "")
        video["lcd_ghosting"] = self.video.lcd_ghosting

        audio = _table(doc, "audio")
        audio["resampler"] = _names(_RESAMPLERS).get(self.audio.interpolation, "")
        audio["volume"] = self.audio.volume
        audio["mp2k_hle_enable"] = self.audio.mp2k_hle_enable
        audio["mp2k_hle_cubic"] = self.audio.mp2k_hle_cubic
        audio["mp2k_hle_force_reverb"] = self.audio.mp2k_hle_force_reverb

        self.save_custom_data(doc)

        path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    def load_custom_data(self, data: Mapping[str, Any]) -> None:
        """Hook for subclasses to read extra settings from the parsed file."""

    def save_custom_data(self, data: Any) -> None:
        """Hook for subclasses to add extra settings to the document being saved."""