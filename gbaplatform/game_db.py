"""Per-game overrides for save type, GPIO devices and ROM mirroring."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from gbaplatform.config import BackupType


class GPIODeviceType(enum.IntFlag):
    NONE = 0
    RTC = 1
    SOLAR_SENSOR = 2


@dataclass(frozen=True)
class GameInfo:
    backup_type: BackupType = BackupType.DETECT
    gpio: GPIODeviceType = GPIODeviceType.NONE
    mirror: bool = False


_NONE = GPIODeviceType.NONE
_RTC = GPIODeviceType.RTC
_RTC_SOLAR = GPIODeviceType.RTC | GPIODeviceType.SOLAR_SENSOR

_DETECT = BackupType.DETECT
_NO_SAVE = BackupType.NONE
_SRAM = BackupType.SRAM
_F64 = BackupType.FLASH_64
_F128 = BackupType.FLASH_128
_E4 = BackupType.EEPROM_4
_E64 = BackupType.EEPROM_64

# Save sizes of EEPROM games are partly guesses.
_ENTRIES = {
    "ALFP": (_E64, _NONE, False),   # Dragon Ball Z - The Legacy of Goku II (Europe)
    "ALGP": (_E64, _NONE, False),   # Dragon Ball Z - The Legacy of Goku (Europe)
    "AROP": (_E64, _NONE, False),   # Rocky (Europe)
    "AR8e": (_E64, _NONE, False),   # Rocky (USA)
    "AXVE": (_F128, _RTC, False),   # Pokemon - Ruby Version (USA, Europe)
    "AXPE": (_F128, _RTC, False),   # Pokemon - Sapphire Version (USA, Europe)
    "AX4P": (_F128, _NONE, False),  # Super Mario Advance 4 (Europe)
    "A2YE": (_NO_SAVE, _NONE, False),  # Top Gun - Combat Zones (USA)
    "BDBP": (_E64, _NONE, False),   # Dragon Ball Z - Taiketsu (Europe)
    "BM5P": (_F64, _NONE, False),   # Mario vs. Donkey Kong (Europe)
    "BPEE": (_F128, _RTC, False),   # Pokemon - Emerald Version (USA, Europe)
    "BY6P": (_SRAM, _NONE, False),  # Yu-Gi-Oh! - Ultimate Masters 2006 (Europe)
    "B24E": (_F128, _NONE, False),  # Pokemon Mystery Dungeon - Red Rescue Team (USA)
    "FADE": (_E4, _NONE, True),     # Classic NES Series - Castlevania
    "FBME": (_E4, _NONE, True),     # Classic NES Series - Bomberman
    "FDKE": (_E4, _NONE, True),     # Classic NES Series - Donkey Kong
    "FDME": (_E4, _NONE, True),     # Classic NES Series - Dr. Mario
    "FEBE": (_E64, _NONE, True),    # Classic NES Series - Excitebike
    "FICE": (_E4, _NONE, True),     # Classic NES Series - Ice Climber
    "FLBE": (_E64, _NONE, True),    # Classic NES Series - Zelda II
    "FMRE": (_E4, _NONE, True),     # Classic NES Series - Metroid
    "FP7E": (_E4, _NONE, True),     # Classic NES Series - Pac-Man
    "FSME": (_E4, _NONE, True),     # Classic NES Series - Super Mario Bros.
    "FXVE": (_E4, _NONE, True),     # Classic NES Series - Xevious
    "FZLE": (_E64, _NONE, True),    # Classic NES Series - Legend of Zelda
    "KYGP": (_E64, _NONE, False),   # Yoshi's Universal Gravitation (Europe)
    "U3IP": (_DETECT, _RTC_SOLAR, False),  # Boktai (Europe)
    "U32P": (_DETECT, _RTC_SOLAR, False),  # Boktai 2 (Europe)
    "AGFE": (_F64, _RTC, False),    # Golden Sun - The Lost Age (USA)
    "AGSE": (_F64, _RTC, False),    # Golden Sun (USA)
    "ALFE": (_E64, _NONE, False),   # Dragon Ball Z - The Legacy of Goku II (USA)
    "ALGE": (_E64, _NONE, False),   # Dragon Ball Z - The Legacy of Goku (USA)
    "AX4E": (_F128, _NONE, False),  # Super Mario Advance 4 (USA)
    "BDBE": (_E64, _NONE, False),   # Dragon Ball Z - Taiketsu (USA)
    "BG3E": (_E64, _NONE, False),   # Dragon Ball Z - Buu's Fury (USA)
    "BLFE": (_E64, _NONE, False),   # 2 Games in 1 - Dragon Ball Z (USA)
    "BPRE": (_F128, _NONE, False),  # Pokemon - Fire Red Version (USA, Europe)
    "BPGE": (_F128, _NONE, False),  # Pokemon - Leaf Green Version (USA, Europe)
    "BT4E": (_E64, _NONE, False),   # Dragon Ball GT - Transformation (USA)
    "BUFE": (_E64, _NONE, False),   # 2 Games in 1 - Buu's Fury + Transformation (USA)
    "BYGE": (_SRAM, _NONE, False),  # Yu-Gi-Oh! GX - Duel Academy (USA)
    "KYGE": (_E64, _NONE, False),   # Yoshi - Topsy-Turvy (USA)
    "PSAE": (_F128, _NONE, False),  # e-Reader (USA)
    "U3IE": (_DETECT, _RTC_SOLAR, False),  # Boktai (USA)
    "U32E": (_DETECT, _RTC_SOLAR, False),  # Boktai 2 (USA)
    "ALFJ": (_E64, _NONE, False),   # Dragon Ball Z - The Legacy of Goku II International (Japan)
    "AXPJ": (_F128, _RTC, False),   # Pocket Monsters - Sapphire (Japan)
    "AXVJ": (_F128, _RTC, False),   # Pocket Monsters - Ruby (Japan)
    "AX4J": (_F128, _NONE, False),  # Super Mario Advance 4 (Japan)
    "BFTJ": (_F128, _NONE, False),  # F-Zero - Climax (Japan)
    "BGWJ": (_F128, _NONE, False),  # Game Boy Wars Advance 1+2 (Japan)
    "BKAJ": (_F128, _RTC, False),   # Sennen Kazoku (Japan)
    "BPEJ": (_F128, _RTC, False),   # Pocket Monsters - Emerald (Japan)
    "BPGJ": (_F128, _NONE, False),  # Pocket Monsters - Leaf Green (Japan)
    "BPRJ": (_F128, _NONE, False),  # Pocket Monsters - Fire Red (Japan)
    "BDKJ": (_E64, _NONE, False),   # Digi Communication 2 (Japan)
    "BR4J": (_DETECT, _RTC, False),  # Rockman EXE 4.5 - Real Operation (Japan)
    "FSRJ": (_E64, _NONE, True),    # Famicom Mini - Dai-2-ji Super Robot Taisen
    "FGZJ": (_E4, _NONE, True),     # Famicom Mini - Kidou Senshi Z Gundam
    "FMBJ": (_E4, _NONE, True),     # Famicom Mini Vol. 01
    "FCLJ": (_E4, _NONE, True),     # Famicom Mini Vol. 12
    "FBFJ": (_E4, _NONE, True),     # Famicom Mini Vol. 13
    "FWCJ": (_E4, _NONE, True),     # Famicom Mini Vol. 14
    "FDMJ": (_E4, _NONE, True),     # Famicom Mini Vol. 15
    "FDDJ": (_E4, _NONE, True),     # Famicom Mini Vol. 16
    "FTBJ": (_E4, _NONE, True),     # Famicom Mini Vol. 17
    "FMKJ": (_E4, _NONE, True),     # Famicom Mini Vol. 18
    "FTWJ": (_E4, _NONE, True),     # Famicom Mini Vol. 19
    "FGGJ": (_E4, _NONE, True),     # Famicom Mini Vol. 20
    "FM2J": (_E4, _NONE, True),     # Famicom Mini Vol. 21
    "FNMJ": (_E4, _NONE, True),     # Famicom Mini Vol. 22
    "FMRJ": (_E64, _NONE, True),    # Famicom Mini Vol. 23
    "FPTJ": (_E64, _NONE, True),    # Famicom Mini Vol. 24
    "FLBJ": (_E64, _NONE, True),    # Famicom Mini Vol. 25
    "FFMJ": (_E4, _NONE, True),     # Famicom Mini Vol. 26
    "FTKJ": (_E4, _NONE, True),     # Famicom Mini Vol. 27
    "FTUJ": (_E4, _NONE, True),     # Famicom Mini Vol. 28
    "FADJ": (_E4, _NONE, True),     # Famicom Mini Vol. 29
    "FSDJ": (_E64, _NONE, True),    # Famicom Mini Vol. 30
    "KHPJ": (_E64, _NONE, False),   # Koro Koro Puzzle - Happy Panechu! (Japan)
    "KYGJ": (_E64, _NONE, False),   # Yoshi no Banyuuinryoku (Japan)
    "PSAJ": (_F128, _NONE, False),  # Card e-Reader+ (Japan)
    "U3IJ": (_DETECT, _RTC_SOLAR, False),  # Bokura no Taiyou (Japan)
    "U32J": (_DETECT, _RTC_SOLAR, False),  # Zoku Bokura no Taiyou (Japan)
    "U33J": (_DETECT, _RTC_SOLAR, False),  # Shin Bokura no Taiyou (Japan)
    "AXPF": (_F128, _RTC, False),   # Pokemon - Version Saphir (France)
    "AXVF": (_F128, _RTC, False),   # Pokemon - Version Rubis (France)
    "BPEF": (_F128, _RTC, False),   # Pokemon - Version Emeraude (France)
    "BPGF": (_F128, _NONE, False),  # Pokemon - Version Vert Feuille (France)
    "BPRF": (_F128, _NONE, False),  # Pokemon - Version Rouge Feu (France)
    "AXPI": (_F128, _RTC, False),   # Pokemon - Versione Zaffiro (Italy)
    "AXVI": (_F128, _RTC, False),   # Pokemon - Versione Rubino (Italy)
    "BPEI": (_F128, _RTC, False),   # Pokemon - Versione Smeraldo (Italy)
    "BPGI": (_F128, _NONE, False),  # Pokemon - Versione Verde Foglia (Italy)
    "BPRI": (_F128, _NONE, False),  # Pokemon - Versione Rosso Fuoco (Italy)
    "AXPD": (_F128, _RTC, False),   # Pokemon - Saphir-Edition (Germany)
    "AXVD": (_F128, _RTC, False),   # Pokemon - Rubin-Edition (Germany)
    "BPED": (_F128, _RTC, False),   # Pokemon - Smaragd-Edition (Germany)
    "BPGD": (_F128, _NONE, False),  # Pokemon - Blattgruene Edition (Germany)
    "BPRD": (_F128, _NONE, False),  # Pokemon - Feuerrote Edition (Germany)
    "AXPS": (_F128, _RTC, False),   # Pokemon - Edicion Zafiro (Spain)
    "AXVS": (_F128, _RTC, False),   # Pokemon - Edicion Rubi (Spain)
    "BPES": (_F128, _RTC, False),   # Pokemon - Edicion Esmeralda (Spain)
    "BPGS": (_F128, _NONE, False),  # Pokemon - Edicion Verde Hoja (Spain)
    "BPRS": (_F128, _NONE, False),  # Pokemon - Edicion Rojo Fuego (Spain)
    "A9DP": (_E4, _NONE, False),    # DOOM II
    "AAOJ": (_E4, _NONE, False),    # Acrobat Kid (Japan)
    "BGDP": (_E4, _NONE, False),    # Baldur's Gate - Dark Alliance (Europe)
    "BGDE": (_E4, _NONE, False),    # Baldur's Gate - Dark Alliance (USA)
    "BJBE": (_E4, _NONE, False),    # 007 - Everything or Nothing (USA, Europe)
    "BJBJ": (_E4, _NONE, False),    # 007 - Everything or Nothing (Japan)
    "ALUP": (_E4, _NONE, False),    # Super Monkey Ball Jr. (Europe)
    "ALUE": (_E4, _NONE, False),    # Super Monkey Ball Jr. (USA)
    "BL8E": (_E4, _NONE, False),    # Tomb Raider - Legend
}

GAME_DB: Mapping[str, GameInfo] = MappingProxyType(
    {code: GameInfo(*entry) for code, entry in _ENTRIES.items()}
)


def lookup_game(game_code: Union[str, bytes]) -> GameInfo:
    """Return the overrides for a four-character game code, or the defaults."""
    if isinstance(game_code, (bytes, bytearray)):
        game_code = bytes(game_code).decode("latin-1")
    return GAME_DB.get(game_code, GameInfo())