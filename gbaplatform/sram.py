"""Battery-backed 32 KiB SRAM save memory."""

from __future__ import annotations

from typing import Optional

from gbaplatform.backup_file import BackupFile, PathLike

_SRAM_SIZE = 32768


class SRAM:
    """SRAM save chip; addresses are mirrored every 32 KiB."""

    def __init__(self, save_path: PathLike) -> None:
        self.save_path = save_path
        self.file: Optional[BackupFile] = None
        self.reset()

    def reset(self) -> None:
        """Reopen the save file, reloading its contents."""
        if self.file is not None:
            self.file.close()
        self.file = BackupFile.open_or_create(self.save_path, [_SRAM_SIZE], _SRAM_SIZE)

    def read(self, address: int) -> int:
        return self.file.read(address & 0x7FFF)

    def write(self, address: int, value: int) -> None:
        self.file.write(address & 0x7FFF, value)