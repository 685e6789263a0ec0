"""Cartridge save memory kept in RAM and mirrored to a file on disk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Iterable, Union

PathLike = Union[str, "os.PathLike[str]"]

# Save files may carry a few trailing bytes of extra data (written by some
# other emulators); the usable size is the file size rounded down to 64.
_SIZE_ALIGNMENT = 64


class BackupFile:
    """A block of save memory backed by a file.

    With ``auto_update`` enabled every modification is written through to the
    file immediately.
    """

    def __init__(self, stream: BinaryIO, memory: bytearray, size: int) -> None:
        self._stream = stream
        self.buffer = memory
        self.size = size
        self.auto_update = True

    @classmethod
    def open_or_create(
        cls, save_path: PathLike, valid_sizes: Iterable[int], default_size: int
    ) -> "BackupFile":
        """Open ``save_path`` if its size is valid, otherwise create it.

        An existing file whose size (ignoring up to 63 trailing bytes) is one
        of ``valid_sizes`` is loaded and decides the size. Otherwise a new
        file of ``default_size`` bytes filled with 0xFF is created. The
        resulting size is available as ``size``.
        """
        path = Path(save_path)
        valid = set(valid_sizes)

        if path.is_file():
            file_size = path.stat().st_size
            save_size = file_size & ~(_SIZE_ALIGNMENT - 1)
            if save_size in valid:
                memory = bytearray(path.read_bytes())
                stream = open(path, "r+b", buffering=0)
                return cls(stream, memory, save_size)

        stream = open(path, "w+b", buffering=0)
        backup = cls(stream, bytearray(default_size), default_size)
        backup.memory_set(0, default_size, 0xFF)
        return backup

    def _check_range(self, index: int, length: int, action: str) -> None:
        if index < 0 or length < 0 or index + length > self.size:
            raise IndexError(f"BackupFile: out-of-bounds index while {action}.")

    def read(self, index: int) -> int:
        """Return the byte at ``index``."""
        self._check_range(index, 1, "reading")
        return self.buffer[index]

    def write(self, index: int, value: int) -> None:
        """Store one byte at ``index``."""
        self._check_range(index, 1, "writing")
        self.buffer[index] = value & 0xFF
        if self.auto_update:
            self.update(index, 1)

    def memory_set(self, index: int, length: int, value: int) -> None:
        """Fill ``length`` bytes starting at ``index`` with ``value``."""
        self._check_range(index, length, "setting memory")
        self.buffer[index:index + length] = bytes([value & 0xFF]) * length
        if self.auto_update:
            self.update(index, length)

    def update(self, index: int, length: int) -> None:
        """Write ``length`` bytes starting at ``index`` out to the file."""
        self._check_range(index, length, "updating file")
        self._stream.seek(index)
        self._stream.write(bytes(self.buffer[index:index + length]))

    def close(self) -> None:
        """Close the underlying file."""
        self._stream.close()

    def __enter__(self) -> "BackupFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()