import pytest

from gbaplatform.backup_file import BackupFile


def test_create_new_file_filled_with_ff(tmp_path):
    path = tmp_path / "game.sav"
    with BackupFile.open_or_create(path, [512, 8192], 512) as backup:
        assert backup.size == 512
        assert bytes(backup.buffer) == b"\xff" * 512
    assert path.read_bytes() == b"\xff" * 512


def test_existing_valid_file_is_loaded(tmp_path):
    path = tmp_path / "game.sav"
    content = bytes(range(256)) * 2
    path.write_bytes(content)
    with BackupFile.open_or_create(path, [512, 8192], 8192) as backup:
        assert backup.size == 512
        assert [backup.read(i) for i in range(512)] == list(content)
    assert path.read_bytes() == content


def test_trailing_bytes_are_tolerated(tmp_path):
    path = tmp_path / "game.sav"
    content = bytes(512 + 16)
    path.write_bytes(content)
    with BackupFile.open_or_create(path, [512], 512) as backup:
        assert backup.size == 512
        assert backup.read(511) == 0
        with pytest.raises(IndexError):
            backup.read(512)
    assert path.stat().st_size == len(content)


def test_invalid_size_recreates_file(tmp_path):
    path = tmp_path / "game.sav"
    path.write_bytes(bytes(100))
    with BackupFile.open_or_create(path, [512], 512) as backup:
        assert backup.size == 512
        assert backup.read(0) == 0xFF
    assert path.read_bytes() == b"\xff" * 512


def test_write_goes_through_to_disk(tmp_path):
    path = tmp_path / "game.sav"
    with BackupFile.open_or_create(path, [512], 512) as backup:
        backup.write(10, 0x5A)
        assert backup.read(10) == 0x5A
        assert path.read_bytes()[10] == 0x5A


def test_disabled_auto_update_defers_writes(tmp_path):
    path = tmp_path / "game.sav"
    with BackupFile.open_or_create(path, [512], 512) as backup:
        backup.auto_update = False
        backup.write(3, 0x12)
        backup.memory_set(100, 4, 0x00)
        assert path.read_bytes() == b"\xff" * 512
        backup.update(3, 1)
        backup.update(100, 4)
        on_disk = path.read_bytes()
        assert on_disk[3] == 0x12
        assert on_disk[100:104] == bytes(4)
        assert on_disk[104] == 0xFF


def test_memory_set_round_trip(tmp_path):
    path = tmp_path / "game.sav"
    with BackupFile.open_or_create(path, [512], 512) as backup:
        backup.memory_set(8, 8, 0)
        assert [backup.read(i) for i in range(7, 17)] == [0xFF] + [0] * 8 + [0xFF]
    with BackupFile.open_or_create(path, [512], 512) as backup:
        assert backup.read(8) == 0
        assert backup.read(16) == 0xFF


def test_read_past_end_raises(tmp_path):
    with BackupFile.open_or_create(tmp_path / "game.sav", [512], 512) as backup:
        with pytest.raises(IndexError):
            backup.read(512)
        assert backup.read(511) == 0xFF


def test_read_negative_index_raises(tmp_path):
    with BackupFile.open_or_create(tmp_path / "game.sav", [512], 512) as backup:
        with pytest.raises(IndexError):
            backup.read(-1)
        assert backup.read(0) == 0xFF


def test_write_past_end_raises_and_leaves_memory(tmp_path):
    with BackupFile.open_or_create(tmp_path / "game.sav", [512], 512) as backup:
        with pytest.raises(IndexError):
            backup.write(512, 0)
        assert bytes(backup.buffer) == b"\xff" * 512


def test_memory_set_past_end_raises_and_leaves_memory(tmp_path):
    with BackupFile.open_or_create(tmp_path / "game.sav", [512], 512) as backup:
        with pytest.raises(IndexError):
            backup.memory_set(510, 8, 0)
        assert bytes(backup.buffer) == b"\xff" * 512


def test_update_past_end_raises(tmp_path):
    path = tmp_path / "game.sav"
    with BackupFile.open_or_create(path, [512], 512) as backup:
        with pytest.raises(IndexError):
            backup.update(500, 13)
        assert backup.size == 512
    assert path.read_bytes() == b"\xff" * 512


def test_existing_size_overrides_default(tmp_path):
    path = tmp_path / "game.sav"
    path.write_bytes(b"\x00" * 8192)
    with BackupFile.open_or_create(path, [512, 8192], 512) as backup:
        assert backup.size == 8192
        assert backup.read(8191) == 0