from gbaplatform.flash import Flash, FlashSize


def unlock(flash, command):
    flash.write(0x0E005555, 0xAA)
    flash.write(0x0E002AAA, 0x55)
    flash.write(0x0E005555, command)


def write_byte(flash, offset, value):
    unlock(flash, 0xA0)
    flash.write(0x0E000000 | offset, value)


def select_bank(flash, bank):
    unlock(flash, 0xB0)
    flash.write(0x0E000000, bank)


def test_fresh_flash_sizes(tmp_path):
    small = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    large = Flash(tmp_path / "b.sav", FlashSize.SIZE_128K)
    assert small.file.size == 65536
    assert large.file.size == 131072
    assert small.read(0x1234) == 0xFF


def test_chip_id_64k(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    unlock(flash, 0x90)
    assert (flash.read(0x0E000000), flash.read(0x0E000001)) == (0xBF, 0xD4)
    unlock(flash, 0xF0)
    assert flash.read(0x0E000000) == 0xFF


def test_chip_id_128k(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_128K)
    unlock(flash, 0x90)
    assert (flash.read(0), flash.read(1)) == (0xC2, 0x09)


def test_write_byte_round_trip(tmp_path):
    path = tmp_path / "a.sav"
    flash = Flash(path, FlashSize.SIZE_64K)
    write_byte(flash, 0x0420, 0x37)
    assert flash.read(0x0E000420) == 0x37
    assert path.read_bytes()[0x0420] == 0x37


def test_write_without_unlock_is_ignored(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    flash.write(0x0E000010, 0x12)
    assert flash.read(0x10) == 0xFF
    assert flash.phase == 0


def test_bank_select_128k(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_128K)
    select_bank(flash, 1)
    write_byte(flash, 0x10, 0x42)
    assert flash.read(0x10) == 0x42
    assert flash.file.read(0x10010) == 0x42
    assert flash.file.read(0x10) == 0xFF
    select_bank(flash, 0)
    assert flash.read(0x10) == 0xFF


def test_bank_select_ignored_on_64k(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    select_bank(flash, 1)
    assert flash.current_bank == 0
    write_byte(flash, 0x10, 0x42)
    assert flash.file.read(0x10) == 0x42


def test_erase_sector(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    write_byte(flash, 0x1005, 0x01)
    write_byte(flash, 0x2005, 0x02)
    unlock(flash, 0x80)
    flash.write(0x0E005555, 0xAA)
    flash.write(0x0E002AAA, 0x55)
    flash.write(0x0E001000, 0x30)
    assert flash.read(0x1005) == 0xFF
    assert flash.read(0x2005) == 0x02


def test_erase_chip(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    write_byte(flash, 0x0001, 0x00)
    write_byte(flash, 0xFFFF, 0x00)
    unlock(flash, 0x80)
    unlock(flash, 0x10)
    assert flash.read(0x0001) == 0xFF
    assert flash.read(0xFFFF) == 0xFF


def test_erase_chip_requires_erase_command(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    write_byte(flash, 0x0001, 0x00)
    unlock(flash, 0x10)
    assert flash.read(0x0001) == 0x00


def test_existing_file_decides_size(tmp_path):
    path = tmp_path / "a.sav"
    path.write_bytes(b"\xff" * 131072)
    flash = Flash(path, FlashSize.SIZE_64K)
    assert flash.size == FlashSize.SIZE_128K


def test_contents_persist_across_reset(tmp_path):
    flash = Flash(tmp_path / "a.sav", FlashSize.SIZE_64K)
    write_byte(flash, 0x77, 0x55)
    flash.reset()
    assert flash.read(0x77) == 0x55