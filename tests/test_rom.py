import pytest

from gbaplatform.eeprom import EEPROM, EEPROMSize
from gbaplatform.gpio import GPIO, GPIODevice
from gbaplatform.rom import ROM
from gbaplatform.solar_sensor import SolarSensor
from gbaplatform.sram import SRAM

PATTERN = bytes(range(256))


class _Scheduler:
    def __init__(self):
        self.events = []

    def add(self, cycles, callback):
        self.events.append((cycles, callback))


class _Fixed(GPIODevice):
    def reset(self):
        self.value = 0b0101

    def read(self):
        return 0b0101

    def write(self, value):
        self.value = value


def _word(data, offset, size):
    return int.from_bytes(data[offset:offset + size], "little")


def test_read16_little_endian():
    rom = ROM(PATTERN)
    assert rom.read_rom16(0, False) == _word(PATTERN, 0, 2)
    assert rom.read_rom16(0x10, False) == _word(PATTERN, 0x10, 2)


def test_read32_little_endian():
    rom = ROM(PATTERN)
    assert rom.read_rom32(0x20, False) == _word(PATTERN, 0x20, 4)


def test_sequential_read_uses_latch():
    rom = ROM(PATTERN)
    rom.read_rom16(0, False)
    assert rom.read_rom16(0x80, True) == _word(PATTERN, 2, 2)
    assert rom.read_rom32(0x80, True) == _word(PATTERN, 4, 4)


@pytest.mark.parametrize("address", [0x1000, 0x2468, 0x00FFFFFE])
def test_read16_open_bus_returns_half_address(address):
    rom = ROM(PATTERN)
    assert rom.read_rom16(address, False) == address // 2


def test_read32_open_bus_returns_consecutive_halves():
    rom = ROM(PATTERN)
    value = rom.read_rom32(0x4000, False)
    assert value & 0xFFFF == 0x4000 // 2
    assert value >> 16 == 0x4000 // 2 + 1


def test_rom_mask_mirrors_data():
    rom = ROM(PATTERN, rom_mask=0xFF)
    assert rom.read_rom16(0x100, False) == rom.read_rom16(0, False)


def test_gpio_reads_require_enable():
    gpio = GPIO()
    gpio.attach(_Fixed())
    rom = ROM(PATTERN, gpio=gpio)
    assert rom.read_rom16(0xC8, False) == _word(PATTERN, 0xC8, 2)
    rom.write_rom(0xC8, 1, False)
    assert rom.read_rom16(0xC8, False) == 1
    assert rom.read_rom16(0xC4, False) == 0b0101


def test_gpio_read32_combines_registers():
    gpio = GPIO()
    gpio.attach(_Fixed())
    rom = ROM(PATTERN, gpio=gpio)
    rom.write_rom(0xC8, 1, False)
    rom.write_rom(0xC6, 0b0011, False)
    assert rom.read_rom32(0xC4, False) == (gpio.rd_mask << 16) | 0b0101


def test_get_gpio_device():
    gpio = GPIO()
    sensor = SolarSensor()
    gpio.attach(sensor)
    assert ROM(PATTERN, gpio=gpio).get_gpio_device(SolarSensor) is sensor
    assert ROM(PATTERN).get_gpio_device(SolarSensor) is None


def test_sram_read_write_and_mirror(tmp_path):
    sram = SRAM(tmp_path / "game.sav")
    rom = ROM(PATTERN, sram)
    rom.write_sram(0x0E000010, 0x5A)
    assert rom.read_sram(0x0E000010) == 0x5A
    assert rom.read_sram(0x0E008010) == 0x5A
    sram.file.close()


def test_sram_absent_reads_ff():
    rom = ROM(PATTERN)
    rom.write_sram(0x0E000000, 0x12)
    assert rom.read_sram(0x0E000000) == 0xFF


def test_eeprom_is_decoded_in_upper_half(tmp_path):
    eeprom = EEPROM(tmp_path / "game.sav", EEPROMSize.DETECT, _Scheduler())
    rom = ROM(bytes(0x200), eeprom)
    assert rom.eeprom_mask == 0x01000000
    assert rom.read_rom16(0x0D000000, False) == 1
    assert rom.read_rom16(0, False) == 0
    eeprom.file.close()


def test_eeprom_write_does_not_move_latch(tmp_path):
    eeprom = EEPROM(tmp_path / "game.sav", EEPROMSize.DETECT, _Scheduler())
    data = PATTERN * 2
    rom = ROM(data, eeprom)
    rom.read_rom16(0x100, False)
    rom.write_rom(0x0D000000, 1, False)
    assert rom.read_rom16(0, True) == _word(data, 0x102, 2)
    eeprom.file.close()


def test_set_eeprom_size_hint(tmp_path):
    eeprom = EEPROM(tmp_path / "game.sav", EEPROMSize.DETECT, _Scheduler())
    rom = ROM(PATTERN, eeprom)
    rom.set_eeprom_size_hint(EEPROMSize.SIZE_4K)
    assert eeprom.size == EEPROMSize.SIZE_4K
    assert eeprom.file.size == 512
    eeprom.file.close()


def test_sram_backup_is_not_eeprom(tmp_path):
    sram = SRAM(tmp_path / "game.sav")
    rom = ROM(PATTERN, sram)
    assert rom.backup_eeprom is None
    assert rom.eeprom_mask == 0
    sram.file.close()