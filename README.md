# gbaplatform

Building blocks for a Game Boy Advance emulator, in pure Python.

## What is in it

- `gbaplatform.backup_file.BackupFile`: save memory held in a `bytearray` and written
  through to a file on disk on every change (while `auto_update` is on). An existing file is
  used when its size, rounded down to a multiple of 64, is one of the valid sizes; otherwise
  a new file filled with `0xFF` is created.
- `gbaplatform.sram.SRAM`: 32 KiB SRAM, mirrored every 32 KiB.
- `gbaplatform.flash.Flash`: 64 KiB and 128 KiB FLASH chips (`FlashSize`), driven by the
  unlock/command sequence: chip ID, chip and sector erase, byte write and, on 128 KiB chips,
  bank selection.
- `gbaplatform.eeprom.EEPROM`: serial EEPROM of 512 bytes or 8 KiB (`EEPROMSize`), with
  size detection and `set_size_hint`. After a block write it is busy until the scheduler
  calls `on_ready_after_write`.
- `gbaplatform.gpio`: the cartridge `GPIO` port and the `GPIODevice` base class;
  `gbaplatform.rtc.RTC` (real-time clock, reading the time from a `clock` callable) and
  `gbaplatform.solar_sensor.SolarSensor`.
- `gbaplatform.rom.ROM`: 16- and 32-bit ROM reads with the sequential address latch, GPIO
  and EEPROM mapping, open-bus values past the end of the ROM, and SRAM/FLASH access.
- `gbaplatform.timer.Timer`: the four timers with prescalers, cascading and overflow
  interrupts.
- `gbaplatform.config.PlatformConfig`: settings loaded from and saved to a TOML file; saving
  keeps comments and unknown keys already in the file.
- `gbaplatform.game_db`: `lookup_game` returns the `GameInfo` (save type, `GPIODeviceType`
  flags, ROM mirroring) for a four-character game code.
- `gbaplatform.resampler`: `CubicResampler` and `SincResampler` convert a stream of samples
  between sample rates.
- `gbaplatform.devices`: the `AudioDevice` and `VideoDevice` interfaces with
  `NullAudioDevice` and `NullVideoDevice`.
- `gbaplatform.frame_limiter.FrameLimiter` and `gbaplatform.emulator_thread.EmulatorThread`:
  paced running of a core on a background thread, with fast-forward, pause and queued
  reset/key messages.
- `gbaplatform.loaders`: `load_bios`, `read_rom_file` (plain files or the first `.gba` file
  in a ZIP or TAR archive), `detect_backup_type`, `round_to_power_of_two` and `load_rom`.

## Installing

```
pip install gbaplatform
```

The tests use pytest, available through the `test` extra.

## Examples

Look up a game:

```python
from gbaplatform.game_db import lookup_game

info = lookup_game("BPEE")
print(info.backup_type, info.gpio, info.mirror)
```

Read and write a configuration file:

```python
from gbaplatform.config import PlatformConfig, VideoFilter

config = PlatformConfig()
config.load("config.toml")          # creates the file from the current values when missing
config.video.filter = VideoFilter.SHARP
config.save("config.toml")
```

Write a byte to a FLASH chip backed by a save file:

```python
from gbaplatform.flash import Flash, FlashSize

flash = Flash("game.sav", FlashSize.SIZE_128K)
flash.write(0x0E005555, 0xAA)   # unlock
flash.write(0x0E002AAA, 0x55)
flash.write(0x0E005555, 0xA0)   # write byte
flash.write(0x0E000010, 0x42)
assert flash.read(0x0E000010) == 0x42
```

Resample a mono stream from 32768 Hz to 48000 Hz. The output is any object with a
`write(sample)` method:

```python
from gbaplatform.resampler import CubicResampler


class Collector(list):
    def write(self, sample):
        self.append(sample)


output = Collector()
resampler = CubicResampler(output)
resampler.set_sample_rates(32768, 48000)
for sample in (0.0, 0.5, 1.0, 0.5, 0.0):
    resampler.write(sample)
```

Load a cartridge:

```python
from gbaplatform.loaders import detect_backup_type, load_rom, read_rom_file

data = read_rom_file("game.gba")
print(detect_backup_type(data))

rom = load_rom("game.gba")          # save file defaults to game.sav
print(hex(rom.read_rom16(0, sequential=False)))
```

`load_rom` needs a `scheduler` (an object with `add(cycles, callback)`) when the game uses
EEPROM saves. Loader functions raise `CannotOpenFileError` or `BadImageError` (both
subclasses of `LoaderError`), and `FileNotFoundError` when the file does not exist.

## What it does not do

There is no CPU, video or sound emulation in this package, and no command to start. The
`Timer` and `EEPROM` expect a scheduler supplied by the caller, and `EmulatorThread` runs
whatever core object it is given. The only audio and video devices are the null ones, which
produce no sound or picture. Save states are not written or read.