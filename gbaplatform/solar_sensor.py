"""Solar light sensor used by the Boktai cartridges."""

from __future__ import annotations

import enum

from gbaplatform.gpio import GPIODevice, PortDirection


class _Pin(enum.IntEnum):
    CLK = 0
    RST = 1
    nCS = 2
    FLG = 3


_DEFAULT_LEVEL = 0x60


class SolarSensor(GPIODevice):
    """Counter compared against the light level; FLG rises past the threshold."""

    def __init__(self) -> None:
        super().__init__()
        self.reset()

    def reset(self) -> None:
        self.old_clk = False
        self.counter = 0
        self.set_light_level(_DEFAULT_LEVEL)

    def read(self) -> int:
        return (1 << _Pin.FLG) if self.counter > self.current_level else 0

    def write(self, value: int) -> None:
        clk = bool(value & (1 << _Pin.CLK)) and (
            self.get_port_direction(_Pin.CLK) == PortDirection.OUT
        )
        rst = bool(value & (1 << _Pin.RST)) and (
            self.get_port_direction(_Pin.RST) == PortDirection.OUT
        )

        if rst:
            self.counter = 0
        elif self.old_clk and not clk:
            self.counter = (self.counter + 1) & 0xFF

        self.old_clk = clk

    def set_light_level(self, level: int) -> None:
        """Set the light level (0 = dark, 255 = brightest)."""
        self.current_level = 255 - (level & 0xFF)