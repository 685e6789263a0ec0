"""General purpose I/O port found on some cartridges (RTC, solar sensor)."""

from __future__ import annotations

import abc
import enum
from typing import Dict, List, Optional, Type, TypeVar


class PortDirection(enum.IntEnum):
    IN = 0
    OUT = 1


class Register(enum.IntEnum):
    DATA = 0xC4
    DIRECTION = 0xC6
    CONTROL = 0xC8


class GPIODevice(abc.ABC):
    """A device wired to the four GPIO pins of a cartridge."""

    def __init__(self) -> None:
        self._port_directions = 0

    def set_port_directions(self, directions: int) -> None:
        """Set the pin directions; a set bit marks the pin as an output."""
        self._port_directions = directions & 0xF

    def get_port_direction(self, pin: int) -> PortDirection:
        return PortDirection((self._port_directions >> pin) & 1)

    @abc.abstractmethod
    def reset(self) -> None:
        """Return the device to its power-on state."""

    @abc.abstractmethod
    def read(self) -> int:
        """Return the pin levels driven by the device."""

    @abc.abstractmethod
    def write(self, value: int) -> None:
        """Receive the pin levels driven by the console."""


_Device = TypeVar("_Device", bound=GPIODevice)


class GPIO:
    """The cartridge GPIO port, multiplexing several attached devices."""

    def __init__(self) -> None:
        self.devices: List[GPIODevice] = []
        self._device_map: Dict[type, GPIODevice] = {}
        self.reset()

    def reset(self) -> None:
        self.allow_reads = False
        self.port_data = 0
        self.rd_mask = 0b1111
        self.wr_mask = 0b0000
        for device in self.devices:
            device.reset()
            device.set_port_directions(0)

    @property
    def readable(self) -> bool:
        return self.allow_reads

    def attach(self, device: GPIODevice) -> None:
        self.devices.append(device)
        self._device_map[type(device)] = device

    def get(self, device_type: Type[_Device]) -> Optional[_Device]:
        """Return the attached device of exactly ``device_type``, if any."""
        return self._device_map.get(device_type)  # type: ignore[return-value]

    def read(self, address: int) -> int:
        if not self.allow_reads:
            return 0

        if address == Register.DATA:
            value = 0
            for device in self.devices:
                value |= device.read()
            self.port_data &= self.wr_mask
            self.port_data |= self.rd_mask & value
            return value & 0xFF
        if address == Register.DIRECTION:
            return self.rd_mask
        if address == Register.CONTROL:
            return 1 if self.allow_reads else 0
        return 0

    def write(self, address: int, value: int) -> None:
        value &= 0xFF
        if address == Register.DATA:
            self.port_data &= self.rd_mask
            self.port_data |= self.wr_mask & value
            for device in self.devices:
                device.write(self.port_data)
        elif address == Register.DIRECTION:
            value &= 15
            self.rd_mask = ~value & 15
            self.wr_mask = value
            for device in self.devices:
                device.set_port_directions(value)
        elif address == Register.CONTROL:
            self.allow_reads = bool(value & 1)