"""Cartridge save memory, GPIO devices, timers, resamplers, loaders and front-end plumbing for a Game Boy Advance emulator."""

__version__ = "0.1.0"