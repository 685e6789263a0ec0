[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gbaplatform"
version = "0.1.0"
description = "Cartridge hardware, timers, resamplers and front-end plumbing for a Game Boy Advance emulator"
requires-python = ">=3.10"
keywords = ["gba", "emulator", "game-boy-advance", "eeprom", "flash", "rtc", "resampler"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]
dependencies = [
    "tomlkit",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gbaplatform"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
