"""Sample rate converters feeding an output stream."""

from __future__ import annotations

import abc
import math
from collections import deque
from typing import Any, Deque, List, Protocol


class WriteStream(Protocol):
    def write(self, sample: Any) -> None: ...


class Resampler(abc.ABC):
    """Converts a stream of samples from one rate to another.

    Samples may be any values supporting addition, subtraction and
    multiplication by a float (numbers, numpy arrays for stereo, ...);
    ``zero`` is the silent sample used to prime the history.
    """

    def __init__(self, output: WriteStream, zero: Any = 0.0) -> None:
        self.output = output
        self.zero = zero
        self.resample_phase_shift = 1.0

    def set_sample_rates(self, samplerate_in: float, samplerate_out: float) -> None:
        self.resample_phase_shift = samplerate_in / samplerate_out

    @abc.abstractmethod
    def write(self, sample: Any) -> None:
        """Feed one input sample, writing zero or more output samples."""


class CubicResampler(Resampler):
    """Four-point cubic interpolation."""

    def __init__(self, output: WriteStream, zero: Any = 0.0) -> None:
        super().__init__(output, zero)
        self._previous: List[Any] = [zero, zero, zero]
        self._resample_phase = 0.0

    def write(self, sample: Any) -> None:
        p0, p1, p2 = self._previous
        while self._resample_phase < 1.0:
            mu = self._resample_phase
            mu2 = mu * mu
            a0 = sample - p0 - p2 + p1
            a1 = p2 - p1 - a0
            a2 = p0 - p2
            a3 = p1
            self.output.write(a0 * (mu * mu2) + a1 * mu2 + a2 * mu + a3)
            self._resample_phase += self.resample_phase_shift

        self._resample_phase -= 1.0
        self._previous = [sample, p0, p1]


_LUT_RESOLUTION = 512


class SincResampler(Resampler):
    """Windowed-sinc (Blackman) interpolation over ``points`` taps."""

    def __init__(self, output: WriteStream, points: int, zero: Any = 0.0) -> None:
        if points <= 0 or points % 4 != 0:
            raise ValueError("SincResampler: points must be divisible by four.")
        super().__init__(output, zero)
        self.points = points
        self._lut: List[float] = []
        self._resample_phase = 0.0
        self._taps: Deque[Any] = deque([zero] * (points - 1))
        self.set_sample_rates(1, 1)

    def set_sample_rates(self, samplerate_in: float, samplerate_out: float) -> None:
        super().set_sample_rates(samplerate_in, samplerate_out)

        points = self.points
        cutoff = 0.9
        if self.resample_phase_shift > 1.0:
            cutoff /= self.resample_phase_shift

        lut: List[float] = []
        kernel_sum = 0.0
        for n in range(points):
            for m in range(_LUT_RESOLUTION):
                t = m / _LUT_RESOLUTION
                x1 = math.pi * (t - n + points // 2) + 1e-6
                x2 = 2 * math.pi * (n + t) / points
                sinc = math.sin(cutoff * x1) / x1
                blackman = 0.42 - 0.49 * math.cos(x2) + 0.076 * math.cos(2 * x2)
                value = sinc * blackman
                lut.append(value)
                kernel_sum += value

        kernel_sum /= _LUT_RESOLUTION
        self._lut = [value / kernel_sum for value in lut]

    def write(self, sample: Any) -> None:
        self._taps.append(sample)
        taps = list(self._taps)
        lut = self._lut

        while self._resample_phase < 1.0:
            x = int(self._resample_phase * _LUT_RESOLUTION)
            result = self.zero
            for tap in taps:
                result = result + tap * lut[x]
                x += _LUT_RESOLUTION
            self.output.write(result)
            self._resample_phase += self.resample_phase_shift

        self._taps.popleft()
        self._resample_phase -= 1.0