import pytest

from gbaplatform.resampler import CubicResampler, Resampler, SincResampler


class Collector:
    def __init__(self):
        self.samples = []

    def write(self, sample):
        self.samples.append(sample)


def test_cubic_same_rate_delays_input_by_two_samples():
    out = Collector()
    resampler = CubicResampler(out)
    for value in [1.0, 2.0, 3.0, 4.0, 5.0]:
        resampler.write(value)
    assert out.samples == [0.0, 0.0, 1.0, 2.0, 3.0]


def test_cubic_upsampling_doubles_output_count():
    out = Collector()
    resampler = CubicResampler(out)
    resampler.set_sample_rates(1, 2)
    for _ in range(10):
        resampler.write(1.0)
    assert len(out.samples) == 20


def test_cubic_downsampling_halves_output_count():
    out = Collector()
    resampler = CubicResampler(out)
    resampler.set_sample_rates(2, 1)
    for _ in range(10):
        resampler.write(1.0)
    assert len(out.samples) == 5


def test_cubic_constant_signal_stays_constant():
    out = Collector()
    resampler = CubicResampler(out)
    resampler.set_sample_rates(3, 7)
    for _ in range(20):
        resampler.write(0.5)
    assert out.samples[-10:] == pytest.approx([0.5] * 10)


def test_phase_shift_is_ratio_of_rates():
    resampler = CubicResampler(Collector())
    resampler.set_sample_rates(32768, 48000)
    assert resampler.resample_phase_shift == pytest.approx(32768 / 48000)


def test_sinc_points_must_be_divisible_by_four():
    with pytest.raises(ValueError):
        SincResampler(Collector(), 6)


def test_sinc_same_rate_one_output_per_input():
    out = Collector()
    resampler = SincResampler(out, 16)
    for _ in range(20):
        resampler.write(0.0)
    assert len(out.samples) == 20
    assert out.samples == pytest.approx([0.0] * 20)


def test_sinc_constant_signal_passes_dc():
    out = Collector()
    resampler = SincResampler(out, 32)
    for _ in range(80):
        resampler.write(1.0)
    for value in out.samples[-20:]:
        assert value == pytest.approx(1.0, abs=0.05)


def test_sinc_upsampling_doubles_output_count():
    out = Collector()
    resampler = SincResampler(out, 16)
    resampler.set_sample_rates(1, 2)
    for _ in range(8):
        resampler.write(0.25)
    assert len(out.samples) == 16


def test_sinc_is_linear():
    inputs = [0.3, -0.7, 1.0, 0.2, -0.1, 0.6, 0.0, -0.4] * 3
    out_a, out_b = Collector(), Collector()
    a = SincResampler(out_a, 16)
    b = SincResampler(out_b, 16)
    for value in inputs:
        a.write(value)
        b.write(2.0 * value)
    assert out_b.samples == pytest.approx([2.0 * v for v in out_a.samples])


def test_resampler_is_abstract():
    with pytest.raises(TypeError):
        Resampler(Collector())  # type: ignore[abstract]