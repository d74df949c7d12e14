import math

import numpy as np
import pytest

from wavetone.errors import InvalidArgumentError
from wavetone.oscillator import WavetableOscillator
from wavetone.wavetable import Wavetable, sine_table


def test_new_oscillator_is_silent_until_tuned() -> None:
    osc = WavetableOscillator(44_100, sine_table(64))
    assert osc.phase == 0.0
    assert osc.phase_increment == 0.0
    assert osc.channels == 1
    assert osc.sample_rate == 44_100
    assert osc.total_duration is None


@pytest.mark.parametrize("rate", [0, -1, -44_100, float("nan")])
def test_rejects_bad_sample_rate(rate: float) -> None:
    with pytest.raises(InvalidArgumentError):
        WavetableOscillator(rate, sine_table(64))  # type: ignore[arg-type]


@pytest.mark.parametrize("freq", [-1.0, -0.001, float("inf"), float("nan")])
def test_rejects_bad_frequency(freq: float) -> None:
    osc = WavetableOscillator(44_100, sine_table(64))
    with pytest.raises(InvalidArgumentError):
        osc.set_frequency(freq)


def test_increment_formula() -> None:
    osc = WavetableOscillator(44_100, sine_table(64))
    osc.set_frequency(440.0)
    assert osc.frequency == 440.0
    assert osc.phase_increment == pytest.approx(440 * 64 / 44_100)


def test_integer_phases_read_table_exactly() -> None:
    table = sine_table(64)
    osc = WavetableOscillator(64, table)
    osc.set_frequency(1.0)
    assert osc.phase_increment == 1.0
    for k in range(64):
        assert osc.next_sample() == table[k]


def test_phase_at_table_length_reads_first_entry() -> None:
    table = Wavetable.from_samples([0.25, 0.5, -0.5, -0.25])
    osc = WavetableOscillator(4, table)
    osc.set_frequency(1.0)
    for _ in range(4):
        osc.next_sample()
    assert osc.phase == 0.0
    assert osc.next_sample() == table[0]


def test_zero_frequency_repeats_first_sample() -> None:
    table = Wavetable.from_samples([0.5, 1.0, -1.0, 0.0])
    osc = WavetableOscillator(44_100, table)
    osc.set_frequency(0.0)
    assert [osc.next_sample() for _ in range(100)] == [0.5] * 100
    assert osc.phase == 0.0


def test_one_period_advances_one_cycle() -> None:
    rate, freq, size = 44_100, 440.0, 64
    osc = WavetableOscillator(rate, sine_table(size))
    osc.set_frequency(freq)
    steps = math.ceil(rate / freq)
    for _ in range(steps):
        osc.next_sample()
    advance = steps * osc.phase_increment
    assert size <= advance < size + osc.phase_increment
    assert osc.phase == pytest.approx(advance - size, abs=1e-9)


def test_interpolates_across_the_wrap() -> None:
    table = sine_table(64)
    osc = WavetableOscillator(44_100, table)
    osc.set_frequency(440.0)
    assert osc.phase_increment == pytest.approx(0.6386, abs=1e-4)
    for _ in range(100):
        osc.next_sample()
    assert osc.phase == pytest.approx(63.855, abs=1e-3)
    frac = osc.phase - 63
    assert frac == pytest.approx(0.855, abs=1e-3)
    expected = (1 - frac) * table[63] + frac * table[0]
    assert osc.next_sample() == pytest.approx(expected, abs=1e-12)


def test_phase_stays_in_range_when_aliasing() -> None:
    osc = WavetableOscillator(8_000, sine_table(64))
    osc.set_frequency(30_000.0)
    assert osc.phase_increment > 64
    for _ in range(1_000):
        osc.next_sample()
        assert 0.0 <= osc.phase < 64


def test_iterates_without_end() -> None:
    osc = WavetableOscillator(44_100, sine_table(64))
    osc.set_frequency(440.0)
    samples = [sample for _, sample in zip(range(5_000), osc)]
    assert len(samples) == 5_000
    assert max(samples) <= 1.0
    assert min(samples) >= -1.0


def test_render_matches_per_sample_path() -> None:
    per_sample = WavetableOscillator(44_100, sine_table(64))
    block = WavetableOscillator(44_100, sine_table(64))
    for osc in (per_sample, block):
        osc.set_frequency(523.25)

    expected = np.array([per_sample.next_sample() for _ in range(2_000)])
    first = block.render(1_500)
    second = block.render(500)

    assert first.dtype == np.float32
    assert np.allclose(np.concatenate([first, second]), expected, atol=1e-5)
    assert block.phase == pytest.approx(per_sample.phase, abs=1e-6)


def test_reset_keeps_frequency() -> None:
    osc = WavetableOscillator(44_100, sine_table(64))
    osc.set_frequency(440.0)
    osc.render(17)
    osc.reset()
    assert osc.phase == 0.0
    assert osc.frequency == 440.0
