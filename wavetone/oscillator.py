from __future__ import annotations

import logging
import math
from collections.abc import Iterator

import numpy as np

from .audio import FloatArray
from .errors import InvalidArgumentError
from .wavetable import Wavetable, sine_table

_LOGGER = logging.getLogger("wavetone.oscillator")

CHANNELS = 1


class WavetableOscillator:
    """Phase accumulator that reads a wavetable at a frequency-dependent rate.

    The phase is a fractional index into the table and stays in
    ``[0, len(wavetable))``. Each draw linearly interpolates between the two
    neighbouring table entries, then advances the phase by
    ``frequency * len(wavetable) / sample_rate``.

    Iterating an oscillator never ends; wrap it in a
    :class:`~wavetone.sequencer.BoundedSegment` to get a finite stream.
    """

    def __init__(self, sample_rate: int, wavetable: Wavetable | None = None) -> None:
        if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, float)):
            raise InvalidArgumentError(f"sample_rate must be a number, got {sample_rate!r}")
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise InvalidArgumentError(f"sample_rate must be > 0, got {sample_rate}")
        table = wavetable if wavetable is not None else sine_table()
        self._sample_rate = sample_rate
        self._wavetable = table
        self._values = table.values
        self._size = len(table)
        self._phase = 0.0
        self._increment = 0.0
        self._frequency = 0.0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def total_duration(self) -> float | None:
        return None

    @property
    def wavetable(self) -> Wavetable:
        return self._wavetable

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def phase_increment(self) -> float:
        return self._increment

    @property
    def frequency(self) -> float:
        return self._frequency

    def set_frequency(self, frequency: float) -> None:
        """Recompute the phase increment for ``frequency`` Hz.

        Zero is accepted and freezes the phase. Increments larger than the
        table length alias; that is tolerated.
        """
        if isinstance(frequency, bool) or not isinstance(frequency, (int, float)):
            raise InvalidArgumentError(f"frequency must be a number, got {frequency!r}")
        if not math.isfinite(frequency) or frequency < 0:
            raise InvalidArgumentError(f"frequency must be finite and >= 0, got {frequency}")
        self._frequency = float(frequency)
        self._increment = self._frequency * self._size / self._sample_rate
        if self._increment >= self._size:
            _LOGGER.debug(
                "Frequency %.2f Hz exceeds the table rate at %s Hz; output will alias.",
                frequency,
                self._sample_rate,
            )

    def reset(self) -> None:
        self._phase = 0.0

    def next_sample(self) -> float:
        values = self._values
        size = self._size
        phase = self._phase
        i0 = int(phase)
        i1 = i0 + 1
        if i1 == size:
            i1 = 0
        frac = phase - i0
        sample = (1.0 - frac) * values[i0] + frac * values[i1]
        self._phase = (phase + self._increment) % size
        return sample

    def render(self, count: int) -> FloatArray:
        """Render ``count`` samples at once, advancing the phase as ``count`` draws would."""
        if count < 0:
            raise InvalidArgumentError(f"count must be >= 0, got {count}")
        size = self._size
        phases = (self._phase + self._increment * np.arange(count, dtype=np.float64)) % size
        i0 = phases.astype(np.int64)
        # Rounding in the modulo can land exactly on ``size``.
        i0[i0 >= size] = 0
        frac = phases - np.floor(phases)
        i1 = (i0 + 1) % size
        table = self._wavetable.samples
        block = (1.0 - frac) * table[i0] + frac * table[i1]
        self._phase = (self._phase + self._increment * count) % size
        return block.astype(np.float32)

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        return self.next_sample()

    def __repr__(self) -> str:
        return (
            f"WavetableOscillator(sample_rate={self._sample_rate}, "
            f"table_size={self._size}, frequency={self._frequency})"
        )
