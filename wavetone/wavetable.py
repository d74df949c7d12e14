from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from functools import lru_cache
from typing import Callable, TypeAlias

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidArgumentError

TableArray: TypeAlias = NDArray[np.float64]
SampleGenerator: TypeAlias = Callable[[int, int], float]

DEFAULT_TABLE_SIZE = 64
_MIN_TABLE_SIZE = 2
_AMPLITUDE_LIMIT = 1.0 + 1e-9


def sine(n: int, size: int) -> float:
    """One cycle of a sine: sin(2*pi*n/size)."""
    return math.sin(2.0 * math.pi * n / size)


def _check_size(size: object) -> int:
    if isinstance(size, bool) or not isinstance(size, int):
        raise InvalidArgumentError(f"Wavetable size must be an int, got {size!r}")
    if size < _MIN_TABLE_SIZE:
        raise InvalidArgumentError(
            f"Wavetable size must be at least {_MIN_TABLE_SIZE} to interpolate, got {size}"
        )
    return size


class Wavetable:
    """Exactly one period of a waveform, stored as an immutable sample array.

    Logical index ``len(table)`` wraps to index 0, so ``table[i]`` accepts any
    integer and reads modulo the table length.
    """

    __slots__ = ("_samples", "_values")

    def __init__(self, size: int = DEFAULT_TABLE_SIZE, generator: SampleGenerator = sine) -> None:
        size = _check_size(size)
        self._set(np.array([generator(n, size) for n in range(size)], dtype=np.float64))

    @classmethod
    def from_samples(cls, samples: Iterable[float]) -> "Wavetable":
        values = np.asarray(list(samples), dtype=np.float64).reshape(-1)
        _check_size(int(values.size))
        table = cls.__new__(cls)
        table._set(values)
        return table

    def _set(self, values: TableArray) -> None:
        if not np.all(np.isfinite(values)):
            raise InvalidArgumentError("Wavetable samples must be finite")
        peak = float(np.max(np.abs(values)))
        if peak > _AMPLITUDE_LIMIT:
            raise InvalidArgumentError(f"Wavetable samples must lie in [-1, 1], peak was {peak}")
        values.setflags(write=False)
        object.__setattr__(self, "_samples", values)
        # Plain floats for the per-sample path; numpy scalar indexing is slow.
        object.__setattr__(self, "_values", tuple(float(v) for v in values))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Wavetable is immutable")

    @property
    def samples(self) -> TableArray:
        return self._samples

    @property
    def values(self) -> tuple[float, ...]:
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> float:
        return self._values[index % len(self._values)]

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wavetable):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"Wavetable(size={len(self)})"


@lru_cache(maxsize=None)
def sine_table(size: int = DEFAULT_TABLE_SIZE) -> Wavetable:
    """Shared sine table for ``size``; built once per process."""
    return Wavetable(size, sine)
