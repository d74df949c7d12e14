from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray

from .errors import InvalidArgumentError

FloatArray = NDArray[np.float32]
AudioNumbers = NDArray[np.floating[Any]] | Sequence[float] | FloatArray

SAMPLE_RATE = 44_100


def ensure_audio_contract(audio: AudioNumbers, *, check_peak: bool = True) -> FloatArray:
    """Normalize to a flat float32 mono array, rescaling if the peak exceeds 1.0."""

    mono: FloatArray = np.asarray(audio, dtype=np.float32).reshape(-1)
    if mono.size == 0 or not check_peak:
        return mono
    peak = float(np.max(np.abs(mono)))
    if peak > 1.0:
        mono = mono / peak
    return mono


def iter_chunks(chunks: Iterable[AudioNumbers]) -> Iterator[FloatArray]:
    for chunk in chunks:
        yield ensure_audio_contract(chunk)


def _looks_like_samples(sequence: Sequence[object]) -> bool:
    match sequence:
        case []:
            return True
        case [int() | float() | np.floating(), *_]:
            return True
        case _:
            return False


def write_wav(
    path: str | Path,
    audio_or_chunks: AudioNumbers | Iterable[AudioNumbers],
    *,
    sample_rate: int = SAMPLE_RATE,
) -> Path:
    """Write a full array or a chunk iterator to a mono float wav file."""

    target = Path(path)
    audio_obj: object = audio_or_chunks
    match audio_obj:
        case np.ndarray():
            sf.write(target, ensure_audio_contract(audio_obj), sample_rate, subtype="FLOAT")
            return target
        case Sequence() as sequence if _looks_like_samples(sequence):
            sf.write(target, ensure_audio_contract(sequence), sample_rate, subtype="FLOAT")
            return target
        case str() | bytes():
            raise InvalidArgumentError("audio_or_chunks must be audio samples or chunk iterables")
        case Iterable():
            pass
        case _:
            raise InvalidArgumentError("audio_or_chunks must be audio samples or chunk iterables")

    with sf.SoundFile(
        target,
        mode="w",
        samplerate=sample_rate,
        channels=1,
        subtype="FLOAT",
    ) as handle:
        for chunk in iter_chunks(audio_obj):
            handle.write(chunk)

    return target
