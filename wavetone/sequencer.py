from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Sequence
from typing import Callable, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .audio import SAMPLE_RATE, FloatArray
from .errors import InvalidArgumentError, OutputSinkError
from .notes import DEFAULT_STANDARD, NoteRegistry, registry_for
from .oscillator import CHANNELS, WavetableOscillator
from .wavetable import Wavetable

_LOGGER = logging.getLogger("wavetone.sequencer")

DEFAULT_CHUNK_SIZE = 1024
DEFAULT_NOTE_SECONDS = 0.5

SequencerState = Literal["idle", "sounding"]
StreamSink = Callable[..., None]


class Note(BaseModel):
    name: str
    duration: float = Field(default=DEFAULT_NOTE_SECONDS, gt=0.0, allow_inf_nan=False)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class BoundedSegment:
    """One note's audible window over an otherwise endless oscillator.

    Emits exactly ``round(duration * sample_rate)`` samples (at least one),
    then stops. Elapsed time is derived from the integer count of emitted
    samples, so long sequences never drift.

    When ``frequency`` is given the oscillator is retuned on the first draw,
    so a segment keeps its own pitch even if it is consumed after later
    segments were created on the same oscillator.
    """

    def __init__(
        self,
        oscillator: WavetableOscillator,
        duration: float,
        *,
        frequency: float | None = None,
    ) -> None:
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise InvalidArgumentError(f"duration must be a number, got {duration!r}")
        if not math.isfinite(duration) or duration <= 0:
            raise InvalidArgumentError(f"duration must be finite and > 0, got {duration}")
        self._oscillator = oscillator
        self._duration = float(duration)
        self._frequency = frequency
        self._total = max(1, round(duration * oscillator.sample_rate))
        self._emitted = 0

    @property
    def oscillator(self) -> WavetableOscillator:
        return self._oscillator

    @property
    def frequency(self) -> float:
        if self._frequency is None:
            return self._oscillator.frequency
        return self._frequency

    @property
    def sample_rate(self) -> int:
        return self._oscillator.sample_rate

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def total_samples(self) -> int:
        return self._total

    @property
    def emitted(self) -> int:
        return self._emitted

    @property
    def total_duration(self) -> float:
        return self._total / self.sample_rate

    @property
    def elapsed(self) -> float:
        return self._emitted / self.sample_rate

    @property
    def remaining(self) -> float:
        return (self._total - self._emitted) / self.sample_rate

    @property
    def finished(self) -> bool:
        return self._emitted >= self._total

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        if self._emitted >= self._total:
            raise StopIteration
        if self._emitted == 0:
            self._tune()
        self._emitted += 1
        return self._oscillator.next_sample()

    def render_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[FloatArray]:
        if chunk_size <= 0:
            raise InvalidArgumentError(f"chunk_size must be > 0, got {chunk_size}")
        if self._emitted == 0:
            self._tune()
        while self._emitted < self._total:
            count = min(chunk_size, self._total - self._emitted)
            block = self._oscillator.render(count)
            self._emitted += count
            yield block

    def _tune(self) -> None:
        if self._frequency is not None:
            self._oscillator.set_frequency(self._frequency)

    def __repr__(self) -> str:
        return (
            f"BoundedSegment(frequency={self.frequency}, "
            f"duration={self._duration}, emitted={self._emitted}/{self._total})"
        )


def build_notes(
    names: Sequence[str],
    *,
    duration: float | None = None,
    durations: Sequence[float] | None = None,
) -> list[Note]:
    """Pair note names with one shared duration or with per-note durations."""
    if duration is not None and durations is not None:
        raise InvalidArgumentError("Pass either duration or durations, not both")
    if durations is not None:
        if len(durations) != len(names):
            raise InvalidArgumentError(
                f"Got {len(durations)} durations for {len(names)} notes; counts must match"
            )
        pairs = zip(names, durations)
    else:
        shared = DEFAULT_NOTE_SECONDS if duration is None else duration
        pairs = ((name, shared) for name in names)
    notes: list[Note] = []
    for name, seconds in pairs:
        if (
            isinstance(seconds, bool)
            or not isinstance(seconds, (int, float))
            or not math.isfinite(seconds)
            or seconds <= 0
        ):
            raise InvalidArgumentError(f"Note {name!r} needs a positive duration, got {seconds}")
        notes.append(Note(name=name, duration=seconds))
    return notes


class Sequencer:
    """Monophonic note player: one shared oscillator, one sounding note at a time.

    The oscillator keeps its phase across notes, so transitions are
    continuous.
    """

    def __init__(
        self,
        *,
        sample_rate: int = SAMPLE_RATE,
        tuning: int = DEFAULT_STANDARD,
        wavetable: Wavetable | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        strict: bool = False,
    ) -> None:
        if chunk_size <= 0:
            raise InvalidArgumentError(f"chunk_size must be > 0, got {chunk_size}")
        self._registry: NoteRegistry = registry_for(tuning)
        self._oscillator = WavetableOscillator(sample_rate, wavetable)
        self._chunk_size = chunk_size
        self._strict = strict
        self._state: SequencerState = "idle"
        self._current: Note | None = None

    @property
    def sample_rate(self) -> int:
        return self._oscillator.sample_rate

    @property
    def tuning(self) -> int:
        return self._registry.standard

    @property
    def oscillator(self) -> WavetableOscillator:
        return self._oscillator

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def current(self) -> Note | None:
        return self._current

    def segments(self, notes: Iterable[Note]) -> Iterator[BoundedSegment]:
        """Yield one bounded segment per note; the previous note stops when the next starts."""
        try:
            for note in notes:
                frequency = self._registry.frequency(note.name, strict=self._strict)
                self._oscillator.set_frequency(frequency)
                self._state = "sounding"
                self._current = note
                _LOGGER.debug(
                    "Sounding %s at %.2f Hz for %.3fs", note.name, frequency, note.duration
                )
                yield BoundedSegment(self._oscillator, note.duration, frequency=frequency)
                self._state = "idle"
                self._current = None
        finally:
            self._state = "idle"
            self._current = None

    def iter_chunks(self, notes: Iterable[Note]) -> Iterator[FloatArray]:
        for segment in self.segments(notes):
            yield from segment.render_chunks(self._chunk_size)

    def render(self, notes: Iterable[Note]) -> FloatArray:
        chunks = list(self.iter_chunks(notes))
        if not chunks:
            return np.array([], dtype=np.float32)
        return np.concatenate(chunks)

    def play(self, notes: Iterable[Note], sink: StreamSink | None = None) -> None:
        """Stream ``notes`` into ``sink`` (the default audio device when omitted).

        A sink failure aborts the rest of the sequence; it is not retried.
        """
        if sink is None:
            from .playback import play_stream

            sink = play_stream
        try:
            sink(self.iter_chunks(notes), sample_rate=self.sample_rate)
        except OutputSinkError as exc:
            _LOGGER.error("Output sink failed; abandoning the remaining notes: %s", exc)
            raise
