"""Live note changes from an input thread.

Input threads never touch the oscillator. They post immutable
:class:`NoteRequest` messages to a queue; the render loop drains it between
chunks and applies only the newest request, so a frequency change is never
observed half-applied.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from queue import Empty, Queue
from threading import Event, Thread
from typing import TextIO

import numpy as np
from pydantic import BaseModel, ConfigDict

from .audio import SAMPLE_RATE, FloatArray
from .errors import InvalidArgumentError
from .notes import DEFAULT_STANDARD, registry_for
from .oscillator import WavetableOscillator
from .sequencer import DEFAULT_CHUNK_SIZE
from .wavetable import Wavetable

_LOGGER = logging.getLogger("wavetone.live")

_SILENCE_WORDS = frozenset({"-", "rest", "off"})
_QUIT_WORDS = frozenset({"q", "quit", "exit"})


class NoteRequest(BaseModel):
    """A note (Hz already resolved) handed to the render thread; ``None`` is a rest."""

    name: str
    frequency: float | None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class LiveSession:
    def __init__(
        self,
        *,
        sample_rate: int = SAMPLE_RATE,
        tuning: int = DEFAULT_STANDARD,
        wavetable: Wavetable | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        queue_maxsize: int = 0,
        linger: float = 0.5,
    ) -> None:
        if chunk_size <= 0:
            raise InvalidArgumentError(f"chunk_size must be > 0, got {chunk_size}")
        if linger < 0:
            raise InvalidArgumentError(f"linger must be >= 0, got {linger}")
        self._registry = registry_for(tuning)
        self._oscillator = WavetableOscillator(sample_rate, wavetable)
        self._chunk_size = chunk_size
        self._requests: Queue[NoteRequest] = Queue(maxsize=queue_maxsize)
        self._stopped = Event()
        self._input_closed = Event()
        # Chunks still rendered after input closes, so the last note is heard.
        self._linger_chunks = max(1, math.ceil(linger * sample_rate / chunk_size))
        self._sounding = False
        self._current: str | None = None

    @property
    def sample_rate(self) -> int:
        return self._oscillator.sample_rate

    @property
    def current(self) -> str | None:
        return self._current

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def submit(self, name: str) -> NoteRequest:
        """Queue ``name`` for the render thread. Safe to call from any thread."""
        word = name.strip()
        if word.lower() in _SILENCE_WORDS:
            request = NoteRequest(name=word, frequency=None)
        else:
            request = NoteRequest(name=word, frequency=self._registry.frequency(word))
        self._requests.put(request)
        return request

    def stop(self) -> None:
        self._stopped.set()

    def close_input(self) -> None:
        """Mark the end of input; queued notes still play for the linger time, then the stream ends."""
        self._input_closed.set()

    def _apply_pending(self) -> None:
        latest: NoteRequest | None = None
        while True:
            try:
                latest = self._requests.get_nowait()
            except Empty:
                break
        if latest is None:
            return
        if latest.frequency is None:
            self._sounding = False
            self._current = None
            _LOGGER.debug("Rest")
            return
        self._oscillator.set_frequency(latest.frequency)
        self._sounding = True
        self._current = latest.name
        _LOGGER.debug("Now sounding %s at %.2f Hz", latest.name, latest.frequency)

    def chunks(self) -> Iterator[FloatArray]:
        """Render chunks until :meth:`stop`, or until the linger time after input closes.

        Rests render silence.
        """
        silence: FloatArray | None = None
        lingering = 0
        while not self._stopped.is_set():
            # Read before draining so requests queued ahead of the close are applied.
            closed = self._input_closed.is_set()
            self._apply_pending()
            if closed:
                if lingering >= self._linger_chunks:
                    break
                lingering += 1
            if self._sounding:
                yield self._oscillator.render(self._chunk_size)
                continue
            if silence is None:
                silence = np.zeros(self._chunk_size, dtype=np.float32)
            yield silence
        self._stopped.set()

    def feed_lines(self, lines: Iterable[str]) -> None:
        """Submit each non-empty line as a note.

        A quit word stops the session at once; end of input lets queued notes
        play out (see :meth:`close_input`).
        """
        try:
            for line in lines:
                if self._stopped.is_set():
                    return
                word = line.strip()
                if not word:
                    continue
                if word.lower() in _QUIT_WORDS:
                    self.stop()
                    return
                self.submit(word)
        finally:
            self.close_input()

    def start_reader(self, stream: TextIO) -> Thread:
        thread = Thread(target=self.feed_lines, args=(stream,), daemon=True)
        thread.start()
        return thread
