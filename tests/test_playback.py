from collections.abc import Iterable

import numpy as np
import pytest

import wavetone.playback as playback
from wavetone.audio import FloatArray
from wavetone.errors import OutputSinkError
from wavetone.playback import PlaybackBackend, play_stream
from wavetone.sequencer import Sequencer, build_notes


def _collecting_backend(store: list[FloatArray]) -> PlaybackBackend:
    def _play_stream(chunks: Iterable[FloatArray], sample_rate: int) -> None:
        _ = sample_rate
        store.extend(chunks)

    return PlaybackBackend(name="memory", play_stream=_play_stream)


def test_play_stream_drains_chunks() -> None:
    store: list[FloatArray] = []
    chunks = [np.full(4, 0.5, dtype=np.float32), np.zeros(2, dtype=np.float32)]
    play_stream(chunks, sample_rate=8_000, backend=_collecting_backend(store), show_status=False)
    assert [chunk.size for chunk in store] == [4, 2]


def test_missing_backend_is_a_sink_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(playback, "_load_backend", lambda: None)
    with pytest.raises(OutputSinkError):
        play_stream([], sample_rate=44_100)


def test_sequencer_default_sink_surfaces_sink_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(playback, "_load_backend", lambda: None)
    with pytest.raises(OutputSinkError):
        Sequencer().play(build_notes(["A"], duration=0.01))


def test_sequencer_default_sink_uses_loaded_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    store: list[FloatArray] = []
    monkeypatch.setattr(playback, "_load_backend", lambda: _collecting_backend(store))
    Sequencer(chunk_size=100).play(build_notes(["A"], duration=0.01))
    assert sum(chunk.size for chunk in store) == 441


def test_backend_model_is_frozen() -> None:
    backend = _collecting_backend([])
    with pytest.raises(Exception):
        backend.name = "other"  # type: ignore[misc]
