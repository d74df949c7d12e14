import io
import threading

import numpy as np
import pytest

from wavetone.errors import InvalidArgumentError, UnsupportedStandardError
from wavetone.live import LiveSession, NoteRequest
from wavetone.notes import resolve


def test_rest_until_first_note() -> None:
    session = LiveSession(chunk_size=32)
    chunks = session.chunks()
    first = next(chunks)
    assert first.size == 32
    assert not np.any(first)
    assert session.current is None


def test_note_applies_between_chunks() -> None:
    session = LiveSession(chunk_size=256)
    chunks = session.chunks()
    request = session.submit("A")
    assert request == NoteRequest(name="A", frequency=440.0)
    chunk = next(chunks)
    assert session.current == "A"
    assert np.any(chunk)


def test_only_latest_request_is_applied() -> None:
    session = LiveSession(tuning=432)
    chunks = session.chunks()
    session.submit("C")
    session.submit("E")
    next(chunks)
    assert session.current == "E"


def test_rest_silences_output() -> None:
    session = LiveSession(chunk_size=64)
    chunks = session.chunks()
    session.submit("A")
    next(chunks)
    session.submit("rest")
    assert not np.any(next(chunks))
    assert session.current is None


def test_unknown_note_plays_default() -> None:
    session = LiveSession()
    assert session.submit("H").frequency == resolve("A")


def test_stop_ends_stream() -> None:
    session = LiveSession()
    chunks = session.chunks()
    next(chunks)
    session.stop()
    with pytest.raises(StopIteration):
        next(chunks)
    assert session.stopped


def test_feed_lines_stops_on_quit(monkeypatch: pytest.MonkeyPatch) -> None:
    session = LiveSession()
    submitted: list[str] = []
    real_submit = session.submit

    def _record(name: str) -> NoteRequest:
        submitted.append(name)
        return real_submit(name)

    monkeypatch.setattr(session, "submit", _record)
    session.feed_lines(["A\n", "\n", "  C# \n", "quit\n", "E\n"])
    assert submitted == ["A", "C#"]
    assert session.stopped


def test_reader_thread_hands_off_notes() -> None:
    session = LiveSession(chunk_size=16, linger=0.0)
    thread = session.start_reader(io.StringIO("G\n"))
    assert isinstance(thread, threading.Thread)
    thread.join(timeout=2.0)
    assert not session.stopped
    chunks = list(session.chunks())
    assert len(chunks) == 1
    assert np.any(chunks[0])
    assert session.current == "G"
    assert session.stopped


def test_end_of_input_lingers_on_last_note() -> None:
    session = LiveSession(sample_rate=8_000, chunk_size=100, linger=0.04)
    session.feed_lines(["A\n", "C\n"])
    chunks = list(session.chunks())
    assert len(chunks) == 4
    assert all(np.any(chunk) for chunk in chunks)
    assert session.current == "C"


def test_quit_word_discards_pending_notes() -> None:
    session = LiveSession()
    session.feed_lines(["A\n", "q\n"])
    assert session.stopped
    assert list(session.chunks()) == []


def test_rejects_bad_setup() -> None:
    with pytest.raises(UnsupportedStandardError):
        LiveSession(tuning=441)
    with pytest.raises(InvalidArgumentError):
        LiveSession(chunk_size=0)
    with pytest.raises(InvalidArgumentError):
        LiveSession(sample_rate=0)
    with pytest.raises(InvalidArgumentError):
        LiveSession(linger=-1.0)
