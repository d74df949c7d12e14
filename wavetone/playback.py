from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict
from rich.console import Console

from .audio import FloatArray, ensure_audio_contract
from .errors import OutputSinkError

_LOGGER = logging.getLogger("wavetone.playback")
_MUSIC_FRAMES = "♪♫♬♩"
_CONSOLE = Console(stderr=True)


class PlaybackBackend(BaseModel):
    name: str
    play_stream: Callable[[Iterable[FloatArray], int], None]

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


def _load_backend() -> PlaybackBackend | None:
    return _load_sounddevice()


def _resolve_backend() -> PlaybackBackend:
    backend = _load_backend()
    if backend is None:
        raise OutputSinkError(
            "Playback requires sounddevice. Install it (pip install wavetone[playback]) "
            "or write the notes to a file with --output."
        )
    return backend


def play_stream(
    chunks: Iterable[FloatArray],
    *,
    sample_rate: int,
    backend: PlaybackBackend | None = None,
    show_status: bool = True,
) -> None:
    """Pull ``chunks`` into the audio device until the iterable is exhausted."""
    resolved = backend or _resolve_backend()
    _LOGGER.info("Streaming to %s at %s Hz", resolved.name, sample_rate)
    if not show_status or not _CONSOLE.is_terminal:
        resolved.play_stream(chunks, sample_rate)
        return
    with _CONSOLE.status(f"{_MUSIC_FRAMES[0]} Playing", spinner="dots"):
        resolved.play_stream(chunks, sample_rate)


def _load_sounddevice() -> PlaybackBackend | None:
    try:
        import sounddevice as sd_module  # type: ignore[import]
    except (ImportError, OSError) as exc:
        # OSError: the module imports but PortAudio itself is missing.
        _LOGGER.info("sounddevice not available: %s", exc, exc_info=True)
        return None
    sd: Any = sd_module

    def _play_stream(chunks: Iterable[FloatArray], sample_rate: int) -> None:
        try:
            with sd.OutputStream(
                samplerate=sample_rate,
                channels=1,
                dtype="float32",
            ) as stream:
                for chunk in chunks:
                    normalized = ensure_audio_contract(chunk)
                    stream.write(normalized.reshape(-1, 1))
        except sd.PortAudioError as exc:
            raise OutputSinkError(f"Audio device failed: {exc}") from exc

    return PlaybackBackend(
        name="sounddevice",
        play_stream=_play_stream,
    )
