from __future__ import annotations

from .audio import SAMPLE_RATE, write_wav
from .config import Settings
from .errors import (
    InvalidArgumentError,
    InvalidConfigError,
    OutputSinkError,
    UnknownNoteError,
    UnsupportedStandardError,
    WavetoneError,
)
from .live import LiveSession, NoteRequest
from .logging_utils import configure_logging as _configure_logging
from .notes import (
    DEFAULT_FREQUENCY,
    PITCH_CLASSES,
    SUPPORTED_STANDARDS,
    NoteRegistry,
    TuningStandard,
    registry_for,
    resolve,
)
from .oscillator import WavetableOscillator
from .playback import play_stream
from .sequencer import BoundedSegment, Note, Sequencer, build_notes
from .wavetable import Wavetable, sine_table

__all__ = [
    "SAMPLE_RATE",
    "DEFAULT_FREQUENCY",
    "PITCH_CLASSES",
    "SUPPORTED_STANDARDS",
    "BoundedSegment",
    "InvalidArgumentError",
    "InvalidConfigError",
    "LiveSession",
    "Note",
    "NoteRegistry",
    "NoteRequest",
    "OutputSinkError",
    "Sequencer",
    "Settings",
    "TuningStandard",
    "UnknownNoteError",
    "UnsupportedStandardError",
    "Wavetable",
    "WavetableOscillator",
    "WavetoneError",
    "build_notes",
    "play_stream",
    "registry_for",
    "resolve",
    "sine_table",
    "write_wav",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
