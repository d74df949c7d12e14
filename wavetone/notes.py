"""Note name to frequency lookup, one immutable table per tuning standard.

Tables hold the twelve pitch classes of the reference octave (octave 4,
containing A4). Names may carry a sharp (``#``) or flat (``b``) and an
octave digit, e.g. ``"A"``, ``"c#"``, ``"Bb3"``, ``"G5"``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, get_args

from .errors import UnknownNoteError, UnsupportedStandardError

_LOGGER = logging.getLogger("wavetone.notes")

TuningStandard = Literal[440, 432]

SUPPORTED_STANDARDS: tuple[int, ...] = get_args(TuningStandard)
DEFAULT_STANDARD: TuningStandard = 440
DEFAULT_FREQUENCY = 440.0
REFERENCE_OCTAVE = 4

PITCH_CLASSES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

_LETTER_SEMITONES: Mapping[str, int] = MappingProxyType(
    {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
)
_ACCIDENTALS: Mapping[str, int] = MappingProxyType({"": 0, "#": 1, "b": -1})
_A_SEMITONE = _LETTER_SEMITONES["A"]
_NOTE_PATTERN = re.compile(r"^\s*([A-Ga-g])([#b]?)(\d)?\s*$")


def _pitch_table(reference: int) -> Mapping[str, float]:
    return MappingProxyType(
        {
            name: round(reference * 2 ** ((semitone - _A_SEMITONE) / 12), 2)
            for semitone, name in enumerate(PITCH_CLASSES)
        }
    )


@dataclass(frozen=True, slots=True)
class ParsedNote:
    pitch_class: str
    octave: int


def parse_note(name: str) -> ParsedNote | None:
    """Split a note name into its pitch class and octave, or ``None`` if unrecognised."""
    if not isinstance(name, str):
        return None
    match = _NOTE_PATTERN.match(name)
    if match is None:
        return None
    letter, accidental, octave_text = match.groups()
    semitone = _LETTER_SEMITONES[letter.upper()] + _ACCIDENTALS[accidental]
    octave = int(octave_text) if octave_text is not None else REFERENCE_OCTAVE
    # Cb and B# cross the octave boundary.
    octave += semitone // 12
    return ParsedNote(pitch_class=PITCH_CLASSES[semitone % 12], octave=octave)


@dataclass(frozen=True, slots=True)
class NoteRegistry:
    """Pitch-class frequencies for one tuning standard (A4 = ``standard`` Hz)."""

    standard: int
    frequencies: Mapping[str, float]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and parse_note(name) is not None

    def frequency(self, name: str, *, strict: bool = False) -> float:
        parsed = parse_note(name)
        if parsed is None:
            if strict:
                raise UnknownNoteError(f"Unknown note: {name!r}. Valid: {list(PITCH_CLASSES)}")
            _LOGGER.warning(
                "Unknown note %r; playing default %.1f Hz instead.", name, DEFAULT_FREQUENCY
            )
            return DEFAULT_FREQUENCY
        base = self.frequencies[parsed.pitch_class]
        return base * 2.0 ** (parsed.octave - REFERENCE_OCTAVE)


_REGISTRIES: Mapping[int, NoteRegistry] = MappingProxyType(
    {
        standard: NoteRegistry(standard=standard, frequencies=_pitch_table(standard))
        for standard in SUPPORTED_STANDARDS
    }
)


def registry_for(standard: int) -> NoteRegistry:
    if isinstance(standard, bool) or standard not in _REGISTRIES:
        raise UnsupportedStandardError(
            f"Unsupported tuning standard: {standard!r}. Valid: {list(SUPPORTED_STANDARDS)}"
        )
    return _REGISTRIES[standard]


def resolve(
    note_name: str,
    tuning_standard: int = DEFAULT_STANDARD,
    *,
    strict: bool = False,
) -> float:
    """Return the frequency in Hz of ``note_name`` under ``tuning_standard``.

    An unsupported standard raises :class:`UnsupportedStandardError`. An
    unrecognised note name logs a warning and returns ``DEFAULT_FREQUENCY``
    so live playback keeps going; pass ``strict=True`` to raise
    :class:`UnknownNoteError` instead.
    """
    return registry_for(tuning_standard).frequency(note_name, strict=strict)
