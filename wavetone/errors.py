from __future__ import annotations


class WavetoneError(Exception):
    """Base error for the wavetone library."""


class InvalidArgumentError(WavetoneError, ValueError):
    """Raised when a structural argument (rate, table size, frequency) is invalid."""


class UnsupportedStandardError(InvalidArgumentError):
    """Raised when a tuning standard is not one of the supported references."""


class UnknownNoteError(WavetoneError, KeyError):
    """Raised by strict note lookups when the name is not a known pitch."""


class OutputSinkError(WavetoneError):
    """Raised when the audio output device or backend fails."""


class InvalidConfigError(WavetoneError):
    """Raised when settings cannot be parsed or validated."""
