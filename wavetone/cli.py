from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .audio import write_wav
from .config import Settings
from .live import LiveSession
from .logging_utils import configure_logging, debug_enabled, log_exception
from .notes import PITCH_CLASSES, REFERENCE_OCTAVE, SUPPORTED_STANDARDS, registry_for
from .playback import play_stream
from .sequencer import Sequencer, build_notes
from .wavetable import sine_table

_LOGGER = logging.getLogger("wavetone.cli")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


def _add_render_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tuning",
        type=int,
        choices=SUPPORTED_STANDARDS,
        help="Reference frequency of A4 in Hz.",
    )
    parser.add_argument("--sample-rate", type=int, help="Output sample rate in Hz.")
    parser.add_argument("--table-size", type=int, help="Number of samples in the sine table.")
    parser.add_argument("--chunk-size", type=int, help="Samples per block sent to the device.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavetone",
        description="Play notes through a wavetable oscillator.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Play a sequence of notes.")
    play.add_argument("notes", nargs="+", help="Note names, e.g. A C# Eb5.")
    lengths = play.add_mutually_exclusive_group()
    lengths.add_argument("--duration", type=float, help="Seconds per note.")
    lengths.add_argument(
        "--durations", type=float, nargs="+", help="Seconds for each note, in order."
    )
    play.add_argument("-o", "--output", type=str, help="Write a wav file instead of playing.")
    play.add_argument(
        "--strict", action="store_true", help="Fail on unknown note names instead of playing A4."
    )
    _add_render_options(play)

    live = sub.add_parser("live", help="Read note names from stdin and play them as typed.")
    _add_render_options(live)

    notes = sub.add_parser("notes", help="List pitch-class frequencies for a tuning.")
    notes.add_argument("--tuning", type=int, choices=SUPPORTED_STANDARDS)
    notes.add_argument("--octave", type=int, default=REFERENCE_OCTAVE)
    return parser


def _settings_for(args: argparse.Namespace) -> Settings:
    return Settings.from_env().override(
        tuning=getattr(args, "tuning", None),
        sample_rate=getattr(args, "sample_rate", None),
        table_size=getattr(args, "table_size", None),
        chunk_size=getattr(args, "chunk_size", None),
        duration=getattr(args, "duration", None),
    )


def _cmd_play(args: argparse.Namespace) -> int:
    settings = _settings_for(args)
    if args.durations is not None:
        notes = build_notes(args.notes, durations=args.durations)
    else:
        notes = build_notes(args.notes, duration=settings.duration)
    sequencer = Sequencer(
        sample_rate=settings.sample_rate,
        tuning=settings.tuning,
        wavetable=sine_table(settings.table_size),
        chunk_size=settings.chunk_size,
        strict=args.strict,
    )
    if args.output:
        path = write_wav(
            Path(args.output),
            sequencer.iter_chunks(notes),
            sample_rate=settings.sample_rate,
        )
        _CONSOLE.print(f"Wrote {len(notes)} notes to {path} (sr={settings.sample_rate})")
        return 0
    sequencer.play(notes)
    return 0


def _cmd_live(args: argparse.Namespace) -> int:
    settings = _settings_for(args)
    session = LiveSession(
        sample_rate=settings.sample_rate,
        tuning=settings.tuning,
        wavetable=sine_table(settings.table_size),
        chunk_size=settings.chunk_size,
    )
    _ERR_CONSOLE.print("Type a note and press Enter; 'rest' for silence, 'q' to quit.")
    session.start_reader(sys.stdin)
    try:
        play_stream(session.chunks(), sample_rate=session.sample_rate, show_status=False)
    finally:
        session.stop()
    return 0


def _cmd_notes(args: argparse.Namespace) -> int:
    settings = _settings_for(args)
    registry = registry_for(settings.tuning)
    table = Table(title=f"A4 = {registry.standard} Hz")
    table.add_column("Note")
    table.add_column("Hz", justify="right")
    for pitch_class in PITCH_CLASSES:
        name = f"{pitch_class}{args.octave}"
        table.add_row(name, f"{registry.frequency(name):.2f}")
    _CONSOLE.print(table)
    return 0


def render_error(context: str, exc: BaseException) -> None:
    _ERR_CONSOLE.print(f"[bold red]{context} failed:[/] {type(exc).__name__}: {exc}")


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "play":
            return _cmd_play(args)
        if args.command == "live":
            return _cmd_live(args)
        if args.command == "notes":
            return _cmd_notes(args)

        parser.print_help()
        return 1
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        _LOGGER.warning("wavetone CLI failed: %s", exc, exc_info=debug_enabled())
        log_exception("wavetone CLI", exc)
        render_error("wavetone", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
