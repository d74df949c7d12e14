import logging
from pathlib import Path

import pytest

from wavetone.logging_utils import configure_logging, get_log_dir, get_log_path, log_exception


def test_log_dir_uses_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WAVETONE_LOG_DIR", str(tmp_path))
    assert get_log_dir() == tmp_path
    assert get_log_path() == tmp_path / "wavetone.log"


def test_log_exception_appends_traceback(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WAVETONE_LOG_DIR", str(tmp_path))
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        path = log_exception("render", exc)
    assert path == tmp_path / "wavetone.log"
    text = path.read_text(encoding="utf-8")
    assert "render: RuntimeError: boom" in text
    assert "Traceback" in text


def test_configure_logging_force_installs_file_handler(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WAVETONE_LOG_DIR", str(tmp_path))
    configure_logging(force=True)
    logger = logging.getLogger("wavetone")
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert file_handlers
    assert Path(file_handlers[-1].baseFilename) == tmp_path / "wavetone.log"
    assert logger.propagate


def test_console_format_shortens_logger_names(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WAVETONE_LOG_DIR", str(tmp_path))
    configure_logging(force=True)
    logger = logging.getLogger("wavetone")
    console = next(h for h in logger.handlers if not isinstance(h, logging.FileHandler))
    record = logging.LogRecord("wavetone.notes", logging.WARNING, __file__, 1, "odd %s", ("H",), None)
    assert console.format(record) == "wavetone[W] notes: odd H"
