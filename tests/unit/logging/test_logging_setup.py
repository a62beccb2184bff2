"""Tests for logging configuration, file context and JSON output."""

import json
import logging
import sys
from pathlib import Path

import pytest

from trackrules.config.models import LoggingConfig
from trackrules.logging import (
    FileContextFilter,
    JSONFormatter,
    configure_logging,
    file_context,
    get_file_context,
)
from trackrules.logging.config import TEXT_FORMAT, build_formatter


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="trackrules.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Restore root handlers and level after configure_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestFileContext:
    """Tests for file_context and get_file_context."""

    def test_default_is_none(self) -> None:
        assert get_file_context() is None

    def test_set_and_restored(self) -> None:
        """The context is set inside the block and restored after."""
        with file_context(Path("/media/a.mkv")):
            assert get_file_context() == "/media/a.mkv"
            with file_context("/media/b.mkv"):
                assert get_file_context() == "/media/b.mkv"
            assert get_file_context() == "/media/a.mkv"
        assert get_file_context() is None

    def test_restored_on_error(self) -> None:
        with pytest.raises(RuntimeError):
            with file_context("/media/a.mkv"):
                raise RuntimeError("boom")
        assert get_file_context() is None


class TestFileContextFilter:
    """Tests for FileContextFilter."""

    def test_adds_file_tag(self) -> None:
        """Records get the path and a short tag with the file name."""
        record = _record()
        with file_context("/media/movies/movie.mkv"):
            assert FileContextFilter().filter(record) is True

        assert record.file_path == "/media/movies/movie.mkv"
        assert record.file_tag == "[movie.mkv] "

    def test_no_context(self) -> None:
        record = _record()
        FileContextFilter().filter(record)
        assert record.file_path is None
        assert record.file_tag == ""


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record("Loaded %d rules")))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Loaded %d rules"
        assert entry["logger"] == "trackrules.test"
        assert "timestamp" in entry
        assert "file" not in entry
        assert "extra" not in entry

    def test_file_path(self) -> None:
        """The processed file is reported, its text tag is not."""
        record = _record(file_path="/media/movie.mkv", file_tag="[movie.mkv] ")
        entry = json.loads(JSONFormatter().format(record))
        assert entry["file"] == "/media/movie.mkv"
        assert "extra" not in entry

    def test_extra_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record(rule="drop commentary")))
        assert entry["extra"] == {"rule": "drop commentary"}

    def test_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]


class TestBuildFormatter:
    """Tests for build_formatter."""

    def test_json(self) -> None:
        assert isinstance(build_formatter("JSON"), JSONFormatter)

    def test_text(self) -> None:
        formatter = build_formatter("text")
        assert not isinstance(formatter, JSONFormatter)
        assert formatter._fmt == TEXT_FORMAT


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_stderr_only(self, restore_root_logger) -> None:
        """Without a file, a single stderr handler is installed."""
        configure_logging(LoggingConfig(level="debug"))

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert any(isinstance(f, FileContextFilter) for f in root.handlers[0].filters)

    def test_file_handler(self, restore_root_logger, tmp_path: Path) -> None:
        """A log file gets a rotating handler writing JSON lines."""
        log_file = tmp_path / "logs" / "trackrules.log"
        configure_logging(LoggingConfig(file=log_file, format="json"))

        with file_context("/media/movie.mkv"):
            logging.getLogger("trackrules.test").info("processing")
        for handler in restore_root_logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "processing"
        assert entry["file"] == "/media/movie.mkv"
        assert len(restore_root_logger.handlers) == 1

    def test_file_and_stderr(self, restore_root_logger, tmp_path: Path) -> None:
        config = LoggingConfig(file=tmp_path / "t.log", include_stderr=True)
        configure_logging(config)
        assert len(restore_root_logger.handlers) == 2

    def test_unwritable_file_falls_back(self, restore_root_logger, tmp_path: Path) -> None:
        """An unusable log path falls back to stderr."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        configure_logging(LoggingConfig(file=blocker / "t.log"))

        handlers = restore_root_logger.handlers
        assert len(handlers) == 1
        assert type(handlers[0]) is logging.StreamHandler
