"""Per-file context for structured logging.

Every record emitted while a file is being processed is tagged with that
file's path, so output from parallel invocations can be told apart.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def get_file_context() -> str | None:
    """Return the path of the file currently being processed, if any."""
    return _file_path.get()


@contextmanager
def file_context(file_path: Path | str | None) -> Generator[None, None, None]:
    """Context manager tagging log records with the file being processed.

    Restores the previous context on exit. Safe across threads and tasks
    via contextvars.

    Args:
        file_path: Path of the file being processed, or None.

    Example:
        with file_context("/media/movie.mkv"):
            logger.info("Processing file")  # text: "[movie.mkv] Processing file"
    """
    token = _file_path.set(str(file_path) if file_path is not None else None)
    try:
        yield
    finally:
        _file_path.reset(token)


class FileContextFilter(logging.Filter):
    """Logging filter that injects the current file into log records.

    Adds ``file_path`` for JSON output and a compact ``file_tag`` such as
    ``[movie.mkv] `` for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        file_path = get_file_context()
        record.file_path = file_path
        record.file_tag = f"[{Path(file_path).name}] " if file_path else ""
        return True  # Never filter out records
