"""Structured logging for trackrules.

Provides configurable logging with JSON format support and file rotation,
plus a per-file context for tagging records.
"""

from trackrules.logging.config import configure_logging
from trackrules.logging.context import (
    FileContextFilter,
    file_context,
    get_file_context,
)
from trackrules.logging.handlers import JSONFormatter

__all__ = [
    "FileContextFilter",
    "JSONFormatter",
    "configure_logging",
    "file_context",
    "get_file_context",
]
