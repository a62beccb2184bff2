"""Probe data parsing for trackrules.

Probing itself (running ffprobe) is left to the caller; this package only
turns ffprobe's JSON into domain objects.
"""

from trackrules.introspector.parsers import (
    DEFAULT_MARKER_TAG,
    parse_ffprobe_output,
    parse_probe_data,
    parse_stream,
    parse_streams,
)

__all__ = [
    "DEFAULT_MARKER_TAG",
    "parse_ffprobe_output",
    "parse_probe_data",
    "parse_stream",
    "parse_streams",
]
