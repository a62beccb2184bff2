"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into trackrules domain objects.
All functions are pure (no I/O, no side effects) for easy testing.
"""

from __future__ import annotations

import logging
from typing import Any

from trackrules.domain import IntrospectionResult, TrackInfo
from trackrules.introspector.mappings import get_tag, map_track_type

logger = logging.getLogger(__name__)

DEFAULT_MARKER_TAG = "COPYRIGHT"


def sanitize_string(value: str | None) -> str | None:
    """Sanitize a string by replacing invalid UTF-8 characters.

    Args:
        value: String value to sanitize.

    Returns:
        Sanitized string or None if input was None.
    """
    if value is None:
        return None
    return str(value).encode("utf-8", errors="replace").decode("utf-8")


def parse_int(value: Any) -> int | None:
    """Parse an integer that ffprobe may report as a string.

    Args:
        value: Raw value (e.g. "640000", 640000, "N/A", None).

    Returns:
        Parsed integer, or None if the value is absent or not numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_disposition(raw: Any) -> dict[str, int]:
    """Parse a disposition mapping, keeping ffprobe's key order.

    Args:
        raw: Disposition dict from ffprobe (flag -> 0/1).

    Returns:
        Dict of flag name to 0/1. Non-numeric values are dropped.
    """
    if not isinstance(raw, dict):
        return {}
    flags: dict[str, int] = {}
    for flag, value in raw.items():
        parsed = parse_int(value)
        if parsed is not None:
            flags[str(flag)] = 1 if parsed else 0
    return flags


def parse_stream(stream: dict) -> TrackInfo:
    """Parse a single ffprobe stream dict into a TrackInfo.

    Args:
        stream: Stream dictionary from ffprobe JSON.

    Returns:
        TrackInfo domain object.
    """
    index = parse_int(stream.get("index")) or 0
    track_type = map_track_type(stream.get("codec_type"))
    codec = stream.get("codec_name") or None
    if codec == "none":
        codec = None

    if track_type != "audio":
        return TrackInfo(index=index, track_type=track_type, codec=codec)

    tags = stream.get("tags") or {}
    language = get_tag(tags, "language") or "und"
    title = sanitize_string(get_tag(tags, "title")) or ""

    return TrackInfo(
        index=index,
        track_type=track_type,
        codec=codec,
        channels=parse_int(stream.get("channels")) or 0,
        bit_rate=parse_int(stream.get("bit_rate")),
        language=str(language),
        title=title,
        channel_layout=stream.get("channel_layout") or "",
        disposition=parse_disposition(stream.get("disposition")),
    )


def parse_streams(streams: list[dict]) -> tuple[list[TrackInfo], list[str]]:
    """Parse stream data into TrackInfo objects.

    Args:
        streams: List of stream dictionaries from ffprobe.

    Returns:
        Tuple of (tracks list, warnings list).
    """
    tracks: list[TrackInfo] = []
    warnings: list[str] = []
    seen_indices: set[int] = set()

    for stream in streams:
        if not isinstance(stream, dict):
            warnings.append(f"Ignoring malformed stream entry: {stream!r}")
            continue
        track = parse_stream(stream)

        if track.index in seen_indices:
            warnings.append(f"Duplicate stream index {track.index}, skipping")
            continue
        seen_indices.add(track.index)
        tracks.append(track)

    return tracks, warnings


def parse_ffprobe_output(
    data: dict,
    file_path: str | None = None,
    marker_tag: str = DEFAULT_MARKER_TAG,
) -> IntrospectionResult:
    """Parse ffprobe JSON output into IntrospectionResult.

    Args:
        data: Parsed ffprobe JSON output.
        file_path: Path of the probed file, for context only.
        marker_tag: Format-level tag holding processing markers.

    Returns:
        IntrospectionResult with tracks and warnings.
    """
    format_info = data.get("format") or {}
    container_format = format_info.get("format_name")
    if file_path is None:
        file_path = format_info.get("filename")
    marker_text = get_tag(format_info.get("tags"), marker_tag) or ""

    tracks, warnings = parse_streams(data.get("streams") or [])
    if not tracks:
        warnings.append("No streams found in file")
    for warning in warnings:
        logger.warning("%s", warning)

    return IntrospectionResult(
        tracks=tuple(tracks),
        marker_text=str(marker_text),
        container_format=container_format,
        file_path=file_path,
        warnings=tuple(warnings),
    )


def parse_probe_data(
    data: Any,
    file_path: str | None = None,
    marker_tag: str = DEFAULT_MARKER_TAG,
) -> IntrospectionResult | None:
    """Parse probe data, treating missing data as "nothing to process".

    Args:
        data: Decoded ffprobe JSON, or None when probing produced nothing.
        file_path: Path of the probed file, for context only.
        marker_tag: Format-level tag holding processing markers.

    Returns:
        IntrospectionResult, or None if there is no stream data at all.
    """
    if not isinstance(data, dict) or not isinstance(data.get("streams"), list):
        logger.info("Probe data missing or has no stream list")
        return None
    return parse_ffprobe_output(data, file_path=file_path, marker_tag=marker_tag)
