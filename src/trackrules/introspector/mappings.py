"""Pure mapping functions for ffprobe to trackrules type conversions.

These functions have no side effects and no external dependencies.
"""

from collections.abc import Mapping
from typing import Any

# Track type mapping from ffprobe codec_type to trackrules track type
FFPROBE_TO_TRACK_TYPE: dict[str, str] = {
    "video": "video",
    "audio": "audio",
    "subtitle": "subtitle",
    "data": "data",
    "attachment": "attachment",
}


def map_track_type(codec_type: str | None) -> str:
    """Map ffprobe codec_type to a track type.

    Args:
        codec_type: The codec_type from ffprobe.

    Returns:
        Track type string ("video", "audio", "subtitle", "data",
        "attachment", "other").
    """
    if not codec_type:
        return "other"
    return FFPROBE_TO_TRACK_TYPE.get(codec_type, "other")


def get_tag(tags: Mapping[str, Any] | None, name: str) -> Any:
    """Look up a tag value case-insensitively.

    Matroska files report upper-case tag keys (``COPYRIGHT``) while MP4
    files report lower-case ones (``copyright``).

    Args:
        tags: Tag mapping from ffprobe, may be None.
        name: Tag name to look up.

    Returns:
        The tag value, or None if not present.
    """
    if not tags:
        return None
    if name in tags:
        return tags[name]
    wanted = name.casefold()
    for key, value in tags.items():
        if key.casefold() == wanted:
            return value
    return None
