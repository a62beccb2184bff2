"""Disposition flag encoding.

ffmpeg's ``-disposition`` value is order-sensitive: the first enabled flag
is written bare and replaces the stream's dispositions, later flags are
added (``+flag``) or removed (``-flag``).
"""

from collections.abc import Mapping


def encode_dispositions(flags: Mapping[str, bool]) -> str:
    """Encode named boolean flags as a disposition string.

    Flags are emitted in the mapping's insertion order. Only a true flag
    in first position is written bare.

    Args:
        flags: Ordered mapping of flag name to desired state.

    Returns:
        Encoded flags, e.g. ``{"default": True, "comment": False}`` gives
        ``"default-comment"``.
    """
    parts: list[str] = []
    for position, (flag, enabled) in enumerate(flags.items()):
        if not enabled:
            parts.append(f"-{flag}")
        elif position == 0:
            parts.append(flag)
        else:
            parts.append(f"+{flag}")
    return "".join(parts)
