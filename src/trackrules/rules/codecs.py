"""Codec limits and output parameter resolution for transcodes.

Some encoders cannot produce more than a fixed number of channels or a
fixed bitrate. Resolution functions clamp requested or inherited values to
those ceilings and report whether an explicit encoder setting is needed.
"""

from __future__ import annotations

from dataclasses import dataclass

# Maximum channel count per target codec
CODEC_CHANNEL_LIMITS: dict[str, int] = {
    "ac3": 6,
    "mp3": 2,
    "libmp3lame": 2,
}

# Maximum bitrate (bits/sec) per target codec
CODEC_BITRATE_LIMITS: dict[str, int] = {
    "ac3": 640_000,
    "mp3": 320_000,
    "libmp3lame": 320_000,
}

# The native AAC encoder fails on unusual >6ch layouts (e.g. Atmos
# TFL/TFR); forcing a plain 7.1 channel count avoids it.
AAC_CODEC = "aac"
AAC_SAFE_CHANNELS = 8
AAC_SAFE_THRESHOLD = 6


@dataclass(frozen=True)
class ResolvedValue:
    """Outcome of resolving one output parameter.

    Attributes:
        value: Value the output track will have (None if unknown).
        emit: True if an explicit encoder setting must be written.
        note: Short explanation for logs when a limit or override applied.
    """

    value: int | None
    emit: bool
    note: str | None = None


def channel_limit(codec: str) -> int | None:
    """Return the channel ceiling for a codec, if any."""
    return CODEC_CHANNEL_LIMITS.get(codec.lower())


def bitrate_limit(codec: str) -> int | None:
    """Return the bitrate ceiling for a codec, if any."""
    return CODEC_BITRATE_LIMITS.get(codec.lower())


def resolve_channels(
    target_codec: str, source_channels: int, requested: int | None
) -> ResolvedValue:
    """Resolve the output channel count of a transcode.

    Args:
        target_codec: Resolved target codec name.
        source_channels: Channel count of the source track (0 = unknown).
        requested: Channel count given by the operation, if any.

    Returns:
        ResolvedValue; ``emit`` is set when the value differs from the
        source, was explicitly requested, or was clamped.
    """
    channels = requested if requested is not None else source_channels
    note = None
    forced = False

    if (
        target_codec.lower() == AAC_CODEC
        and source_channels > AAC_SAFE_THRESHOLD
        and requested is None
    ):
        channels = AAC_SAFE_CHANNELS
        forced = True
        note = (
            f"forcing {AAC_SAFE_CHANNELS} channels for AAC to avoid "
            "exotic layout issues"
        )

    limit = channel_limit(target_codec)
    clamped = limit is not None and channels > limit
    if clamped:
        note = f"{target_codec} limited to {limit} channels (was {channels})"
        channels = limit

    emit = requested is not None or channels != source_channels or clamped or forced
    if not emit:
        return ResolvedValue(value=channels or None, emit=False)
    return ResolvedValue(value=channels, emit=True, note=note)


def resolve_bitrate(
    target_codec: str, source_bitrate: int | None, requested: int | None
) -> ResolvedValue:
    """Resolve the output bitrate of a transcode.

    An explicit bitrate is always written (clamped to the codec ceiling).
    An inherited bitrate is only written when it exceeds the ceiling;
    otherwise the encoder default applies.

    Args:
        target_codec: Resolved target codec name.
        source_bitrate: Bitrate of the source track, None if unknown.
        requested: Bitrate given by the operation, if any.

    Returns:
        ResolvedValue with the bitrate the output is expected to have.
    """
    limit = bitrate_limit(target_codec)

    if requested is not None:
        if limit is not None and requested > limit:
            return ResolvedValue(
                value=limit,
                emit=True,
                note=f"{target_codec} limited to {limit}bps (was {requested})",
            )
        return ResolvedValue(value=requested, emit=True)

    if source_bitrate is not None and limit is not None and source_bitrate > limit:
        return ResolvedValue(
            value=limit,
            emit=True,
            note=f"{target_codec} limited to {limit}bps (was {source_bitrate})",
        )
    return ResolvedValue(value=source_bitrate, emit=False)
