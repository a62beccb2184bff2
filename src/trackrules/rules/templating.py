"""Track title templating.

Titles are rendered from a template by a fixed sequence of substitution
steps. Each step takes the current text and returns new text; nothing is
mutated in place. Tags without data are left verbatim.

Available tags:
    {1}, {2}, ...                     capture groups of the rule's title pattern
    {title}                           original track title
    {lang}, {LANG}                    track language, lower/upper case
    {i_codec}, {i_CODEC}              input codec, lower/upper case
    {o_codec}, {o_CODEC}              output codec, lower/upper case
    {i_channels}, {o_channels}        input/output channel count
    {i_channels_fancy}, {o_channels_fancy}
                                      "Mono", "Stereo" or "N.1"
    {i_channel_layout}                input channel layout (e.g. "5.1(side)")
    {i_bitrate}, {i_bitrate_kbps}     input bitrate in bps / kbps
    {o_bitrate}, {o_bitrate_kbps}     output bitrate in bps / kbps
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from trackrules.rules.matchers import compile_title_pattern
from trackrules.rules.types import TranscodeOperation

if TYPE_CHECKING:
    from trackrules.domain import TrackInfo
    from trackrules.rules.types import Operation, TitlePattern

# Characters that break command arguments, and their look-alike replacements
SINGLE_LOW_9_QUOTATION_MARK = "‚"
DOUBLE_PRIME = "″"
_UNSAFE_CHARACTERS: tuple[tuple[str, str], ...] = (
    (",", SINGLE_LOW_9_QUOTATION_MARK),
    ('"', DOUBLE_PRIME),
)

Replacement = tuple[str, str | None]


def fancy_channels(channels: int) -> str:
    """Render a channel count as "Mono", "Stereo" or "N.1"."""
    if channels == 1:
        return "Mono"
    if channels == 2:
        return "Stereo"
    return f"{channels - 1}.1"


def format_kbps(bits_per_second: int) -> str:
    """Render bits/sec as kbps without a trailing ``.0``."""
    kbps = bits_per_second / 1000
    if kbps.is_integer():
        return str(int(kbps))
    return str(kbps)


def substitute(text: str, replacements: Iterable[Replacement]) -> str:
    """Apply tag replacements in order, skipping tags without a value."""
    for tag, value in replacements:
        if value is not None:
            text = text.replace(tag, value)
    return text


def sanitize_title(text: str) -> str:
    """Replace characters that are unsafe inside a command argument."""
    return substitute(text, _UNSAFE_CHARACTERS)


def capture_group_replacements(
    title: str, pattern: TitlePattern | None
) -> list[Replacement]:
    """Collect ``{n}`` replacements from every match of the title pattern.

    When several matches fill the same group number, the last one wins.
    Groups that did not participate in a match render as empty text.
    """
    if pattern is None:
        return []
    groups: dict[str, str] = {}
    for match in compile_title_pattern(pattern).finditer(title):
        for number, group in enumerate(match.groups(), start=1):
            groups["{" + str(number) + "}"] = group or ""
    return list(groups.items())


def _output_codec(track: TrackInfo, operation: Operation | None) -> str | None:
    if isinstance(operation, TranscodeOperation) and not operation.keeps_codec:
        return operation.codec
    return track.codec


def tag_replacements(
    track: TrackInfo,
    operation: Operation | None = None,
    output_channels: int | None = None,
    output_bitrate: int | None = None,
) -> list[Replacement]:
    """Build the derived-tag replacements for a track and operation.

    Args:
        track: Source track.
        operation: Operation producing the output track, if any.
        output_channels: Resolved output channels; falls back to the
            operation's explicit value, then the source track.
        output_bitrate: Resolved output bitrate, if known.

    Returns:
        Ordered (tag, value) pairs; value None means "leave the tag".
    """
    codec_in = track.codec or ""
    codec_out = _output_codec(track, operation) or ""

    if output_channels is None and isinstance(operation, TranscodeOperation):
        output_channels = operation.channels
    if output_channels is None:
        output_channels = track.channels
    in_channels = track.channels or None
    out_channels = output_channels or None

    return [
        ("{title}", track.title or ""),
        ("{lang}", (track.language or "und").lower()),
        ("{LANG}", (track.language or "und").upper()),
        ("{i_codec}", codec_in.lower()),
        ("{i_CODEC}", codec_in.upper()),
        ("{o_codec}", codec_out.lower()),
        ("{o_CODEC}", codec_out.upper()),
        ("{i_channels}", str(in_channels) if in_channels else None),
        ("{i_channels_fancy}", fancy_channels(in_channels) if in_channels else None),
        ("{i_channel_layout}", track.channel_layout or None),
        ("{o_channels}", str(out_channels) if out_channels else None),
        (
            "{o_channels_fancy}",
            fancy_channels(out_channels) if out_channels else None,
        ),
        ("{i_bitrate}", str(track.bit_rate) if track.bit_rate else None),
        ("{i_bitrate_kbps}", format_kbps(track.bit_rate) if track.bit_rate else None),
        ("{o_bitrate}", str(output_bitrate) if output_bitrate else None),
        ("{o_bitrate_kbps}", format_kbps(output_bitrate) if output_bitrate else None),
    ]


def expand_title(
    template: str,
    track: TrackInfo,
    operation: Operation | None = None,
    capture_pattern: TitlePattern | None = None,
    output_channels: int | None = None,
    output_bitrate: int | None = None,
) -> str:
    """Render a track title from a template.

    Capture groups are substituted first, then derived tags, then unsafe
    characters are replaced. Unknown or unfilled tags stay as written.

    Args:
        template: Title template.
        track: Source track.
        operation: Operation producing the output track.
        capture_pattern: The rule's title pattern, re-run against the
            original title to fill ``{1}``, ``{2}``, ...
        output_channels: Resolved output channel count.
        output_bitrate: Resolved output bitrate.

    Returns:
        Rendered, command-safe title.
    """
    text = template
    text = substitute(text, capture_group_replacements(track.title or "", capture_pattern))
    text = substitute(
        text, tag_replacements(track, operation, output_channels, output_bitrate)
    )
    return sanitize_title(text)
