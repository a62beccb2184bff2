"""Command synthesis: apply a rule set to a file's audio tracks.

Tracks are visited once, in original order. Two counters are threaded
through the loop:

- ``input_index`` advances once per input audio track, unconditionally.
- ``output_index`` advances once per emitted output track: zero times for
  a dropped track, once for an unmatched copy, once per operation of the
  matched rule.

Every instruction is tagged with the output index it applies to.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from trackrules.rules.codecs import resolve_bitrate, resolve_channels
from trackrules.rules.dispositions import encode_dispositions
from trackrules.rules.matchers import find_matching_rule
from trackrules.rules.plan import (
    CommandPlan,
    Instruction,
    InstructionKind,
    StreamPassthrough,
    TrackAction,
    TrackDecision,
)
from trackrules.rules.templating import expand_title
from trackrules.rules.types import KEEP_CODEC, CopyOperation, TranscodeOperation
from trackrules.rules.watermark import watermark

if TYPE_CHECKING:
    from trackrules.domain import TrackInfo
    from trackrules.rules.types import Rule, RuleSet

logger = logging.getLogger(__name__)

# Stream types that may be passed through when the file is rewritten
PASSTHROUGH_TRACK_TYPES: tuple[str, ...] = ("subtitle", "data", "attachment")


def _stream_copy(input_index: int, output_index: int) -> list[Instruction]:
    return [
        Instruction(
            InstructionKind.MAP_SOURCE, output_index, input_index=input_index
        ),
        Instruction(InstructionKind.SET_CODEC, output_index, KEEP_CODEC),
    ]


def _title_and_dispositions(
    track: TrackInfo,
    rule: Rule,
    operation: CopyOperation | TranscodeOperation,
    output_index: int,
    output_channels: int | None = None,
    output_bitrate: int | None = None,
) -> tuple[list[Instruction], list[str]]:
    instructions: list[Instruction] = []
    notes: list[str] = []

    if operation.title:
        title = expand_title(
            operation.title,
            track,
            operation,
            capture_pattern=rule.match.title,
            output_channels=output_channels,
            output_bitrate=output_bitrate,
        )
        instructions.append(
            Instruction(InstructionKind.SET_TITLE, output_index, title)
        )
        notes.append(f'renamed to "{title}"')

    if operation.dispositions:
        flags = encode_dispositions(operation.dispositions)
        instructions.append(
            Instruction(InstructionKind.SET_DISPOSITION, output_index, flags)
        )
        notes.append(f"dispositions {flags}")

    return instructions, notes


def copy_instructions(
    track: TrackInfo,
    rule: Rule,
    operation: CopyOperation,
    input_index: int,
    output_index: int,
) -> tuple[list[Instruction], str]:
    """Build instructions for a copy operation.

    Returns:
        Tuple of (instructions, log note).
    """
    instructions = _stream_copy(input_index, output_index)
    extra, notes = _title_and_dispositions(
        track, rule, operation, output_index, output_bitrate=track.bit_rate
    )
    instructions.extend(extra)
    return instructions, ", ".join(["copying track", *notes])


def transcode_instructions(
    track: TrackInfo,
    rule: Rule,
    operation: TranscodeOperation,
    input_index: int,
    output_index: int,
) -> tuple[list[Instruction], str]:
    """Build instructions for a transcode operation.

    The target codec "copy" keeps the source codec. Channel count and
    bitrate are resolved against the codec ceiling table; explicit
    settings are only emitted when needed.

    Returns:
        Tuple of (instructions, log note).
    """
    target_codec = (
        (track.codec or "") if operation.keeps_codec else operation.codec
    )
    notes = [f"transcoding to {target_codec.upper()}"]
    instructions = [
        Instruction(
            InstructionKind.MAP_SOURCE, output_index, input_index=input_index
        ),
        Instruction(InstructionKind.SET_CODEC, output_index, target_codec),
    ]

    channels = resolve_channels(target_codec, track.channels, operation.channels)
    if channels.emit:
        instructions.append(
            Instruction(InstructionKind.SET_CHANNELS, output_index, channels.value)
        )
        notes.append(f"{channels.value}ch")
    if channels.note:
        notes.append(channels.note)

    bitrate = resolve_bitrate(target_codec, track.bit_rate, operation.bitrate)
    if bitrate.emit:
        instructions.append(
            Instruction(InstructionKind.SET_BITRATE, output_index, bitrate.value)
        )
        notes.append(f"{bitrate.value}bps")
    if bitrate.note:
        notes.append(bitrate.note)

    instructions.append(
        Instruction(
            InstructionKind.SET_LANGUAGE, output_index, track.language or "und"
        )
    )

    extra, extra_notes = _title_and_dispositions(
        track,
        rule,
        operation,
        output_index,
        output_channels=channels.value,
        output_bitrate=bitrate.value,
    )
    instructions.extend(extra)
    notes.extend(extra_notes)

    if operation.filters:
        instructions.append(
            Instruction(InstructionKind.SET_FILTER, output_index, operation.filters)
        )
        notes.append(f'filters "{operation.filters}"')

    return instructions, ", ".join(notes)


def plan_passthrough(other_tracks: Sequence[TrackInfo]) -> tuple[StreamPassthrough, ...]:
    """Select non-audio, non-video streams that can be copied unchanged.

    Streams without an identifiable codec are left out; copying them
    makes the rewrite fail. Input indices count every stream of a type,
    output indices only the kept ones.
    """
    input_counts: dict[str, int] = {}
    output_counts: dict[str, int] = {}
    kept: list[StreamPassthrough] = []

    for track in other_tracks:
        if track.track_type not in PASSTHROUGH_TRACK_TYPES:
            continue
        input_index = input_counts.get(track.track_type, 0)
        input_counts[track.track_type] = input_index + 1

        if not track.has_codec:
            logger.info(
                "Excluding %s stream %d: codec not identified",
                track.track_type,
                track.index,
            )
            continue

        output_index = output_counts.get(track.track_type, 0)
        output_counts[track.track_type] = output_index + 1
        kept.append(StreamPassthrough(track.track_type, input_index, output_index))

    return tuple(kept)


def synthesize(
    tracks: Sequence[TrackInfo],
    rule_set: RuleSet,
    *,
    other_tracks: Sequence[TrackInfo] = (),
) -> CommandPlan:
    """Apply a rule set to audio tracks and build the command plan.

    Args:
        tracks: Audio tracks in original order.
        rule_set: Validated rule set; the first matching rule applies.
        other_tracks: Non-audio, non-video streams of the same file,
            considered for passthrough when the plan changes anything.

    Returns:
        CommandPlan. When no rule matched any track the plan is unchanged
        and carries no instructions.
    """
    instructions: list[Instruction] = []
    decisions: list[TrackDecision] = []
    changed = False
    input_index = 0
    output_index = 0

    for track in tracks:
        rule = find_matching_rule(track, rule_set)

        if rule is None:
            logger.info(
                'Track %d (title: "%s") matched no rule, copying track',
                track.index,
                track.title,
            )
            instructions.extend(_stream_copy(input_index, output_index))
            decisions.append(
                TrackDecision(
                    input_index,
                    track.index,
                    TrackAction.UNMATCHED_COPY,
                    output_indices=(output_index,),
                )
            )
            output_index += 1
            input_index += 1
            continue

        changed = True
        logger.info(
            'Track %d (title: "%s") matches rule "%s"',
            track.index,
            track.title,
            rule.label,
        )

        if rule.drops_track:
            logger.info(" -> removing track")
            decisions.append(
                TrackDecision(input_index, track.index, TrackAction.DROP, rule.label)
            )
            input_index += 1
            continue

        outputs: list[int] = []
        notes: list[str] = []
        for operation in rule.operations:
            if isinstance(operation, CopyOperation):
                emitted, note = copy_instructions(
                    track, rule, operation, input_index, output_index
                )
            else:
                emitted, note = transcode_instructions(
                    track, rule, operation, input_index, output_index
                )
            logger.info(" -> output %d: %s", output_index, note)
            instructions.extend(emitted)
            outputs.append(output_index)
            notes.append(note)
            output_index += 1

        decisions.append(
            TrackDecision(
                input_index,
                track.index,
                TrackAction.APPLY,
                rule.label,
                output_indices=tuple(outputs),
                notes=tuple(notes),
            )
        )
        input_index += 1

    if not changed:
        logger.info("No rule matched any audio track, nothing to do")
        return CommandPlan(decisions=tuple(decisions))

    passthrough = plan_passthrough(other_tracks)
    return CommandPlan(
        instructions=tuple(instructions),
        decisions=tuple(decisions),
        changed=True,
        watermark=watermark(rule_set),
        copy_video=True,
        passthrough=passthrough,
        suppress_other=not passthrough,
    )
