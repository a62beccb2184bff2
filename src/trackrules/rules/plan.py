"""Command plan types produced by the synthesizer.

A CommandPlan is an ordered list of instructions, each tagged with the
output audio track index it applies to. It is tool-neutral; the executor
renders it into concrete command arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class InstructionKind(Enum):
    """Kinds of per-output-track instruction."""

    MAP_SOURCE = "map_source"
    SET_CODEC = "set_codec"
    SET_CHANNELS = "set_channels"
    SET_BITRATE = "set_bitrate"
    SET_LANGUAGE = "set_language"
    SET_TITLE = "set_title"
    SET_DISPOSITION = "set_disposition"
    SET_FILTER = "set_filter"


@dataclass(frozen=True)
class Instruction:
    """A single emitted instruction. Immutable.

    ``input_index`` is only set for MAP_SOURCE, where it names the source
    audio track (0-based among audio tracks).
    """

    kind: InstructionKind
    output_index: int
    value: Any = None
    input_index: int | None = None

    @property
    def description(self) -> str:
        """Human-readable description of this instruction."""
        if self.kind == InstructionKind.MAP_SOURCE:
            return f"Output {self.output_index}: map input audio {self.input_index}"
        elif self.kind == InstructionKind.SET_CODEC:
            return f"Output {self.output_index}: codec {self.value}"
        elif self.kind == InstructionKind.SET_CHANNELS:
            return f"Output {self.output_index}: {self.value} channels"
        elif self.kind == InstructionKind.SET_BITRATE:
            return f"Output {self.output_index}: bitrate {self.value}"
        elif self.kind == InstructionKind.SET_TITLE:
            return f"Output {self.output_index}: title '{self.value}'"
        elif self.kind == InstructionKind.SET_LANGUAGE:
            return f"Output {self.output_index}: language '{self.value}'"
        else:
            return f"Output {self.output_index}: {self.kind.value} {self.value}"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "output_index": self.output_index,
            "value": self.value,
        }
        if self.input_index is not None:
            result["input_index"] = self.input_index
        return result


class TrackAction(Enum):
    """What happened to one input audio track."""

    UNMATCHED_COPY = "unmatched_copy"  # No rule matched, copied verbatim
    DROP = "drop"  # Matched a rule with no operations
    APPLY = "apply"  # Matched a rule, operations emitted


@dataclass(frozen=True)
class TrackDecision:
    """Outcome for one input audio track."""

    input_index: int
    stream_index: int  # Absolute stream index in the container
    action: TrackAction
    rule: str | None = None  # Label of the matched rule
    output_indices: tuple[int, ...] = ()
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_index": self.input_index,
            "stream_index": self.stream_index,
            "action": self.action.value,
            "rule": self.rule,
            "output_indices": list(self.output_indices),
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class StreamPassthrough:
    """A non-audio, non-video stream copied unchanged.

    Indices are relative to streams of the same type.
    """

    track_type: str
    input_index: int
    output_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "track_type": self.track_type,
            "input_index": self.input_index,
            "output_index": self.output_index,
        }


@dataclass(frozen=True)
class CommandPlan:
    """Immutable output of one synthesizer run."""

    instructions: tuple[Instruction, ...] = ()
    decisions: tuple[TrackDecision, ...] = ()
    changed: bool = False
    watermark: str = ""

    copy_video: bool = False
    """Pass video streams through unchanged."""

    passthrough: tuple[StreamPassthrough, ...] = ()
    """Other streams with an identifiable codec, copied unchanged."""

    suppress_other: bool = False
    """True when changed but no other stream could be kept."""

    @property
    def output_track_count(self) -> int:
        """Number of audio tracks the output will have."""
        return sum(1 for i in self.instructions if i.kind == InstructionKind.MAP_SOURCE)

    def for_output(self, output_index: int) -> tuple[Instruction, ...]:
        """Instructions that apply to one output audio track."""
        return tuple(i for i in self.instructions if i.output_index == output_index)

    @property
    def summary(self) -> str:
        """Human-readable summary of changes."""
        if not self.changed:
            return "No changes required"
        dropped = sum(1 for d in self.decisions if d.action == TrackAction.DROP)
        count = self.output_track_count
        parts = [f"{count} output audio track{'s' if count != 1 else ''}"]
        if dropped:
            parts.append(f"{dropped} dropped")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": self.changed,
            "watermark": self.watermark,
            "instructions": [i.to_dict() for i in self.instructions],
            "decisions": [d.to_dict() for d in self.decisions],
            "copy_video": self.copy_video,
            "passthrough": [p.to_dict() for p in self.passthrough],
            "suppress_other": self.suppress_other,
        }


EMPTY_PLAN = CommandPlan()
