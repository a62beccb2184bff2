"""Render a CommandPlan into ffmpeg command-line arguments.

Arguments are argv-style token lists, ready for ``subprocess`` without a
shell; nothing is quoted. Input and output files are left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from trackrules.rules.plan import CommandPlan, Instruction, InstructionKind

# ffmpeg stream specifiers for passthrough stream types
STREAM_SPECIFIERS: dict[str, str] = {
    "subtitle": "s",
    "data": "d",
    "attachment": "t",
}


@dataclass(frozen=True)
class FFmpegArguments:
    """Rendered arguments, partitioned by stream kind."""

    video: list[str] = field(default_factory=list)
    audio: list[str] = field(default_factory=list)
    other: list[str] = field(default_factory=list)
    metadata: list[str] = field(default_factory=list)

    @property
    def tokens(self) -> list[str]:
        """All tokens in command order: video, audio, other, metadata."""
        return [*self.video, *self.audio, *self.other, *self.metadata]

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "video": list(self.video),
            "audio": list(self.audio),
            "other": list(self.other),
            "metadata": list(self.metadata),
        }


def render_instruction(instruction: Instruction) -> list[str]:
    """Render one audio instruction as ffmpeg tokens."""
    out = instruction.output_index
    kind = instruction.kind

    if kind == InstructionKind.MAP_SOURCE:
        return ["-map", f"0:a:{instruction.input_index}"]
    elif kind == InstructionKind.SET_CODEC:
        return [f"-c:a:{out}", str(instruction.value)]
    elif kind == InstructionKind.SET_CHANNELS:
        return [f"-ac:a:{out}", str(instruction.value)]
    elif kind == InstructionKind.SET_BITRATE:
        return [f"-b:a:{out}", str(instruction.value)]
    elif kind == InstructionKind.SET_LANGUAGE:
        return [f"-metadata:s:a:{out}", f"language={instruction.value}"]
    elif kind == InstructionKind.SET_TITLE:
        return [f"-metadata:s:a:{out}", f"title={instruction.value}"]
    elif kind == InstructionKind.SET_DISPOSITION:
        return [f"-disposition:a:{out}", str(instruction.value)]
    elif kind == InstructionKind.SET_FILTER:
        return [f"-filter:a:{out}", str(instruction.value)]

    raise ValueError(f"Unsupported instruction kind: {kind}")


def build_ffmpeg_args(
    plan: CommandPlan, marker: str | None = None
) -> FFmpegArguments:
    """Render a plan into ffmpeg arguments.

    Args:
        plan: Plan from the synthesizer.
        marker: Marker text to store as the container copyright tag.
            Defaults to the plan's own watermark.

    Returns:
        FFmpegArguments; empty when the plan changes nothing.
    """
    if not plan.changed:
        return FFmpegArguments()

    video: list[str] = []
    if plan.copy_video:
        video = ["-map", "0:v", "-c:v", "copy"]

    audio: list[str] = []
    for instruction in plan.instructions:
        audio.extend(render_instruction(instruction))

    other: list[str] = []
    for stream in plan.passthrough:
        spec = STREAM_SPECIFIERS[stream.track_type]
        other.extend(
            [
                "-map",
                f"0:{spec}:{stream.input_index}",
                f"-c:{spec}:{stream.output_index}",
                "copy",
            ]
        )
    if plan.suppress_other:
        other.append("-sn")

    metadata: list[str] = []
    marker_text = marker if marker is not None else plan.watermark
    if marker_text:
        metadata = ["-metadata", f"copyright={marker_text}"]

    return FFmpegArguments(video=video, audio=audio, other=other, metadata=metadata)
