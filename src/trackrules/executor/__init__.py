"""Rendering of command plans for external tools."""

from trackrules.executor.ffmpeg_args import (
    FFmpegArguments,
    build_ffmpeg_args,
    render_instruction,
)

__all__ = ["FFmpegArguments", "build_ffmpeg_args", "render_instruction"]
