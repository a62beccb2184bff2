"""Domain models for trackrules.

These models describe a probed media file independent of the tool that
produced the probe data. They are read-only inputs to the rule engine.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TrackInfo:
    """Represents a stream within a media file (domain model)."""

    index: int
    track_type: str  # "video", "audio", "subtitle", "data", "attachment", "other"
    codec: str | None = None
    # Audio-specific fields
    channels: int = 0  # 0 means unknown
    bit_rate: int | None = None  # bits/sec, None for lossless or unknown
    language: str = "und"
    title: str = ""
    channel_layout: str = ""
    disposition: dict[str, int] = field(default_factory=dict)

    @property
    def has_codec(self) -> bool:
        """Return True if the stream's encoding was identified."""
        return bool(self.codec) and self.codec != "none"


@dataclass(frozen=True)
class IntrospectionResult:
    """Result of parsing probe data for a single file."""

    tracks: tuple[TrackInfo, ...]
    marker_text: str = ""
    container_format: str | None = None
    file_path: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def audio_tracks(self) -> tuple[TrackInfo, ...]:
        """Return audio tracks in original stream order."""
        return tuple(t for t in self.tracks if t.track_type == "audio")

    @property
    def other_tracks(self) -> tuple[TrackInfo, ...]:
        """Return tracks that are neither audio nor video."""
        return tuple(
            t for t in self.tracks if t.track_type not in ("audio", "video")
        )
