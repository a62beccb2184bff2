"""Configuration data models for trackrules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from trackrules.introspector.parsers import DEFAULT_MARKER_TAG


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass
class EngineConfig:
    """Configuration for the rule engine."""

    # Default rule document (used when --rules is not given)
    rules_file: Path | None = None

    # Compute and report plans without asking for them to be applied
    dry_run: bool = False

    # Container metadata tag holding the processed-file marker
    marker_tag: str = DEFAULT_MARKER_TAG

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.marker_tag or not self.marker_tag.strip():
            raise ValueError("marker_tag must be a non-empty string")


@dataclass
class TrackRulesConfig:
    """Main configuration container."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
