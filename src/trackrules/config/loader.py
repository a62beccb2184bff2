"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (TRACKRULES_*)
3. Config file (~/.trackrules/config.toml)
4. Default values

Environment variables:
- TRACKRULES_CONFIG_PATH: Path to config file (overrides default location)
- TRACKRULES_LOG_LEVEL: Log level (debug, info, warning, error)
- TRACKRULES_LOG_FILE: Log file path
- TRACKRULES_LOG_FORMAT: Log format (text, json)
- TRACKRULES_RULES_FILE: Default rule document
- TRACKRULES_DRY_RUN: Report plans without applying them
- TRACKRULES_MARKER_TAG: Metadata tag holding the processed-file marker
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from trackrules.config.env import EnvReader
from trackrules.config.models import EngineConfig, LoggingConfig, TrackRulesConfig
from trackrules.introspector.parsers import DEFAULT_MARKER_TAG

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".trackrules"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigError(Exception):
    """The configuration file or a configuration value is invalid."""


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path.

    Can be overridden by the TRACKRULES_CONFIG_PATH environment variable.
    """
    reader = env_reader or EnvReader()
    return reader.get_path("TRACKRULES_CONFIG_PATH", DEFAULT_CONFIG_FILE)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigError: If the file cannot be read or is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("Config file %s not found, using defaults", path)
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    logger.debug("Loaded config file %s", path)
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def _typed(
    section: dict[str, Any], section_name: str, key: str, expected: type
) -> Any:
    """Return a config file value, or None if absent.

    Raises:
        ConfigError: If the value is present with the wrong TOML type.
    """
    value = section.get(key)
    if value is None:
        return None
    # bool is a subclass of int
    wrong_bool = isinstance(value, bool) and expected is not bool
    if wrong_bool or not isinstance(value, expected):
        raise ConfigError(
            f"[{section_name}] {key} must be of type {expected.__name__}, "
            f"got {type(value).__name__} {value!r}"
        )
    return value


def _optional_path(value: Any) -> Path | None:
    if value is None:
        return None
    return Path(str(value)).expanduser()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    log_level: str | None = None,
    log_file: Path | None = None,
    log_format: str | None = None,
    rules_file: Path | None = None,
    dry_run: bool | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
) -> TrackRulesConfig:
    """Get trackrules configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides TRACKRULES_CONFIG_PATH).
        log_level: CLI override for the log level.
        log_file: CLI override for the log file.
        log_format: CLI override for the log format.
        rules_file: CLI override for the default rule document.
        dry_run: CLI override for dry-run mode.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        TrackRulesConfig with merged configuration.

    Raises:
        ConfigError: If the config file or a merged value is invalid.
    """
    reader = env_reader or EnvReader()
    path = config_path or get_default_config_path(reader)
    data = load_config_file(path)

    logging_file = _section(data, "logging")
    engine_file = _section(data, "engine")

    def from_logging(key: str, expected: type) -> Any:
        return _typed(logging_file, "logging", key, expected)

    def from_engine(key: str, expected: type) -> Any:
        return _typed(engine_file, "engine", key, expected)

    def pick(cli: Any, env: Any, file_value: Any, default: Any) -> Any:
        for value in (cli, env, file_value):
            if value is not None:
                return value
        return default

    try:
        logging_config = LoggingConfig(
            level=pick(
                log_level,
                reader.get_str("TRACKRULES_LOG_LEVEL"),
                from_logging("level", str),
                "info",
            ),
            file=pick(
                log_file,
                reader.get_path("TRACKRULES_LOG_FILE"),
                _optional_path(from_logging("file", str)),
                None,
            ),
            format=pick(
                log_format,
                reader.get_str("TRACKRULES_LOG_FORMAT"),
                from_logging("format", str),
                "text",
            ),
            include_stderr=pick(
                None, None, from_logging("include_stderr", bool), False
            ),
            max_bytes=pick(None, None, from_logging("max_bytes", int), 10_485_760),
            backup_count=pick(None, None, from_logging("backup_count", int), 5),
        )
        engine_config = EngineConfig(
            rules_file=pick(
                rules_file,
                reader.get_path("TRACKRULES_RULES_FILE"),
                _optional_path(from_engine("rules_file", str)),
                None,
            ),
            dry_run=pick(
                dry_run,
                reader.get_bool("TRACKRULES_DRY_RUN"),
                from_engine("dry_run", bool),
                False,
            ),
            marker_tag=pick(
                None,
                reader.get_str("TRACKRULES_MARKER_TAG"),
                from_engine("marker_tag", str),
                DEFAULT_MARKER_TAG,
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return TrackRulesConfig(logging=logging_config, engine=engine_config)

