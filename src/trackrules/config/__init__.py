"""Configuration management for trackrules.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (TRACKRULES_*)
3. Config file (~/.trackrules/config.toml)
4. Default values (lowest priority)
"""

from trackrules.config.env import EnvReader
from trackrules.config.loader import (
    ConfigError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from trackrules.config.models import EngineConfig, LoggingConfig, TrackRulesConfig

__all__ = [
    "ConfigError",
    "EngineConfig",
    "EnvReader",
    "LoggingConfig",
    "TrackRulesConfig",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
