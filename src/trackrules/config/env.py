"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion and validation. It supports dependency injection
for testing by accepting an optional env mapping.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path


class EnvReader:
    """Environment variable reader with type conversion and validation.

    Supports dependency injection by accepting an optional env mapping,
    making it easy to test code that depends on environment variables
    without modifying os.environ.

    Example:
        # Production usage (reads from os.environ)
        reader = EnvReader()
        level = reader.get_str("TRACKRULES_LOG_LEVEL", "info")

        # Testing usage (inject custom env)
        reader = EnvReader(env={"TRACKRULES_DRY_RUN": "yes"})
        reader.get_bool("TRACKRULES_DRY_RUN")  # Returns True
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        """Get a string from environment variable.

        Empty values count as unset.
        """
        value = self._env.get(var)
        if not value:
            return default
        return value

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean from environment variable.

        Recognizes "true", "1", "yes" and "on" (case-insensitive) as true.
        All other non-empty values are treated as false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path (with ``~`` expanded) from environment variable."""
        value = self._env.get(var)
        if not value:
            return default
        return Path(value).expanduser()
