"""Tests for EnvReader class."""

from __future__ import annotations

from pathlib import Path

import pytest

from trackrules.config.env import EnvReader


class TestEnvReaderGetStr:
    """Tests for EnvReader.get_str method."""

    def test_returns_value_when_set(self) -> None:
        """Should return the value when environment variable is set."""
        reader = EnvReader(env={"MY_VAR": "hello"})
        assert reader.get_str("MY_VAR") == "hello"

    def test_returns_default_when_not_set(self) -> None:
        """Should return default when environment variable is not set."""
        reader = EnvReader(env={})
        assert reader.get_str("MY_VAR") is None
        assert reader.get_str("MY_VAR", "default") == "default"

    def test_empty_counts_as_unset(self) -> None:
        """Should return default when variable is set to empty."""
        reader = EnvReader(env={"MY_VAR": ""})
        assert reader.get_str("MY_VAR", "default") == "default"


class TestEnvReaderGetBool:
    """Tests for EnvReader.get_bool method."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "on"])
    def test_true_values(self, value: str) -> None:
        """Should recognize true values case-insensitively."""
        reader = EnvReader(env={"MY_VAR": value})
        assert reader.get_bool("MY_VAR") is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off", "maybe"])
    def test_other_values_false(self, value: str) -> None:
        """Should treat other values as false."""
        reader = EnvReader(env={"MY_VAR": value})
        assert reader.get_bool("MY_VAR") is False

    def test_returns_default_when_not_set(self) -> None:
        """Should return default when variable is not set."""
        reader = EnvReader(env={})
        assert reader.get_bool("MY_VAR") is None
        assert reader.get_bool("MY_VAR", True) is True


class TestEnvReaderGetPath:
    """Tests for EnvReader.get_path method."""

    def test_expands_user(self) -> None:
        """Should expand ~ in paths."""
        reader = EnvReader(env={"MY_VAR": "~/rules.json"})
        assert reader.get_path("MY_VAR") == Path.home() / "rules.json"

    def test_returns_default_when_not_set(self) -> None:
        """Should return default when variable is not set or empty."""
        default = Path("/tmp/x")
        assert EnvReader(env={}).get_path("MY_VAR", default) == default
        assert EnvReader(env={"MY_VAR": ""}).get_path("MY_VAR", default) == default


class TestEnvReaderDefaultEnv:
    """Tests for reading os.environ."""

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should read from os.environ when no env is injected."""
        monkeypatch.setenv("TRACKRULES_TEST_VAR", "value")
        assert EnvReader().get_str("TRACKRULES_TEST_VAR") == "value"
