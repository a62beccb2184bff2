"""Pydantic models for rule document parsing and validation.

The rule document is a JSON (or YAML) list of rule objects. These models
check its structure; the loader converts the result into the frozen
runtime types in ``trackrules.rules.types``. All models are frozen and
reject unknown keys.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
    model_validator,
)

from trackrules.rules.matchers import parse_int_condition


def _as_string_list(value: Any, field_name: str) -> list[str]:
    """Accept a string or a list of strings, returning a list."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        for idx, item in enumerate(value):
            if not isinstance(item, str):
                raise ValueError(
                    f"'{field_name}' entries must be strings "
                    f"(got {type(item).__name__} at index {idx})"
                )
        return value
    raise ValueError(f"'{field_name}' must be a string or a list of strings")


def normalize_pattern(pattern: str) -> str:
    """Collapse escaped backslashes in a title pattern.

    Patterns usually arrive inside a larger escaped text blob, so ``\\\\d``
    is meant as ``\\d``.
    """
    return pattern.replace("\\\\", "\\")


class TitleMatchModel(BaseModel):
    """Pydantic model for a title regular expression."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    pattern: StrictStr
    case_sensitive: StrictBool = Field(default=False, alias="caseSensitive")

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        """Normalize escaped backslashes and check the regex compiles."""
        v = normalize_pattern(v)
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {e}") from e
        return v


class MatchModel(BaseModel):
    """Pydantic model for a rule's match specification."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codecs: str | list[str]
    channels: list[str] | None = None
    bitrate: list[str] | None = None
    languages: list[str] | None = None
    dispositions: dict[str, bool] | None = None
    title: TitleMatchModel | None = None

    @field_validator("codecs", mode="before")
    @classmethod
    def validate_codecs(cls, v: Any) -> str | list[str]:
        """Codecs must be a list, "*" or "!codec"."""
        if isinstance(v, list):
            return _as_string_list(v, "codecs")
        if isinstance(v, str) and (v == "*" or (v.startswith("!") and len(v) > 1)):
            return v
        raise ValueError("'codecs' must be a list of codecs, '*', or '!codec'")

    @field_validator("channels", "bitrate", mode="before")
    @classmethod
    def validate_conditions(
        cls, v: Any, info: ValidationInfo
    ) -> list[str] | None:
        """Accept one condition or a list, each of which must parse."""
        if v is None:
            return None
        conditions = _as_string_list(v, info.field_name)
        for condition in conditions:
            parse_int_condition(condition)
        return conditions

    @field_validator("languages", mode="before")
    @classmethod
    def validate_languages(cls, v: Any) -> list[str] | None:
        """Accept one language code or a list of them."""
        if v is None:
            return None
        return _as_string_list(v, "languages")

    @field_validator("dispositions", mode="before")
    @classmethod
    def validate_dispositions(cls, v: Any) -> Any:
        """Dispositions must be an object of flag -> value."""
        if v is not None and not isinstance(v, dict):
            raise ValueError("'dispositions' must be an object")
        return v


class CopyModel(BaseModel):
    """Pydantic model for a copy operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    title: StrictStr | None = None
    dispositions: dict[str, StrictBool] | None = None


class TranscodeModel(BaseModel):
    """Pydantic model for a transcode operation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    codec: StrictStr = Field(min_length=1)
    channels: StrictInt | None = Field(default=None, gt=0)
    bitrate: StrictInt | None = Field(default=None, gt=0)
    title: StrictStr | None = None
    dispositions: dict[str, StrictBool] | None = None
    filters: StrictStr | None = None

    @field_validator("channels", "bitrate", mode="before")
    @classmethod
    def normalize_count(cls, v: Any) -> Any:
        """Accept whole-number floats; 0 means "inherit from the source"."""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if v == 0 and not isinstance(v, bool):
            return None
        return v


class OperationModel(BaseModel):
    """Pydantic model for one operation: exactly one of copy or transcode."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    copy_: CopyModel | None = Field(default=None, alias="copy")
    transcode: TranscodeModel | None = None

    @model_validator(mode="before")
    @classmethod
    def validate_single_operation(cls, data: Any) -> Any:
        """Validate that exactly one operation kind is present."""
        if isinstance(data, dict):
            present = [key for key in ("copy", "transcode") if key in data]
            if len(present) != 1:
                raise ValueError(
                    "Operation must have exactly one of 'copy' or 'transcode'"
                )
            if data[present[0]] is None:
                raise ValueError(f"'{present[0]}' operation must be an object")
        return data


class RuleModel(BaseModel):
    """Pydantic model for a single rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: StrictStr | None = None
    match: MatchModel
    operations: list[OperationModel]
