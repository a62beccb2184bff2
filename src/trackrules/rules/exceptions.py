"""Exceptions raised by rule set loading and the idempotency guard."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation problem with its location in the document.

    Attributes:
        field: Index-qualified path (e.g. 'rules[1].operations[0].transcode.codec').
        message: Human-readable error message.
        code: Optional machine-readable error type code.
    """

    field: str
    message: str
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.code is not None:
            result["code"] = self.code
        return result


class RuleSetValidationError(Exception):
    """The rule document is invalid; nothing from it may be used."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: tuple[ValidationIssue, ...] = (),
    ) -> None:
        self.message = message
        self.field = field
        self.errors = errors
        super().__init__(message)


class RuleDocumentError(RuleSetValidationError):
    """The rule document could not be read or parsed as JSON/YAML."""


class WatermarkDecodeError(ValueError):
    """A watermark token does not decode to a rule document."""
