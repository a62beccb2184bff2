"""Rule document loading and validation.

This module turns a rule document (already-decoded JSON/YAML data, raw
text, or a file) into a validated, immutable RuleSet. Validation is
all-or-nothing: any structural problem raises RuleSetValidationError and
no rules are returned.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from trackrules.rules.exceptions import (
    RuleDocumentError,
    RuleSetValidationError,
    ValidationIssue,
)
from trackrules.rules.matchers import parse_int_condition
from trackrules.rules.pydantic_models import (
    CopyModel,
    MatchModel,
    OperationModel,
    RuleModel,
    TitleMatchModel,
    TranscodeModel,
)
from trackrules.rules.types import (
    CodecSelector,
    CopyOperation,
    MatchSpec,
    Operation,
    Rule,
    RuleSet,
    TitlePattern,
    TranscodeOperation,
)

logger = logging.getLogger(__name__)

_RULES_ADAPTER = TypeAdapter(list[RuleModel])

_VALUE_ERROR_PREFIX = "Value error, "


def format_pydantic_errors(
    pydantic_error: PydanticValidationError,
) -> tuple[ValidationIssue, ...]:
    """Convert a pydantic ValidationError into located issues.

    Args:
        pydantic_error: Pydantic ValidationError raised for the rule list.

    Returns:
        Issues with paths like 'rules[0].match.codecs'.
    """
    issues: list[ValidationIssue] = []

    for error in pydantic_error.errors():
        loc = error.get("loc", ())
        field_parts = ["rules"]
        for part in loc:
            if isinstance(part, int):
                field_parts[-1] = f"{field_parts[-1]}[{part}]"
            else:
                field_parts.append(str(part))

        message = error.get("msg", "Validation error")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX) :]

        issues.append(
            ValidationIssue(
                field=".".join(field_parts),
                message=message,
                code=error.get("type"),
            )
        )

    return tuple(issues)


# =============================================================================
# Model -> runtime type conversion
# =============================================================================


def _convert_codecs(value: str | list[str]) -> CodecSelector:
    if isinstance(value, list):
        return CodecSelector.any_of(*value)
    if value == "*":
        return CodecSelector.all()
    return CodecSelector.all_except(value[1:])


def _convert_title(model: TitleMatchModel | None) -> TitlePattern | None:
    if model is None:
        return None
    return TitlePattern(pattern=model.pattern, case_sensitive=model.case_sensitive)


def _convert_match(model: MatchModel) -> MatchSpec:
    return MatchSpec(
        codecs=_convert_codecs(model.codecs),
        channels=tuple(parse_int_condition(c) for c in model.channels or ()),
        bitrate=tuple(parse_int_condition(c) for c in model.bitrate or ()),
        languages=tuple(model.languages) if model.languages is not None else None,
        dispositions=(
            {flag: 1 if value else 0 for flag, value in model.dispositions.items()}
            if model.dispositions is not None
            else None
        ),
        title=_convert_title(model.title),
    )


def _convert_copy(model: CopyModel) -> CopyOperation:
    return CopyOperation(
        title=model.title,
        dispositions=dict(model.dispositions) if model.dispositions else None,
    )


def _convert_transcode(model: TranscodeModel) -> TranscodeOperation:
    return TranscodeOperation(
        codec=model.codec,
        channels=model.channels,
        bitrate=model.bitrate,
        title=model.title,
        dispositions=dict(model.dispositions) if model.dispositions else None,
        filters=model.filters,
    )


def _convert_operation(model: OperationModel) -> Operation:
    if model.copy_ is not None:
        return _convert_copy(model.copy_)
    # OperationModel guarantees exactly one of the two is set
    assert model.transcode is not None
    return _convert_transcode(model.transcode)


def _convert_rule(model: RuleModel) -> Rule:
    return Rule(
        name=model.name,
        match=_convert_match(model.match),
        operations=tuple(_convert_operation(op) for op in model.operations),
    )


# =============================================================================
# Public API
# =============================================================================


def validate(document: Any) -> RuleSet:
    """Validate a decoded rule document and return the RuleSet.

    Args:
        document: Decoded JSON/YAML data; must be a list of rule objects.

    Returns:
        Immutable RuleSet, rules in document order.

    Raises:
        RuleSetValidationError: If any part of the document is invalid.
    """
    if not isinstance(document, list):
        raise RuleSetValidationError(
            "Expected a list of rules at the document root "
            f"(got {type(document).__name__})",
            field="rules",
        )

    try:
        models = _RULES_ADAPTER.validate_python(document)
    except PydanticValidationError as e:
        issues = format_pydantic_errors(e)
        first = issues[0]
        raise RuleSetValidationError(
            f"{first.field}: {first.message}",
            field=first.field,
            errors=issues,
        ) from e

    rule_set = RuleSet(rules=tuple(_convert_rule(m) for m in models))
    logger.debug("Validated rule set with %d rules", len(rule_set))
    return rule_set


def parse_rules_text(text: str, format: str = "json") -> RuleSet:
    """Decode and validate a rule document from text.

    Args:
        text: Rule document text.
        format: "json" or "yaml".

    Returns:
        Validated RuleSet.

    Raises:
        RuleDocumentError: If the text cannot be decoded.
        RuleSetValidationError: If the decoded document is invalid.
    """
    try:
        if format == "json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise RuleDocumentError(f"Invalid JSON: {e}") from e
    except yaml.YAMLError as e:
        raise RuleDocumentError(f"Invalid YAML: {e}") from e

    return validate(document)


def load_rules(path: Path) -> RuleSet:
    """Load and validate a rule document file.

    Files ending in ``.json`` are decoded as JSON, anything else as YAML.

    Args:
        path: Path to the rule document.

    Returns:
        Validated RuleSet.

    Raises:
        RuleDocumentError: If the file cannot be read or decoded.
        RuleSetValidationError: If the document is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise RuleDocumentError(f"Rules file not found: {path}") from e
    except IsADirectoryError as e:
        raise RuleDocumentError(f"Rules path is a directory: {path}") from e
    except OSError as e:
        raise RuleDocumentError(f"Cannot read rules file {path}: {e}") from e

    format = "json" if path.suffix.lower() == ".json" else "yaml"
    rule_set = parse_rules_text(text, format=format)
    logger.info("Loaded %d rules from %s", len(rule_set), path)
    return rule_set


def rule_set_to_document(rule_set: RuleSet) -> list[dict[str, Any]]:
    """Render a RuleSet back into its canonical document form.

    Optional fields that are unset are omitted, so equivalent documents
    render identically.
    """
    return [_rule_to_document(rule) for rule in rule_set.rules]


def _rule_to_document(rule: Rule) -> dict[str, Any]:
    doc: dict[str, Any] = {}
    if rule.name is not None:
        doc["name"] = rule.name

    match = rule.match
    match_doc: dict[str, Any] = {"codecs": match.codecs.to_document()}
    if match.channels:
        match_doc["channels"] = [str(c) for c in match.channels]
    if match.bitrate:
        match_doc["bitrate"] = [str(c) for c in match.bitrate]
    if match.languages is not None:
        match_doc["languages"] = list(match.languages)
    if match.dispositions is not None:
        match_doc["dispositions"] = {
            flag: bool(value) for flag, value in match.dispositions.items()
        }
    if match.title is not None:
        match_doc["title"] = {
            "pattern": match.title.pattern,
            "caseSensitive": match.title.case_sensitive,
        }
    doc["match"] = match_doc

    operations: list[dict[str, Any]] = []
    for op in rule.operations:
        if isinstance(op, CopyOperation):
            body: dict[str, Any] = {}
            if op.title is not None:
                body["title"] = op.title
            if op.dispositions:
                body["dispositions"] = dict(op.dispositions)
            operations.append({"copy": body})
        else:
            body = {"codec": op.codec}
            for key in ("channels", "bitrate", "title", "filters"):
                value = getattr(op, key)
                if value is not None:
                    body[key] = value
            if op.dispositions:
                body["dispositions"] = dict(op.dispositions)
            operations.append({"transcode": body})
    doc["operations"] = operations
    return doc
