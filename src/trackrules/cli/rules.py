"""CLI commands for rule documents.

This module provides commands for working with rule documents:
- rules validate: Validate a rule document
- rules watermark: Print the marker a rule document stamps into files
- rules decode: Recover the rule document from a marker
"""

import json
import logging
from pathlib import Path
from typing import Any

import click
import yaml

from trackrules.cli.exit_codes import ExitCode
from trackrules.cli.output import error_exit
from trackrules.rules import (
    RuleDocumentError,
    RuleSetValidationError,
    WatermarkDecodeError,
    decode_token,
    load_rules,
    watermark,
)

logger = logging.getLogger(__name__)

json_option = click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output as JSON.",
)


@click.group("rules")
def rules_group() -> None:
    """Work with rule documents.

    Examples:

        # Validate a rule document
        trackrules rules validate rules.json

        # Show the marker written to processed files
        trackrules rules watermark rules.yaml

        # Recover the rules a file was processed with
        trackrules rules decode '[trackrules:audio_rules:W3si...]'
    """
    pass


# =============================================================================
# Validate Command
# =============================================================================


def _validate_rules(rules_path: Path) -> dict[str, Any]:
    """Validate a rule document and return the result as a dict.

    Returns:
        Dict with keys: valid, file, message, rules, errors
    """
    result: dict[str, Any] = {
        "valid": False,
        "file": str(rules_path),
        "errors": [],
    }

    if not rules_path.exists():
        result["message"] = f"File not found: {rules_path}"
        result["errors"].append(
            {"field": None, "message": result["message"], "code": "file_not_found"}
        )
        return result

    try:
        rule_set = load_rules(rules_path)
    except RuleDocumentError as e:
        result["message"] = e.message
        result["errors"].append(
            {"field": None, "message": e.message, "code": "syntax_error"}
        )
        return result
    except RuleSetValidationError as e:
        result["message"] = e.message
        if e.errors:
            result["errors"] = [issue.to_dict() for issue in e.errors]
        else:
            result["errors"].append(
                {"field": e.field, "message": e.message, "code": "validation_error"}
            )
        return result

    result["valid"] = True
    result["rules"] = len(rule_set)
    result["message"] = f"Rule document is valid ({len(rule_set)} rules)"
    return result


@rules_group.command("validate")
@click.argument("rules_file", type=click.Path(path_type=Path))
@json_option
def validate_rules_cmd(rules_file: Path, json_output: bool) -> None:
    """Validate a rule document.

    Exit codes:
        0: Rule document is valid
        10: Rule document is invalid
        20: File not found
    """
    result = _validate_rules(rules_file)

    if json_output:
        click.echo(json.dumps(result, indent=2))
    elif result["valid"]:
        click.echo(click.style("Valid", fg="green") + f": {result['file']}")
        click.echo(f"  {result['message']}")
    else:
        click.echo(click.style("Invalid", fg="red") + f": {result['file']}")
        for error in result["errors"]:
            if error.get("field"):
                click.echo(f"  {error['field']}: {error['message']}")
            else:
                click.echo(f"  {error['message']}")

    if not result["valid"]:
        if result["errors"] and result["errors"][0]["code"] == "file_not_found":
            raise SystemExit(ExitCode.TARGET_NOT_FOUND)
        raise SystemExit(ExitCode.RULES_VALIDATION_ERROR)


# =============================================================================
# Watermark Commands
# =============================================================================


@rules_group.command("watermark")
@click.argument("rules_file", type=click.Path(path_type=Path))
def watermark_cmd(rules_file: Path) -> None:
    """Print the marker stamped into files processed with RULES_FILE."""
    try:
        rule_set = load_rules(rules_file)
    except RuleSetValidationError as e:
        error_exit(e.message, ExitCode.RULES_VALIDATION_ERROR)

    click.echo(watermark(rule_set))


@rules_group.command("decode")
@click.argument("marker_or_token")
@json_option
def decode_cmd(marker_or_token: str, json_output: bool) -> None:
    """Print the rule document encoded in a marker or bare token."""
    try:
        document = decode_token(marker_or_token)
    except WatermarkDecodeError as e:
        error_exit(str(e), ExitCode.PARSE_ERROR, json_output)

    if json_output:
        click.echo(json.dumps(document, indent=2, ensure_ascii=False))
    else:
        click.echo(
            yaml.safe_dump(document, sort_keys=False, allow_unicode=True).rstrip()
        )
