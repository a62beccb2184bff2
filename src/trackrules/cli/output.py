"""CLI output formatting for JSON and human-readable output."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from trackrules.cli.exit_codes import ExitCode


@dataclass
class CLIResult:
    """Result object for CLI operations.

    Provides consistent JSON serialization for command results.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: int = 0

    def to_json(self) -> str:
        """Serialize to JSON string.

        Returns:
            JSON string with status, message, and optional data fields.
        """
        output: dict[str, Any] = {
            "status": "completed" if self.success else "failed",
        }
        if self.success:
            output["message"] = self.message
            output.update(self.data)
        else:
            if isinstance(self.exit_code, ExitCode):
                code_name = self.exit_code.name
            else:
                code_name = "UNKNOWN_ERROR"
            output["error"] = {
                "code": code_name,
                "message": self.message,
            }
        return json.dumps(output, indent=2, ensure_ascii=False)


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Exit with formatted error message.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).
        json_output: Whether to format output as JSON.
    """
    if json_output:
        result = CLIResult(success=False, message=message, exit_code=code)
        click.echo(result.to_json(), err=True)
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))


def success_output(result: CLIResult, json_output: bool = False) -> None:
    """Output successful result in appropriate format."""
    if json_output:
        click.echo(result.to_json())
    else:
        click.echo(result.message)
