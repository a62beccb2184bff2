"""CLI command to plan the audio track changes for one probed file."""

import json
import logging
from pathlib import Path
from typing import Any

import click

from trackrules.cli.exit_codes import ExitCode
from trackrules.cli.output import CLIResult, error_exit, success_output
from trackrules.executor import build_ffmpeg_args
from trackrules.introspector import parse_probe_data
from trackrules.processor import ProcessingResult, ProcessingStatus, process_file
from trackrules.rules import RuleSetValidationError, load_rules

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    ProcessingStatus.CHANGED: "Changes planned",
    ProcessingStatus.UNCHANGED: "No rule matched, nothing to do",
    ProcessingStatus.NO_SOURCE_DATA: "Probe data missing, nothing to do",
    ProcessingStatus.NO_AUDIO_TRACKS: "No audio tracks, nothing to do",
    ProcessingStatus.ALREADY_PROCESSED: "Already processed with these rules",
}


def _read_probe(probe_json: str, json_output: bool) -> Any:
    """Read ffprobe JSON from a file, or stdin for ``-``."""
    try:
        if probe_json == "-":
            text = click.get_text_stream("stdin").read()
        else:
            text = Path(probe_json).read_text(encoding="utf-8")
    except FileNotFoundError:
        error_exit(
            f"Probe file not found: {probe_json}", ExitCode.TARGET_NOT_FOUND, json_output
        )
    except OSError as e:
        error_exit(
            f"Cannot read probe file {probe_json}: {e}",
            ExitCode.TARGET_NOT_FOUND,
            json_output,
        )

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        error_exit(f"Invalid probe JSON: {e}", ExitCode.PARSE_ERROR, json_output)


def _format_human(result: ProcessingResult, tokens: list[str]) -> list[str]:
    lines = [f"Status: {_STATUS_MESSAGES[result.status]}"]
    if result.file_path:
        lines.append(f"File: {result.file_path}")

    for decision in result.plan.decisions:
        line = f"  Audio track {decision.input_index} (stream {decision.stream_index})"
        line += f": {decision.action.value}"
        if decision.rule:
            line += f" [{decision.rule}]"
        lines.append(line)
        for output_index, note in zip(decision.output_indices, decision.notes):
            lines.append(f"    -> output {output_index}: {note}")

    if result.status == ProcessingStatus.CHANGED:
        lines.append(f"Summary: {result.plan.summary}")
        lines.append("Arguments:")
        lines.append("  " + " ".join(tokens))
        if result.dry_run:
            lines.append("Dry run: no changes should be applied")
    return lines


@click.command("plan")
@click.argument("probe_json", type=str)
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Rule document (default: engine.rules_file from config).",
)
@click.option(
    "--dry-run/--no-dry-run",
    default=None,
    help="Report the plan but mark it as not to be applied.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output as JSON.",
)
@click.pass_context
def plan_command(
    ctx: click.Context,
    probe_json: str,
    rules_file: Path | None,
    dry_run: bool | None,
    json_output: bool,
) -> None:
    """Plan audio track changes for a file from its ffprobe JSON.

    PROBE_JSON is the output of
    ``ffprobe -show_streams -show_format -of json FILE``, or ``-`` to
    read it from stdin.

    Examples:

        ffprobe -v quiet -show_streams -show_format -of json movie.mkv \\
            | trackrules plan --rules rules.json -
    """
    config = ctx.obj["config"]
    rules_path = rules_file or config.engine.rules_file
    if rules_path is None:
        error_exit(
            "No rule document given (use --rules or set engine.rules_file)",
            ExitCode.CONFIG_ERROR,
            json_output,
        )
    if dry_run is None:
        dry_run = config.engine.dry_run

    try:
        rule_set = load_rules(rules_path)
    except RuleSetValidationError as e:
        error_exit(e.message, ExitCode.RULES_VALIDATION_ERROR, json_output)

    data = _read_probe(probe_json, json_output)
    probe = parse_probe_data(data, marker_tag=config.engine.marker_tag)
    result = process_file(probe, rule_set, dry_run=dry_run)
    arguments = build_ffmpeg_args(result.plan, marker=result.marker)

    if json_output:
        report = result.to_dict()
        report["outcome"] = report.pop("status")
        report["arguments"] = arguments.to_dict()
        report["command"] = arguments.tokens
        success_output(
            CLIResult(
                success=True,
                message=_STATUS_MESSAGES[result.status],
                data=report,
            ),
            json_output=True,
        )
        return

    for line in _format_human(result, arguments.tokens):
        click.echo(line)
