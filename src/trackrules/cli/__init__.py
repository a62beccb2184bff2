"""CLI module for trackrules."""

import logging
from pathlib import Path

import click

from trackrules.cli.exit_codes import ExitCode
from trackrules.cli.output import error_exit
from trackrules.config import ConfigError, get_config
from trackrules.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="trackrules")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.trackrules/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """trackrules - Rule-based audio track transcode, rename and removal."""
    ctx.ensure_object(dict)

    try:
        config = get_config(
            config_path=config_path,
            log_level=log_level.lower() if log_level else None,
            log_file=log_file,
            log_format="json" if log_json else None,
        )
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)
    logger.debug(
        "trackrules starting: log_level=%s, rules_file=%s, dry_run=%s",
        config.logging.level,
        config.engine.rules_file,
        config.engine.dry_run,
    )
    ctx.obj["config"] = config


# Defer import to avoid circular dependency
def _register_commands():
    from trackrules.cli.plan import plan_command
    from trackrules.cli.rules import rules_group

    main.add_command(rules_group)
    main.add_command(plan_command)


_register_commands()
