"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from unused_cards_report.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from unused_cards_report.run_execution import (
    AttemptsRequest,
    BackfillRequest,
    RecheckRequest,
    ReportRequest,
    RunExecutionError,
    execute_attempts_report,
    execute_missing_info_backfill,
    execute_second_attempt_recheck,
    execute_unused_cards_report,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


def _config_option(func):
    return click.option(
        "--config",
        "config_path",
        required=True,
        type=click.Path(path_type=str),
        help="Path to the YAML configuration file",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="unused-cards-report")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """Find captured payment cards that were never successfully used."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT, stream=sys.stderr)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="report")
@_config_option
@click.option(
    "--log",
    "log_path",
    required=False,
    type=click.Path(path_type=str),
    help="Event log to read instead of the configured one",
)
@click.option(
    "--ledger",
    "ledger_path",
    required=False,
    type=click.Path(path_type=str),
    help="Settlement ledger (CSV or XLSX) to read instead of the configured one",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for storing the report",
)
@click.option(
    "--workbook",
    is_flag=True,
    default=False,
    help="Also write an XLSX workbook with unresolved, resolved and run info sheets.",
)
def report(
    config_path: str,
    log_path: str | None,
    ledger_path: str | None,
    output_dir: str | None,
    workbook: bool,
) -> None:
    """Report failed-session cards that no later session used successfully."""
    try:
        outcome = execute_unused_cards_report(
            ReportRequest(
                config_path=config_path,
                output_dir=output_dir,
                log_path=log_path,
                ledger_path=ledger_path,
                workbook=workbook,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))
    if outcome.workbook_path is not None:
        click.echo(str(outcome.workbook_path))


@cli.command(name="recheck")
@_config_option
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(path_type=str),
    help="Candidate CSV written by the report command",
)
@click.option(
    "--output",
    "output_path",
    required=False,
    type=click.Path(path_type=str),
    help="Where to write the candidates that remain unused",
)
@click.option(
    "--checkpoint",
    "checkpoint_path",
    required=False,
    type=click.Path(path_type=str),
    help="JSON checkpoint file to resume from and update after every wave",
)
@click.option(
    "--resume-index",
    "resume_index",
    required=False,
    type=click.IntRange(min=0),
    help="Treat candidates below this index as already decided",
)
@click.option(
    "--excluded-keys",
    "excluded_keys_path",
    required=False,
    type=click.Path(path_type=str),
    help="File with one already excluded card number per line",
)
def recheck(
    config_path: str,
    input_path: str,
    output_path: str | None,
    checkpoint_path: str | None,
    resume_index: int | None,
    excluded_keys_path: str | None,
) -> None:
    """Re-verify candidates against later sessions using targeted log search."""
    try:
        outcome = execute_second_attempt_recheck(
            RecheckRequest(
                config_path=config_path,
                input_path=input_path,
                output_path=output_path,
                checkpoint_path=checkpoint_path,
                resume_index=resume_index,
                excluded_keys_path=excluded_keys_path,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    if outcome.flagged:
        click.echo(f"{outcome.flagged} candidates flagged for review", err=True)
    click.echo(str(outcome.output_path))


@cli.command(name="backfill")
@_config_option
@click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(path_type=str),
    help="Candidate CSV to complete",
)
@click.option(
    "--output",
    "output_path",
    required=False,
    type=click.Path(path_type=str),
    help="Where to write the completed candidates",
)
def backfill(config_path: str, input_path: str, output_path: str | None) -> None:
    """Fill missing reward link and balance values from each candidate's session."""
    try:
        outcome = execute_missing_info_backfill(
            BackfillRequest(config_path=config_path, input_path=input_path, output_path=output_path)
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))


@cli.command(name="attempts")
@_config_option
@click.option(
    "--log",
    "log_path",
    required=False,
    type=click.Path(path_type=str),
    help="Event log to read instead of the configured one",
)
@click.option(
    "--output-dir",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Optional directory for storing the report",
)
def attempts(config_path: str, log_path: str | None, output_dir: str | None) -> None:
    """Write one row per payment session with its order id and outcome."""
    try:
        outcome = execute_attempts_report(
            AttemptsRequest(config_path=config_path, output_dir=output_dir, log_path=log_path)
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.output_path))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
