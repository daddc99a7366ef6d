"""CLI smoke tests."""

from click.testing import CliRunner
from unused_cards_report.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("generate-config", "report", "recheck", "backfill", "attempts"):
        assert command in result.output


def test_recheck_help_lists_resume_options() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["recheck", "--help"])

    assert result.exit_code == 0
    assert "--checkpoint" in result.output
    assert "--resume-index" in result.output
    assert "--excluded-keys" in result.output
