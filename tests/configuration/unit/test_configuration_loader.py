"""Configuration loader tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from unused_cards_report.configuration.loader import ConfigurationError, load_configuration
from unused_cards_report.configuration.runtime_settings import MatchingMode, SearchBackend


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def test_loads_yaml_configuration_with_defaults(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.yaml",
        """
log:
  path: "logs/merged.log"
""",
    )

    configuration = load_configuration(config_path)

    assert configuration.log.path == (tmp_path / "logs" / "merged.log").resolve()
    assert configuration.log.progress_every == 100_000
    assert configuration.events.session_field == "runId"
    assert configuration.events.card_stage_messages == (
        "Response from processCard",
        "Card stored to use",
    )
    assert configuration.events.failure_message == "Error while making Requests"
    assert configuration.matching.mode == MatchingMode.FIELD
    assert configuration.settlement.ledger_path is None
    assert configuration.settlement.key_column == "Account"
    assert configuration.reverification.parallelism == 20
    assert configuration.reverification.search == SearchBackend.GREP
    assert configuration.reverification.key_min_length == 13
    assert configuration.reverification.key_max_length == 19
    assert configuration.output.directory == (tmp_path / "results").resolve()


def test_loads_json_configuration_with_overrides(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.json",
        json.dumps(
            {
                "log": {"path": "/var/log/merged.log", "progress_every": 500},
                "events": {
                    "session_field": "sessionId",
                    "card_stage_messages": "Card stored",
                    "success_flag_field": "ok",
                },
                "matching": {"mode": "SUBSTRING"},
                "settlement": {"ledger_path": "pnm.xlsx", "key_column": "Order"},
                "reverification": {"parallelism": 5, "search": "scan"},
                "output": {"directory": "out"},
            }
        ),
    )

    configuration = load_configuration(config_path)

    assert configuration.log.path == Path("/var/log/merged.log")
    assert configuration.log.progress_every == 500
    assert configuration.events.session_field == "sessionId"
    assert configuration.events.card_stage_messages == ("Card stored",)
    assert configuration.events.success_flag_field == "ok"
    assert configuration.events.time_field == "time"
    assert configuration.matching.mode == MatchingMode.SUBSTRING
    assert configuration.settlement.ledger_path == (tmp_path / "pnm.xlsx").resolve()
    assert configuration.settlement.key_column == "Order"
    assert configuration.reverification.parallelism == 5
    assert configuration.reverification.search == SearchBackend.SCAN
    assert configuration.output.directory == (tmp_path / "out").resolve()


def test_missing_configuration_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_configuration(tmp_path / "absent.yaml")


def test_missing_log_section_raises(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "config.yaml", "matching:\n  mode: field\n")

    with pytest.raises(ConfigurationError, match="'log' is required"):
        load_configuration(config_path)


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ("log:\n  path: ''\n", "log.path must not be empty"),
        ("log:\n  path: a.log\n  progress_every: 0\n", "greater than zero"),
        ("log:\n  path: a.log\nmatching:\n  mode: fuzzy\n", "matching.mode"),
        ("log:\n  path: a.log\nreverification:\n  search: ssh\n", "reverification.search"),
        (
            "log:\n  path: a.log\nreverification:\n  key_min_length: 20\n  key_max_length: 10\n",
            "must not exceed",
        ),
        ("log:\n  path: a.log\nreverification:\n  parallelism: true\n", "must be an integer"),
        ("- just\n- a list\n", "root must be a mapping"),
    ],
)
def test_invalid_values_raise_configuration_error(
    tmp_path: Path, contents: str, message: str
) -> None:
    config_path = _write_file(tmp_path / "config.yaml", contents)

    with pytest.raises(ConfigurationError, match=message):
        load_configuration(config_path)
