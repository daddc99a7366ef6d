"""Checkpoint store tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from unused_cards_report.batch_reverification import (
    Checkpoint,
    CheckpointError,
    load_checkpoint,
    read_excluded_keys,
    save_checkpoint,
)


def test_absent_checkpoint_starts_from_zero(tmp_path: Path) -> None:
    assert load_checkpoint(None) == Checkpoint()
    assert load_checkpoint(tmp_path / "absent.json") == Checkpoint(0, frozenset())


def test_saved_checkpoint_loads_back(tmp_path: Path) -> None:
    path = tmp_path / "state" / "checkpoint.json"
    checkpoint = Checkpoint(processed_up_to=40, excluded_keys=frozenset({"4111", "5500"}))

    save_checkpoint(path, checkpoint)

    assert load_checkpoint(path) == checkpoint
    assert json.loads(path.read_text(encoding="utf-8"))["excluded_keys"] == ["4111", "5500"]
    assert [entry.name for entry in path.parent.iterdir()] == ["checkpoint.json"]


def test_save_replaces_previous_checkpoint(tmp_path: Path) -> None:
    path = tmp_path / "checkpoint.json"
    save_checkpoint(path, Checkpoint(20))
    save_checkpoint(path, Checkpoint(40, frozenset({"4111"})))

    assert load_checkpoint(path) == Checkpoint(40, frozenset({"4111"}))


@pytest.mark.parametrize(
    "contents",
    [
        "not json",
        "[1, 2]",
        '{"processed_up_to": "10"}',
        '{"processed_up_to": -1}',
        '{"processed_up_to": 1, "excluded_keys": [1]}',
    ],
)
def test_malformed_checkpoint_raises(tmp_path: Path, contents: str) -> None:
    path = tmp_path / "checkpoint.json"
    path.write_text(contents, encoding="utf-8")

    with pytest.raises(CheckpointError):
        load_checkpoint(path)


def test_read_excluded_keys_ignores_blank_lines(tmp_path: Path) -> None:
    path = tmp_path / "excluded.txt"
    path.write_text("4111\n\n 5500 \n", encoding="utf-8")

    assert read_excluded_keys(path) == frozenset({"4111", "5500"})


def test_read_excluded_keys_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(CheckpointError):
        read_excluded_keys(tmp_path / "absent.txt")
