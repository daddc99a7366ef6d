"""Targeted log search tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest
from unused_cards_report.batch_reverification import (
    GrepLogSearch,
    LogSearchError,
    ScanLogSearch,
    build_log_search,
    parse_found_lines,
)
from unused_cards_report.configuration.runtime_settings import (
    EventFields,
    ReverificationSettings,
    SearchBackend,
)

_LINES = (
    '{"runId": "S1", "msg": "Card stored to use", "cardData": {"cardNumber": "4111"}}',
    '{"runId": "S2", "msg": "start"}',
    '{"runId": "S3", "msg": "retry 4111"}',
)


def _write_log(tmp_path: Path) -> Path:
    log_path = tmp_path / "merged.log"
    log_path.write_text("\n".join(_LINES) + "\n", encoding="utf-8")
    return log_path


def _settings(search: SearchBackend, grep_executable: str = "grep") -> ReverificationSettings:
    return ReverificationSettings(
        parallelism=2,
        search=search,
        grep_executable=grep_executable,
        key_min_length=13,
        key_max_length=19,
    )


def test_scan_search_returns_lines_with_any_pattern(tmp_path: Path) -> None:
    search = ScanLogSearch(_write_log(tmp_path))

    assert search.find_lines(["4111"]) == [_LINES[0], _LINES[2]]
    assert search.find_lines(["S2", "S3"]) == [_LINES[1], _LINES[2]]
    assert search.find_lines(["absent"]) == []
    assert search.find_lines([]) == []


def test_scan_search_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(LogSearchError):
        ScanLogSearch(tmp_path / "absent.log").find_lines(["4111"])


@pytest.mark.skipif(shutil.which("grep") is None, reason="grep is not installed")
def test_grep_search_matches_scan_search(tmp_path: Path) -> None:
    log_path = _write_log(tmp_path)
    grep = GrepLogSearch(log_path)
    scan = ScanLogSearch(log_path)

    for patterns in (["4111"], ["S2", "S3"], ["absent"], ["-e"]):
        assert grep.find_lines(patterns) == scan.find_lines(patterns)


@pytest.mark.skipif(shutil.which("grep") is None, reason="grep is not installed")
def test_grep_search_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(LogSearchError, match="exit code 2"):
        GrepLogSearch(tmp_path / "absent.log").find_lines(["4111"])


def test_grep_search_missing_executable_raises(tmp_path: Path) -> None:
    search = GrepLogSearch(_write_log(tmp_path), executable=str(tmp_path / "no-such-grep"))

    with pytest.raises(LogSearchError, match="could not be started"):
        search.find_lines(["4111"])


def test_build_log_search_follows_backend(tmp_path: Path) -> None:
    log_path = _write_log(tmp_path)

    assert isinstance(build_log_search(log_path, _settings(SearchBackend.SCAN)), ScanLogSearch)
    assert isinstance(build_log_search(log_path, _settings(SearchBackend.GREP)), GrepLogSearch)


def test_parse_found_lines_drops_non_objects() -> None:
    events = parse_found_lines([_LINES[1], "", "Binary file matches", _LINES[2]], EventFields())

    assert [event.session_id for event in events] == ["S2", "S3"]


@pytest.mark.skipif(shutil.which("grep") is None, reason="grep is not installed")
@pytest.mark.parametrize("locale", ["C", "C.UTF-8"])
def test_grep_search_reads_lines_with_invalid_utf8_like_scan_search(
    tmp_path: Path, monkeypatch, locale: str
) -> None:
    monkeypatch.setenv("LC_ALL", locale)
    log_path = tmp_path / "merged.log"
    log_path.write_bytes(
        b'{"runId": "S1", "msg": "Card stored to use", "cardData": {"cardNumber": "4111"}}\n'
        b'{"runId": "S2", "note": "\xff\xfe", "cardData": {"cardNumber": "4111"}}\n'
    )

    found = GrepLogSearch(log_path).find_lines(["4111"])

    assert found == ScanLogSearch(log_path).find_lines(["4111"])
    assert [event.session_id for event in parse_found_lines(found, EventFields())] == [
        "S1",
        "S2",
    ]
