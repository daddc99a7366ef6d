"""Predicates deciding whether a log event references a card number."""

from __future__ import annotations

from typing import Protocol

from unused_cards_report.candidate_extraction.snapshot_shapes import extract_snapshot
from unused_cards_report.configuration.runtime_settings import MatchingMode
from unused_cards_report.log_ingestion.log_events import LogEvent


class SnapshotMatcher(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol implemented by reuse matchers."""

    def matches(self, event: LogEvent, card_number: str) -> bool: ...


class FieldEqualityMatcher:  # pylint: disable=too-few-public-methods
    """Matches events whose parsed card snapshot carries exactly `card_number`."""

    def matches(self, event: LogEvent, card_number: str) -> bool:
        snapshot = extract_snapshot(event)
        return snapshot is not None and snapshot.card_number == card_number


class SubstringMatcher:  # pylint: disable=too-few-public-methods
    """Matches any raw log line that contains `card_number`."""

    def matches(self, event: LogEvent, card_number: str) -> bool:
        return bool(card_number) and card_number in event.raw


def build_matcher(mode: MatchingMode) -> SnapshotMatcher:
    if mode == MatchingMode.SUBSTRING:
        return SubstringMatcher()
    return FieldEqualityMatcher()
