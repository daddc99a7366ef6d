"""Candidate extraction, deduplication and enrichment service."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from unused_cards_report.configuration.runtime_settings import EventFields
from unused_cards_report.log_ingestion.log_events import LogEvent

from .candidate_models import Candidate
from .snapshot_shapes import extract_snapshot

logger = logging.getLogger(__name__)

_DEFAULT_FIELDS = EventFields()


def extract_candidate(
    session_events: Sequence[LogEvent], fields: EventFields = _DEFAULT_FIELDS
) -> Candidate | None:
    """Build the candidate of one session from its latest card snapshot."""
    for event in reversed(session_events):
        snapshot = extract_snapshot(event)
        if snapshot is None:
            continue
        if event.session_id is None or event.time is None:
            logger.warning(
                "Line %d carries card data without a session id or time; ignored.",
                event.line_number,
            )
            continue
        return Candidate(
            session_id=event.session_id,
            order_id=_order_id(event, session_events, fields),
            timestamp=event.time,
            card_number=snapshot.card_number,
            expiration_date=snapshot.expiration_date,
            cvv=snapshot.cvv,
            last_known_ip=snapshot.last_known_ip,
        )
    return None


def deduplicate_candidates(candidates: Iterable[Candidate]) -> dict[str, Candidate]:
    """Keep exactly one candidate per card number: the chronologically latest.

    Candidates are visited newest first, so the first one seen per card number
    wins. Ties on timestamp are broken by session id, which makes the result
    independent of the input order.
    """
    newest_first = sorted(
        candidates, key=lambda candidate: (candidate.timestamp, candidate.session_id), reverse=True
    )
    survivors: dict[str, Candidate] = {}
    for candidate in newest_first:
        survivors.setdefault(candidate.card_number, candidate)
    return survivors


def enrich_candidate(
    candidate: Candidate,
    session_events: Sequence[LogEvent],
    fields: EventFields = _DEFAULT_FIELDS,
) -> Candidate:
    """Fill reward link and balance from the candidate's own session events."""
    reward_link = find_reward_link(session_events, fields)
    balance = find_balance(session_events, fields)
    return replace(
        candidate,
        reward_link=reward_link if reward_link is not None else candidate.reward_link,
        balance=balance if balance is not None else candidate.balance,
    )


def find_reward_link(
    events: Iterable[LogEvent], fields: EventFields = _DEFAULT_FIELDS
) -> str | None:
    """Locate the reward link: top-level field, message suffix, then stored card."""
    prefix = fields.reward_link_message_prefix
    for event in events:
        direct = event.payload.get(fields.reward_link_field)
        if isinstance(direct, str) and direct:
            return direct
        if prefix and event.message.startswith(prefix):
            return event.message[len(prefix) :]
        stored_card = event.payload.get("availableStoredCard")
        if isinstance(stored_card, Mapping):
            nested = stored_card.get(fields.reward_link_field)
            if isinstance(nested, str) and nested:
                return nested
    return None


def find_balance(events: Iterable[LogEvent], fields: EventFields = _DEFAULT_FIELDS) -> str | None:
    """Return the amount reported by the first balance response, if numeric."""
    for event in events:
        if event.message != fields.balance_message:
            continue
        amount_data = event.payload.get("amountData")
        if not isinstance(amount_data, Mapping):
            return None
        return _numeric_text(amount_data.get("amount"))
    return None


def find_order_id(
    events: Iterable[LogEvent], fields: EventFields = _DEFAULT_FIELDS
) -> str | None:
    """Return the first non-empty order id carried by `events`."""
    for event in events:
        value = _scalar_text(event.payload.get(fields.order_id_field))
        if value is not None:
            return value
    return None


def _order_id(
    event: LogEvent, session_events: Sequence[LogEvent], fields: EventFields
) -> str | None:
    own = _scalar_text(event.payload.get(fields.order_id_field))
    if own is not None:
        return own
    return find_order_id(session_events, fields)


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


def _numeric_text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return None if math.isnan(value) else repr(value)
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return None if math.isnan(number) else value.strip()
    return None
