"""Exclusion of candidates reported as paid by the settlement ledger."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from unused_cards_report.outcome_reconciliation.reconciliation_outcomes import (
    ReconciliationResult,
)

logger = logging.getLogger(__name__)


def filter_settled(
    results: Iterable[ReconciliationResult], settled_keys: Collection[str] | None
) -> list[ReconciliationResult]:
    """Resolve unresolved results whose order id appears in `settled_keys`.

    Matching is exact after trimming whitespace. A missing ledger leaves every
    result unchanged.
    """
    result_list = list(results)
    if settled_keys is None:
        logger.info("No settlement ledger configured; skipping settlement filter.")
        return result_list

    normalized_keys = {key.strip() for key in settled_keys if key.strip()}
    filtered: list[ReconciliationResult] = []
    for result in result_list:
        order_id = (result.candidate.order_id or "").strip()
        if result.is_unresolved and order_id and order_id in normalized_keys:
            logger.info(
                "Card %s is reported as paid for order %s.",
                result.candidate.masked_card_number,
                order_id,
            )
            filtered.append(ReconciliationResult.settled(result.candidate, order_id))
        else:
            filtered.append(result)
    return filtered
