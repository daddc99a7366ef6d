"""Outcome reconciliation domain exports."""

from .outcome_reconciler import (
    ConsistencyViolationError,
    reconcile_candidate,
    reconcile_candidates,
)
from .reconciliation_outcomes import ReconciliationResult, ResolutionReason, Verdict
from .snapshot_matchers import (
    FieldEqualityMatcher,
    SnapshotMatcher,
    SubstringMatcher,
    build_matcher,
)

__all__ = [
    "ConsistencyViolationError",
    "FieldEqualityMatcher",
    "ReconciliationResult",
    "ResolutionReason",
    "SnapshotMatcher",
    "SubstringMatcher",
    "Verdict",
    "build_matcher",
    "reconcile_candidate",
    "reconcile_candidates",
]
