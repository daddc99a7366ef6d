"""Candidate extraction domain exports."""

from .candidate_extractor import (
    deduplicate_candidates,
    enrich_candidate,
    extract_candidate,
    find_balance,
    find_order_id,
    find_reward_link,
)
from .candidate_models import Candidate, CardSnapshot, mask_card_number
from .snapshot_shapes import SNAPSHOT_SHAPES, SnapshotShape, extract_snapshot

__all__ = [
    "Candidate",
    "CardSnapshot",
    "SNAPSHOT_SHAPES",
    "SnapshotShape",
    "deduplicate_candidates",
    "enrich_candidate",
    "extract_candidate",
    "extract_snapshot",
    "find_balance",
    "find_order_id",
    "find_reward_link",
    "mask_card_number",
]
