"""Checkpoint persistence for resumable re-verification.

State is a small JSON document written atomically (temp file + os.replace),
so an interrupted run never leaves a half-written checkpoint behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

from .reverification_outcomes import Checkpoint


class CheckpointError(Exception):
    """Raised when a checkpoint file is unreadable or malformed."""


def load_checkpoint(path: Path | str | None) -> Checkpoint:
    """Load a checkpoint; a missing path or file means `(0, empty set)`."""
    if path is None:
        return Checkpoint()
    checkpoint_path = Path(path)
    if not checkpoint_path.exists():
        return Checkpoint()
    try:
        data = json.loads(checkpoint_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CheckpointError(f"Failed to read checkpoint {checkpoint_path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise CheckpointError(f"Checkpoint {checkpoint_path} must contain a JSON object.")
    processed_up_to = data.get("processed_up_to", 0)
    excluded_keys = data.get("excluded_keys", [])
    if isinstance(processed_up_to, bool) or not isinstance(processed_up_to, int):
        raise CheckpointError("Checkpoint processed_up_to must be an integer.")
    if processed_up_to < 0:
        raise CheckpointError("Checkpoint processed_up_to must not be negative.")
    if not isinstance(excluded_keys, list) or not all(isinstance(k, str) for k in excluded_keys):
        raise CheckpointError("Checkpoint excluded_keys must be a list of strings.")
    return Checkpoint(processed_up_to=processed_up_to, excluded_keys=frozenset(excluded_keys))


def save_checkpoint(path: Path | str, checkpoint: Checkpoint) -> None:
    """Atomically replace the checkpoint file."""
    checkpoint_path = Path(path)
    checkpoint_path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "processed_up_to": checkpoint.processed_up_to,
        "excluded_keys": sorted(checkpoint.excluded_keys),
    }
    fd, tmp = tempfile.mkstemp(dir=checkpoint_path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        os.replace(tmp, checkpoint_path)
    except Exception:
        os.unlink(tmp)
        raise


def read_excluded_keys(path: Path | str) -> frozenset[str]:
    """Read newline-separated card numbers already known to be excluded."""
    keys_path = Path(path)
    try:
        text = keys_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CheckpointError(f"Failed to read excluded keys {keys_path}: {exc}") from exc
    return frozenset(line.strip() for line in text.splitlines() if line.strip())
