"""Process memory snapshots for long log passes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import psutil

_BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class MemorySnapshot:
    """Resident and virtual memory of the current process."""

    rss_mb: float
    vms_mb: float
    percent: float

    def describe(self) -> str:
        return f"rss={self.rss_mb:.2f} MB vms={self.vms_mb:.2f} MB ({self.percent:.2f}% of system)"


def take_memory_snapshot(process: psutil.Process | None = None) -> MemorySnapshot:
    """Return the memory usage of `process` (defaults to the running process)."""
    current = process or psutil.Process()
    info = current.memory_info()
    return MemorySnapshot(
        rss_mb=round(info.rss / _BYTES_PER_MB, 2),
        vms_mb=round(info.vms / _BYTES_PER_MB, 2),
        percent=round(current.memory_percent(), 2),
    )


def log_memory_usage(logger: logging.Logger) -> None:
    """Emit one INFO line with the current memory snapshot."""
    if logger.isEnabledFor(logging.INFO):
        logger.info("memory usage: %s", take_memory_snapshot().describe())
