"""Bounded-concurrency execution in fixed-size waves."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TypeVar

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


def run_in_waves(
    items: Sequence[ItemT],
    worker: Callable[[ItemT], ResultT],
    *,
    parallelism: int,
) -> Iterator[list[ResultT]]:
    """Run `worker` over `items`, at most `parallelism` at a time.

    Each wave is awaited completely before the next one starts. Results of a
    wave are yielded in item order; the first exception raised by a unit is
    re-raised after its wave has finished, which stops the iteration.
    """
    max_workers = max(1, parallelism)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for wave_start in range(0, len(items), max_workers):
            wave = items[wave_start : wave_start + max_workers]
            futures = [executor.submit(worker, item) for item in wave]
            wait(futures)
            yield [future.result() for future in futures]
