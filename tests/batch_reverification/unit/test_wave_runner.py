"""Wave runner tests."""

from __future__ import annotations

import threading
import time

import pytest
from unused_cards_report.batch_reverification import run_in_waves


def test_results_are_grouped_per_wave_in_item_order() -> None:
    waves = list(run_in_waves([1, 2, 3, 4, 5], lambda item: item * 10, parallelism=2))

    assert waves == [[10, 20], [30, 40], [50]]


def test_concurrency_never_exceeds_parallelism() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def _work(item: int) -> int:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return item

    list(run_in_waves(list(range(9)), _work, parallelism=3))

    assert peak <= 3


def test_next_wave_starts_after_previous_finished() -> None:
    finished: list[int] = []
    started_after: dict[int, list[int]] = {}

    def _work(item: int) -> int:
        started_after[item] = list(finished)
        time.sleep(0.01 * (2 - item % 2))
        finished.append(item)
        return item

    list(run_in_waves([0, 1, 2, 3], _work, parallelism=2))

    assert sorted(started_after[2]) == [0, 1]
    assert sorted(started_after[3]) == [0, 1]


def test_first_error_stops_after_its_wave() -> None:
    seen: list[int] = []

    def _work(item: int) -> int:
        seen.append(item)
        if item == 1:
            raise ValueError("unit failed")
        return item

    with pytest.raises(ValueError, match="unit failed"):
        list(run_in_waves([0, 1, 2, 3], _work, parallelism=2))

    assert sorted(seen) == [0, 1]


def test_empty_input_yields_nothing() -> None:
    assert list(run_in_waves([], lambda item: item, parallelism=4)) == []
