# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import threading
import time

import pytest

from netprobe.scan import AdmissionGate, ResultSlots, run_all


def _error_outcome(item, exc):
    return ("error", item, type(exc).__name__)


def test_gate_tracks_in_flight_and_peak():
    gate = AdmissionGate(2)
    with gate:
        assert gate.in_flight == 1
        with gate:
            assert gate.available == 0
    assert gate.available == 2
    assert gate.peak == 2


def test_gate_rejects_bad_capacity_and_extra_release():
    with pytest.raises(ValueError):
        AdmissionGate(0)
    gate = AdmissionGate(1)
    with pytest.raises(RuntimeError):
        gate.release()


def test_result_slots_are_write_once():
    slots = ResultSlots(2)
    slots.put(1, "b")
    assert slots.pending == [0]
    with pytest.raises(RuntimeError):
        slots.put(1, "again")
    with pytest.raises(RuntimeError):
        slots.collect()
    slots.put(0, "a")
    assert slots.collect() == ["a", "b"]


def test_run_all_empty_input():
    assert run_all([], lambda item: item, gate=AdmissionGate(3), on_error=_error_outcome) == []


def test_run_all_preserves_submission_order_when_later_items_finish_first():
    delays = [0.2, 0.15, 0.1, 0.05, 0.0]
    finished: list[int] = []
    lock = threading.Lock()

    def worker(index):
        time.sleep(delays[index])
        with lock:
            finished.append(index)
        return f"result-{index}"

    results = run_all(range(5), worker, gate=AdmissionGate(5), on_error=_error_outcome)

    assert results == [f"result-{index}" for index in range(5)]
    assert finished[0] == 4


def test_run_all_never_exceeds_capacity():
    gate = AdmissionGate(5)
    lock = threading.Lock()
    active = 0
    observed_peak = 0

    def worker(item):
        nonlocal active, observed_peak
        with lock:
            active += 1
            observed_peak = max(observed_peak, active)
        time.sleep(0.05)
        with lock:
            active -= 1
        return item

    started = time.monotonic()
    results = run_all(range(50), worker, gate=gate, on_error=_error_outcome)
    elapsed = time.monotonic() - started

    assert results == list(range(50))
    assert observed_peak <= 5
    assert gate.peak <= 5
    # 50 items, 5 at a time, 0.05s each: at least ten rounds.
    assert elapsed >= 0.45
    assert elapsed < 2.0


def test_run_all_returns_every_token_after_failures():
    gate = AdmissionGate(3)

    def worker(item):
        if item % 3 == 0:
            raise TimeoutError("deadline")
        if item % 3 == 1:
            raise RuntimeError("boom")
        return item

    results = run_all(range(12), worker, gate=gate, on_error=_error_outcome)

    assert len(results) == 12
    assert gate.available == gate.capacity
    assert gate.in_flight == 0
    assert results[0] == ("error", 0, "TimeoutError")
    assert results[1] == ("error", 1, "RuntimeError")
    assert results[2] == 2


def test_run_all_isolates_worker_exceptions():
    def worker(item):
        if item == "bad":
            raise ValueError("broken target")
        return item.upper()

    results = run_all(["a", "bad", "c"], worker, gate=AdmissionGate(2), on_error=_error_outcome)

    assert results == ["A", ("error", "bad", "ValueError"), "C"]


def test_run_all_single_slot_runs_sequentially():
    gate = AdmissionGate(1)
    order: list[int] = []

    def worker(item):
        order.append(item)
        return item

    assert run_all([3, 1, 2], worker, gate=gate, on_error=_error_outcome) == [3, 1, 2]
    assert gate.peak == 1
    assert sorted(order) == [1, 2, 3]
