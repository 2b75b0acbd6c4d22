# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded-parallelism executor for independent units of work."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from .aggregator import ResultSlots
from .gate import AdmissionGate

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
OutcomeT = TypeVar("OutcomeT")


def run_all(
    items: Iterable[ItemT],
    worker: Callable[[ItemT], OutcomeT],
    *,
    gate: AdmissionGate,
    on_error: Callable[[ItemT, Exception], OutcomeT],
    thread_name_prefix: str = "netprobe",
) -> list[OutcomeT]:
    """
    Run ``worker`` once per item with at most ``gate.capacity`` running at once.

    An exception raised by a worker is turned into that item's outcome by
    ``on_error``; siblings keep running. Returns after every item has an
    outcome, in input order.
    """
    work = list(items)
    slots: ResultSlots[OutcomeT] = ResultSlots(len(work))
    if not work:
        return []

    def run_one(index: int, item: ItemT) -> None:
        with gate:
            try:
                outcome = worker(item)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Worker for %r failed: %s", item, exc)
                outcome = on_error(item, exc)
        slots.put(index, outcome)

    max_workers = min(gate.capacity, len(work))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix) as pool:
        futures = [pool.submit(run_one, index, item) for index, item in enumerate(work)]
        for future in futures:
            future.result()

    return slots.collect()
