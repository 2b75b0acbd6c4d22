# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Counting admission gate bounding in-flight probes."""

from __future__ import annotations

import threading


class AdmissionGate:
    """
    Hands out at most ``capacity`` concurrency tokens at a time.

    Use as a context manager so the token is released exactly once on every
    exit path. One gate per batch; gates are never shared across batches.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    def acquire(self) -> None:
        self._semaphore.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._lock:
            if self._in_flight <= 0:
                raise RuntimeError("AdmissionGate released more times than acquired")
            self._in_flight -= 1
        self._semaphore.release()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def available(self) -> int:
        return self.capacity - self.in_flight

    @property
    def peak(self) -> int:
        """Highest number of tokens held at once since the gate was created."""
        with self._lock:
            return self._peak

    def __enter__(self) -> AdmissionGate:
        self.acquire()
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.release()
