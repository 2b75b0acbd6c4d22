# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pre-allocated, index-addressed result slots."""

from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")

_EMPTY = object()


class ResultSlots(Generic[T]):
    """
    One write-once slot per submitted item.

    Workers write to the slot at their item's original index, so output order
    is the submission order whatever order the workers finish in. Each worker
    owns a distinct slot, so writes need no lock.
    """

    def __init__(self, size: int):
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        self._slots: list[object] = [_EMPTY] * size

    def __len__(self) -> int:
        return len(self._slots)

    def put(self, index: int, value: T) -> None:
        if self._slots[index] is not _EMPTY:
            raise RuntimeError(f"result slot {index} already filled")
        self._slots[index] = value

    def is_filled(self, index: int) -> bool:
        return self._slots[index] is not _EMPTY

    @property
    def pending(self) -> list[int]:
        return [index for index, value in enumerate(self._slots) if value is _EMPTY]

    def collect(self) -> list[T]:
        pending = self.pending
        if pending:
            raise RuntimeError(f"{len(pending)} result slot(s) never filled: {pending[:10]}")
        return list(self._slots)  # type: ignore[arg-type]
