# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ordered batch results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .outcome import Failure, Measurement, ProbeOutcome
from .target import Target


@dataclass(frozen=True)
class BatchEntry:
    target: Target
    outcome: ProbeOutcome

    @property
    def ok(self) -> bool:
        return self.outcome.ok

    def to_dict(self) -> dict[str, Any]:
        return {"target": self.target.value, **self.outcome.to_dict()}


@dataclass
class BatchResult:
    """One entry per submitted target, in submission order."""

    method: str
    entries: list[BatchEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[BatchEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> BatchEntry:
        return self.entries[index]

    @property
    def targets(self) -> list[Target]:
        return [entry.target for entry in self.entries]

    @property
    def outcomes(self) -> list[ProbeOutcome]:
        return [entry.outcome for entry in self.entries]

    @property
    def succeeded(self) -> list[BatchEntry]:
        return [entry for entry in self.entries if isinstance(entry.outcome, Measurement)]

    @property
    def failed(self) -> list[BatchEntry]:
        return [entry for entry in self.entries if isinstance(entry.outcome, Failure)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "total": len(self.entries),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "results": [entry.to_dict() for entry in self.entries],
        }
