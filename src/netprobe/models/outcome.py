# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tagged probe outcomes: a measurement or a typed failure."""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Literal, Union

from ..errors import ErrorCategory


@dataclass(frozen=True)
class LatencyStats:
    """Packet and round-trip statistics. Latencies are in milliseconds."""

    packets_sent: int
    packets_recv: int
    packet_loss: float
    min_rtt_ms: float | None = None
    avg_rtt_ms: float | None = None
    max_rtt_ms: float | None = None
    stddev_ms: float | None = None
    duration_seconds: float | None = None

    @classmethod
    def from_samples(
        cls,
        sent: int,
        rtts_ms: Sequence[float],
        *,
        duration_seconds: float | None = None,
    ) -> LatencyStats:
        """Build statistics over successful samples only (population stddev)."""
        received = len(rtts_ms)
        loss = 100.0 if sent <= 0 else (sent - received) / sent * 100.0
        if not rtts_ms:
            return cls(packets_sent=sent, packets_recv=0, packet_loss=100.0, duration_seconds=duration_seconds)
        return cls(
            packets_sent=sent,
            packets_recv=received,
            packet_loss=loss,
            min_rtt_ms=min(rtts_ms),
            avg_rtt_ms=statistics.fmean(rtts_ms),
            max_rtt_ms=max(rtts_ms),
            stddev_ms=statistics.pstdev(rtts_ms),
            duration_seconds=duration_seconds,
        )


@dataclass(frozen=True)
class HttpFetchStats:
    url: str
    status_code: int
    bytes_read: int
    duration_ms: float
    has_keyword: bool = False
    truncated: bool = False


@dataclass(frozen=True)
class DownloadStats:
    url: str
    status_code: int
    bytes_downloaded: int
    seconds: float
    throughput_bps: float
    stopped_by: Literal["eof", "duration"] = "eof"


Stats = Union[LatencyStats, HttpFetchStats, DownloadStats]


@dataclass(frozen=True)
class Measurement:
    """Successful probe: the method that produced it plus its statistics."""

    method: str
    stats: Stats

    @property
    def ok(self) -> bool:
        return True

    def tagged(self, method: str) -> Measurement:
        return replace(self, method=method)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "method": self.method, "result": asdict(self.stats)}


@dataclass(frozen=True)
class Failure:
    """
    Failed probe.

    ``causes`` lists every attempted method's cause in order; ``cause`` is
    their concatenation. ``stats`` carries a loss report when one exists
    (e.g. 100% loss for an unreachable TCP target).
    """

    cause: str
    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR
    method: str | None = None
    causes: tuple[str, ...] = field(default=())
    stats: LatencyStats | None = None

    def __post_init__(self) -> None:
        if not self.causes:
            object.__setattr__(self, "causes", (self.cause,))

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_timeout(self) -> bool:
        return self.category == ErrorCategory.TIMEOUT

    @classmethod
    def combine(cls, failures: Sequence[Failure], *, separator: str = " | ") -> Failure:
        """Fold several failures into one whose cause names all of them."""
        if not failures:
            raise ValueError("combine() needs at least one failure")
        causes = tuple(cause for failure in failures for cause in failure.causes)
        last = failures[-1]
        return cls(
            cause=separator.join(causes),
            category=last.category,
            method=last.method,
            causes=causes,
            stats=last.stats,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ok": False,
            "method": self.method,
            "error": self.cause,
            "category": self.category.value,
        }
        if len(self.causes) > 1:
            data["causes"] = list(self.causes)
        if self.stats is not None:
            data["result"] = asdict(self.stats)
        return data


ProbeOutcome = Union[Measurement, Failure]
