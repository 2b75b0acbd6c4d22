# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for netprobe."""

from .batch import BatchEntry, BatchResult
from .outcome import DownloadStats, Failure, HttpFetchStats, LatencyStats, Measurement, ProbeOutcome
from .params import ProbeParameters
from .target import TCP_FALLBACK_TAG, ProbeMethod, Target, as_target

__all__ = [
    "BatchEntry",
    "BatchResult",
    "DownloadStats",
    "Failure",
    "HttpFetchStats",
    "LatencyStats",
    "Measurement",
    "ProbeMethod",
    "ProbeOutcome",
    "ProbeParameters",
    "TCP_FALLBACK_TAG",
    "Target",
    "as_target",
]
