# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
netprobe package entrypoint.

This package runs reachability and latency probes (ICMP echo with TCP
fallback, TCP connect, HTTP fetch, download throughput) against one target or
a batch of targets under a bounded concurrency budget, returning one ordered
result per target. HTTP behavior is abstracted behind an injectable client
interface, and domain objects are modeled with typed dataclasses.
"""

from .config import HttpSettings, ProbeSettings, load_http_settings, load_probe_settings
from .errors import BatchInputError, ErrorCategory, InvalidParametersError, NetProbeError
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, StubHttpClient, create_default_http_client
from .log import setup_logging
from .models import (
    BatchEntry,
    BatchResult,
    Failure,
    Measurement,
    ProbeMethod,
    ProbeOutcome,
    ProbeParameters,
    Target,
)
from .probes import FallbackPolicy, SystemPingBackend, ping_with_fallback
from .runtime import NetProbe
from .scan import AdmissionGate, ProbeEngine, ResultSlots, run_all
from .version import __version__

__all__ = [
    "AdmissionGate",
    "BatchEntry",
    "BatchInputError",
    "BatchResult",
    "ErrorCategory",
    "Failure",
    "FallbackPolicy",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "InvalidParametersError",
    "Measurement",
    "NetProbe",
    "NetProbeError",
    "ProbeEngine",
    "ProbeMethod",
    "ProbeOutcome",
    "ProbeParameters",
    "ProbeSettings",
    "ResultSlots",
    "StubHttpClient",
    "SystemPingBackend",
    "Target",
    "create_default_http_client",
    "load_http_settings",
    "load_probe_settings",
    "ping_with_fallback",
    "run_all",
    "setup_logging",
    "__version__",
]
