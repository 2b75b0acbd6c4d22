# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single-target probes and the method fallback policy."""

from .base import ProbeFunc, failure_from_exception
from .echo import EchoBackend, SystemPingBackend, build_ping_command, echo_probe, parse_ping_output
from .fallback import (
    FallbackPolicy,
    FallbackStep,
    build_ping_policy,
    echo_step,
    ping_with_fallback,
    tcp_fallback_step,
)
from .http import download_probe, http_fetch_probe, keyword_in_body
from .tcp import tcp_connect_probe

__all__ = [
    "EchoBackend",
    "FallbackPolicy",
    "FallbackStep",
    "ProbeFunc",
    "SystemPingBackend",
    "build_ping_command",
    "build_ping_policy",
    "download_probe",
    "echo_probe",
    "echo_step",
    "failure_from_exception",
    "http_fetch_probe",
    "keyword_in_body",
    "parse_ping_output",
    "ping_with_fallback",
    "tcp_connect_probe",
    "tcp_fallback_step",
]
