# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single-target diagnostics that sit beside the probe engine."""

from .dns import SUPPORTED_RECORD_TYPES, DnsResult, dns_lookup
from .traceroute import TracerouteResult, build_traceroute_command, traceroute

__all__ = [
    "DnsResult",
    "SUPPORTED_RECORD_TYPES",
    "TracerouteResult",
    "build_traceroute_command",
    "dns_lookup",
    "traceroute",
]
