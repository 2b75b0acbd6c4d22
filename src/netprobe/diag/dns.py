# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Name lookups for A, MX, NS and TXT records."""

from __future__ import annotations

import socket
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import dns.exception
import dns.resolver

from ..errors import DiagnosticError

SUPPORTED_RECORD_TYPES = ("A", "MX", "NS", "TXT")


@dataclass
class DnsResult:
    host: str
    record_type: str
    records: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"host": self.host, self.record_type: self.records}


def _lookup_host(host: str, getaddrinfo: Callable[..., list]) -> list[str]:
    try:
        infos = getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    except OSError as exc:
        raise DiagnosticError(f"lookup {host}: {exc}") from exc
    addresses: list[str] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


def _format_rdata(record_type: str, rdata: Any) -> Any:
    if record_type == "MX":
        return {"host": rdata.exchange.to_text(), "pref": int(rdata.preference)}
    if record_type == "NS":
        return {"host": rdata.target.to_text()}
    if record_type == "TXT":
        return "".join(part.decode("utf-8", errors="replace") for part in rdata.strings)
    return rdata.to_text()


def dns_lookup(
    host: str,
    record_type: str | None = "A",
    *,
    timeout: float = 5.0,
    resolver: dns.resolver.Resolver | None = None,
    getaddrinfo: Callable[..., list] = socket.getaddrinfo,
) -> DnsResult:
    """
    Resolve ``host``. ``A`` (the default, also for an empty type) goes through
    the system resolver and returns every address; other types use dnspython.
    """
    rtype = (record_type or "A").strip().upper() or "A"
    if rtype not in SUPPORTED_RECORD_TYPES:
        raise DiagnosticError(f"unsupported record type: {record_type}")
    if rtype == "A":
        return DnsResult(host=host, record_type=rtype, records=_lookup_host(host, getaddrinfo))

    resolver = resolver or dns.resolver.Resolver()
    try:
        answer = resolver.resolve(host, rtype, lifetime=timeout)
    except dns.exception.DNSException as exc:
        raise DiagnosticError(f"lookup {host} {rtype}: {exc}") from exc
    return DnsResult(host=host, record_type=rtype, records=[_format_rdata(rtype, rdata) for rdata in answer])
