# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit


class ProbeMethod(str, Enum):
    """Probe methods understood by the engine, valued by their outcome tag."""

    PING = "ping"
    ICMP = "icmp"
    TCP = "tcp"
    HTTP = "http"
    DOWNLOAD = "download"


TCP_FALLBACK_TAG = "tcp-fallback"


@dataclass(frozen=True)
class Target:
    """Opaque identifier of what is probed: ``host``, ``host:port`` or a URL."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", str(self.value).strip())

    def __str__(self) -> str:
        return self.value

    @property
    def is_url(self) -> bool:
        return "://" in self.value

    @property
    def url(self) -> str:
        return self.value

    def host_port(self, default_port: int | None = None) -> tuple[str, int | None]:
        """
        Split the target into ``(host, port)``.

        URLs yield their hostname and explicit port (or the scheme default when
        no ``default_port`` is given). Bracketed IPv6 literals are unwrapped; a
        bare IPv6 literal is treated as a host without port.
        """
        raw = self.value
        if self.is_url:
            parts = urlsplit(raw)
            host = parts.hostname or ""
            try:
                port = parts.port
            except ValueError:
                port = None
            if port is None:
                if default_port is not None:
                    port = default_port
                elif parts.scheme == "https":
                    port = 443
                elif parts.scheme == "http":
                    port = 80
            return host, port

        if raw.startswith("["):
            host, _, rest = raw[1:].partition("]")
            if rest.startswith(":") and rest[1:].isdigit():
                return host, int(rest[1:])
            return host, default_port

        if raw.count(":") == 1:
            host, _, port_text = raw.partition(":")
            if port_text.isdigit():
                return host, int(port_text)
        return raw, default_port

    @property
    def host(self) -> str:
        return self.host_port()[0]


def as_target(value: Target | str) -> Target:
    return value if isinstance(value, Target) else Target(value)
