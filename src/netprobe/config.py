# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for netprobe."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"netprobe/{__version__} (+network diagnostics)"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _positive_int_env(name: str, default: int) -> int:
    value = _int_env(name, default)
    return value if value > 0 else default


def _positive_float_env(name: str, default: float) -> float:
    value = _float_env(name, default)
    return value if value > 0 else default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 200 * 1024
    download_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            timeout=_positive_float_env("NETPROBE_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("NETPROBE_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("NETPROBE_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("NETPROBE_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=_positive_int_env("NETPROBE_HTTP_MAX_BODY_BYTES", cls.max_body_bytes),
            download_timeout=_positive_float_env("NETPROBE_DOWNLOAD_CLIENT_TIMEOUT", cls.download_timeout),
        )


@dataclass
class ProbeSettings:
    """Probe and batch defaults applied when the caller omits a value.

    Durations are in seconds.
    """

    ping_count: int = 4
    bulk_ping_count: int = 3
    timeout: float = 2.0
    http_timeout: float = 5.0
    bulk_ping_concurrency: int = 25
    bulk_http_concurrency: int = 20
    http_max_body_bytes: int = 200 * 1024
    download_duration: float = 5.0
    download_timeout: float = 30.0
    tcp_fallback_port: int = 80
    tcp_check_port: int = 443
    tcp_delay: float = 0.1
    ping_grace: float = 2.0
    traceroute_max_hops: int = 30
    traceroute_timeout: float = 3.0

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        tcp_delay = _float_env("NETPROBE_TCP_DELAY", cls.tcp_delay)
        if tcp_delay < 0:
            tcp_delay = cls.tcp_delay
        return cls(
            ping_count=_positive_int_env("NETPROBE_PING_COUNT", cls.ping_count),
            bulk_ping_count=_positive_int_env("NETPROBE_BULK_PING_COUNT", cls.bulk_ping_count),
            timeout=_positive_float_env("NETPROBE_TIMEOUT", cls.timeout),
            http_timeout=_positive_float_env("NETPROBE_HTTP_TIMEOUT", cls.http_timeout),
            bulk_ping_concurrency=_positive_int_env("NETPROBE_BULK_PING_CONCURRENCY", cls.bulk_ping_concurrency),
            bulk_http_concurrency=_positive_int_env("NETPROBE_BULK_HTTP_CONCURRENCY", cls.bulk_http_concurrency),
            http_max_body_bytes=_positive_int_env("NETPROBE_HTTP_MAX_BODY_BYTES", cls.http_max_body_bytes),
            download_duration=_positive_float_env("NETPROBE_DOWNLOAD_DURATION", cls.download_duration),
            download_timeout=_positive_float_env("NETPROBE_DOWNLOAD_TIMEOUT", cls.download_timeout),
            tcp_fallback_port=_positive_int_env("NETPROBE_TCP_FALLBACK_PORT", cls.tcp_fallback_port),
            tcp_check_port=_positive_int_env("NETPROBE_TCP_CHECK_PORT", cls.tcp_check_port),
            tcp_delay=tcp_delay,
            ping_grace=_positive_float_env("NETPROBE_PING_GRACE", cls.ping_grace),
            traceroute_max_hops=_positive_int_env("NETPROBE_TRACEROUTE_MAX_HOPS", cls.traceroute_max_hops),
            traceroute_timeout=_positive_float_env("NETPROBE_TRACEROUTE_TIMEOUT", cls.traceroute_timeout),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_probe_settings() -> ProbeSettings:
    """Load probe defaults from environment with sensible defaults."""
    return ProbeSettings.from_env()
