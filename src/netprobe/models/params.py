# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared, read-only parameters for a probe or batch."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ..config import ProbeSettings, load_probe_settings
from ..errors import InvalidParametersError


@dataclass(frozen=True)
class ProbeParameters:
    """
    Batch-wide probe configuration. Durations are in seconds.

    ``port`` overrides the TCP port for the ``tcp`` method; the ping fallback
    always uses ``fallback_port``.
    """

    count: int = 4
    timeout: float = 2.0
    concurrency: int = 25
    keyword: str | None = None
    max_body_bytes: int = 200 * 1024
    duration: float = 5.0
    port: int | None = None
    fallback_port: int = 80
    tcp_delay: float = 0.1

    def validate(self) -> ProbeParameters:
        if self.count <= 0:
            raise InvalidParametersError(f"count must be positive, got {self.count}")
        if self.timeout <= 0:
            raise InvalidParametersError(f"timeout must be positive, got {self.timeout}")
        if self.concurrency <= 0:
            raise InvalidParametersError(f"concurrency must be positive, got {self.concurrency}")
        if self.max_body_bytes <= 0:
            raise InvalidParametersError(f"max_body_bytes must be positive, got {self.max_body_bytes}")
        if self.duration <= 0:
            raise InvalidParametersError(f"duration must be positive, got {self.duration}")
        if self.port is not None and not 0 < self.port < 65536:
            raise InvalidParametersError(f"port out of range: {self.port}")
        if self.tcp_delay < 0:
            raise InvalidParametersError(f"tcp_delay must not be negative, got {self.tcp_delay}")
        return self

    def with_overrides(self, **overrides: Any) -> ProbeParameters:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def _base(cls, settings: ProbeSettings | None) -> tuple[ProbeSettings, dict[str, Any]]:
        cfg = settings or load_probe_settings()
        return cfg, {
            "timeout": cfg.timeout,
            "max_body_bytes": cfg.http_max_body_bytes,
            "duration": cfg.download_duration,
            "fallback_port": cfg.tcp_fallback_port,
            "tcp_delay": cfg.tcp_delay,
        }

    @classmethod
    def for_ping(cls, settings: ProbeSettings | None = None, **overrides: Any) -> ProbeParameters:
        cfg, base = cls._base(settings)
        return cls(count=cfg.ping_count, concurrency=1, **base).with_overrides(**overrides)

    @classmethod
    def for_bulk_ping(cls, settings: ProbeSettings | None = None, **overrides: Any) -> ProbeParameters:
        cfg, base = cls._base(settings)
        return cls(count=cfg.bulk_ping_count, concurrency=cfg.bulk_ping_concurrency, **base).with_overrides(**overrides)

    @classmethod
    def for_http_scan(cls, settings: ProbeSettings | None = None, **overrides: Any) -> ProbeParameters:
        cfg, base = cls._base(settings)
        base["timeout"] = cfg.http_timeout
        return cls(count=1, concurrency=cfg.bulk_http_concurrency, **base).with_overrides(**overrides)

    @classmethod
    def for_tcp_check(cls, settings: ProbeSettings | None = None, **overrides: Any) -> ProbeParameters:
        cfg, base = cls._base(settings)
        return cls(count=1, concurrency=1, port=cfg.tcp_check_port, **base).with_overrides(**overrides)

    @classmethod
    def for_download(cls, settings: ProbeSettings | None = None, **overrides: Any) -> ProbeParameters:
        cfg, base = cls._base(settings)
        base["timeout"] = cfg.download_timeout
        return cls(count=1, concurrency=1, **base).with_overrides(**overrides)
