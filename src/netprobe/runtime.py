# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level netprobe facade for single-target probes, batches and diagnostics."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import suppress

from .config import ProbeSettings, load_http_settings, load_probe_settings
from .diag import DnsResult, TracerouteResult, dns_lookup, traceroute
from .http.client import HttpClient, create_default_http_client
from .models import BatchResult, ProbeMethod, ProbeOutcome, ProbeParameters, Target
from .probes import EchoBackend
from .scan.engine import ProbeEngine


class NetProbe:
    """
    Convenience wrapper that wires a shared HTTP client and echo backend into
    one ProbeEngine.

    The same client is reused by every HTTP probe of every batch, and closed
    with the facade.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        echo_backend: EchoBackend | None = None,
        settings: ProbeSettings | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.http_settings = load_http_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        self.engine = ProbeEngine(self.http_client, echo_backend, self.settings)

    def run_probe(
        self,
        target: Target | str,
        method: ProbeMethod | str = ProbeMethod.PING,
        params: ProbeParameters | None = None,
    ) -> ProbeOutcome:
        return self.engine.run_probe(target, method, params)

    def run_batch(
        self,
        targets: Iterable[Target | str],
        params: ProbeParameters | None = None,
        method: ProbeMethod | str = ProbeMethod.PING,
    ) -> BatchResult:
        return self.engine.run_batch(targets, params, method)

    def ping(self, host: str, *, count: int | None = None, timeout: float | None = None) -> ProbeOutcome:
        params = ProbeParameters.for_ping(self.settings, count=count, timeout=timeout)
        return self.engine.run_probe(host, ProbeMethod.PING, params)

    def tcping(
        self,
        host: str,
        *,
        port: int | None = None,
        count: int | None = None,
        timeout: float | None = None,
    ) -> ProbeOutcome:
        params = ProbeParameters.for_tcp_check(self.settings, port=port, count=count, timeout=timeout)
        return self.engine.run_probe(host, ProbeMethod.TCP, params)

    def fetch(self, url: str, *, keyword: str | None = None, timeout: float | None = None) -> ProbeOutcome:
        params = ProbeParameters.for_http_scan(self.settings, keyword=keyword, timeout=timeout)
        return self.engine.run_probe(url, ProbeMethod.HTTP, params)

    def speed_test(self, url: str, *, duration: float | None = None) -> ProbeOutcome:
        params = ProbeParameters.for_download(self.settings, duration=duration)
        return self.engine.run_probe(url, ProbeMethod.DOWNLOAD, params)

    def bulk_ping(
        self,
        hosts: Iterable[Target | str],
        *,
        count: int | None = None,
        timeout: float | None = None,
        concurrency: int | None = None,
    ) -> BatchResult:
        params = ProbeParameters.for_bulk_ping(self.settings, count=count, timeout=timeout, concurrency=concurrency)
        return self.engine.bulk_ping(hosts, params)

    def bulk_http(
        self,
        urls: Iterable[Target | str],
        *,
        keyword: str | None = None,
        timeout: float | None = None,
        concurrency: int | None = None,
    ) -> BatchResult:
        params = ProbeParameters.for_http_scan(self.settings, timeout=timeout, concurrency=concurrency)
        return self.engine.bulk_http(urls, params, keyword=keyword)

    def traceroute(self, host: str, *, max_hops: int | None = None, timeout: float | None = None) -> TracerouteResult:
        return traceroute(
            host,
            max_hops=max_hops or self.settings.traceroute_max_hops,
            timeout=timeout or self.settings.traceroute_timeout,
        )

    def dns(self, host: str, record_type: str | None = "A") -> DnsResult:
        return dns_lookup(host, record_type, timeout=self.http_settings.timeout)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> NetProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
