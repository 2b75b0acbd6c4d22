# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe engine: single-target probes and bounded, ordered batches."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..config import ProbeSettings, load_probe_settings
from ..errors import BatchInputError
from ..http.client import HttpClient, create_default_http_client
from ..models import (
    BatchEntry,
    BatchResult,
    ProbeMethod,
    ProbeOutcome,
    ProbeParameters,
    Target,
    as_target,
)
from ..probes import (
    EchoBackend,
    FallbackPolicy,
    ProbeFunc,
    SystemPingBackend,
    build_ping_policy,
    download_probe,
    echo_probe,
    failure_from_exception,
    http_fetch_probe,
    tcp_connect_probe,
)
from ..probes.tcp import ConnectFunc, default_connect
from .executor import run_all
from .gate import AdmissionGate

logger = logging.getLogger(__name__)


class ProbeEngine:
    """
    Runs probes against one target or a batch of targets.

    The HTTP client is created lazily so ping-only callers never open one.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        echo_backend: EchoBackend | None = None,
        settings: ProbeSettings | None = None,
        *,
        connect: ConnectFunc = default_connect,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or load_probe_settings()
        self._http_client = http_client
        self.echo_backend = echo_backend or SystemPingBackend(grace=self.settings.ping_grace)
        self._connect = connect
        self._sleep = sleep
        self.ping_policy: FallbackPolicy = build_ping_policy(self.echo_backend, connect=connect, sleep=sleep)

    @property
    def http_client(self) -> HttpClient:
        if self._http_client is None:
            self._http_client = create_default_http_client()
        return self._http_client

    def default_parameters(self, method: ProbeMethod | str, *, batch: bool = False) -> ProbeParameters:
        method = ProbeMethod(method)
        if method in (ProbeMethod.PING, ProbeMethod.ICMP):
            if batch:
                return ProbeParameters.for_bulk_ping(self.settings)
            return ProbeParameters.for_ping(self.settings)
        if method == ProbeMethod.TCP:
            params = ProbeParameters.for_tcp_check(self.settings)
            return params.with_overrides(concurrency=self.settings.bulk_ping_concurrency) if batch else params
        if method == ProbeMethod.HTTP:
            return ProbeParameters.for_http_scan(self.settings)
        params = ProbeParameters.for_download(self.settings)
        return params.with_overrides(concurrency=self.settings.bulk_http_concurrency) if batch else params

    def _probe_for(self, method: ProbeMethod) -> ProbeFunc:
        if method == ProbeMethod.PING:
            return self.ping_policy.run
        if method == ProbeMethod.ICMP:
            return lambda target, params: echo_probe(self.echo_backend, target.host, params.count, params.timeout)
        if method == ProbeMethod.TCP:
            return self._tcp_check
        if method == ProbeMethod.HTTP:
            return lambda target, params: http_fetch_probe(
                self.http_client,
                target.url,
                timeout=params.timeout,
                max_body_bytes=params.max_body_bytes,
                keyword=params.keyword,
            )
        return lambda target, params: download_probe(
            self.http_client,
            target.url,
            duration=params.duration,
            timeout=params.timeout,
        )

    def _tcp_check(self, target: Target, params: ProbeParameters) -> ProbeOutcome:
        host, port = target.host_port(params.port or self.settings.tcp_check_port)
        return tcp_connect_probe(
            host,
            port or self.settings.tcp_check_port,
            count=params.count,
            timeout=params.timeout,
            delay=params.tcp_delay,
            connect=self._connect,
            sleep=self._sleep,
        )

    def run_probe(
        self,
        target: Target | str,
        method: ProbeMethod | str = ProbeMethod.PING,
        params: ProbeParameters | None = None,
    ) -> ProbeOutcome:
        """
        Probe a single target. Probe-level errors come back as a Failure;
        only invalid parameters raise.
        """
        method = ProbeMethod(method)
        resolved = as_target(target)
        params = (params or self.default_parameters(method)).validate()
        probe = self._probe_for(method)
        try:
            return probe(resolved, params)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s probe for %s failed: %s", method.value, resolved, exc)
            return failure_from_exception(exc, method.value)

    def run_batch(
        self,
        targets: Iterable[Target | str],
        params: ProbeParameters | None = None,
        method: ProbeMethod | str = ProbeMethod.PING,
        *,
        gate: AdmissionGate | None = None,
    ) -> BatchResult:
        """
        Probe every target under one concurrency cap.

        The result has one entry per target in submission order. An empty or
        blank target list is rejected before any probe starts. Without an
        explicit ``gate`` a fresh one sized ``params.concurrency`` is used.
        """
        method = ProbeMethod(method)
        if isinstance(targets, (str, Target)):
            raise BatchInputError("targets must be a sequence of targets, not a single target")
        resolved = [as_target(target) for target in targets]
        if not resolved:
            raise BatchInputError("no targets supplied")
        blank = [index for index, target in enumerate(resolved) if not target.value]
        if blank:
            raise BatchInputError(f"blank target(s) at position(s) {blank}")
        params = (params or self.default_parameters(method, batch=True)).validate()
        gate = gate or AdmissionGate(params.concurrency)
        probe = self._probe_for(method)

        started = time.monotonic()
        outcomes = run_all(
            resolved,
            lambda target: probe(target, params),
            gate=gate,
            on_error=lambda _target, exc: failure_from_exception(exc, method.value),
        )
        result = BatchResult(
            method=method.value,
            entries=[BatchEntry(target=target, outcome=outcome) for target, outcome in zip(resolved, outcomes)],
        )
        logger.info(
            "%s batch: %d targets, %d failed, peak concurrency %d/%d, %.2fs",
            method.value,
            len(result),
            len(result.failed),
            gate.peak,
            gate.capacity,
            time.monotonic() - started,
        )
        return result

    def bulk_ping(self, hosts: Iterable[Target | str], params: ProbeParameters | None = None) -> BatchResult:
        return self.run_batch(hosts, params or ProbeParameters.for_bulk_ping(self.settings), ProbeMethod.PING)

    def bulk_http(
        self,
        urls: Iterable[Target | str],
        params: ProbeParameters | None = None,
        *,
        keyword: str | None = None,
    ) -> BatchResult:
        params = params or ProbeParameters.for_http_scan(self.settings)
        return self.run_batch(urls, params.with_overrides(keyword=keyword), ProbeMethod.HTTP)
