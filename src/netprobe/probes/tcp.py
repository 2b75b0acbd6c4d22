# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""TCP connect probe."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable

from ..errors import ErrorCategory, categorize_exception
from ..models import Failure, LatencyStats, Measurement, ProbeMethod, ProbeOutcome

logger = logging.getLogger(__name__)

ConnectFunc = Callable[[tuple[str, int], float], socket.socket]


def default_connect(address: tuple[str, int], timeout: float) -> socket.socket:
    return socket.create_connection(address, timeout=timeout)


def tcp_connect_probe(
    host: str,
    port: int,
    *,
    count: int,
    timeout: float,
    delay: float = 0.1,
    connect: ConnectFunc = default_connect,
    sleep: Callable[[float], None] = time.sleep,
    method: str = ProbeMethod.TCP.value,
) -> ProbeOutcome:
    """
    Run ``count`` sequential connect-then-close cycles against ``(host, port)``.

    Statistics cover successful attempts only. Zero successes is a Failure
    carrying a 100% loss report; the cause names the last connect error.
    """
    logger.debug("tcp probe %s:%d count=%d timeout=%.2fs", host, port, count, timeout)
    rtts_ms: list[float] = []
    errors: list[BaseException] = []
    started = time.monotonic()

    for attempt in range(count):
        if attempt and delay > 0:
            sleep(delay)
        attempt_start = time.perf_counter()
        try:
            conn = connect((host, port), timeout)
        except OSError as exc:
            errors.append(exc)
            continue
        rtts_ms.append((time.perf_counter() - attempt_start) * 1000.0)
        conn.close()

    stats = LatencyStats.from_samples(count, rtts_ms, duration_seconds=time.monotonic() - started)
    if rtts_ms:
        return Measurement(method=method, stats=stats)

    last_error = errors[-1] if errors else None
    detail = f": {str(last_error) or type(last_error).__name__}" if last_error is not None else ""
    category = ErrorCategory.UNREACHABLE
    if last_error is not None and categorize_exception(last_error) in {ErrorCategory.DNS_ERROR, ErrorCategory.TIMEOUT}:
        category = categorize_exception(last_error)
    return Failure(
        cause=f"no tcp success to {host}:{port} after {count} attempts{detail}",
        category=category,
        method=method,
        stats=stats,
    )
