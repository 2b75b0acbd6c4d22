# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""ICMP echo probe backed by the system ``ping`` binary."""

from __future__ import annotations

import logging
import math
import platform
import re
import shutil
import subprocess
import time
from collections.abc import Callable
from typing import Protocol

from ..errors import (
    ErrorCategory,
    ProbeError,
    ProbeTimeoutError,
    TransportUnavailableError,
    UnreachableError,
)
from ..models import LatencyStats, Measurement, ProbeMethod, ProbeOutcome
from .base import failure_from_exception

logger = logging.getLogger(__name__)

DEFAULT_PING_GRACE = 2.0

_TRANSMITTED_RE = re.compile(r"(\d+)\s+packets?\s+transmitted,\s+(\d+)\s+(?:packets\s+)?received", re.IGNORECASE)
_WINDOWS_COUNTS_RE = re.compile(r"Sent\s*=\s*(\d+),\s*Received\s*=\s*(\d+)", re.IGNORECASE)
_RTT_RE = re.compile(r"min/avg/max(?:/(?:mdev|stddev))?\s*=\s*([\d.]+)/([\d.]+)/([\d.]+)(?:/([\d.]+))?\s*ms")
_WINDOWS_RTT_RE = re.compile(
    r"Minimum\s*=\s*(\d+)ms,\s*Maximum\s*=\s*(\d+)ms,\s*Average\s*=\s*(\d+)ms",
    re.IGNORECASE,
)
_PRIVILEGE_MARKERS = ("operation not permitted", "permission denied", "must be root", "lacking privilege")
_RESOLVE_MARKERS = (
    "unknown host",
    "name or service not known",
    "cannot resolve",
    "could not find host",
    "temporary failure in name resolution",
    "no address associated",
)


class EchoBackend(Protocol):
    """Raw echo capability: ``(host, count, timeout) -> statistics`` or a ProbeError."""

    def echo(self, host: str, count: int, timeout: float) -> LatencyStats: ...


def build_ping_command(binary: str, host: str, count: int, timeout: float, system: str | None = None) -> list[str]:
    system = (system or platform.system()).lower()
    if system == "windows":
        return [binary, "-n", str(count), "-w", str(max(1, int(timeout * 1000))), host]
    if system == "darwin":
        return [binary, "-c", str(count), "-W", str(max(1, int(timeout * 1000))), host]
    return [binary, "-c", str(count), "-W", str(max(1, math.ceil(timeout))), host]


def parse_ping_output(output: str, *, duration_seconds: float | None = None) -> LatencyStats | None:
    """
    Parse the summary block printed by ``ping``.

    Returns ``None`` when no packet summary is present (the run failed before
    sending). Latency fields stay ``None`` when nothing was received.
    """
    counts = _TRANSMITTED_RE.search(output) or _WINDOWS_COUNTS_RE.search(output)
    if counts is None:
        return None
    sent, received = int(counts.group(1)), int(counts.group(2))
    loss = 100.0 if sent == 0 else (sent - received) / sent * 100.0

    min_rtt = avg_rtt = max_rtt = stddev = None
    rtt = _RTT_RE.search(output)
    if rtt is not None:
        min_rtt, avg_rtt, max_rtt = (float(rtt.group(i)) for i in (1, 2, 3))
        stddev = float(rtt.group(4)) if rtt.group(4) is not None else None
    else:
        win_rtt = _WINDOWS_RTT_RE.search(output)
        if win_rtt is not None:
            min_rtt, max_rtt, avg_rtt = (float(win_rtt.group(i)) for i in (1, 2, 3))

    return LatencyStats(
        packets_sent=sent,
        packets_recv=received,
        packet_loss=loss,
        min_rtt_ms=min_rtt,
        avg_rtt_ms=avg_rtt,
        max_rtt_ms=max_rtt,
        stddev_ms=stddev,
        duration_seconds=duration_seconds,
    )


def _last_line(output: str) -> str:
    lines = [line.strip() for line in output.strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""


class SystemPingBackend:
    """
    Echo backend that shells out to ``ping``.

    The process deadline is ``count * timeout + grace``; exceeding it is a
    timeout, a missing binary or a privilege complaint is transport-unavailable.
    """

    def __init__(
        self,
        binary: str = "ping",
        *,
        grace: float = DEFAULT_PING_GRACE,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        system: str | None = None,
    ):
        self.binary = binary
        self.grace = grace
        self._runner = runner
        self._system = system

    def echo(self, host: str, count: int, timeout: float) -> LatencyStats:
        binary = shutil.which(self.binary)
        if binary is None:
            raise TransportUnavailableError(f"echo unavailable: '{self.binary}' not found on PATH")

        argv = build_ping_command(binary, host, count, timeout, self._system)
        deadline = count * timeout + self.grace
        started = time.monotonic()
        try:
            completed = self._runner(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=deadline,
                check=False,
                text=True,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProbeTimeoutError(f"echo to {host} did not finish within {deadline:.1f}s") from exc
        except OSError as exc:
            raise TransportUnavailableError(f"echo unavailable: {exc}") from exc

        output = completed.stdout or ""
        stats = parse_ping_output(output, duration_seconds=time.monotonic() - started)
        if stats is None:
            lowered = output.lower()
            detail = _last_line(output) or f"ping exited with status {completed.returncode}"
            if any(marker in lowered for marker in _PRIVILEGE_MARKERS):
                raise TransportUnavailableError(f"echo unavailable: {detail}")
            if any(marker in lowered for marker in _RESOLVE_MARKERS):
                raise ProbeError(f"echo to {host} failed: {detail}", ErrorCategory.DNS_ERROR)
            raise ProbeError(f"echo to {host} failed: {detail}")
        if stats.packets_recv == 0:
            raise UnreachableError(f"echo to {host}: {stats.packets_sent} requests sent, 0 replies (100% loss)")
        return stats


def echo_probe(backend: EchoBackend, host: str, count: int, timeout: float) -> ProbeOutcome:
    """Run one echo probe; every error is returned as a Failure."""
    logger.debug("echo probe %s count=%d timeout=%.2fs", host, count, timeout)
    try:
        stats = backend.echo(host, count, timeout)
    except Exception as exc:  # noqa: BLE001
        return failure_from_exception(exc, ProbeMethod.ICMP.value)
    return Measurement(method=ProbeMethod.ICMP.value, stats=stats)
