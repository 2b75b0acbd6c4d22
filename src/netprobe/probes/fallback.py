# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Method fallback as a sequential pipeline of tagged probe steps.

A step only runs when every earlier step failed. The first measurement wins
and is tagged with its step's name; when all steps fail their failures are
folded into one whose cause names each attempt.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from ..models import TCP_FALLBACK_TAG, Failure, Measurement, ProbeMethod, ProbeOutcome, ProbeParameters, Target
from .base import ProbeFunc, failure_from_exception
from .echo import EchoBackend, echo_probe
from .tcp import ConnectFunc, default_connect, tcp_connect_probe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FallbackStep:
    tag: str
    probe: ProbeFunc


class FallbackPolicy:
    """Runs steps in order until one produces a measurement."""

    def __init__(self, steps: Sequence[FallbackStep]):
        if not steps:
            raise ValueError("FallbackPolicy needs at least one step")
        self.steps = tuple(steps)

    def run(self, target: Target, params: ProbeParameters) -> ProbeOutcome:
        failures: list[Failure] = []
        for step in self.steps:
            try:
                outcome = step.probe(target, params)
            except Exception as exc:  # noqa: BLE001
                outcome = failure_from_exception(exc, step.tag)

            if isinstance(outcome, Measurement):
                if failures:
                    logger.info("%s: %s succeeded after %s failed", target, step.tag, failures[-1].method)
                return outcome.tagged(step.tag)

            logger.debug("%s: %s failed: %s", target, step.tag, outcome.cause)
            failures.append(replace(outcome, method=step.tag))
        return Failure.combine(failures)

    __call__ = run


def echo_step(backend: EchoBackend) -> FallbackStep:
    def probe(target: Target, params: ProbeParameters) -> ProbeOutcome:
        return echo_probe(backend, target.host, params.count, params.timeout)

    return FallbackStep(tag=ProbeMethod.ICMP.value, probe=probe)


def tcp_fallback_step(
    *,
    port: int | None = None,
    connect: ConnectFunc = default_connect,
    sleep: Callable[[float], None] = time.sleep,
) -> FallbackStep:
    def probe(target: Target, params: ProbeParameters) -> ProbeOutcome:
        return tcp_connect_probe(
            target.host,
            port or params.fallback_port,
            count=params.count,
            timeout=params.timeout,
            delay=params.tcp_delay,
            connect=connect,
            sleep=sleep,
            method=TCP_FALLBACK_TAG,
        )

    return FallbackStep(tag=TCP_FALLBACK_TAG, probe=probe)


def build_ping_policy(
    backend: EchoBackend,
    *,
    connect: ConnectFunc = default_connect,
    sleep: Callable[[float], None] = time.sleep,
) -> FallbackPolicy:
    """Echo first, then TCP connect to the fallback port."""
    return FallbackPolicy([echo_step(backend), tcp_fallback_step(connect=connect, sleep=sleep)])


def ping_with_fallback(
    target: Target | str,
    params: ProbeParameters,
    *,
    backend: EchoBackend,
    connect: ConnectFunc = default_connect,
) -> ProbeOutcome:
    resolved = target if isinstance(target, Target) else Target(target)
    return build_ping_policy(backend, connect=connect).run(resolved, params)
