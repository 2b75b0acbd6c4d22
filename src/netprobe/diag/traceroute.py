# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Traceroute via the system binary; output is returned verbatim."""

from __future__ import annotations

import math
import platform
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..errors import DiagnosticError


@dataclass
class TracerouteResult:
    host: str
    output: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> dict[str, Any]:
        return {"host": self.host, "output": self.output, "returncode": self.returncode}


def build_traceroute_command(host: str, max_hops: int, timeout: float, system: str | None = None) -> list[str]:
    system = (system or platform.system()).lower()
    if system == "windows":
        return ["tracert", "-h", str(max_hops), "-w", str(max(1, int(timeout * 1000))), host]
    return ["traceroute", "-m", str(max_hops), "-w", str(max(1, math.floor(timeout))), host]


def traceroute(
    host: str,
    *,
    max_hops: int = 30,
    timeout: float = 3.0,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    system: str | None = None,
) -> TracerouteResult:
    """
    Run traceroute and capture combined stdout/stderr.

    The process gets ``max_hops * 3 * timeout`` seconds (three probes per hop).
    A missing binary or an expired process deadline raises DiagnosticError; a
    non-zero exit still returns the output.
    """
    argv = build_traceroute_command(host, max_hops, timeout, system)
    if shutil.which(argv[0]) is None:
        raise DiagnosticError(f"{argv[0]} not found on PATH")
    deadline = max_hops * 3 * timeout
    try:
        completed = runner(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=deadline,
            check=False,
            text=True,
        )
    except subprocess.TimeoutExpired as exc:
        raise DiagnosticError(f"traceroute to {host} did not finish within {deadline:.0f}s") from exc
    except OSError as exc:
        raise DiagnosticError(f"traceroute to {host} failed: {exc}") from exc
    return TracerouteResult(host=host, output=completed.stdout or "", returncode=completed.returncode)
