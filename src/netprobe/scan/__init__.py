# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Batch orchestration: admission gate, bounded executor, ordered result slots."""

from .aggregator import ResultSlots
from .engine import ProbeEngine
from .executor import run_all
from .gate import AdmissionGate

__all__ = ["AdmissionGate", "ProbeEngine", "ResultSlots", "run_all"]
