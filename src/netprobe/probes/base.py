# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared helpers for probe implementations."""

from __future__ import annotations

from collections.abc import Callable

from ..errors import ProbeError, categorize_exception
from ..models import Failure, ProbeOutcome, ProbeParameters, Target

ProbeFunc = Callable[[Target, ProbeParameters], ProbeOutcome]


def failure_from_exception(exc: BaseException, method: str | None) -> Failure:
    """Convert an exception raised inside a probe into a typed Failure."""
    cause = str(exc) or type(exc).__name__
    if isinstance(exc, ProbeError):
        return Failure(cause=cause, category=exc.category, method=method)
    return Failure(cause=cause, category=categorize_exception(exc), method=method)
