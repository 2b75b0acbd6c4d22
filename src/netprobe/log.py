# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for netprobe."""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "netprobe"
LOG_LEVEL_ENV = "NETPROBE_LOG_LEVEL"
FALLBACK_LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def resolve_log_level(level: str | int | None = None) -> int:
    """
    Pick the effective level: an explicit ``level`` (e.g. CLI ``--log-level``)
    wins, then ``NETPROBE_LOG_LEVEL``, then WARNING.

    Unknown level names fall back to WARNING.
    """
    if isinstance(level, int):
        return level
    name = (level or os.getenv(LOG_LEVEL_ENV) or "").strip().upper()
    if not name:
        return FALLBACK_LOG_LEVEL
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else FALLBACK_LOG_LEVEL


def setup_logging(level: str | int | None = None, *, logger_name: str = LOGGER_NAME) -> logging.Logger:
    """
    Configure logging for CLI/library use and return the package logger.

    The level is set on the package logger itself, so it applies even when
    the root logger already has handlers and ``basicConfig`` does nothing.
    """
    effective_level = resolve_log_level(level)
    logging.basicConfig(level=effective_level, format=LOG_FORMAT)
    logger = logging.getLogger(logger_name)
    logger.setLevel(effective_level)
    return logger


__all__ = ["LOGGER_NAME", "resolve_log_level", "setup_logging"]
