# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the HTTP probes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    allow_redirects: bool = True
    max_body_bytes: int | None = None


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    ``content`` holds at most the requested byte cap; ``elapsed`` covers the
    request plus the body read, in seconds. Downloads leave ``content`` empty
    and report their counters in ``meta``.
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    url: str | None = None
    elapsed: float = 0.0
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def truncated(self) -> bool:
        return bool(self.meta.get("body_truncated"))
