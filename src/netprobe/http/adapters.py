# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

import threading
import time

from .client import HttpClient
from .models import HttpRequest, HttpResponse


class StubHttpClient(HttpClient):
    """
    Deterministic, programmable HttpClient for tests and dry runs.

    Stubbed bodies are capped at ``request.max_body_bytes`` the same way the
    httpx client caps them; ``delays`` holds per-URL sleep times in seconds.
    """

    def __init__(
        self,
        responses: dict[str, HttpResponse] | None = None,
        *,
        delays: dict[str, float] | None = None,
    ):
        self._responses = responses or {}
        self._delays = delays or {}
        self._lock = threading.Lock()
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse, *, delay: float | None = None) -> None:
        self._responses[url] = response
        if delay is not None:
            self._delays[url] = delay

    def _lookup(self, request: HttpRequest) -> HttpResponse | None:
        with self._lock:
            self.requests.append(request)
        delay = self._delays.get(request.url)
        if delay:
            time.sleep(delay)
        return self._responses.get(request.url)

    def request(self, request: HttpRequest) -> HttpResponse:
        stub = self._lookup(request)
        if stub is None:
            return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")
        if not stub.ok or request.max_body_bytes is None or len(stub.content) <= request.max_body_bytes:
            return stub
        content = stub.content[: request.max_body_bytes]
        return HttpResponse(
            ok=True,
            status_code=stub.status_code,
            headers=dict(stub.headers),
            content=content,
            url=stub.url or request.url,
            elapsed=stub.elapsed,
            meta={**stub.meta, "body_truncated": True, "body_bytes_read": len(content)},
        )

    def download(self, request: HttpRequest, duration: float) -> HttpResponse:  # noqa: ARG002
        stub = self._lookup(request)
        if stub is None:
            return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")
        return stub

    def close(self) -> None:
        self.closed = True
