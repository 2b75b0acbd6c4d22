# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import time

import httpx

from ..config import HttpSettings, load_http_settings
from .client import HttpClient
from .models import HttpRequest, HttpResponse


def _deadline_exceeded(request: HttpRequest, timeout: float, started: float, bytes_read: int) -> HttpResponse:
    return HttpResponse(
        ok=False,
        elapsed=time.monotonic() - started,
        error_message=f"GET {request.url} exceeded its {timeout}s deadline",
        error_type="ReadTimeout",
        meta={"body_bytes_read": bytes_read},
    )


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper, safe to share across worker threads."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _headers(self, request: HttpRequest) -> dict[str, str]:
        headers = dict(request.headers or {})
        headers.setdefault("User-Agent", self.settings.user_agent)
        return headers

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = self._headers(request)
        max_body_bytes = request.max_body_bytes or self.settings.max_body_bytes
        timeout = request.timeout if request.timeout is not None else self.settings.timeout
        started = time.monotonic()
        deadline = started + timeout

        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=httpx.Timeout(timeout),
                follow_redirects=request.allow_redirects,
            ) as resp:
                content = bytearray()
                truncated = False
                if time.monotonic() >= deadline:
                    return _deadline_exceeded(request, timeout, started, 0)
                for chunk in resp.iter_bytes():
                    # timeout bounds the whole fetch, not each read
                    if time.monotonic() >= deadline:
                        return _deadline_exceeded(request, timeout, started, len(content))
                    if not chunk:
                        continue
                    remaining = max_body_bytes - len(content)
                    if len(chunk) > remaining:
                        content.extend(chunk[:remaining])
                        truncated = True
                        break
                    content.extend(chunk)
                    if len(content) >= max_body_bytes:
                        break

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                content=bytes(content),
                url=str(resp.url),
                elapsed=time.monotonic() - started,
                meta={
                    "body_truncated": truncated,
                    "body_bytes_read": len(content),
                    "body_bytes_limit": max_body_bytes,
                },
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                elapsed=time.monotonic() - started,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )

    def download(self, request: HttpRequest, duration: float) -> HttpResponse:
        """
        Stream the body until EOF or until ``duration`` seconds pass after the
        response headers arrive. Bytes are counted, not kept.

        A read timeout that fires once the duration has elapsed ends the read
        like the duration check does; any other read error fails the download.
        """
        headers = self._headers(request)
        connect_timeout = request.timeout if request.timeout is not None else self.settings.download_timeout
        timeout = httpx.Timeout(connect_timeout, read=duration)
        total = 0
        stopped_by = "eof"
        started = time.monotonic()

        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                follow_redirects=request.allow_redirects,
            ) as resp:
                started = time.monotonic()
                deadline = started + duration
                try:
                    for chunk in resp.iter_raw():
                        total += len(chunk)
                        if time.monotonic() >= deadline:
                            stopped_by = "duration"
                            break
                except httpx.ReadTimeout:
                    if time.monotonic() < deadline:
                        raise
                    stopped_by = "duration"
                elapsed = time.monotonic() - started

            return HttpResponse(
                ok=True,
                status_code=resp.status_code,
                headers=dict(resp.headers),
                url=str(resp.url),
                elapsed=elapsed,
                meta={
                    "body_bytes_read": total,
                    "stopped_by": stopped_by,
                },
            )
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                elapsed=time.monotonic() - started,
                error_message=str(exc),
                error_type=type(exc).__name__,
                meta={"body_bytes_read": total},
            )

    def close(self) -> None:
        self._client.close()
