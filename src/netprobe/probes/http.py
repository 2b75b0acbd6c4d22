# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP fetch and download-throughput probes."""

from __future__ import annotations

import logging

from ..errors import category_from_error_type
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse
from ..models import DownloadStats, Failure, HttpFetchStats, Measurement, ProbeMethod, ProbeOutcome

logger = logging.getLogger(__name__)


def _transport_failure(response: HttpResponse, url: str, method: str) -> Failure:
    detail = response.error_message or response.error_type or "no response"
    return Failure(
        cause=f"GET {url} failed: {detail}",
        category=category_from_error_type(response.error_type),
        method=method,
    )


def keyword_in_body(content: bytes, keyword: str | None) -> bool:
    """Exact byte search over what was actually read; empty keywords never match."""
    if not keyword:
        return False
    return keyword.encode("utf-8") in content


def http_fetch_probe(
    client: HttpClient,
    url: str,
    *,
    timeout: float,
    max_body_bytes: int,
    keyword: str | None = None,
) -> ProbeOutcome:
    """
    Issue one GET and read at most ``max_body_bytes`` of the body.

    Any HTTP status is a measurement; transport errors and timeouts are
    failures, never partial measurements.
    """
    logger.debug("http probe %s timeout=%.2fs cap=%d", url, timeout, max_body_bytes)
    response = client.request(HttpRequest(url=url, timeout=timeout, max_body_bytes=max_body_bytes))
    if not response.ok or response.status_code is None:
        return _transport_failure(response, url, ProbeMethod.HTTP.value)

    content = response.content[:max_body_bytes]
    return Measurement(
        method=ProbeMethod.HTTP.value,
        stats=HttpFetchStats(
            url=url,
            status_code=response.status_code,
            bytes_read=len(content),
            duration_ms=response.elapsed * 1000.0,
            has_keyword=keyword_in_body(content, keyword),
            truncated=response.truncated or len(response.content) > max_body_bytes,
        ),
    )


def download_probe(
    client: HttpClient,
    url: str,
    *,
    duration: float,
    timeout: float | None = None,
) -> ProbeOutcome:
    """Measure download throughput for up to ``duration`` seconds."""
    logger.debug("download probe %s duration=%.2fs", url, duration)
    response = client.download(HttpRequest(url=url, timeout=timeout), duration)
    if not response.ok or response.status_code is None:
        return _transport_failure(response, url, ProbeMethod.DOWNLOAD.value)

    total = int(response.meta.get("body_bytes_read", 0))
    seconds = response.elapsed
    throughput = total * 8.0 / seconds if seconds > 0 else 0.0
    stopped_by = "duration" if response.meta.get("stopped_by") == "duration" else "eof"
    return Measurement(
        method=ProbeMethod.DOWNLOAD.value,
        stats=DownloadStats(
            url=url,
            status_code=response.status_code,
            bytes_downloaded=total,
            seconds=seconds,
            throughput_bps=throughput,
            stopped_by=stopped_by,
        ),
    )
