# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from types import SimpleNamespace

import httpx

from netprobe.config import HttpSettings
from netprobe.errors import ErrorCategory
from netprobe.http import HttpRequest, HttpResponse, HttpxClient, StubHttpClient, create_default_http_client
from netprobe.http import httpx_client as httpx_client_module
from netprobe.models import Failure
from netprobe.probes import http_fetch_probe


class _ChunkStream(httpx.SyncByteStream):
    def __init__(self, chunks, error=None):
        self._chunks = chunks
        self._error = error

    def __iter__(self):
        yield from self._chunks
        if self._error is not None:
            raise self._error


class _StepClock:
    def __init__(self, step=1.0):
        self.now = 0.0
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


def _client(handler, **settings):
    transport = httpx.MockTransport(handler)
    return HttpxClient(HttpSettings(**settings), client=httpx.Client(transport=transport))


def test_request_caps_body_and_reports_truncation():
    def handler(request):
        assert request.headers["User-Agent"].startswith("netprobe/")
        return httpx.Response(200, content=b"a" * 300)

    client = _client(handler)
    response = client.request(HttpRequest(url="http://example.test/", max_body_bytes=100))

    assert response.ok is True
    assert response.status_code == 200
    assert response.content == b"a" * 100
    assert response.truncated is True
    assert response.meta["body_bytes_limit"] == 100


def test_request_under_cap_is_not_truncated():
    client = _client(lambda request: httpx.Response(404, content=b"missing"))
    response = client.request(HttpRequest(url="http://example.test/nope", max_body_bytes=100))

    assert response.ok is True
    assert response.status_code == 404
    assert response.text == "missing"
    assert response.truncated is False


def test_request_transport_error_is_not_ok():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    response = _client(handler).request(HttpRequest(url="http://down.test/"))

    assert response.ok is False
    assert response.status_code is None
    assert response.error_type == "ConnectError"
    assert "refused" in response.error_message


def test_request_trickling_body_hits_total_deadline(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    client = _client(lambda request: httpx.Response(200, stream=_ChunkStream([b"t"] * 10)))

    response = client.request(HttpRequest(url="http://slow.test/", timeout=2.5, max_body_bytes=1024))

    assert response.ok is False
    assert response.status_code is None
    assert response.error_type == "ReadTimeout"
    assert "2.5s deadline" in response.error_message
    assert response.meta == {"body_bytes_read": 1}


def test_trickling_fetch_is_timeout_failure(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    client = _client(lambda request: httpx.Response(200, stream=_ChunkStream([b"t"] * 10)))

    outcome = http_fetch_probe(client, "http://slow.test/", timeout=1.5, max_body_bytes=1024)

    assert isinstance(outcome, Failure)
    assert outcome.category == ErrorCategory.TIMEOUT
    assert outcome.method == "http"


def test_download_reads_to_eof(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    client = _client(lambda request: httpx.Response(200, stream=_ChunkStream([b"x" * 10, b"y" * 5])))

    response = client.download(HttpRequest(url="http://speed.test/file"), duration=100.0)

    assert response.ok is True
    assert response.meta == {"body_bytes_read": 15, "stopped_by": "eof"}
    assert response.content == b""


def test_download_stops_at_duration(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    client = _client(lambda request: httpx.Response(200, stream=_ChunkStream([b"z" * 4] * 10)))

    response = client.download(HttpRequest(url="http://speed.test/big"), duration=2.5)

    assert response.ok is True
    assert response.meta["stopped_by"] == "duration"
    assert response.meta["body_bytes_read"] == 12
    assert response.elapsed == 4.0


def test_download_read_timeout_after_duration_counts_as_stop(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    stream = _ChunkStream([b"q" * 8], error=httpx.ReadTimeout("idle"))
    client = _client(lambda request: httpx.Response(200, stream=stream))

    response = client.download(HttpRequest(url="http://speed.test/idle"), duration=1.5)

    assert response.ok is True
    assert response.meta == {"body_bytes_read": 8, "stopped_by": "duration"}


def test_download_read_timeout_before_duration_fails(monkeypatch):
    monkeypatch.setattr(httpx_client_module, "time", SimpleNamespace(monotonic=_StepClock()))
    stream = _ChunkStream([], error=httpx.ReadTimeout("stalled"))
    client = _client(lambda request: httpx.Response(200, stream=stream))

    response = client.download(HttpRequest(url="http://speed.test/stall"), duration=50.0)

    assert response.ok is False
    assert response.error_type == "ReadTimeout"
    assert response.meta == {"body_bytes_read": 0}


def test_stub_client_caps_content_and_records_requests():
    stub = StubHttpClient({"http://a.test": HttpResponse(ok=True, status_code=200, content=b"0123456789")})

    capped = stub.request(HttpRequest(url="http://a.test", max_body_bytes=4))
    missing = stub.request(HttpRequest(url="http://b.test"))

    assert capped.content == b"0123"
    assert capped.truncated is True
    assert missing.ok is False
    assert [request.url for request in stub.requests] == ["http://a.test", "http://b.test"]
    stub.close()
    assert stub.closed is True


def test_create_default_http_client_uses_settings():
    settings = HttpSettings(timeout=1.5, verify_ssl=False)
    client = create_default_http_client(settings)
    try:
        assert isinstance(client, HttpxClient)
        assert client.settings is settings
    finally:
        client.close()
