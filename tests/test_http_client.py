from __future__ import annotations

import io
import socket
from email.message import Message
from urllib.error import HTTPError, URLError

import pytest

from seks_tools.cli_shared import OpError, RequestTimeoutError
from seks_tools.http_client import HttpResponse, _http_request


class _FakeResp:
    status = 200
    reason = "OK"

    def __init__(self, body: bytes) -> None:
        self._body = body
        self.headers = Message()
        self.headers["Content-Type"] = "application/json"

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_success_returns_status_headers_and_body(monkeypatch):
    seen: dict[str, object] = {}

    def _fake_urlopen(req, timeout=None):
        seen["method"] = req.get_method()
        seen["auth"] = req.get_header("Authorization")
        seen["timeout"] = timeout
        return _FakeResp(b'{"ok":true}')

    monkeypatch.setattr("seks_tools.http_client.urlopen", _fake_urlopen)
    resp = _http_request(
        method="get", url="https://example.invalid/", headers={"Authorization": "Bearer t"}, timeout_seconds=5
    )
    assert resp == HttpResponse(
        status=200, reason="OK", headers=[("Content-Type", "application/json")], body=b'{"ok":true}'
    )
    assert resp.ok
    assert seen == {"method": "GET", "auth": "Bearer t", "timeout": 5}


def test_http_error_status_is_returned(monkeypatch):
    def _fake_urlopen(req, timeout=None):
        raise HTTPError(req.full_url, 404, "Not Found", Message(), io.BytesIO(b"missing"))

    monkeypatch.setattr("seks_tools.http_client.urlopen", _fake_urlopen)
    resp = _http_request(method="GET", url="https://example.invalid/missing", headers={})
    assert resp.status == 404
    assert resp.reason == "Not Found"
    assert resp.body == b"missing"
    assert not resp.ok


def test_timeout_raises_request_timeout(monkeypatch):
    def _fake_urlopen(req, timeout=None):
        raise URLError(socket.timeout("timed out"))

    monkeypatch.setattr("seks_tools.http_client.urlopen", _fake_urlopen)
    with pytest.raises(RequestTimeoutError) as ei:
        _http_request(method="GET", url="https://example.invalid/", headers={}, timeout_seconds=1.5)
    assert str(ei.value) == "Request timed out after 1.5s"


def test_connection_failure_raises_op_error(monkeypatch):
    def _fake_urlopen(req, timeout=None):
        raise URLError(ConnectionRefusedError(111, "Connection refused"))

    monkeypatch.setattr("seks_tools.http_client.urlopen", _fake_urlopen)
    with pytest.raises(OpError) as ei:
        _http_request(method="GET", url="https://example.invalid/", headers={})
    assert not isinstance(ei.value, RequestTimeoutError)
    assert "http request failed" in str(ei.value)
