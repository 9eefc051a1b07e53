from __future__ import annotations

import socket
from dataclasses import dataclass, field
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .cli_shared import OpError, RequestTimeoutError

DEFAULT_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class HttpResponse:
    status: int
    reason: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _is_timeout(err: BaseException) -> bool:
    if isinstance(err, (socket.timeout, TimeoutError)):
        return True
    reason = getattr(err, "reason", None)
    return isinstance(reason, (socket.timeout, TimeoutError))


def _http_request(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> HttpResponse:
    """Send one request; HTTP error statuses are returned, not raised."""
    req = Request(url, data=body, method=str(method).upper())
    for k, v in headers.items():
        req.add_header(k, v)
    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            status = getattr(resp, "status", 200)
            reason = str(getattr(resp, "reason", "") or "")
            data = resp.read()
            return HttpResponse(
                status=int(status),
                reason=reason,
                headers=list(resp.headers.items()),
                body=data,
            )
    except HTTPError as e:
        data = e.read() if hasattr(e, "read") else b""
        hdrs = list(e.headers.items()) if e.headers is not None else []
        return HttpResponse(
            status=int(getattr(e, "code", 0) or 0),
            reason=str(getattr(e, "reason", "") or ""),
            headers=hdrs,
            body=data,
        )
    except (URLError, OSError) as e:
        if _is_timeout(e):
            raise RequestTimeoutError(timeout_seconds) from e
        raise OpError(f"http request failed: {e}") from e
