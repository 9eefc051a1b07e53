from __future__ import annotations

import base64
import sys
from urllib.parse import urlsplit

import typer

from . import __version__
from .broker import BrokerClient, client_from_env
from .cli_shared import (
    OpError,
    RequestTimeoutError,
    UsageError,
    _eprint,
    _run_cli,
    _split_header,
)
from .http_client import DEFAULT_TIMEOUT_SECONDS, HttpResponse, _http_request

METHODS = ("get", "post", "put", "patch", "delete")

app = typer.Typer(
    name="seks-http",
    help="HTTP client with credential injection via the SEKS broker.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"seks-http {__version__}")
        raise typer.Exit(code=0)


def _basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _write_response(resp: HttpResponse) -> None:
    _eprint(f"{resp.status} {resp.reason}")
    for k, v in resp.headers:
        _eprint(f"{k.lower()}: {v}")
    sys.stdout.flush()
    sys.stdout.buffer.write(resp.body)
    sys.stdout.buffer.flush()


def _proxy_via_capability(
    client: BrokerClient,
    *,
    capability: str,
    method: str,
    url: str,
    headers: dict[str, str],
    data: bytes | None,
    timeout_seconds: float,
) -> HttpResponse:
    provider = capability.split("/", 1)[0]
    parts = urlsplit(url)
    path_and_query = (parts.path or "/") + (f"?{parts.query}" if parts.query else "")
    try:
        return client.proxy_request(
            provider,
            path_and_query,
            method=method,
            headers=headers,
            body=data,
            timeout_seconds=timeout_seconds,
        )
    except OpError as e:
        raise OpError(f"Capability request failed: {e}") from e


@app.command(help="Send one HTTP request with broker-resolved credentials.")
def seks_http(
    method: str = typer.Argument(..., help="HTTP method: get, post, put, patch, delete"),
    url: str = typer.Argument(..., help="Target URL"),
    auth_bearer: str | None = typer.Option(None, "--auth-bearer", help="Bearer token secret name"),
    auth_basic_user: str | None = typer.Option(None, "--auth-basic-user", help="Basic auth username secret name"),
    auth_basic_pass: str | None = typer.Option(None, "--auth-basic-pass", help="Basic auth password secret name"),
    header_secret: list[str] | None = typer.Option(
        None, "--header-secret", help="Inject a secret as a header value ('Header:secret'); repeatable"
    ),
    capability: str | None = typer.Option(
        None, "--capability", help="provider/action; the broker proxies the request and injects credentials"
    ),
    header: list[str] | None = typer.Option(None, "--header", help="Static header ('Name: value'); repeatable"),
    data: str | None = typer.Option(None, "--data", help="Request body"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT_SECONDS, "--timeout", help="Request timeout in seconds"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    del version
    if method.lower() not in METHODS:
        raise UsageError(f"Unknown method: {method} (expected one of: {', '.join(METHODS)})")
    verb = method.upper()
    if timeout <= 0:
        raise UsageError("--timeout must be a positive number of seconds")

    headers: dict[str, str] = {}
    for raw in header or []:
        name, value = _split_header(raw, label="header")
        headers[name] = value
    header_secrets = [_split_header(raw, label="header-secret") for raw in header_secret or []]
    body = data.encode("utf-8") if data is not None else None

    needs_broker = bool(capability or auth_bearer or auth_basic_user or auth_basic_pass or header_secrets)
    client = client_from_env() if needs_broker else None

    if capability and capability.find("/") > 0:
        resp = _proxy_via_capability(
            client,
            capability=capability,
            method=verb,
            url=url,
            headers=headers,
            data=body,
            timeout_seconds=timeout,
        )
        _write_response(resp)
        return

    if auth_bearer:
        headers["Authorization"] = f"Bearer {client.get_secret(auth_bearer)}"
    if auth_basic_user or auth_basic_pass:
        user = client.get_secret(auth_basic_user) if auth_basic_user else ""
        password = client.get_secret(auth_basic_pass) if auth_basic_pass else ""
        headers["Authorization"] = _basic_auth_header(user, password)
    for name, secret_name in header_secrets:
        headers[name] = client.get_secret(secret_name)

    try:
        resp = _http_request(method=verb, url=url, headers=headers, body=body, timeout_seconds=timeout)
    except RequestTimeoutError:
        raise
    except OpError as e:
        raise OpError(f"Request failed: {e}") from e
    _write_response(resp)


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name="seks-http", argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
