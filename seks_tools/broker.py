"""Thin client for the SEKS credential broker.

Only the four calls the CLIs need are exposed. The broker's own semantics
(storage, policy, auditing) live on the broker side.
"""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import quote

from . import __version__
from .cli_shared import OpError, RequestTimeoutError
from .config import BrokerConfig, BrokerEndpoint, load_config
from .http_client import DEFAULT_TIMEOUT_SECONDS, HttpResponse, _http_request


@dataclass(frozen=True)
class SecretInfo:
    name: str
    provider: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "provider": self.provider}


@dataclass(frozen=True)
class Capabilities:
    agent_id: str
    agent_name: str
    providers: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "providers": list(self.providers),
            "channels": list(self.channels),
            "features": list(self.features),
        }


def _str_list(val: Any) -> list[str]:
    if not isinstance(val, list):
        return []
    return [str(v) for v in val if str(v).strip()]


def _run_token_command(command: str) -> str:
    try:
        out = subprocess.run(command, shell=True, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise OpError(f"broker tokenCommand failed (exit {e.returncode}): {stderr}") from e
    token = (out.stdout or "").strip()
    if not token:
        raise OpError("broker tokenCommand produced an empty token")
    return token


class BrokerClient:
    def __init__(
        self,
        config: BrokerConfig,
        *,
        http_request: Callable[..., HttpResponse] = _http_request,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.config = config
        self._http_request = http_request
        self._timeout_seconds = timeout_seconds
        self._tokens: dict[str, str] = {}

    def _endpoints(self) -> list[BrokerEndpoint]:
        out = [self.config.primary]
        if self.config.secondary is not None:
            out.append(self.config.secondary)
        return out

    def _token_for(self, endpoint: BrokerEndpoint) -> str:
        if endpoint.token:
            return endpoint.token
        cached = self._tokens.get(endpoint.url)
        if cached:
            return cached
        token = _run_token_command(endpoint.token_command)
        self._tokens[endpoint.url] = token
        return token

    def _send(
        self,
        *,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        timeout_seconds: float | None = None,
    ) -> HttpResponse:
        # Fall over to the secondary broker only on transport failures.
        last_error: OpError | None = None
        for endpoint in self._endpoints():
            hdrs = {
                "Authorization": f"Bearer {self._token_for(endpoint)}",
                "User-Agent": f"seks-tools/{__version__}",
            }
            hdrs.update(headers or {})
            try:
                return self._http_request(
                    method=method,
                    url=endpoint.url.rstrip("/") + path,
                    headers=hdrs,
                    body=body,
                    timeout_seconds=timeout_seconds or self._timeout_seconds,
                )
            except RequestTimeoutError:
                raise
            except OpError as e:
                last_error = e
        if last_error is None:
            raise OpError("no broker endpoints configured")
        raise OpError(f"broker unreachable: {last_error}") from last_error

    def _json_checked(
        self,
        *,
        method: str,
        path: str,
        label: str,
        body_obj: dict[str, Any] | None = None,
    ) -> Any:
        body = None
        headers: dict[str, str] = {"Accept": "application/json"}
        if body_obj is not None:
            body = json.dumps(body_obj, separators=(",", ":")).encode("utf-8")
            headers["Content-Type"] = "application/json"
        resp = self._send(method=method, path=path, headers=headers, body=body)
        if not resp.ok:
            raise OpError(f"broker {label} failed: status={resp.status} body={resp.text()}")
        try:
            return json.loads(resp.text())
        except Exception as e:
            raise OpError(f"invalid JSON from broker {label}: {e}") from e

    def get_secret(self, name: str) -> str:
        out = self._json_checked(
            method="POST",
            path="/v1/secrets/get",
            label=f"secret lookup for {name!r}",
            body_obj={"name": name},
        )
        value = out.get("value") if isinstance(out, dict) else None
        if not isinstance(value, str) or not value:
            raise OpError(f"broker returned no value for secret {name!r}")
        return value

    def list_secrets(self) -> list[SecretInfo]:
        out = self._json_checked(method="GET", path="/v1/secrets", label="secret listing")
        items = out.get("secrets") if isinstance(out, dict) else out
        if not isinstance(items, list):
            raise OpError("invalid JSON from broker secret listing: expected a list")
        return [
            SecretInfo(name=str(item.get("name") or ""), provider=str(item.get("provider") or ""))
            for item in items
            if isinstance(item, dict)
        ]

    def list_capabilities(self) -> Capabilities:
        out = self._json_checked(method="GET", path="/v1/capabilities", label="capability listing")
        if not isinstance(out, dict):
            raise OpError("invalid JSON from broker capability listing: expected object")
        return Capabilities(
            agent_id=str(out.get("agent_id") or ""),
            agent_name=str(out.get("agent_name") or ""),
            providers=_str_list(out.get("providers")),
            channels=_str_list(out.get("channels")),
            features=_str_list(out.get("features")),
        )

    def proxy_request(
        self,
        provider: str,
        path_and_query: str,
        *,
        method: str,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        timeout_seconds: float | None = None,
    ) -> HttpResponse:
        if not path_and_query.startswith("/"):
            path_and_query = "/" + path_and_query
        return self._send(
            method=method,
            path=f"/v1/proxy/{quote(provider, safe='')}{path_and_query}",
            headers=headers,
            body=body,
            timeout_seconds=timeout_seconds,
        )


def client_from_env() -> BrokerClient:
    return BrokerClient(load_config())
