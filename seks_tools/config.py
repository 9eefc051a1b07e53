"""Broker config resolution.

Order:
1. Env vars SEKS_BROKER_URL + SEKS_BROKER_TOKEN
2. ~/.openclaw/openclaw.json -> seks.broker.primary / seks.broker.secondary
3. ~/.openclaw/openclaw.json -> seks.broker.url / seks.broker.token (legacy)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .cli_shared import (
    OPENCLAW_CONFIG,
    SEKS_BROKER_TOKEN,
    SEKS_BROKER_URL,
    ConfigError,
    _env_or_none,
)


@dataclass(frozen=True)
class BrokerEndpoint:
    url: str
    token: str = ""
    token_command: str = ""


@dataclass(frozen=True)
class BrokerConfig:
    primary: BrokerEndpoint
    secondary: BrokerEndpoint | None = None


def _default_config_path() -> Path:
    override = _env_or_none(OPENCLAW_CONFIG)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".openclaw" / "openclaw.json"


def _endpoint_from_obj(obj: Any) -> BrokerEndpoint | None:
    if not isinstance(obj, dict):
        return None
    url = str(obj.get("url") or "").strip()
    token = str(obj.get("token") or "").strip()
    token_command = str(obj.get("tokenCommand") or "").strip()
    if not url or not (token or token_command):
        return None
    if token:
        return BrokerEndpoint(url=url, token=token)
    return BrokerEndpoint(url=url, token_command=token_command)


def load_config(*, config_path: Path | None = None) -> BrokerConfig:
    env_url = _env_or_none(SEKS_BROKER_URL)
    env_token = _env_or_none(SEKS_BROKER_TOKEN)
    if env_url and env_token:
        return BrokerConfig(primary=BrokerEndpoint(url=env_url, token=env_token))

    path = config_path or _default_config_path()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"No broker config found. Set {SEKS_BROKER_URL} + {SEKS_BROKER_TOKEN} "
            f"or configure {path}"
        ) from e

    try:
        doc = json.loads(raw)
    except Exception as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e

    seks = doc.get("seks") if isinstance(doc, dict) else None
    broker = seks.get("broker") if isinstance(seks, dict) else None
    if not isinstance(broker, dict):
        raise ConfigError(f"No seks.broker section in {path}")

    primary = _endpoint_from_obj(broker.get("primary"))
    if primary is not None:
        return BrokerConfig(primary=primary, secondary=_endpoint_from_obj(broker.get("secondary")))

    url = str(broker.get("url") or "").strip()
    token = str(broker.get("token") or "").strip()
    if url and token:
        return BrokerConfig(primary=BrokerEndpoint(url=url, token=token))

    raise ConfigError(f"Invalid broker config in {path}")
