from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .types import Action

NO_RESULTS = "(no results)"

# Hetzner wraps lists as e.g. {"servers": [...]}, Cloudflare as {"result": [...]}.
LIST_WRAPPER_KEYS = ("servers", "ssh_keys", "images", "result", "zones", "dns_records")


@dataclass(frozen=True)
class Column:
    key: str
    label: str


def _cols(*pairs: tuple[str, str]) -> tuple[Column, ...]:
    return tuple(Column(key=k, label=label) for k, label in pairs)


COLUMNS_BY_CAPABILITY: dict[str, tuple[Column, ...]] = {
    "servers.list": _cols(
        ("name", "NAME"),
        ("status", "STATUS"),
        ("public_net.ipv4.ip", "IP"),
        ("server_type.name", "TYPE"),
        ("datacenter.name", "DATACENTER"),
    ),
    "ssh-keys.list": _cols(("id", "ID"), ("name", "NAME"), ("fingerprint", "FINGERPRINT")),
    "images.list": _cols(("id", "ID"), ("name", "NAME"), ("type", "TYPE"), ("status", "STATUS")),
    "repos.list": _cols(
        ("full_name", "REPO"),
        ("private", "PRIVATE"),
        ("language", "LANG"),
        ("updated_at", "UPDATED"),
    ),
    "issues.list": _cols(("number", "#"), ("title", "TITLE"), ("state", "STATE"), ("user.login", "AUTHOR")),
    "zones.list": _cols(("id", "ID"), ("name", "NAME"), ("status", "STATUS")),
    "dns.list": _cols(("id", "ID"), ("type", "TYPE"), ("name", "NAME"), ("content", "CONTENT")),
}


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def get_nested_value(obj: Any, path: str) -> str:
    current = obj
    for part in path.split("."):
        if not isinstance(current, dict):
            return ""
        current = current.get(part)
    return _cell(current)


def pick_columns(action: Action) -> tuple[Column, ...] | None:
    return COLUMNS_BY_CAPABILITY.get(action.capability)


def format_table(items: list[Any], columns: tuple[Column, ...] | list[Column]) -> str:
    widths = [len(c.label) for c in columns]
    rows: list[list[str]] = []
    for item in items:
        row = [get_nested_value(item, c.key) for c in columns]
        for i, val in enumerate(row):
            widths[i] = max(widths[i], len(val))
        rows.append(row)
    lines = ["  ".join(c.label.ljust(widths[i]) for i, c in enumerate(columns))]
    for row in rows:
        lines.append("  ".join(val.ljust(widths[i]) for i, val in enumerate(row)))
    return "\n".join(lines)


def format_response(data: Any, provider: str, action: Action) -> str:
    """Render a parsed JSON body as a table when a column layout is known."""
    del provider
    items: list[Any] | None = None
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        for key in LIST_WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                items = data[key]
                break
        if items is None:
            return _pretty(data)

    if not items:
        return NO_RESULTS

    columns = pick_columns(action)
    if columns is None:
        return _pretty(items)
    return format_table(items, columns)
