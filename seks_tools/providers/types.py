"""Provider schema types for do-seks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

AuthType = Literal["bearer", "basic", "header"]
Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "GIT"]
Location = Literal["path", "query", "body"]
BodyKind = Literal["json", "none"]


@dataclass(frozen=True)
class AuthPattern:
    type: AuthType
    secret_name: str
    header_name: str | None = None


@dataclass(frozen=True)
class ParamDef:
    name: str
    location: Location
    required: bool = False
    position: int | None = None
    flag: str | None = None


@dataclass(frozen=True)
class Action:
    description: str
    method: Method
    path: str
    capability: str
    params: tuple[ParamDef, ...] = ()
    body: BodyKind = "none"


@dataclass(frozen=True)
class ProviderSchema:
    name: str
    display_name: str
    base_url: str
    auth_pattern: AuthPattern
    actions: dict[str, Action] = field(default_factory=dict)


@dataclass
class ResolvedParams:
    path: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    body: dict[str, str] = field(default_factory=dict)

    def bucket(self, location: Location) -> dict[str, str]:
        return {"path": self.path, "query": self.query, "body": self.body}[location]


@dataclass(frozen=True)
class ExecuteOptions:
    json: bool = False
    verbose: bool = False
    dry_run: bool = False
