from __future__ import annotations

from .cloudflare import cloudflare
from .github import github
from .hetzner import hetzner
from .types import ProviderSchema

BUILTIN_PROVIDERS: tuple[ProviderSchema, ...] = (hetzner, github, cloudflare)


class ProviderRegistry:
    """Provider schemas keyed by name, kept in registration order."""

    def __init__(self, schemas: tuple[ProviderSchema, ...] | list[ProviderSchema] = ()) -> None:
        self._providers: dict[str, ProviderSchema] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, schema: ProviderSchema) -> None:
        # Re-registering a name replaces the schema but keeps its original slot.
        self._providers[schema.name] = schema

    def get_provider(self, name: str) -> ProviderSchema | None:
        return self._providers.get(name)

    def list_providers(self) -> list[ProviderSchema]:
        return list(self._providers.values())


def default_registry() -> ProviderRegistry:
    return ProviderRegistry(BUILTIN_PROVIDERS)


_DEFAULT = default_registry()


def get_provider(name: str) -> ProviderSchema | None:
    return _DEFAULT.get_provider(name)


def list_providers() -> list[ProviderSchema]:
    return _DEFAULT.list_providers()
