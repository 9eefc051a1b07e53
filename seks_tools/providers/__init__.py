from .executor import build_url, execute, parse_action_args, split_action_argv
from .formatting import format_response, format_table
from .registry import ProviderRegistry, default_registry, get_provider, list_providers
from .types import Action, AuthPattern, ExecuteOptions, ParamDef, ProviderSchema, ResolvedParams

__all__ = [
    "Action",
    "AuthPattern",
    "ExecuteOptions",
    "ParamDef",
    "ProviderRegistry",
    "ProviderSchema",
    "ResolvedParams",
    "build_url",
    "default_registry",
    "execute",
    "format_response",
    "format_table",
    "get_provider",
    "list_providers",
    "parse_action_args",
    "split_action_argv",
]
