from __future__ import annotations

import sys

import typer

from . import __version__
from .broker import client_from_env
from .cli_shared import UsageError, _eprint, _run_cli
from .providers.executor import execute, parse_action_args, split_action_argv
from .providers.registry import ProviderRegistry, default_registry
from .providers.types import Action, ExecuteOptions, ProviderSchema

USAGE = """Usage: do-seks <provider> <action> [args...] [flags]

Discovery:
  do-seks providers                   List available providers
  do-seks <provider> actions          List actions for a provider
  do-seks <provider> <action> --help  Show action details

Global flags:
  --json       JSON output (default for API responses)
  --verbose    Show request details on stderr
  --dry-run    Show what would happen without executing
  --help       Show this help"""

app = typer.Typer(
    name="do-seks",
    help="Capability-first CLI for agents to act on external services.",
    add_completion=False,
)


def _usage() -> None:
    _eprint(USAGE)
    raise typer.Exit(code=1)


def _print_providers(registry: ProviderRegistry) -> None:
    typer.echo("PROVIDER     DESCRIPTION")
    for p in registry.list_providers():
        typer.echo(f"{p.name.ljust(13)}{p.display_name}")


def _print_actions(schema: ProviderSchema) -> None:
    typer.echo(f"Actions for {schema.display_name}:\n")
    typer.echo("ACTION           DESCRIPTION")
    for name, action in schema.actions.items():
        typer.echo(f"{name.ljust(17)}{action.description}")


def _print_action_help(schema: ProviderSchema, action_name: str, action: Action) -> None:
    typer.echo(f"{schema.name} {action_name} - {action.description}\n")
    typer.echo(f"Method: {action.method}")
    typer.echo(f"Path:   {action.path}")
    if not action.params:
        return
    typer.echo("\nParameters:")
    for p in action.params:
        pos = f"(positional {p.position})" if p.position is not None else ""
        req = "required" if p.required else "optional"
        typer.echo(f"  {(p.flag or p.name).ljust(15)} {req.ljust(10)} {pos} [{p.location}]")


def _expand_repo_shorthand(schema: ProviderSchema, positionals: list[str]) -> list[str]:
    if schema.name == "github" and len(positionals) == 1 and "/" in positionals[0]:
        owner, repo = positionals[0].split("/", 1)
        return [owner, repo]
    return positionals


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"do-seks {__version__}")
        raise typer.Exit(code=0)


@app.command(
    help="Run a provider action, or list providers and actions.",
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    },
)
def do_seks(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Pretty JSON output"),
    verbose: bool = typer.Option(False, "--verbose", help="Show request details on stderr"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would happen without executing"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    del version
    registry = default_registry()
    opts = ExecuteOptions(json=json_output, verbose=verbose, dry_run=dry_run)
    remaining = list(ctx.args)

    if not remaining or remaining[0] == "--help":
        _usage()

    command = remaining[0]
    if command == "providers":
        _print_providers(registry)
        return

    schema = registry.get_provider(command)
    if schema is None:
        raise UsageError(
            f"Unknown provider: {command}\nRun 'do-seks providers' to see available providers."
        )

    action_name = remaining[1] if len(remaining) > 1 else ""
    if not action_name or action_name == "actions":
        _print_actions(schema)
        return

    action = schema.actions.get(action_name)
    if action is None:
        raise UsageError(
            f"Unknown action: {action_name} for provider {schema.name}\n"
            f"Run 'do-seks {schema.name} actions' to see available actions."
        )

    action_argv = remaining[2:]
    if "--help" in action_argv:
        _print_action_help(schema, action_name, action)
        return

    positionals, flags = split_action_argv(action_argv)
    positionals = _expand_repo_shorthand(schema, positionals)
    params = parse_action_args(action, positionals, flags)

    # GIT actions delegate to seks-git, which resolves its own token.
    client = client_from_env() if action.method != "GIT" else None
    execute(schema, action, params, opts, client=client)


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name="do-seks", argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
