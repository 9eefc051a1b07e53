from __future__ import annotations

import sys

import typer

from . import __version__
from .broker import client_from_env
from .cli_shared import _print_json, _run_cli

app = typer.Typer(
    name="listseks",
    help="List available secrets and capabilities from the SEKS broker.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"listseks {__version__}")
        raise typer.Exit(code=0)


def _matches_provider(entry: str, provider: str) -> bool:
    return entry == provider or entry.startswith(f"{provider}/")


def _joined(values: list[str]) -> str:
    return ", ".join(values) or "(none)"


@app.command(help="List broker secrets, or capabilities with --capabilities.")
def listseks(
    capabilities: bool = typer.Option(False, "--capabilities", help="List by capability"),
    provider: str | None = typer.Option(None, "--provider", help="Filter by provider"),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    del version
    client = client_from_env()

    if not capabilities:
        secrets = client.list_secrets()
        if provider:
            secrets = [s for s in secrets if s.provider == provider]
        if json_output:
            _print_json([s.to_dict() for s in secrets])
            return
        if not secrets:
            typer.echo(f"No secrets for provider: {provider}" if provider else "No secrets available.")
            return
        typer.echo("Available secrets:")
        for s in secrets:
            typer.echo(f"  {s.name}  ({s.provider})")
        return

    caps = client.list_capabilities()
    providers = caps.providers
    if provider:
        providers = [p for p in providers if _matches_provider(p, provider)]

    if json_output:
        _print_json({"providers": providers, "channels": caps.channels, "features": caps.features})
        return

    typer.echo("Capabilities:")
    typer.echo(f"  Providers: {_joined(providers)}")
    typer.echo(f"  Channels:  {_joined(caps.channels)}")
    typer.echo(f"  Features:  {_joined(caps.features)}")


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name="listseks", argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
