from __future__ import annotations

import base64
import os
import subprocess
import sys
from urllib.parse import quote, urlsplit, urlunsplit

import typer

from . import __version__
from .broker import client_from_env
from .cli_shared import OpError, SubprocessError, UsageError, _eprint, _run_cli

TOKEN_USER = "x-access-token"
HEADER_COMMANDS = ("push", "pull", "fetch")

USAGE = """Usage: seks-git <command> [args...] --auth-token <secret>

Commands: clone, push, pull (and any other git command)

Options:
  --auth-token <secret>   Secret name resolved through the broker
                          Injected as x-access-token in HTTPS URLs

Examples:
  seks-git clone https://github.com/org/repo.git --auth-token github/pat
  seks-git push --auth-token github/pat
  seks-git pull origin main --auth-token github/pat"""

app = typer.Typer(
    name="seks-git",
    help="git wrapper with credential injection via the SEKS broker.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"seks-git {__version__}")
        raise typer.Exit(code=0)


def inject_token_into_url(url: str, token: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return url
    host = parts.hostname
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    netloc = f"{TOKEN_USER}:{quote(token, safe='')}@{host}"
    return urlunsplit(parts._replace(netloc=netloc))


def _extra_header_args(token: str) -> list[str]:
    basic = base64.b64encode(f"{TOKEN_USER}:{token}".encode("utf-8")).decode("ascii")
    return ["-c", f"http.extraHeader=Authorization: Basic {basic}"]


def build_git_args(git_args: list[str], token: str) -> list[str]:
    """Return git argv with the token wired in for the given subcommand."""
    out = list(git_args)
    command = out[0] if out else ""
    if command == "clone":
        for i in range(1, len(out)):
            if not out[i].startswith("-"):
                out[i] = inject_token_into_url(out[i], token)
                break
    elif command in HEADER_COMMANDS:
        # git only accepts -c before the subcommand.
        return [*_extra_header_args(token), *out]
    return out


@app.command(
    help="Run git with a broker-resolved token.",
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    },
)
def seks_git(
    ctx: typer.Context,
    auth_token: str | None = typer.Option(None, "--auth-token", help="Secret name for the git token"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    del version
    git_args = list(ctx.args)
    if not git_args or git_args[0] == "--help":
        _eprint(USAGE)
        raise typer.Exit(code=1)
    if not auth_token:
        raise UsageError("--auth-token is required")

    token = client_from_env().get_secret(auth_token)
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"

    try:
        proc = subprocess.run(["git", *build_git_args(git_args, token)], env=env, check=False)
    except OSError as e:
        raise OpError(f"failed to run git: {e}") from e
    if proc.returncode != 0:
        raise SubprocessError("git", proc.returncode)


def main(argv: list[str] | None = None) -> int:
    return _run_cli(root_app=app, prog_name="seks-git", argv=argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
