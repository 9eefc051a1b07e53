from __future__ import annotations

import json
import os
import sys
from typing import Any

import click
import typer
from rich.console import Console
from rich.markup import escape

try:
    from dotenv import load_dotenv  # type: ignore
except Exception:  # pragma: no cover - exercised only when deps are missing
    load_dotenv = None


class SeksToolsError(Exception):
    pass


class UsageError(SeksToolsError):
    pass


class ConfigError(UsageError):
    pass


class OpError(SeksToolsError):
    pass


class HttpStatusError(OpError):
    """Raised when a provider answers with a non-2xx status."""

    def __init__(self, status: int, reason: str, body: str) -> None:
        super().__init__(f"Error {status}: {reason}")
        self.status = status
        self.reason = reason
        self.body = body


class RequestTimeoutError(OpError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Request timed out after {_fmt_seconds(timeout_seconds)}s")
        self.timeout_seconds = timeout_seconds


class SubprocessError(OpError):
    def __init__(self, command: str, returncode: int | None) -> None:
        super().__init__(f"{command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        return int(self.returncode or 1)


SEKS_BROKER_URL = "SEKS_BROKER_URL"
SEKS_BROKER_TOKEN = "SEKS_BROKER_TOKEN"
OPENCLAW_CONFIG = "OPENCLAW_CONFIG"

AUTH_PREVIEW_CHARS = 15

_ERROR_CONSOLE = Console(stderr=True)


def _fmt_seconds(val: float) -> str:
    return str(int(val)) if float(val).is_integer() else str(val)


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}", highlight=False, soft_wrap=True)


def _bootstrap_env() -> None:
    if load_dotenv is None:
        raise UsageError("missing dependency: python-dotenv (pip install seks-tools)")
    # Discover and load .env without overriding already-exported values.
    load_dotenv()


def _env_or_none(*names: str) -> str | None:
    for n in names:
        v = (os.environ.get(n) or "").strip()
        if v:
            return v
    return None


def _print_json(obj: Any, *, pretty: bool = True) -> None:
    if pretty:
        sys.stdout.write(json.dumps(obj, indent=2) + "\n")
    else:
        sys.stdout.write(json.dumps(obj, separators=(",", ":")) + "\n")


def _truncate_auth(value: str) -> str:
    return value[:AUTH_PREVIEW_CHARS] + "..."


def _redacted_headers(headers: dict[str, str]) -> dict[str, str]:
    return {k: (_truncate_auth(v) if k == "Authorization" else v) for k, v in headers.items()}


def _split_header(raw: str, *, label: str) -> tuple[str, str]:
    colon = raw.find(":")
    if colon < 1:
        raise UsageError(f"Invalid {label}: {raw}")
    return raw[:colon].strip(), raw[colon + 1 :].strip()


def _run_cli(*, root_app: typer.Typer, prog_name: str, argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        _bootstrap_env()
        result = root_app(args=argv, prog_name=prog_name, standalone_mode=False)
        if result is None:
            return 0
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except (click.exceptions.Abort, typer.Abort):
        return 1
    except (click.ClickException, typer.TyperException) as e:
        _rich_error(e.format_message())
        return 1
    except HttpStatusError as e:
        _eprint(str(e))
        _eprint(e.body)
        return 1
    except SubprocessError as e:
        return e.exit_code
    except (UsageError, OpError) as e:
        _rich_error(str(e))
        return 1
