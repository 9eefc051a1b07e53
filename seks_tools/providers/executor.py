from __future__ import annotations

import base64
import json
import re
import subprocess
import sys
from typing import Any, Protocol
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from ..cli_shared import (
    HttpStatusError,
    OpError,
    SubprocessError,
    UsageError,
    _eprint,
    _print_json,
    _redacted_headers,
)
from ..http_client import _http_request
from .formatting import format_response
from .types import Action, ExecuteOptions, ProviderSchema, ResolvedParams

GIT_HELPER = "seks-git"
USER_AGENT = "do-seks/1.0"

# Left unescaped in path values, besides alphanumerics and "-_.~".
_COMPONENT_SAFE = "!*'()"
_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


class SecretSource(Protocol):
    def get_secret(self, name: str) -> str: ...


def split_action_argv(argv: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split action tokens into positionals and ``--name value`` flags.

    Every ``--name`` consumes the next token as its value, whatever it looks like.
    """
    positionals: list[str] = []
    flags: dict[str, str] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("--"):
            i += 1
            flags[arg[2:]] = argv[i] if i < len(argv) else ""
        else:
            positionals.append(arg)
        i += 1
    return positionals, flags


def parse_action_args(action: Action, args: list[str], flags: dict[str, str]) -> ResolvedParams:
    result = ResolvedParams()

    positionals = sorted((p for p in action.params if p.position is not None), key=lambda p: p.position)
    for p in positionals:
        if p.position < len(args):
            result.bucket(p.location)[p.name] = args[p.position]
        elif p.required:
            raise UsageError(f"Missing required positional argument: {p.name} (position {p.position})")

    for p in action.params:
        if not p.flag:
            continue
        flag_name = p.flag[2:] if p.flag.startswith("--") else p.flag
        bucket = result.bucket(p.location)
        if flag_name in flags:
            bucket[p.name] = flags[flag_name]
        elif p.required and p.name not in bucket:
            raise UsageError(f"Missing required flag: {p.flag}")

    return result


def build_url(base_url: str, path_template: str, path_params: dict[str, str]) -> str:
    path = path_template
    for key, value in path_params.items():
        path = path.replace("{" + key + "}", quote(str(value), safe=_COMPONENT_SAFE), 1)
    leftover = _PLACEHOLDER_RE.findall(path)
    if leftover:
        names = ", ".join(leftover)
        raise UsageError(f"Unresolved path parameter(s) in {path_template}: {names}")
    return base_url + path


def _with_query(url: str, query: dict[str, str]) -> str:
    if not query:
        return url
    parts = urlsplit(url)
    pairs = dict(parse_qsl(parts.query, keep_blank_values=True))
    pairs.update(query)
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def auth_headers(schema: ProviderSchema, secret: str) -> dict[str, str]:
    auth = schema.auth_pattern
    if auth.type == "bearer":
        return {"Authorization": f"Bearer {secret}"}
    if auth.type == "header":
        if not auth.header_name:
            raise UsageError(f"provider {schema.name} uses header auth without a header name")
        return {auth.header_name: secret}
    if auth.type == "basic":
        # The broker hands out a pre-joined credential; encode it as-is.
        token = base64.b64encode(secret.encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}
    raise UsageError(f"unsupported auth type for provider {schema.name}: {auth.type}")


def _render_success(text: str, schema: ProviderSchema, action: Action, opts: ExecuteOptions) -> str:
    try:
        data: Any = json.loads(text)
    except ValueError:
        return text
    if opts.json:
        return json.dumps(data, indent=2)
    return format_response(data, schema.name, action)


def execute_git(schema: ProviderSchema, action: Action, params: ResolvedParams, opts: ExecuteOptions) -> None:
    del action
    owner = params.path.get("owner", "")
    repo = params.path.get("repo", "")
    dest = params.body.get("dest") or repo
    repo_url = f"https://github.com/{owner}/{repo}.git"
    args = ["clone", repo_url, dest, "--auth-token", schema.auth_pattern.secret_name]

    if opts.dry_run:
        _print_json({"command": GIT_HELPER, "args": args})
        return

    if opts.verbose:
        _eprint(f"{GIT_HELPER} clone {repo_url} {dest}")

    try:
        proc = subprocess.run([GIT_HELPER, *args], check=False)
    except OSError as e:
        raise OpError(f"failed to run {GIT_HELPER}: {e}") from e
    if proc.returncode != 0:
        raise SubprocessError(GIT_HELPER, proc.returncode)


def execute(
    schema: ProviderSchema,
    action: Action,
    params: ResolvedParams,
    opts: ExecuteOptions,
    *,
    client: SecretSource | None,
) -> None:
    if action.method == "GIT":
        execute_git(schema, action, params, opts)
        return

    url = _with_query(build_url(schema.base_url, action.path, params.path), params.query)

    body_text: str | None = None
    if action.body == "json" and params.body:
        body_text = json.dumps(params.body, separators=(",", ":"))

    if client is None:
        raise OpError(f"no broker client available for {schema.name} {action.method} request")
    secret = client.get_secret(schema.auth_pattern.secret_name)
    headers = auth_headers(schema, secret)
    if body_text:
        headers["Content-Type"] = "application/json"
    if schema.name == "github":
        headers["User-Agent"] = USER_AGENT

    if opts.verbose:
        _eprint(f"{action.method} {url}")
        for k, v in _redacted_headers(headers).items():
            _eprint(f"{k}: {v}")
        if body_text:
            _eprint(f"Body: {body_text}")

    if opts.dry_run:
        plan: dict[str, Any] = {
            "method": action.method,
            "url": url,
            "headers": _redacted_headers(headers),
        }
        if body_text:
            plan["body"] = json.loads(body_text)
        _print_json(plan)
        return

    resp = _http_request(
        method=action.method,
        url=url,
        headers=headers,
        body=body_text.encode("utf-8") if body_text else None,
    )
    if opts.verbose:
        _eprint(f"{resp.status} {resp.reason}")

    text = resp.text()
    if not resp.ok:
        raise HttpStatusError(resp.status, resp.reason, text)

    sys.stdout.write(_render_success(text, schema, action, opts) + "\n")
