from __future__ import annotations

from .types import Action, AuthPattern, ParamDef, ProviderSchema

_OWNER = ParamDef(name="owner", position=0, required=True, location="path")
_REPO = ParamDef(name="repo", position=1, required=True, location="path")

github = ProviderSchema(
    name="github",
    display_name="GitHub",
    base_url="https://api.github.com",
    auth_pattern=AuthPattern(type="bearer", secret_name="SEKSBOT_GITHUB_PERSONAL_ACCESS_TOKEN"),
    actions={
        "list-repos": Action(
            description="List repositories for authenticated user",
            method="GET",
            path="/user/repos",
            capability="repos.list",
        ),
        "get-repo": Action(
            description="Get repository details",
            method="GET",
            path="/repos/{owner}/{repo}",
            capability="repos.read",
            params=(_OWNER, _REPO),
        ),
        "list-issues": Action(
            description="List issues for a repository",
            method="GET",
            path="/repos/{owner}/{repo}/issues",
            capability="issues.list",
            params=(_OWNER, _REPO),
        ),
        "create-issue": Action(
            description="Create an issue",
            method="POST",
            path="/repos/{owner}/{repo}/issues",
            capability="issues.write",
            body="json",
            params=(
                _OWNER,
                _REPO,
                ParamDef(name="title", flag="--title", required=True, location="body"),
                ParamDef(name="body", flag="--body", required=False, location="body"),
            ),
        ),
        "clone": Action(
            description="Clone a repository (delegates to seks-git)",
            method="GIT",
            path="/{owner}/{repo}",
            capability="repos.read",
            params=(
                _OWNER,
                _REPO,
                ParamDef(name="dest", position=2, required=False, location="body"),
            ),
        ),
    },
)
