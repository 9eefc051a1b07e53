from __future__ import annotations

from .types import Action, AuthPattern, ParamDef, ProviderSchema

_SERVER_ID = ParamDef(name="id", position=0, required=True, location="path")

hetzner = ProviderSchema(
    name="hetzner",
    display_name="Hetzner Cloud",
    base_url="https://api.hetzner.cloud/v1",
    auth_pattern=AuthPattern(type="bearer", secret_name="HETZNER_API_TOKEN"),
    actions={
        "list-servers": Action(
            description="List all servers",
            method="GET",
            path="/servers",
            capability="servers.list",
        ),
        "get-server": Action(
            description="Get server details",
            method="GET",
            path="/servers/{id}",
            capability="servers.read",
            params=(_SERVER_ID,),
        ),
        "create-server": Action(
            description="Create a new server",
            method="POST",
            path="/servers",
            capability="servers.create",
            body="json",
            params=(
                ParamDef(name="name", flag="--name", required=True, location="body"),
                ParamDef(name="server_type", flag="--type", required=True, location="body"),
                ParamDef(name="image", flag="--image", required=True, location="body"),
            ),
        ),
        "delete-server": Action(
            description="Delete a server",
            method="DELETE",
            path="/servers/{id}",
            capability="servers.delete",
            params=(_SERVER_ID,),
        ),
        "list-ssh-keys": Action(
            description="List all SSH keys",
            method="GET",
            path="/ssh_keys",
            capability="ssh-keys.list",
        ),
        "list-images": Action(
            description="List all images",
            method="GET",
            path="/images",
            capability="images.list",
        ),
    },
)
