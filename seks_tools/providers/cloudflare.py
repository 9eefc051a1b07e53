from __future__ import annotations

from .types import Action, AuthPattern, ParamDef, ProviderSchema

_ZONE = ParamDef(name="zone_id", flag="--zone", required=True, location="path")

cloudflare = ProviderSchema(
    name="cloudflare",
    display_name="Cloudflare",
    base_url="https://api.cloudflare.com/client/v4",
    auth_pattern=AuthPattern(type="bearer", secret_name="CLOUDFLARE_API_TOKEN"),
    actions={
        "list-zones": Action(
            description="List all zones",
            method="GET",
            path="/zones",
            capability="zones.list",
        ),
        "dns-list": Action(
            description="List DNS records for a zone",
            method="GET",
            path="/zones/{zone_id}/dns_records",
            capability="dns.list",
            params=(_ZONE,),
        ),
        "dns-add": Action(
            description="Add a DNS record",
            method="POST",
            path="/zones/{zone_id}/dns_records",
            capability="dns.write",
            body="json",
            params=(
                _ZONE,
                ParamDef(name="type", flag="--type", required=True, location="body"),
                ParamDef(name="name", flag="--name", required=True, location="body"),
                ParamDef(name="content", flag="--content", required=True, location="body"),
            ),
        ),
        "dns-delete": Action(
            description="Delete a DNS record",
            method="DELETE",
            path="/zones/{zone_id}/dns_records/{id}",
            capability="dns.delete",
            params=(
                _ZONE,
                ParamDef(name="id", position=0, required=True, location="path"),
            ),
        ),
    },
)
