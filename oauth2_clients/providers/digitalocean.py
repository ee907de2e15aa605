"""
digitalocean.py

DigitalOcean adapter. The token response already carries the account
profile, so there is no separate user-info endpoint.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from oauth2_clients.adapter import ProviderAdapter, load_profile, optional, require
from oauth2_clients.models import Endpoint, UserInfo
from oauth2_clients.registry import register_provider

BASE_URI = "https://cloud.digitalocean.com"


def parse_profile(content: str) -> UserInfo:
    profile = load_profile(content)
    info = require(profile, "info")
    return UserInfo(
        id=str(require(profile, "uid")),
        first_name=require(info, "name"),
        last_name="",
        email=optional(info, "email"),
    )


@register_provider("digitalocean")
def digitalocean() -> ProviderAdapter:
    return ProviderAdapter(
        name="DigitalOcean",
        authorize_endpoint=Endpoint(BASE_URI, "/v1/oauth/authorize"),
        token_endpoint=Endpoint(BASE_URI, "/v1/oauth/token"),
        userinfo_endpoint=None,
        parse_user_info=parse_profile,
    )
