"""
yandex.py

Yandex adapter. See http://api.yandex.com/oauth/doc/dg/yandex-oauth-dg.pdf
Part of oauth2-clients - OAuth2 login for many providers.
"""

from oauth2_clients.adapter import ProviderAdapter, load_profile, optional, require, split_name
from oauth2_clients.models import Endpoint, UserInfo
from oauth2_clients.registry import register_provider


def parse_profile(content: str) -> UserInfo:
    profile = load_profile(content)
    first_name, last_name = split_name(
        optional(profile, "real_name") or "",
        optional(profile, "display_name") or "",
    )
    return UserInfo(
        id=str(require(profile, "id")),
        first_name=first_name,
        last_name=last_name,
        email=optional(profile, "default_email"),
    )


@register_provider("yandex")
def yandex() -> ProviderAdapter:
    return ProviderAdapter(
        name="Yandex",
        authorize_endpoint=Endpoint("https://oauth.yandex.ru", "/authorize"),
        token_endpoint=Endpoint("https://oauth.yandex.ru", "/token"),
        userinfo_endpoint=Endpoint("https://login.yandex.ru", "/info"),
        parse_user_info=parse_profile,
    )
