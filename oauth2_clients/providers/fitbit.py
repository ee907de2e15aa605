"""
fitbit.py

Fitbit adapter. Token requests use HTTP basic client authentication and
API calls send the access token as a bearer header.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

from datetime import date

from oauth2_clients.adapter import (
    ProviderAdapter,
    load_profile,
    optional,
    require,
    split_name,
    use_basic_auth,
    use_bearer_header,
)
from oauth2_clients.client import OAuth2Client
from oauth2_clients.models import AvatarInfo, Endpoint, UserInfo
from oauth2_clients.registry import register_provider

API_BASE_URI = "https://api.fitbit.com"


def parse_profile(content: str) -> UserInfo:
    user = require(load_profile(content), "user")
    display_name = optional(user, "displayName") or ""
    first_name, last_name = split_name(optional(user, "fullName") or "", display_name)
    return UserInfo(
        id=str(require(user, "encodedId")),
        first_name=first_name,
        last_name=last_name,
        avatar=AvatarInfo(normal=optional(user, "avatar")),
    )


@register_provider("fitbit")
def fitbit() -> ProviderAdapter:
    return ProviderAdapter(
        name="Fitbit",
        authorize_endpoint=Endpoint("https://www.fitbit.com", "/oauth2/authorize"),
        token_endpoint=Endpoint(API_BASE_URI, "/oauth2/token"),
        userinfo_endpoint=Endpoint(API_BASE_URI, "/1/user/-/profile.json"),
        parse_user_info=parse_profile,
        before_token_exchange=use_basic_auth,
        before_refresh=use_basic_auth,
        before_user_info=use_bearer_header,
    )


def step_data_endpoint(start_date: date, end_date: date | None = None) -> Endpoint:
    """Intraday step series between two days, one-minute resolution."""
    end_date = end_date or start_date
    return Endpoint(
        API_BASE_URI,
        f"/1/user/-/activities/steps/date/{start_date:%Y-%m-%d}/{end_date:%Y-%m-%d}/1min.json",
    )


def get_step_data(client: OAuth2Client, start_date: date, end_date: date | None = None) -> str:
    """
    Fetch intraday step data for the logged-in Fitbit user.

    Args:
        client: A client bound to the Fitbit adapter.
        start_date: First day of the range.
        end_date: Last day of the range, defaults to start_date.

    Returns:
        The raw JSON response body.

    Example:
        body = get_step_data(client, date(2024, 1, 1))
    """
    return client.call(step_data_endpoint(start_date, end_date), use_bearer_header)
