"""
adapter.py

ProviderAdapter describes one identity provider as data: a name, three
endpoints, a profile parser and up to four optional hooks. A single
OAuth2Client drives every adapter through the same token lifecycle.

Hooks receive a RequestContext and may only edit the request (auth scheme,
extra parameters, headers) or read the response. They never decide
lifecycle state.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.auth import HTTPBasicAuth

from oauth2_clients import config
from oauth2_clients.exceptions import MalformedProfile
from oauth2_clients.models import ClientConfiguration, Endpoint, UserInfo
from oauth2_clients.transport import ApiRequest, BearerAuth


@dataclass
class RequestContext:
    """
    Everything a hook may look at or change.

    Attributes:
        configuration: Application credentials of the calling client.
        request: The request about to be sent (before-hooks).
        response: The verified response (after-hooks).
        parameters: Callback parameters during a code exchange.
        access_token: Current access token during API calls.
        token_type: Current token type during API calls.
    """

    configuration: ClientConfiguration
    request: ApiRequest | None = None
    response: requests.Response | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    access_token: str | None = None
    token_type: str | None = None


Hook = Callable[[RequestContext], None]
ProfileParser = Callable[[str], UserInfo]


@dataclass(frozen=True)
class ProviderAdapter:
    """
    Endpoints and behavior of one OAuth2 provider.

    Example:
        adapter = ProviderAdapter(
            name="Yandex",
            authorize_endpoint=Endpoint("https://oauth.yandex.ru", "/authorize"),
            token_endpoint=Endpoint("https://oauth.yandex.ru", "/token"),
            userinfo_endpoint=Endpoint("https://login.yandex.ru", "/info"),
            parse_user_info=parse_yandex_profile,
        )
    """

    name: str
    authorize_endpoint: Endpoint
    token_endpoint: Endpoint
    # None: the profile arrives with the token response instead
    userinfo_endpoint: Endpoint | None
    parse_user_info: ProfileParser
    before_token_exchange: Hook | None = None
    before_refresh: Hook | None = None
    after_token_exchange: Hook | None = None
    before_user_info: Hook | None = None
    default_expires_in: int = config.DEFAULT_EXPIRES_IN

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("ProviderAdapter.name must be a non-empty string")
        if self.default_expires_in <= 0:
            raise ValueError("ProviderAdapter.default_expires_in must be positive")


# ---------------------------------------------------------------------------
# Reusable hooks
# ---------------------------------------------------------------------------


def use_basic_auth(ctx: RequestContext) -> None:
    """Authenticate a token request with HTTP basic client_id:client_secret."""
    ctx.request.auth = HTTPBasicAuth(
        ctx.configuration.client_id,
        ctx.configuration.client_secret,
    )


def use_bearer_header(ctx: RequestContext) -> None:
    """Send the access token in the Authorization header instead of the query."""
    ctx.request.auth = BearerAuth(ctx.access_token, ctx.token_type or "Bearer")


# ---------------------------------------------------------------------------
# Profile parsing helpers
# ---------------------------------------------------------------------------


def load_profile(content: str) -> dict[str, Any]:
    """
    Decode a JSON profile payload.

    Raises:
        MalformedProfile: If the content is not a JSON object.
    """
    try:
        data = json.loads(content or "")
    except ValueError as exc:
        raise MalformedProfile(f"Profile is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedProfile("Profile is not a JSON object")
    return data


def require(data: Mapping[str, Any], *path: str) -> Any:
    """
    Walk nested keys and return the value, failing on any missing step.

    Example:
        require(profile, "user", "encodedId")

    Raises:
        MalformedProfile: If a key is absent or its value is None.
    """
    value: Any = data
    for key in path:
        if not isinstance(value, Mapping) or value.get(key) is None:
            raise MalformedProfile(f"Profile field '{'.'.join(path)}' is missing")
        value = value[key]
    return value


def optional(data: Mapping[str, Any], *path: str) -> Any:
    """Like require() but returns None for a missing field."""
    try:
        return require(data, *path)
    except MalformedProfile:
        return None


def split_name(full_name: str, fallback: str = "") -> tuple[str, str]:
    """Split "First Middle Last" into ("First", "Last")."""
    names = full_name.split()
    if not names:
        return fallback, ""
    return names[0], names[-1] if len(names) > 1 else ""
