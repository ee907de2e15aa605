"""
models.py

Value types shared by the client and provider adapters:
Endpoint, ClientConfiguration, AvatarInfo, UserInfo and TokenStatus.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from dataclasses import dataclass, field
from enum import Enum, unique


@dataclass(frozen=True)
class Endpoint:
    """
    A provider URI split into base and resource path.

    Example:
        Endpoint("https://api.fitbit.com", "/oauth2/token").url
        # "https://api.fitbit.com/oauth2/token"
    """

    base_uri: str
    resource: str = ""

    @property
    def url(self) -> str:
        if not self.resource:
            return self.base_uri
        return f"{self.base_uri.rstrip('/')}/{self.resource.lstrip('/')}"


@dataclass(frozen=True)
class ClientConfiguration:
    """
    Application credentials for one provider.

    Attributes:
        client_type_name: Registered provider key used to pick the adapter.
        client_id: OAuth2 client identifier issued by the provider.
        client_secret: OAuth2 client secret issued by the provider.
        redirect_uri: Callback URI registered with the provider.
        scope: Space separated scopes, empty for the provider default.
        is_enabled: Disabled services are skipped by the registry.
    """

    client_type_name: str
    client_id: str
    client_secret: str
    redirect_uri: str
    scope: str = ""
    is_enabled: bool = True


@dataclass
class AvatarInfo:
    small: str | None = None
    normal: str | None = None
    large: str | None = None


@dataclass
class UserInfo:
    """
    Normalized user profile returned by every provider adapter.

    Attributes:
        id: Provider-assigned user identifier.
        first_name: Given name (may be empty).
        last_name: Family name (may be empty).
        email: Email address when the provider shares one.
        avatar: Avatar URIs in three sizes, each optional.
        provider_name: Stamped by the client after parsing.
    """

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    avatar: AvatarInfo = field(default_factory=AvatarInfo)
    provider_name: str = ""


@unique
class TokenStatus(Enum):
    """Token state derived from the stored fields at decision time."""

    UNAUTHENTICATED = "unauthenticated"
    VALID = "valid"
    REFRESHABLE = "refreshable"
    EXPIRED = "expired"
