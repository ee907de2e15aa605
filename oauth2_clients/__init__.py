"""
oauth2_clients - OAuth2 authorization-code login for many providers.

One OAuth2Client drives the token lifecycle for any ProviderAdapter;
AuthorizationRoot builds clients for the services enabled in oauth2.yaml.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from oauth2_clients.adapter import ProviderAdapter, RequestContext
from oauth2_clients.client import OAuth2Client
from oauth2_clients.exceptions import (
    LoginRequired,
    MalformedProfile,
    OAuth2ClientError,
    ProviderError,
    TransportFailure,
    UnexpectedResponse,
)
from oauth2_clients.models import AvatarInfo, ClientConfiguration, Endpoint, TokenStatus, UserInfo
from oauth2_clients.persistence import JsonFilePersistor, MemoryPersistor, SessionPersistor
from oauth2_clients.registry import AuthorizationRoot, get_authorization_root, register_provider
from oauth2_clients import providers  # noqa: F401  registers bundled adapters

__all__ = [
    "AuthorizationRoot",
    "AvatarInfo",
    "ClientConfiguration",
    "Endpoint",
    "JsonFilePersistor",
    "LoginRequired",
    "MalformedProfile",
    "MemoryPersistor",
    "OAuth2Client",
    "OAuth2ClientError",
    "ProviderAdapter",
    "ProviderError",
    "RequestContext",
    "SessionPersistor",
    "TokenStatus",
    "TransportFailure",
    "UnexpectedResponse",
    "UserInfo",
    "get_authorization_root",
    "register_provider",
]
