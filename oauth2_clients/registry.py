"""
registry.py

Explicit registration table mapping provider keys to adapter factories,
and AuthorizationRoot, which builds a ready client for every enabled
service in the configuration.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from oauth2_clients import config, config_loader
from oauth2_clients.adapter import ProviderAdapter
from oauth2_clients.client import OAuth2Client
from oauth2_clients.logs import get_logger
from oauth2_clients.models import ClientConfiguration
from oauth2_clients.persistence import BasePersistor
from oauth2_clients.transport import HttpTransport

_log = get_logger("registry")

AdapterFactory = Callable[[], ProviderAdapter]

_PROVIDERS: dict[str, AdapterFactory] = {}


def register_provider(key: str, factory: AdapterFactory | None = None):
    """
    Register an adapter factory under a provider key.

    Usable directly or as a decorator:

        @register_provider("yandex")
        def yandex() -> ProviderAdapter: ...

    Raises:
        ValueError: If the key is already registered to another factory.
    """
    normalized = key.lower().strip()

    def _register(fn: AdapterFactory) -> AdapterFactory:
        existing = _PROVIDERS.get(normalized)
        if existing is not None and existing is not fn:
            raise ValueError(f"Provider '{normalized}' is already registered")
        _PROVIDERS[normalized] = fn
        return fn

    if factory is not None:
        return _register(factory)
    return _register


def get_provider_factory(key: str) -> AdapterFactory | None:
    return _PROVIDERS.get(key.lower().strip())


def registered_providers() -> list[str]:
    return sorted(_PROVIDERS)


class AuthorizationRoot:
    """
    Builds OAuth2 clients for every enabled, registered service.

    Example:
        root = AuthorizationRoot(persistor=SessionPersistor(session))
        for client in root.clients:
            links[client.name] = client.build_login_uri()
    """

    def __init__(
        self,
        configurations: Iterable[ClientConfiguration] | None = None,
        transport: HttpTransport | None = None,
        persistor: BasePersistor | None = None,
    ) -> None:
        """
        Args:
            configurations: Services to consider; read from OAUTH2_CONFIG_PATH if omitted.
            transport: Shared HTTP transport for every client.
            persistor: Shared token store for every client.
        """
        if configurations is None:
            configurations = config_loader.load(config.CONFIG_PATH)
        self.configurations = list(configurations)
        self.transport = transport
        self.persistor = persistor

    @property
    def clients(self) -> list[OAuth2Client]:
        """A fresh client for each enabled service with a registered adapter."""
        result: list[OAuth2Client] = []
        for configuration in self.configurations:
            if not configuration.is_enabled:
                continue

            factory = get_provider_factory(configuration.client_type_name)
            if factory is None:
                _log.warning(
                    "No adapter registered for '%s'; service skipped",
                    configuration.client_type_name,
                )
                continue

            result.append(
                OAuth2Client(
                    factory(),
                    configuration,
                    transport=self.transport,
                    persistor=self.persistor,
                )
            )
        return result

    def get_client(self, name: str) -> OAuth2Client:
        """
        Return the client for a provider by adapter name or client type.

        Raises:
            KeyError: If no enabled, registered service matches.
        """
        wanted = name.lower().strip()
        for client in self.clients:
            if wanted in (client.name.lower(), client.configuration.client_type_name.lower()):
                return client
        raise KeyError(f"No enabled OAuth2 client named '{name}'")


_root_singleton: AuthorizationRoot | None = None


def get_authorization_root() -> AuthorizationRoot:
    """Return a shared AuthorizationRoot built from OAUTH2_CONFIG_PATH."""
    global _root_singleton
    if _root_singleton is None:
        _root_singleton = AuthorizationRoot()
    return _root_singleton
