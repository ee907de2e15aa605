"""Tests for the provider registration table and AuthorizationRoot."""

import pytest

from oauth2_clients import registry
from oauth2_clients.client import OAuth2Client
from oauth2_clients.models import ClientConfiguration
from oauth2_clients.persistence import MemoryPersistor
from oauth2_clients.registry import (
    AuthorizationRoot,
    get_provider_factory,
    register_provider,
    registered_providers,
)


def _service(client_type, enabled=True):
    return ClientConfiguration(
        client_type_name=client_type,
        client_id=f"{client_type}-id",
        client_secret=f"{client_type}-secret",
        redirect_uri=f"https://app.test/callback/{client_type}",
        is_enabled=enabled,
    )


@pytest.fixture
def scratch_registry(monkeypatch):
    """Isolate registrations made by a test."""
    monkeypatch.setattr(registry, "_PROVIDERS", dict(registry._PROVIDERS))


def test_bundled_providers_are_registered():
    assert {"digitalocean", "fitbit", "yandex"} <= set(registered_providers())


def test_register_and_look_up(scratch_registry, adapter):
    register_provider("Acme", lambda: adapter)

    assert get_provider_factory("acme")() is adapter
    assert "acme" in registered_providers()


def test_register_as_decorator(scratch_registry, adapter):
    @register_provider("acme")
    def acme():
        return adapter

    assert get_provider_factory("ACME") is acme


def test_duplicate_registration_is_rejected(scratch_registry, adapter):
    register_provider("acme", lambda: adapter)

    with pytest.raises(ValueError):
        register_provider("acme", lambda: adapter)


def test_clients_for_enabled_registered_services(transport):
    persistor = MemoryPersistor()
    root = AuthorizationRoot(
        [_service("fitbit"), _service("yandex", enabled=False), _service("unknown")],
        transport=transport,
        persistor=persistor,
    )

    clients = root.clients

    assert [c.name for c in clients] == ["Fitbit"]
    (client,) = clients
    assert isinstance(client, OAuth2Client)
    assert client.transport is transport
    assert client.configuration.client_id == "fitbit-id"


def test_get_client_by_name_or_type():
    root = AuthorizationRoot([_service("fitbit"), _service("yandex")])

    assert root.get_client("Yandex").name == "Yandex"
    assert root.get_client("fitbit").name == "Fitbit"
    with pytest.raises(KeyError):
        root.get_client("digitalocean")


def test_get_client_ignores_client_type_case():
    root = AuthorizationRoot([_service("fitbit")])
    root.configurations = [
        ClientConfiguration(
            client_type_name="FitBit",
            client_id="id",
            client_secret="secret",
            redirect_uri="https://app.test/cb",
        )
    ]

    assert root.get_client("fitbit").configuration.client_type_name == "FitBit"
    assert root.get_client("FITBIT").name == "Fitbit"


def test_clients_share_token_store():
    persistor = MemoryPersistor()
    root = AuthorizationRoot([_service("yandex")], persistor=persistor)
    persistor.set("Yandex|+|access_token", "tok1")

    assert root.get_client("yandex").access_token == "tok1"


def test_configurations_default_to_config_file(tmp_path, monkeypatch):
    path = tmp_path / "oauth2.yaml"
    path.write_text(
        "oauth2:\n  services:\n"
        "    - client_type: yandex\n"
        "      client_id: a\n      client_secret: b\n"
        "      redirect_uri: https://app.test/cb\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(registry.config, "CONFIG_PATH", str(path))

    assert [c.name for c in AuthorizationRoot().clients] == ["Yandex"]


def test_shared_root_is_built_once(tmp_path, monkeypatch):
    path = tmp_path / "oauth2.yaml"
    path.write_text(
        "oauth2:\n  services:\n"
        "    - client_type: fitbit\n"
        "      client_id: a\n      client_secret: b\n"
        "      redirect_uri: https://app.test/cb\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(registry.config, "CONFIG_PATH", str(path))
    monkeypatch.setattr(registry, "_root_singleton", None)

    root = registry.get_authorization_root()

    assert registry.get_authorization_root() is root
    assert [c.name for c in root.clients] == ["Fitbit"]
