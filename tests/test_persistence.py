"""Tests for the token stores and the TokenState read/write path."""

from datetime import datetime, timezone

import pytest

from oauth2_clients.persistence import JsonFilePersistor, MemoryPersistor, SessionPersistor
from oauth2_clients.token_state import TokenState, persistor_key

EXPIRY = datetime(2024, 1, 1, 13, 0, 0, tzinfo=timezone.utc)


class TestSessionPersistor:
    def test_reads_and_writes_the_wrapped_mapping(self):
        session = {}
        persistor = SessionPersistor(session)

        persistor.set("Acme|+|access_token", "tok1")

        assert session == {"Acme|+|access_token": "tok1"}
        assert persistor.get("Acme|+|access_token") == "tok1"
        assert "Acme|+|access_token" in persistor

    def test_setting_none_removes_the_key(self):
        session = {"k": "v"}
        persistor = SessionPersistor(session)

        persistor.set("k", None)

        assert session == {}
        assert not persistor.contains("k")

    @pytest.mark.parametrize("key", [1, 1.5, None, ("a",)])
    def test_non_string_keys_fail_loudly(self, key):
        persistor = MemoryPersistor()

        with pytest.raises(TypeError):
            persistor.set(key, "value")
        with pytest.raises(TypeError):
            persistor.get(key)

    def test_clear(self):
        persistor = MemoryPersistor()
        persistor.set("a", "1")

        persistor.clear()

        assert persistor.get("a") is None


class TestJsonFilePersistor:
    def test_values_are_shared_between_instances(self, tmp_path):
        path = tmp_path / "auth" / "tokens.json"
        JsonFilePersistor(path).set("Acme|+|access_token", "tok1")

        assert JsonFilePersistor(path).get("Acme|+|access_token") == "tok1"

    def test_missing_file_is_empty(self, tmp_path):
        persistor = JsonFilePersistor(tmp_path / "absent.json")

        assert persistor.get("anything") is None
        assert not persistor.contains("anything")

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFilePersistor(path).get("k") is None

    def test_clear_deletes_the_file(self, tmp_path):
        path = tmp_path / "tokens.json"
        persistor = JsonFilePersistor(path)
        persistor.set("k", "v")

        persistor.clear()

        assert not path.exists()


class TestTokenState:
    def test_keys_are_namespaced_by_provider(self):
        persistor = MemoryPersistor()
        TokenState("Acme", persistor).store("tok1", "ref1", "Bearer", EXPIRY)

        assert persistor.get(persistor_key("Acme", "access_token")) == "tok1"
        assert persistor.get("Acme|+|refresh_token") == "ref1"
        assert persistor.get("Acme|+|token_type") == "Bearer"
        assert persistor.get("Acme|+|expires_at") == "2024-01-01T13:00:00+00:00"

    def test_new_instance_reads_through_to_the_store(self):
        persistor = MemoryPersistor()
        TokenState("Acme", persistor).store("tok1", None, None, EXPIRY)

        state = TokenState("Acme", persistor)

        assert state.access_token == "tok1"
        assert state.refresh_token is None
        assert state.expires_at == EXPIRY

    def test_other_provider_is_isolated(self):
        persistor = MemoryPersistor()
        TokenState("Acme", persistor).store("tok1", "ref1", "Bearer", EXPIRY)

        assert TokenState("Other", persistor).access_token is None

    def test_works_without_a_store(self):
        state = TokenState("Acme")
        state.store("tok1", "ref1", "Bearer", EXPIRY)

        assert state.access_token == "tok1"
        assert state.expires_at == EXPIRY

    def test_cached_value_wins_over_store(self):
        session = {}
        state = TokenState("Acme", SessionPersistor(session))
        state.store("tok1", "ref1", "Bearer", EXPIRY)

        session["Acme|+|access_token"] = "changed"

        assert state.access_token == "tok1"

    def test_no_expiry_stored_means_none(self):
        persistor = MemoryPersistor()
        persistor.set("Acme|+|access_token", "tok1")

        assert TokenState("Acme", persistor).expires_at is None

    def test_unreadable_expiry_counts_as_expired(self):
        persistor = MemoryPersistor()
        persistor.set("Acme|+|access_token", "tok1")
        persistor.set("Acme|+|expires_at", "garbage")

        assert TokenState("Acme", persistor).expires_at < EXPIRY
