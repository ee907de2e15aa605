"""
persistence.py

Key/value stores that keep token fields between client instances.
Keys are strings of the form "{provider}|+|{field}"; any other key type
is rejected with TypeError.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from oauth2_clients.logs import get_logger

_log = get_logger("persistence")


def _check_key(key: Any) -> str:
    """Reject non-string keys (bool and int included) loudly."""
    if not isinstance(key, str):
        raise TypeError(
            f"Persistor keys must be strings, got {type(key).__name__}: {key!r}"
        )
    return key


class BasePersistor(ABC):
    """
    Abstract key/value store used by TokenState.

    Example:
        class RedisPersistor(BasePersistor):
            def get(self, key): ...
            def set(self, key, value): ...
            def contains(self, key): ...
            def clear(self): ...
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: str | None) -> None:
        """Store a value. Storing None removes the key."""
        ...

    @abstractmethod
    def contains(self, key: str) -> bool:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def __contains__(self, key: str) -> bool:
        return self.contains(key)


class SessionPersistor(BasePersistor):
    """
    Stores values in any mutable mapping, typically a web framework session.

    Example:
        from flask import session
        persistor = SessionPersistor(session)
    """

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session

    def get(self, key: str) -> str | None:
        return self._session.get(_check_key(key))

    def set(self, key: str, value: str | None) -> None:
        key = _check_key(key)
        if value is None:
            self._session.pop(key, None)
        else:
            self._session[key] = value

    def contains(self, key: str) -> bool:
        return self._session.get(_check_key(key)) is not None

    def clear(self) -> None:
        self._session.clear()


class MemoryPersistor(SessionPersistor):
    """Process-local dict store, handy for scripts and tests."""

    def __init__(self) -> None:
        super().__init__({})


class JsonFilePersistor(BasePersistor):
    """
    Stores values in a JSON file, re-read on every access so separate
    processes sharing the file see each other's writes.

    Example:
        persistor = JsonFilePersistor(Path.home() / ".oauth2" / "tokens.json")
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        """Read the token file; a missing or unreadable file is empty."""
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.error("Failed to read token file %s: %s", self.path, exc)
            return {}

        if not isinstance(data, dict):
            _log.error("Token file %s does not hold a JSON object", self.path)
            return {}
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._read().get(_check_key(key))

    def set(self, key: str, value: str | None) -> None:
        key = _check_key(key)
        data = self._read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._write(data)

    def contains(self, key: str) -> bool:
        return self._read().get(_check_key(key)) is not None

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            _log.info("Token file %s deleted", self.path)
