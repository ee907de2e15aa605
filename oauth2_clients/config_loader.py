"""
config_loader.py

Loads and parses the provider services file (oauth2.yaml) using PyYAML.
Returns one ClientConfiguration per declared service.
Supports hot reload via reload() - re-reads the file without restarting.
Validates required fields on every load.
Part of oauth2-clients - OAuth2 login for many providers.

Expected layout:

    oauth2:
      services:
        - client_type: fitbit
          enabled: true
          client_id: abc
          client_secret: xyz
          redirect_uri: https://app.example/callback/fitbit
          scope: profile activity

client_id and client_secret may be left out and supplied through
OAUTH2_<CLIENT_TYPE>_CLIENT_ID / OAUTH2_<CLIENT_TYPE>_CLIENT_SECRET.
"""

import threading
from pathlib import Path
from typing import Any

import yaml

from oauth2_clients.config import credential_from_env
from oauth2_clients.models import ClientConfiguration

_REQUIRED_FIELDS: list[str] = ["client_type", "redirect_uri"]
_CREDENTIAL_FIELDS: list[str] = ["client_id", "client_secret"]


class ServiceConfigLoader:
    """
    Loader for the services file.

    Provides:
        - load(path) - initial load with validation
        - reload() - hot-reload from disk without restarting
        - get(client_type) - configuration of one service
        - get_all() - every declared service, enabled or not

    Thread-safe via a reentrant lock.

    Example:
        loader = ServiceConfigLoader()
        loader.load("oauth2.yaml")
        fitbit = loader.get("fitbit")
    """

    def __init__(self) -> None:
        self._services: list[ClientConfiguration] = []
        self._path: Path | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, path: str | Path) -> list[ClientConfiguration]:
        """
        Load the services file from disk, validate, and cache the result.

        Args:
            path: File path to oauth2.yaml (absolute or relative to cwd).

        Returns:
            The declared services in file order.

        Raises:
            FileNotFoundError: If the YAML file does not exist.
            ValueError: If required fields are missing.
            yaml.YAMLError: If the file contains invalid YAML.
        """
        resolved = Path(path).resolve()
        if not resolved.is_file():
            raise FileNotFoundError(
                f"[oauth2 config] Services file not found: {resolved}\n"
                f"  -> Set OAUTH2_CONFIG_PATH or create oauth2.yaml."
            )

        with self._lock:
            self._path = resolved
            self._services = self._validate(self._read_yaml(resolved))
            return list(self._services)

    def reload(self) -> list[ClientConfiguration]:
        """
        Re-read and re-validate the file, then replace the cached services.

        Raises:
            RuntimeError: If load() was never called first.
        """
        with self._lock:
            if self._path is None:
                raise RuntimeError(
                    "[oauth2 config] Cannot reload - load() has not been called yet."
                )
            self._services = self._validate(self._read_yaml(self._path))
            return list(self._services)

    def get(self, client_type: str) -> ClientConfiguration:
        """
        Return the configuration of one service.

        Raises:
            KeyError: If no service with that client_type is declared.
        """
        with self._lock:
            for service in self._services:
                if service.client_type_name == client_type.lower():
                    return service
            raise KeyError(
                f"[oauth2 config] Service '{client_type}' not found. "
                f"Available: {[s.client_type_name for s in self._services]}"
            )

    def get_all(self) -> list[ClientConfiguration]:
        with self._lock:
            return list(self._services)

    @property
    def path(self) -> Path | None:
        """Return the resolved path of the loaded YAML file."""
        return self._path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(
                f"[oauth2 config] Expected a YAML mapping at top level, got {type(data).__name__}."
            )
        return data

    @staticmethod
    def _validate(raw: dict[str, Any]) -> list[ClientConfiguration]:
        """
        Validate the parsed YAML and build ClientConfiguration objects.

        Raises:
            ValueError: If the layout is wrong or any service is incomplete.
        """
        section = raw.get("oauth2")
        if not isinstance(section, dict):
            raise ValueError("[oauth2 config] YAML must have a top-level 'oauth2' mapping.")

        services = section.get("services") or []
        if not isinstance(services, list):
            raise ValueError("[oauth2 config] 'oauth2.services' must be a list.")

        errors: list[str] = []
        result: list[ClientConfiguration] = []
        for index, entry in enumerate(services):
            if not isinstance(entry, dict):
                errors.append(f"  Service #{index} must be a mapping, got {type(entry).__name__}.")
                continue

            missing = [f for f in _REQUIRED_FIELDS if not entry.get(f)]
            if missing:
                errors.append(f"  Service #{index} is missing required fields {missing}.")
                continue

            client_type = str(entry["client_type"]).strip().lower()
            credentials = {
                f: str(entry.get(f) or credential_from_env(client_type, f))
                for f in _CREDENTIAL_FIELDS
            }
            absent = [f for f, value in credentials.items() if not value]
            if absent:
                errors.append(
                    f"  Service '{client_type}' has no {absent} in YAML or environment."
                )
                continue

            result.append(
                ClientConfiguration(
                    client_type_name=client_type,
                    client_id=credentials["client_id"],
                    client_secret=credentials["client_secret"],
                    redirect_uri=str(entry["redirect_uri"]),
                    scope=str(entry.get("scope") or ""),
                    is_enabled=bool(entry.get("enabled", True)),
                )
            )

        if errors:
            joined = "\n".join(errors)
            raise ValueError(f"[oauth2 config] Validation errors in services file:\n{joined}")

        return result


# ---------------------------------------------------------------------------
# Module-level singleton instance
# ---------------------------------------------------------------------------
_loader = ServiceConfigLoader()


def load(path: str | Path) -> list[ClientConfiguration]:
    """Load the services file (module-level convenience function)."""
    return _loader.load(path)
