"""
token_state.py

The four token fields owned by one client: access token, refresh token,
token type and expiry instant.

Reads try the in-memory cache first and fall back to the persistor under
"{provider}|+|{field}". Writes update the cache and write through at once,
so a new client built against the same store and provider name sees the
same tokens.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from oauth2_clients.persistence import BasePersistor

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
TOKEN_TYPE_KEY = "token_type"
EXPIRES_AT_KEY = "expires_at"

_FIELDS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, TOKEN_TYPE_KEY, EXPIRES_AT_KEY)
_EXPIRED = datetime.min.replace(tzinfo=timezone.utc)


def _parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string to an aware UTC datetime."""
    if not value:
        return None

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = f"{normalized[:-1]}+00:00"

    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def _iso_utc(value: datetime) -> str:
    """Format an aware datetime as an ISO UTC string."""
    return value.astimezone(timezone.utc).isoformat()


def persistor_key(provider_name: str, field_key: str) -> str:
    """Return the namespaced store key, e.g. "Fitbit|+|access_token"."""
    return f"{provider_name}|+|{field_key}"


class TokenState:
    """
    Cached, write-through view of one provider's token fields.

    Example:
        state = TokenState("Fitbit", MemoryPersistor())
        state.store("tok1", "ref1", "Bearer", expires_at)
        state.access_token  # "tok1"
    """

    def __init__(self, provider_name: str, persistor: BasePersistor | None = None) -> None:
        self.provider_name = provider_name
        self._persistor = persistor
        self._cache: dict[str, str | None] = {}

    def _read(self, field_key: str) -> str | None:
        value = self._cache.get(field_key)
        if value is None and self._persistor is not None:
            value = self._persistor.get(persistor_key(self.provider_name, field_key))
            self._cache[field_key] = value
        return value

    def _write(self, field_key: str, value: str | None) -> None:
        self._cache[field_key] = value
        if self._persistor is not None:
            self._persistor.set(persistor_key(self.provider_name, field_key), value)

    @property
    def access_token(self) -> str | None:
        return self._read(ACCESS_TOKEN_KEY) or None

    @property
    def refresh_token(self) -> str | None:
        return self._read(REFRESH_TOKEN_KEY) or None

    @property
    def token_type(self) -> str | None:
        return self._read(TOKEN_TYPE_KEY) or None

    @property
    def expires_at(self) -> datetime | None:
        """
        Expiry instant in UTC; None means the token never expires.
        An unreadable stored value counts as already expired.
        """
        raw = self._read(EXPIRES_AT_KEY)
        if not raw:
            return None
        return _parse_iso_datetime(raw) or _EXPIRED

    def store(
        self,
        access_token: str,
        refresh_token: str | None,
        token_type: str | None,
        expires_at: datetime,
    ) -> None:
        """
        Write all four fields as the result of one successful exchange.

        Args:
            access_token: Non-empty access token.
            refresh_token: Refresh token, or None when the provider issued none.
            token_type: Token type such as "Bearer", or None.
            expires_at: Aware expiry instant.
        """
        self._write(ACCESS_TOKEN_KEY, access_token)
        self._write(REFRESH_TOKEN_KEY, refresh_token)
        self._write(TOKEN_TYPE_KEY, token_type)
        self._write(EXPIRES_AT_KEY, _iso_utc(expires_at))

    def as_dict(self) -> dict[str, str | None]:
        """Return the raw stored values keyed by field name."""
        return {field_key: self._read(field_key) for field_key in _FIELDS}
