"""
config.py

Loads environment variables from .env using python-dotenv.
Exposes them as typed constants used by the client, transport and logging.
Part of oauth2-clients - OAuth2 login for many providers.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load .env file from the working directory
# ---------------------------------------------------------------------------
_ENV_PATH = Path.cwd() / ".env"
load_dotenv(_ENV_PATH)


def _get_optional(key: str, default: str = "") -> str:
    """
    Retrieve an optional environment variable with a default.

    Args:
        key: The environment variable name.
        default: Fallback value if not set.

    Returns:
        The value string or default.
    """
    return os.getenv(key, default).strip() or default


def _get_bool(key: str, default: bool = False) -> bool:
    """
    Retrieve an environment variable as a boolean.

    Args:
        key: The environment variable name.
        default: Fallback if not set.

    Returns:
        True if the value is "true"/"1"/"yes" (case-insensitive), else False.
    """
    raw = os.getenv(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("true", "1", "yes")


def _get_int(key: str, default: int = 0) -> int:
    """
    Retrieve an environment variable as an integer.

    Args:
        key: The environment variable name.
        default: Fallback if not set or not a valid int.

    Returns:
        The integer value.
    """
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def credential_from_env(client_type: str, field: str) -> str:
    """
    Look up a provider credential such as OAUTH2_FITBIT_CLIENT_SECRET.

    Args:
        client_type: Registered provider key, e.g. "fitbit".
        field: "client_id" or "client_secret".

    Returns:
        The value, or an empty string when unset.

    Example:
        secret = credential_from_env("fitbit", "client_secret")
    """
    key = f"OAUTH2_{client_type.upper()}_{field.upper()}"
    return _get_optional(key)


# ===========================================================================
# Section 1 - Services
# ===========================================================================

CONFIG_PATH: str = _get_optional("OAUTH2_CONFIG_PATH", "oauth2.yaml")

# ===========================================================================
# Section 2 - Token lifecycle
# ===========================================================================

# Tokens expiring within this window are refreshed before an API call
EXPIRES_BUFFER_MS: int = _get_int("OAUTH2_EXPIRES_BUFFER_MS", 10000)
# RFC 6749 4.2.2: expires_in is optional, assume one day
DEFAULT_EXPIRES_IN: int = _get_int("OAUTH2_DEFAULT_EXPIRES_IN", 3600 * 24)

# ===========================================================================
# Section 3 - Transport
# ===========================================================================

HTTP_TIMEOUT: int = _get_int("OAUTH2_HTTP_TIMEOUT", 30)
VERIFY_TLS: bool = _get_bool("OAUTH2_VERIFY_TLS", default=True)

# ===========================================================================
# Section 4 - Logging
# ===========================================================================

LOG_LEVEL: str = _get_optional("OAUTH2_LOG_LEVEL", "INFO")
LOGS_DIR: Path = Path(_get_optional("OAUTH2_LOG_DIR", str(Path.cwd() / "logs")))
LOG_FILE: Path = LOGS_DIR / "oauth2.log"


def as_dict() -> dict[str, str | int | bool]:
    """
    Return all configuration values as a flat dictionary.
    Useful for debugging - holds no credentials.

    Returns:
        A dict of all config keys and their current values.

    Example:
        cfg = as_dict()
    """
    return {
        "OAUTH2_CONFIG_PATH": CONFIG_PATH,
        "OAUTH2_EXPIRES_BUFFER_MS": EXPIRES_BUFFER_MS,
        "OAUTH2_DEFAULT_EXPIRES_IN": DEFAULT_EXPIRES_IN,
        "OAUTH2_HTTP_TIMEOUT": HTTP_TIMEOUT,
        "OAUTH2_VERIFY_TLS": VERIFY_TLS,
        "OAUTH2_LOG_LEVEL": LOG_LEVEL,
        "OAUTH2_LOG_DIR": str(LOGS_DIR),
    }
