"""
providers - bundled provider adapters.

Importing this package registers every bundled adapter with the registry.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from oauth2_clients.providers.digitalocean import digitalocean
from oauth2_clients.providers.fitbit import fitbit
from oauth2_clients.providers.yandex import yandex

__all__ = ["digitalocean", "fitbit", "yandex"]
