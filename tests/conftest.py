"""
Shared pytest fixtures for oauth2-clients tests.

No test talks to a real provider: HttpTransport is given a MagicMock
session whose send() returns canned requests.Response objects, and
OAuth2Client is given a FakeClock so expiry can be stepped precisely.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Set test environment variables BEFORE any package imports
os.environ["OAUTH2_LOG_DIR"] = tempfile.mkdtemp(prefix="oauth2-test-logs-")
os.environ.setdefault("OAUTH2_LOG_LEVEL", "DEBUG")

from oauth2_clients.adapter import ProviderAdapter, load_profile, require  # noqa: E402
from oauth2_clients.client import OAuth2Client  # noqa: E402
from oauth2_clients.models import ClientConfiguration, Endpoint, UserInfo  # noqa: E402
from oauth2_clients.persistence import MemoryPersistor  # noqa: E402
from oauth2_clients.transport import HttpTransport  # noqa: E402

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

AUTHORIZE = Endpoint("https://auth.acme.test", "/oauth/authorize")
TOKEN = Endpoint("https://auth.acme.test", "/oauth/token")
USERINFO = Endpoint("https://api.acme.test", "/me")


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_response(body: str = "", status_code: int = 200, url: str = "https://acme.test") -> requests.Response:
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = url
    return response


def sent_requests(session: MagicMock) -> list[requests.PreparedRequest]:
    """Prepared requests passed to session.send, in order."""
    return [c.args[0] for c in session.send.call_args_list]


def parse_acme_profile(content: str) -> UserInfo:
    profile = load_profile(content)
    return UserInfo(
        id=str(require(profile, "id")),
        first_name=profile.get("first", ""),
        last_name=profile.get("last", ""),
        email=profile.get("email"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def transport(session):
    return HttpTransport(session=session, timeout=5)


@pytest.fixture
def persistor():
    return MemoryPersistor()


@pytest.fixture
def configuration():
    return ClientConfiguration(
        client_type_name="acme",
        client_id="cid",
        client_secret="csecret",
        redirect_uri="https://app.test/callback",
        scope="read write",
    )


@pytest.fixture
def adapter():
    return ProviderAdapter(
        name="Acme",
        authorize_endpoint=AUTHORIZE,
        token_endpoint=TOKEN,
        userinfo_endpoint=USERINFO,
        parse_user_info=parse_acme_profile,
    )


@pytest.fixture
def make_client(adapter, configuration, transport, persistor, clock):
    """Factory for clients sharing the fixtures' transport, store and clock."""

    def _make(**overrides) -> OAuth2Client:
        kwargs = {
            "adapter": adapter,
            "configuration": configuration,
            "transport": transport,
            "persistor": persistor,
            "clock": clock,
        }
        kwargs.update(overrides)
        return OAuth2Client(**kwargs)

    return _make
