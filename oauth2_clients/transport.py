"""
transport.py

HTTP transport built on requests.
ApiRequest is the mutable description that client hooks edit before it
is sent; HttpTransport turns it into a URI or executes it and raises
TransportFailure on any non-2xx status or network error.
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests
from requests.auth import AuthBase

from oauth2_clients import config
from oauth2_clients.exceptions import TransportFailure
from oauth2_clients.logs import get_logger
from oauth2_clients.models import Endpoint

_log = get_logger("transport")


class QueryParameterAuth(AuthBase):
    """Appends ``access_token=<token>`` to the request query string."""

    def __init__(self, access_token: str) -> None:
        self.access_token = access_token

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.prepare_url(r.url, {"access_token": self.access_token})
        return r


class BearerAuth(AuthBase):
    """Sends the token in an ``Authorization: <type> <token>`` header."""

    def __init__(self, access_token: str, token_type: str = "Bearer") -> None:
        self.access_token = access_token
        self.token_type = token_type or "Bearer"

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"{self.token_type} {self.access_token}"
        return r


@dataclass
class ApiRequest:
    """
    Request under construction.

    Attributes:
        url: Absolute URL without query string.
        method: HTTP method.
        params: Query string parameters.
        data: Form body parameters (POST).
        headers: Extra request headers.
        auth: A requests auth object applied when the request is prepared.
    """

    url: str
    method: str = "GET"
    params: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    auth: AuthBase | None = None

    @classmethod
    def for_endpoint(cls, endpoint: Endpoint, method: str = "GET") -> "ApiRequest":
        return cls(url=endpoint.url, method=method)

    def add_parameters(self, **values: Any) -> None:
        """
        Add parameters the way the method expects them: query string for
        GET, form body otherwise. None values are skipped.
        """
        target = self.params if self.method.upper() == "GET" else self.data
        for key, value in values.items():
            if value is not None:
                target[key] = value


class HttpTransport:
    """
    Executes ApiRequest objects through a requests.Session.

    Example:
        transport = HttpTransport()
        request = ApiRequest.for_endpoint(endpoint)
        response = transport.execute_and_verify(request)
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = config.HTTP_TIMEOUT,
        verify: bool = config.VERIFY_TLS,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.verify = verify

    def prepare(self, request: ApiRequest) -> requests.PreparedRequest:
        return requests.Request(
            method=request.method.upper(),
            url=request.url,
            params=request.params,
            data=request.data or None,
            headers=request.headers,
            auth=request.auth,
        ).prepare()

    def build_uri(self, request: ApiRequest) -> str:
        """Return the final URL of a request without sending it."""
        return self.prepare(request).url

    def execute_and_verify(self, request: ApiRequest) -> requests.Response:
        """
        Send the request and return the response if its status is 2xx.

        Raises:
            TransportFailure: On network errors or non-success status codes.
        """
        prepared = self.prepare(request)
        try:
            response = self.session.send(prepared, timeout=self.timeout, verify=self.verify)
        except requests.RequestException as exc:
            _log.error("%s %s failed: %s", request.method, request.url, exc)
            raise TransportFailure(f"{request.method} {request.url} failed: {exc}") from exc

        if not response.ok:
            _log.error(
                "%s %s rejected (%s)",
                request.method,
                request.url,
                response.status_code,
            )
            raise TransportFailure(
                f"{request.method} {request.url} returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        return response
