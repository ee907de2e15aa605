"""
client.py

OAuth2Client drives the authorization-code grant for any ProviderAdapter:
builds the login URI, exchanges the callback code for tokens, refreshes
tokens that are about to expire and performs authenticated API calls.

Token status is never stored; it is derived from TokenState each time a
decision is made:
    UNAUTHENTICATED  no access token
    VALID            expiry more than the buffer away (or no expiry)
    REFRESHABLE      expiry within the buffer, refresh token present
    EXPIRED          expiry within the buffer, no refresh token
Part of oauth2-clients - OAuth2 login for many providers.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Callable
from urllib.parse import parse_qs

from oauth2_clients import config
from oauth2_clients.adapter import Hook, ProviderAdapter, RequestContext
from oauth2_clients.exceptions import (
    LoginRequired,
    MalformedProfile,
    ProviderError,
    UnexpectedResponse,
)
from oauth2_clients.logs import get_logger
from oauth2_clients.models import ClientConfiguration, Endpoint, TokenStatus, UserInfo
from oauth2_clients.persistence import BasePersistor
from oauth2_clients.token_state import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    TOKEN_TYPE_KEY,
    TokenState,
)
from oauth2_clients.transport import ApiRequest, HttpTransport, QueryParameterAuth

_log = get_logger("client")

EXPIRES_IN_KEY = "expires_in"
# Larger values fall back to the default, like a failed 32-bit parse
MAX_EXPIRES_IN = 2**31 - 1


def _utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def parse_token_response(content: str | None, key: str) -> str | None:
    """
    Read one field from a token endpoint response body.

    The body may be a JSON object or a query string
    ("access_token=...&expires_in=..."); the query string is tried when
    the body is not a JSON object.

    Args:
        content: Raw response body.
        key: Field name, e.g. "access_token".

    Returns:
        The field value as a string, or None if absent.

    Example:
        parse_token_response('{"expires_in": 3600}', "expires_in")  # "3600"
        parse_token_response("access_token=abc", "access_token")    # "abc"
    """
    if not content or not key:
        return None

    try:
        data = json.loads(content)
    except ValueError:
        data = None

    if isinstance(data, dict):
        value = data.get(key)
        return None if value is None else str(value)

    values = parse_qs(content.strip(), keep_blank_values=True).get(key)
    return values[0] if values else None


class OAuth2Client:
    """
    Token lifecycle engine bound to one provider adapter.

    One instance serves one login/refresh/call sequence, typically a single
    inbound web request. Token fields survive across instances through the
    persistor, keyed by the adapter name.

    Example:
        client = OAuth2Client(fitbit_adapter(), configuration, persistor=SessionPersistor(session))
        redirect(client.build_login_uri(state="xyz"))
        # ... in the callback handler ...
        user = client.get_user_info(request.args)
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        configuration: ClientConfiguration,
        transport: HttpTransport | None = None,
        persistor: BasePersistor | None = None,
        expires_buffer_ms: int = config.EXPIRES_BUFFER_MS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            adapter: Provider endpoints, parser and hooks.
            configuration: Application credentials for this provider.
            transport: HTTP transport; a default requests-based one if omitted.
            persistor: Store that keeps tokens between instances; memory only if omitted.
            expires_buffer_ms: Tokens expiring within this window count as expired.
            clock: Returns the current aware datetime; injectable for tests.
        """
        self.adapter = adapter
        self.configuration = configuration
        self.transport = transport if transport is not None else HttpTransport()
        self.tokens = TokenState(adapter.name, persistor)
        self.expires_buffer = timedelta(milliseconds=expires_buffer_ms)
        self._clock = clock or _utc_now
        # Posted back by the provider with the callback
        self.state: str | None = None
        self._last_token_response: str | None = None

    # ------------------------------------------------------------------
    # Token fields and derived status
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.adapter.name

    @property
    def access_token(self) -> str | None:
        return self.tokens.access_token

    @property
    def refresh_token(self) -> str | None:
        return self.tokens.refresh_token

    @property
    def token_type(self) -> str | None:
        return self.tokens.token_type

    @property
    def expires_at(self) -> datetime | None:
        return self.tokens.expires_at

    @property
    def status(self) -> TokenStatus:
        """Classify the stored tokens against the current time."""
        if not self.tokens.access_token:
            return TokenStatus.UNAUTHENTICATED

        expires_at = self.tokens.expires_at
        if expires_at is None or expires_at > self._clock() + self.expires_buffer:
            return TokenStatus.VALID

        if self.tokens.refresh_token:
            return TokenStatus.REFRESHABLE
        return TokenStatus.EXPIRED

    @property
    def is_logged_in(self) -> bool:
        """True if an API call can be made without redirecting to the login URI."""
        return self.status in (TokenStatus.VALID, TokenStatus.REFRESHABLE)

    # ------------------------------------------------------------------
    # Authorization code grant
    # ------------------------------------------------------------------

    def build_login_uri(self, state: str | None = None) -> str:
        """
        Return the provider URI the user should be redirected to.

        Args:
            state: Opaque value the provider posts back with the callback.

        Returns:
            The authorize endpoint URL with response_type, client_id,
            redirect_uri, state (if given) and scope (if configured).
        """
        request = ApiRequest.for_endpoint(self.adapter.authorize_endpoint)
        request.add_parameters(
            response_type="code",
            client_id=self.configuration.client_id,
            redirect_uri=self.configuration.redirect_uri,
            state=state,
        )
        if self.configuration.scope:
            request.add_parameters(scope=self.configuration.scope)

        return self.transport.build_uri(request)

    def complete_login(self, parameters: Mapping[str, str]) -> str:
        """
        Handle the provider's redirect back and exchange the code for tokens.

        Args:
            parameters: Callback query parameters (code, state, error).

        Returns:
            The new access token.

        Raises:
            ProviderError: If the callback carries an error.
            UnexpectedResponse: If code or access_token is missing.
            TransportFailure: If the token endpoint call fails.
        """
        error = parameters.get("error")
        if error:
            _log.warning("%s login rejected by provider: %s", self.name, error)
            raise ProviderError(error, parameters.get("error_description"))

        self.state = parameters.get("state")

        code = parameters.get("code")
        if not code:
            raise UnexpectedResponse("code")

        request = ApiRequest.for_endpoint(self.adapter.token_endpoint, method="POST")
        request.add_parameters(
            code=code,
            client_id=self.configuration.client_id,
            client_secret=self.configuration.client_secret,
            redirect_uri=self.configuration.redirect_uri,
            grant_type="authorization_code",
        )

        content = self._exchange(request, self.adapter.before_token_exchange, parameters)
        access_token = self._handle_token_response(
            content,
            parse_token_response(content, REFRESH_TOKEN_KEY),
        )
        _log.info("%s authorization code exchanged for tokens", self.name)
        return access_token

    def refresh(self) -> str:
        """
        Exchange the stored refresh token for a new access token.

        Called by call() when the token is about to expire.

        Returns:
            The new access token.

        Raises:
            UnexpectedResponse: If no refresh token is stored or the
                response lacks access_token.
            TransportFailure: If the token endpoint call fails.
        """
        refresh_token = self.tokens.refresh_token
        if not refresh_token:
            raise UnexpectedResponse(REFRESH_TOKEN_KEY)

        request = ApiRequest.for_endpoint(self.adapter.token_endpoint, method="POST")
        request.add_parameters(
            refresh_token=refresh_token,
            client_id=self.configuration.client_id,
            client_secret=self.configuration.client_secret,
            grant_type="refresh_token",
        )

        content = self._exchange(request, self.adapter.before_refresh)
        # Providers that rotate refresh tokens return a new one
        rotated = parse_token_response(content, REFRESH_TOKEN_KEY)
        access_token = self._handle_token_response(content, rotated or refresh_token)
        _log.info("%s access token refreshed", self.name)
        return access_token

    def _exchange(
        self,
        request: ApiRequest,
        before_hook: Hook | None,
        parameters: Mapping[str, str] | None = None,
    ) -> str:
        """Run before-hook, POST to the token endpoint, run after-hook."""
        if before_hook is not None:
            before_hook(
                RequestContext(
                    configuration=self.configuration,
                    request=request,
                    parameters=parameters or {},
                )
            )

        response = self.transport.execute_and_verify(request)

        if self.adapter.after_token_exchange is not None:
            self.adapter.after_token_exchange(
                RequestContext(configuration=self.configuration, response=response)
            )

        return response.text

    def _handle_token_response(self, content: str, refresh_token: str | None) -> str:
        """Parse access_token, token_type and expires_in, then store all fields."""
        access_token = parse_token_response(content, ACCESS_TOKEN_KEY)
        if not access_token:
            raise UnexpectedResponse(ACCESS_TOKEN_KEY)

        token_type = parse_token_response(content, TOKEN_TYPE_KEY)

        expires_in = self.adapter.default_expires_in
        raw_expires_in = parse_token_response(content, EXPIRES_IN_KEY)
        try:
            parsed = int(raw_expires_in) if raw_expires_in is not None else 0
        except ValueError:
            parsed = 0
        if 0 < parsed <= MAX_EXPIRES_IN:
            expires_in = parsed

        expires_at = self._clock() + timedelta(seconds=expires_in)
        self.tokens.store(access_token, refresh_token or None, token_type, expires_at)
        self._last_token_response = content
        return access_token

    # ------------------------------------------------------------------
    # Authenticated calls
    # ------------------------------------------------------------------

    def call(
        self,
        endpoint: Endpoint,
        before_hook: Hook | None = None,
        after_hook: Hook | None = None,
        method: str = "GET",
        params: Mapping[str, str] | None = None,
    ) -> str:
        """
        Perform a verified API request with the current access token.

        Refreshes the token first if it is about to expire. The token is
        sent as an access_token query parameter unless before_hook changes
        the request auth.

        Args:
            endpoint: Provider API endpoint.
            before_hook: Edits the request before it is sent.
            after_hook: Inspects the verified response.
            method: HTTP method.
            params: Extra query (GET) or form (other methods) parameters.

        Returns:
            The response body.

        Raises:
            LoginRequired: If there is no usable access token.
            TransportFailure: If the request (or the refresh) fails.
        """
        status = self.status
        if status in (TokenStatus.UNAUTHENTICATED, TokenStatus.EXPIRED):
            _log.warning("%s API call attempted while %s", self.name, status.value)
            raise LoginRequired(
                f"{self.name}: complete the login flow before making API calls"
            )
        if status is TokenStatus.REFRESHABLE:
            self.refresh()

        access_token = self.tokens.access_token
        request = ApiRequest.for_endpoint(endpoint, method=method)
        request.auth = QueryParameterAuth(access_token)
        if params:
            request.add_parameters(**params)

        if before_hook is not None:
            before_hook(
                RequestContext(
                    configuration=self.configuration,
                    request=request,
                    access_token=access_token,
                    token_type=self.tokens.token_type,
                )
            )

        response = self.transport.execute_and_verify(request)

        if after_hook is not None:
            after_hook(RequestContext(configuration=self.configuration, response=response))

        return response.text

    def get_user_info(self, parameters: Mapping[str, str] | None = None) -> UserInfo:
        """
        Return the normalized profile of the logged-in user.

        Args:
            parameters: Callback parameters; when given, the login is
                completed first.

        Raises:
            MalformedProfile: If the adapter cannot parse the profile.
            LoginRequired: If there is no usable access token.
        """
        if parameters is not None:
            self.complete_login(parameters)

        if self.adapter.userinfo_endpoint is None:
            content = self._last_token_response
            if content is None:
                raise LoginRequired(
                    f"{self.name}: profile is only returned by the token exchange"
                )
        else:
            content = self.call(self.adapter.userinfo_endpoint, self.adapter.before_user_info)

        try:
            user_info = self.adapter.parse_user_info(content)
        except MalformedProfile:
            raise
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise MalformedProfile(f"{self.name}: cannot parse profile: {exc}") from exc

        user_info.provider_name = self.name
        return user_info
