"""Exceptions raised by oauth2-clients."""


class OAuth2ClientError(Exception):
    """Base exception for all oauth2-clients errors."""


class ProviderError(OAuth2ClientError):
    """The provider redirected back with a non-empty ``error`` parameter."""

    def __init__(self, error: str, description: str | None = None):
        self.error = error
        self.description = description
        message = f"Provider returned error '{error}'"
        if description:
            message = f"{message}: {description}"
        super().__init__(message)


class UnexpectedResponse(OAuth2ClientError):
    """An expected field is missing from a provider response or callback."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Expected field '{field_name}' is missing or empty")


class TransportFailure(OAuth2ClientError):
    """Non-2xx status or network-level failure while calling the provider."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class LoginRequired(OAuth2ClientError):
    """An authenticated call was attempted without a usable access token."""


class MalformedProfile(OAuth2ClientError):
    """A provider's user profile payload lacks the fields its parser needs."""
