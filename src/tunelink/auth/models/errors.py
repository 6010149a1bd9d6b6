"""Exception hierarchy for the catalog OAuth 2.0 login flow.

Provides specific exception types for each failure mode of the PKCE
handshake so the session controller can report them precisely.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 related errors."""

    pass


class ProviderAuthError(OAuth2Error):
    """Raised when the provider redirects back with an ``error`` parameter.

    Covers both a user denying consent (``access_denied``) and
    provider-side failures.
    """

    def __init__(self, error: str, error_description: str | None = None):
        self.error = error
        self.error_description = error_description
        message = f"Authorization failed: {error}"
        if error_description:
            message += f" ({error_description})"
        super().__init__(message)


class MissingVerifierError(OAuth2Error):
    """Raised when a token exchange is attempted without a stored verifier.

    Indicates a corrupted or cross-attempt state: the challenge sent with
    the authorization request can no longer be proven.
    """

    pass


class StorageUnavailableError(OAuth2Error):
    """Raised when the credential storage cannot be written."""

    pass


class TokenError(OAuth2Error):
    """Raised when token operations fail."""

    pass


class TokenExchangeFailedError(TokenError):
    """Raised when the token endpoint answers with a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Token exchange failed: {status} - {body}")


class MalformedTokenResponseError(TokenError):
    """Raised when a success response lacks a usable access token."""

    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Token response has no usable access_token: {body}")


class NetworkError(TokenError):
    """Raised when the token endpoint could not be reached at all."""

    pass
