"""Authorization flow models.

Contains the grant variants, the authorization request and the parsed
provider callback.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode


class GrantKind(str, Enum):
    """Which OAuth 2.0 grant the session controller drives."""

    AUTHORIZATION_CODE_WITH_PKCE = "pkce"
    IMPLICIT_FRAGMENT = "implicit"

    @property
    def response_type(self) -> str:
        if self is GrantKind.IMPLICIT_FRAGMENT:
            return "token"
        return "code"


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the provider redirect."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    response_type: str = "code"
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    scope: str | None = None

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        params = {
            "client_id": self.client_id,
            "response_type": self.response_type,
            "redirect_uri": self.redirect_uri,
        }

        if self.code_challenge:
            params["code_challenge_method"] = self.code_challenge_method or "S256"
            params["code_challenge"] = self.code_challenge
        if self.scope:
            params["scope"] = self.scope

        return f"{self.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class AuthorizationResponse:
    """What the provider left on the page URL after redirecting back.

    ``code``/``state``/``error`` come from the query string (authorization
    code variant); ``access_token`` comes from the fragment (implicit
    variant). ``fragment_error`` is an ``error`` carried in the fragment.
    """

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None
    access_token: str | None = None
    token_type: str | None = None
    expires_in: str | None = None
    fragment_error: str | None = None

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None

    def has_fragment_token(self) -> bool:
        return self.access_token is not None
