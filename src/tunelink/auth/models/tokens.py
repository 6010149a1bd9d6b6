"""Token exchange request and response models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code to access token request (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636) from the same login attempt
    that produced the code challenge.
    """

    token_endpoint: str
    code: str
    redirect_uri: str
    client_id: str
    code_verifier: str

    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Token requests must use form encoding, not JSON (RFC 6749 Section 4.1.3).
        """
        return {
            "client_id": self.client_id,
            "grant_type": self.grant_type,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }


class TokenResponse(BaseModel):
    """Successful token endpoint response (RFC 6749 Section 5.1).

    Only ``access_token`` is relied upon. The remaining fields are accepted
    as sent, whatever their shape, and kept for callers that want them.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    token_type: Any = None
    scope: Any = None
    expires_in: Any = None
    refresh_token: Any = None

    def is_success(self) -> bool:
        """Check if the response carries a usable access token."""
        return bool(self.access_token)
