"""PKCE (Proof Key for Code Exchange) primitives.

Implements RFC 7636 verifier generation and the S256 challenge transform
used to bind an authorization code to the login attempt that asked for it.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from tunelink.auth.models.security import PKCEParameters

# RFC 7636 Section 4.1 unreserved characters: [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"
UNRESERVED_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-._~"

DEFAULT_VERIFIER_LENGTH = 64


def generate_secret(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Generate a cryptographically secure random string.

    Each character is drawn from the 66-character unreserved alphabet
    using the ``secrets`` module (OS CSPRNG).

    Args:
        length: Number of characters to produce

    Returns:
        Random string of exactly ``length`` characters
    """
    if length < 0:
        raise ValueError("length must not be negative")
    return "".join(secrets.choice(UNRESERVED_ALPHABET) for _ in range(length))


def code_challenge_for(code_verifier: str) -> str:
    """Derive the S256 code challenge for a code verifier.

    RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(ASCII(code_verifier)))
    with the ``=`` padding stripped.
    """
    digest = hashlib.sha256(code_verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates verifier/challenge pairs for login attempts."""

    def __init__(self, verifier_length: int = DEFAULT_VERIFIER_LENGTH):
        if not (43 <= verifier_length <= 128):
            raise ValueError("verifier_length must be between 43 and 128")
        self.verifier_length = verifier_length

    def generate_parameters(self) -> PKCEParameters:
        """Generate a fresh verifier and its matching S256 challenge."""
        code_verifier = generate_secret(self.verifier_length)
        return PKCEParameters(
            code_verifier=code_verifier,
            code_challenge=code_challenge_for(code_verifier),
            code_challenge_method="S256",
        )
