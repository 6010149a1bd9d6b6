"""Client configuration for the catalog login flow.

Values can be given directly or read from the environment (and an optional
``.env`` file) with ``ClientConfig.from_env``.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from tunelink.auth.models.flow import GrantKind

DEFAULT_REDIRECT_URI = "http://127.0.0.1:3000/"
DEFAULT_AUTHORIZATION_ENDPOINT = "https://accounts.spotify.com/authorize"
DEFAULT_TOKEN_ENDPOINT = "https://accounts.spotify.com/api/token"
DEFAULT_API_BASE_URL = "https://api.spotify.com/v1"
DEFAULT_STORAGE_PATH = Path.home() / ".tunelink" / "storage.json"

# Track search needs no scope.
KNOWN_SCOPES = {
    "user-read-private": "subscription details and explicit content settings",
    "user-read-email": "the account email address",
    "user-library-read": "saved tracks and albums",
    "user-top-read": "top artists and tracks",
    "playlist-read-private": "private playlists",
    "user-read-playback-state": "current playback state and devices",
    "user-modify-playback-state": "playback control",
}


@dataclass
class ClientConfig:
    client_id: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    authorization_endpoint: str = DEFAULT_AUTHORIZATION_ENDPOINT
    token_endpoint: str = DEFAULT_TOKEN_ENDPOINT
    api_base_url: str = DEFAULT_API_BASE_URL
    scopes: dict[str, str] = field(default_factory=dict)
    grant_kind: GrantKind = GrantKind.AUTHORIZATION_CODE_WITH_PKCE
    storage_path: Path = DEFAULT_STORAGE_PATH
    verifier_length: int = 64
    search_limit: int = 10
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ValueError("client_id is required")
        if not (43 <= self.verifier_length <= 128):
            raise ValueError("verifier_length must be between 43 and 128")
        if not (1 <= self.search_limit <= 50):
            raise ValueError("search_limit must be between 1 and 50")

    @property
    def scope(self) -> str | None:
        """Space-joined scope names, or None when no scope is requested."""
        if not self.scopes:
            return None
        return " ".join(self.scopes)

    @classmethod
    def from_env(cls, env_file: str | None = None) -> ClientConfig:
        """Build a config from ``TUNELINK_*`` environment variables.

        Raises:
            ValueError: If the client id is missing or a value is invalid
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))

        client_id = os.getenv("TUNELINK_CLIENT_ID")
        if not client_id:
            raise ValueError(
                "Missing TUNELINK_CLIENT_ID. Set it in the environment or a .env file."
            )

        grant = os.getenv("TUNELINK_GRANT", GrantKind.AUTHORIZATION_CODE_WITH_PKCE.value)
        try:
            grant_kind = GrantKind(grant.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown TUNELINK_GRANT: {grant}. Use 'pkce' or 'implicit'."
            ) from None

        scope_names = [s for s in re.split(r"[\s,]+", os.getenv("TUNELINK_SCOPES", "")) if s]

        return cls(
            client_id=client_id,
            redirect_uri=os.getenv("TUNELINK_REDIRECT_URI", DEFAULT_REDIRECT_URI),
            authorization_endpoint=os.getenv(
                "TUNELINK_AUTHORIZATION_ENDPOINT", DEFAULT_AUTHORIZATION_ENDPOINT
            ),
            token_endpoint=os.getenv("TUNELINK_TOKEN_ENDPOINT", DEFAULT_TOKEN_ENDPOINT),
            api_base_url=os.getenv("TUNELINK_API_BASE_URL", DEFAULT_API_BASE_URL),
            scopes={name: KNOWN_SCOPES.get(name, "") for name in scope_names},
            grant_kind=grant_kind,
            storage_path=Path(os.getenv("TUNELINK_STORAGE_PATH", str(DEFAULT_STORAGE_PATH))),
            timeout=float(os.getenv("TUNELINK_TIMEOUT", "30.0")),
        )
