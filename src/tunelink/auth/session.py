"""Session controller for the catalog login flow.

Evaluates the page URL and stored credentials once per page load and
drives the session through its states:

    Unauthenticated --stored token------------------------> Authenticated
    Unauthenticated --?error=...--------------------------> AuthError
    Unauthenticated --?code=...--> PendingExchange --ok---> Authenticated
                                                  --fail-> AuthError
    Unauthenticated --#access_token=... (implicit)--------> Authenticated
    Authenticated   --logout------------------------------> Unauthenticated

Storage and navigation are injected so the controller runs the same way
against a real host page and against in-memory fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from tunelink.auth.models.errors import OAuth2Error, ProviderAuthError
from tunelink.auth.models.flow import AuthorizationResponse, GrantKind
from tunelink.auth.services.authorization import AuthorizationRequestBuilder
from tunelink.auth.services.callback import (
    parse_callback_url,
    strip_fragment,
    strip_query_params,
)
from tunelink.auth.services.storage import TOKEN_KEY, CredentialStore
from tunelink.auth.services.tokens import TokenExchangeClient
from tunelink.config import ClientConfig

logger = logging.getLogger(__name__)


class Navigation(Protocol):
    """The page's location, as seen by the controller."""

    def current_url(self) -> str:
        """Full URL of the current page, fragment included."""
        ...

    def replace_url(self, url: str) -> None:
        """Change the visible URL without reloading the page."""
        ...

    def assign(self, url: str) -> None:
        """Navigate away to ``url``."""
        ...


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PENDING_EXCHANGE = "pending_exchange"
    AUTHENTICATED = "authenticated"
    AUTH_ERROR = "auth_error"


@dataclass
class AuthSession:
    """In-memory session read by the UI."""

    state: SessionState = SessionState.UNAUTHENTICATED
    token: str | None = None
    error: str | None = None
    failure: OAuth2Error | None = None

    def reset(self) -> None:
        self.state = SessionState.UNAUTHENTICATED
        self.token = None
        self.error = None
        self.failure = None


class SessionController:
    """Drives the login state machine for one grant kind.

    The authorization code variant handles ``code``/``error`` query
    parameters; the implicit variant handles an ``access_token`` fragment.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore,
        navigation: Navigation,
        token_client: TokenExchangeClient | None = None,
    ):
        self.config = config
        self.grant_kind = config.grant_kind
        self.session = AuthSession()
        self._store = store
        self._navigation = navigation
        self._builder = AuthorizationRequestBuilder(config, store)
        self._token_client = token_client or TokenExchangeClient(config, store)
        self._logout_listeners: list[Callable[[], None]] = []

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def token(self) -> str | None:
        return self.session.token

    @property
    def error(self) -> str | None:
        return self.session.error

    def on_logout(self, listener: Callable[[], None]) -> None:
        """Register a callback run after logout (e.g. clearing results)."""
        self._logout_listeners.append(listener)

    async def load(self) -> AuthSession:
        """Evaluate the page load transitions once.

        Returns:
            The resulting session; never raises for OAuth failures, which
            are recorded in ``session.error`` instead
        """
        stored_token = self._store.get(TOKEN_KEY)
        if stored_token:
            logger.info("Restored session from stored token")
            self._authenticate(stored_token)
            return self.session

        url = self._navigation.current_url()
        auth_response = parse_callback_url(url)

        if auth_response.is_error():
            self._fail(
                ProviderAuthError(auth_response.error, auth_response.error_description)
            )
            return self.session

        if self.grant_kind is GrantKind.IMPLICIT_FRAGMENT:
            self._handle_fragment(url, auth_response)
        elif auth_response.code:
            await self._handle_code(url, auth_response.code)

        return self.session

    def login(self) -> str:
        """Start a fresh login attempt and navigate to the provider.

        Returns:
            The authorization URL navigated to

        Raises:
            StorageUnavailableError: If the verifier could not be persisted
        """
        self.session.reset()
        authorization_url = self._builder.build_authorization_url(self.grant_kind)
        self._navigation.assign(authorization_url)
        return authorization_url

    def logout(self) -> None:
        """Forget the token and verifier and return to Unauthenticated.

        The in-memory session is reset even when the storage cannot be
        cleared.

        Raises:
            StorageUnavailableError: If the stored credentials could not be removed
        """
        try:
            self._store.clear()
        finally:
            self.session.reset()
            for listener in self._logout_listeners:
                listener()
        logger.info("Logged out")

    def invalidate_token(self) -> None:
        """Drop a token the provider has rejected."""
        self._store.remove(TOKEN_KEY)
        self.session.reset()
        logger.warning("Stored token was rejected by the provider and has been cleared")

    async def _handle_code(self, url: str, code: str) -> None:
        self.session.state = SessionState.PENDING_EXCHANGE

        # Single-use code: off the visible URL before it is exchanged.
        self._navigation.replace_url(strip_query_params(url))

        try:
            token = await self._token_client.exchange(code)
            self._store.set(TOKEN_KEY, token)
        except OAuth2Error as e:
            self._fail(e)
            return

        self._authenticate(token)
        logger.info("Authenticated via authorization code exchange")

    def _handle_fragment(self, url: str, auth_response: AuthorizationResponse) -> None:
        if auth_response.fragment_error:
            self._navigation.replace_url(strip_fragment(url))
            self._fail(ProviderAuthError(auth_response.fragment_error))
            return

        if not auth_response.has_fragment_token():
            return

        self._navigation.replace_url(strip_fragment(url))
        self._store.set(TOKEN_KEY, auth_response.access_token)
        self._authenticate(auth_response.access_token)
        logger.info("Authenticated via implicit grant fragment")

    def _authenticate(self, token: str) -> None:
        self.session.state = SessionState.AUTHENTICATED
        self.session.token = token
        self.session.error = None
        self.session.failure = None

    def _fail(self, error: OAuth2Error) -> None:
        logger.warning(f"Authentication failed: {error}")
        self.session.state = SessionState.AUTH_ERROR
        self.session.token = None
        self.session.error = str(error)
        self.session.failure = error
