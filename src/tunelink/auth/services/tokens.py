"""Authorization code to access token exchange.

Implements the RFC 6749 token endpoint call with the PKCE code_verifier
(RFC 7636) stored when the authorization URL was built.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from tunelink.auth.models.errors import (
    MalformedTokenResponseError,
    MissingVerifierError,
    NetworkError,
    TokenExchangeFailedError,
)
from tunelink.auth.models.tokens import TokenRequest, TokenResponse
from tunelink.auth.services.storage import CODE_VERIFIER_KEY, CredentialStore
from tunelink.config import ClientConfig

logger = logging.getLogger(__name__)


class TokenExchangeClient:
    """Exchanges a single-use authorization code for an access token.

    Uses application/x-www-form-urlencoded encoding as required by
    RFC 6749. Each code is submitted at most once; nothing is retried.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the token exchange client.

        Args:
            config: Client configuration (endpoints, client id, timeout)
            store: Credential store holding the in-flight code verifier
            http_client: Optional shared HTTP client; one is created
                (and owned) otherwise
        """
        self.config = config
        self._store = store
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def exchange(self, code: str) -> str:
        """Exchange an authorization code and return the access token."""
        token_response = await self.exchange_code_for_token(code)
        return token_response.access_token

    async def exchange_code_for_token(self, code: str) -> TokenResponse:
        """Exchange an authorization code for the full token response.

        The stored verifier is consumed before the request is sent, so a
        concurrent call for the same login attempt cannot submit the code again.

        Raises:
            MissingVerifierError: If no verifier is stored (no request is sent)
            StorageUnavailableError: If the verifier could not be removed
            TokenExchangeFailedError: If the endpoint answers non-success
            MalformedTokenResponseError: If a success body has no access_token
            NetworkError: If no response was received
        """
        code_verifier = self._store.get(CODE_VERIFIER_KEY)
        if not code_verifier:
            raise MissingVerifierError(
                "No code verifier stored for this login attempt. Start login again."
            )
        self._store.remove(CODE_VERIFIER_KEY)

        token_request = TokenRequest(
            token_endpoint=self.config.token_endpoint,
            code=code,
            redirect_uri=self.config.redirect_uri,
            client_id=self.config.client_id,
            code_verifier=code_verifier,
        )
        form_data = token_request.to_form_data()

        logger.debug(
            f"Token request: grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}, endpoint={token_request.token_endpoint}"
        )

        try:
            response = await self._http_client.post(
                token_request.token_endpoint,
                data=form_data,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Token endpoint unreachable: {e}")
            raise NetworkError(f"HTTP error during token exchange: {e}") from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> TokenResponse:
        body = response.text

        if not response.is_success:
            logger.warning(f"Token exchange failed with {response.status_code}: {body}")
            raise TokenExchangeFailedError(response.status_code, body)

        try:
            token_response = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MalformedTokenResponseError(body) from e

        if not token_response.is_success():
            raise MalformedTokenResponseError(body)

        logger.info(
            f"Token exchange successful (token_type={token_response.token_type}, "
            f"expires_in={token_response.expires_in})"
        )
        return token_response

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> TokenExchangeClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
