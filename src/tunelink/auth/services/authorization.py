"""Authorization request construction.

Builds the provider redirect for a new login attempt. In the PKCE variant
the fresh code verifier is persisted before the URL is handed out, so the
exchange that follows the redirect can prove possession of it.
"""

from __future__ import annotations

import logging

from tunelink.auth.models.flow import AuthorizationRequest, GrantKind
from tunelink.auth.primitives.pkce import PKCEManager
from tunelink.auth.services.storage import CODE_VERIFIER_KEY, CredentialStore
from tunelink.config import ClientConfig

logger = logging.getLogger(__name__)


class AuthorizationRequestBuilder:
    """Assembles authorization URLs for the configured grant kind."""

    def __init__(self, config: ClientConfig, store: CredentialStore):
        self.config = config
        self._store = store
        self._pkce_manager = PKCEManager(config.verifier_length)

    def build_authorization_url(self, grant_kind: GrantKind | None = None) -> str:
        """Build the URL the user agent should navigate to.

        For the authorization code variant this generates and stores a new
        code verifier, overwriting any earlier in-flight attempt.

        Returns:
            The provider authorization URL with all query parameters

        Raises:
            StorageUnavailableError: If the verifier could not be persisted
        """
        grant_kind = grant_kind or self.config.grant_kind

        if grant_kind is GrantKind.IMPLICIT_FRAGMENT:
            auth_request = AuthorizationRequest(
                authorization_endpoint=self.config.authorization_endpoint,
                client_id=self.config.client_id,
                redirect_uri=self.config.redirect_uri,
                response_type=grant_kind.response_type,
                scope=self.config.scope,
            )
        else:
            pkce_params = self._pkce_manager.generate_parameters()

            # Persisted before the URL is built; no URL without its verifier.
            self._store.set(CODE_VERIFIER_KEY, pkce_params.code_verifier)

            auth_request = AuthorizationRequest(
                authorization_endpoint=self.config.authorization_endpoint,
                client_id=self.config.client_id,
                redirect_uri=self.config.redirect_uri,
                response_type=grant_kind.response_type,
                code_challenge=pkce_params.code_challenge,
                code_challenge_method=pkce_params.code_challenge_method,
                scope=self.config.scope,
            )

        authorization_url = auth_request.build_authorization_url()
        logger.info(
            f"Generated {grant_kind.value} authorization URL for client "
            f"{self.config.client_id}"
        )
        return authorization_url
