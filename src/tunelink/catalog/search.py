"""Track search against the catalog Web API."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from tunelink.catalog.errors import CatalogSearchError, TokenRejectedError
from tunelink.catalog.models import Track
from tunelink.config import ClientConfig

logger = logging.getLogger(__name__)


class CatalogClient:
    """Issues authenticated search queries with a bearer token."""

    def __init__(self, config: ClientConfig, http_client: httpx.AsyncClient | None = None):
        self.config = config
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def search(self, token: str, query: str, limit: int | None = None) -> list[Track]:
        """Search tracks by free text.

        Args:
            token: Bearer access token
            query: Free-text query; blank queries return no results
            limit: Maximum number of tracks (1-50), defaults to the config

        Returns:
            Matching tracks in catalog order

        Raises:
            TokenRejectedError: If the catalog answers 401
            CatalogSearchError: For any other failure
        """
        if not query.strip():
            return []

        if limit is None:
            limit = self.config.search_limit
        if not (1 <= limit <= 50):
            raise ValueError("limit must be between 1 and 50")

        try:
            response = await self._http_client.get(
                f"{self.config.api_base_url}/search",
                headers={"Authorization": f"Bearer {token}"},
                params={"q": query, "type": "track", "limit": limit},
            )
        except httpx.HTTPError as e:
            logger.error(f"Track search failed: {e}")
            raise CatalogSearchError(f"HTTP error during search: {e}") from e

        if response.status_code == 401:
            logger.warning("Catalog rejected the access token")
            raise TokenRejectedError(
                "Access token rejected", status=401, body=response.text
            )

        if not response.is_success:
            logger.error(f"Track search failed: {response.status_code} - {response.text}")
            raise CatalogSearchError(
                f"Search request failed: {response.status_code}",
                status=response.status_code,
                body=response.text,
            )

        try:
            items = (response.json().get("tracks") or {}).get("items") or []
            tracks = [Track.from_api(item) for item in items if item]
        except (AttributeError, KeyError, ValueError, ValidationError) as e:
            logger.error(f"Unexpected search response: {e}")
            raise CatalogSearchError(
                f"Invalid search response format: {e}",
                status=response.status_code,
                body=response.text,
            ) from e

        logger.debug(f"Search for {query!r} returned {len(tracks)} tracks")
        return tracks

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()
