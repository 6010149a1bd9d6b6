"""Exceptions raised by the catalog search client."""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for catalog API errors."""

    pass


class CatalogSearchError(CatalogError):
    """Raised when a search request fails."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        self.status = status
        self.body = body
        super().__init__(message)


class TokenRejectedError(CatalogSearchError):
    """Raised when the catalog rejects the bearer token (HTTP 401)."""

    pass
