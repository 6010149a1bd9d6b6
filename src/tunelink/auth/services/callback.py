"""Parsing of the page URL the provider redirects back to."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from tunelink.auth.models.flow import AuthorizationResponse

CALLBACK_QUERY_PARAMS = ("code", "state")


def parse_callback_url(url: str) -> AuthorizationResponse:
    """Parse a redirect URL into an AuthorizationResponse.

    Query parameters carry the authorization code variant's result; the
    fragment carries the implicit variant's token. Empty values are
    treated as absent.
    """
    parsed = urlsplit(url)
    query = _first_values(parsed.query)
    fragment = parse_fragment(parsed.fragment)

    return AuthorizationResponse(
        code=query.get("code"),
        state=query.get("state"),
        error=query.get("error"),
        error_description=query.get("error_description"),
        access_token=fragment.get("access_token"),
        token_type=fragment.get("token_type"),
        expires_in=fragment.get("expires_in"),
        fragment_error=fragment.get("error"),
    )


def parse_fragment(fragment: str) -> dict[str, str]:
    """Split a ``key=value&key=value`` fragment into a dict.

    The first non-empty value of a repeated key wins.
    """
    return _first_values(fragment.lstrip("#"))


def strip_query_params(url: str, names: tuple[str, ...] = CALLBACK_QUERY_PARAMS) -> str:
    """Return ``url`` without the named query parameters."""
    parsed = urlsplit(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if key not in names
    ]
    return urlunsplit(parsed._replace(query=urlencode(kept)))


def strip_fragment(url: str) -> str:
    """Return ``url`` without its fragment."""
    return urlunsplit(urlsplit(url)._replace(fragment=""))


def _first_values(encoded: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for key, value in parse_qsl(encoded):
        if value and key not in values:
            values[key] = value
    return values
