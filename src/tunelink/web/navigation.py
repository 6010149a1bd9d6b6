"""Navigation capability for a single HTTP request."""

from __future__ import annotations


class RequestNavigation:
    """Records what the controller asked the page to do.

    The web layer turns ``replaced_url`` into a ``history.replaceState``
    call and ``assigned_url`` into a redirect.
    """

    def __init__(self, url: str):
        self._url = url
        self.replaced_url: str | None = None
        self.assigned_url: str | None = None

    def current_url(self) -> str:
        return self.replaced_url or self._url

    def replace_url(self, url: str) -> None:
        self.replaced_url = url

    def assign(self, url: str) -> None:
        self.assigned_url = url
