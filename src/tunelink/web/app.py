"""Starlette host page for the catalog login flow.

Plays the part of the browser page: every request to ``/`` is a page load
evaluated by the session controller, ``/login`` navigates to the provider,
and the redirect URI points back at ``/``.
"""

from __future__ import annotations

import contextlib
import html
import json
import logging
import os

import httpx
import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from tunelink.auth.models.errors import StorageUnavailableError
from tunelink.auth.models.flow import GrantKind
from tunelink.auth.services.storage import CredentialStore, JsonFileStorage, Storage
from tunelink.auth.services.tokens import TokenExchangeClient
from tunelink.auth.session import AuthSession, SessionController
from tunelink.catalog.errors import CatalogSearchError, TokenRejectedError
from tunelink.catalog.models import Track
from tunelink.catalog.search import CatalogClient
from tunelink.config import ClientConfig
from tunelink.web.navigation import RequestNavigation

logger = logging.getLogger(__name__)

FRAGMENT_FORWARD_SCRIPT = (
    "<script>if (/(^#|&)(access_token|error)=/.test(location.hash)) "
    'location.replace("/implicit?href=" + encodeURIComponent(location.href));</script>'
)


def create_app(
    config: ClientConfig,
    storage: Storage | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Starlette:
    """Create the web app.

    Args:
        config: Client configuration
        storage: Credential storage; a JSON file at ``config.storage_path``
            is used when omitted
        http_client: Optional HTTP client shared by token and catalog calls
    """
    store = CredentialStore(storage or JsonFileStorage(config.storage_path))
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=config.timeout)
    token_client = TokenExchangeClient(config, store, http_client=client)
    catalog = CatalogClient(config, http_client=client)

    def controller_for(navigation: RequestNavigation) -> SessionController:
        return SessionController(config, store, navigation, token_client=token_client)

    async def page_load(url: str, query: str = "") -> Response:
        navigation = RequestNavigation(url)
        controller = controller_for(navigation)
        session = await controller.load()

        tracks: list[Track] = []
        search_error = None
        if session.token and query.strip():
            try:
                tracks = await catalog.search(session.token, query)
            except TokenRejectedError:
                controller.invalidate_token()
            except CatalogSearchError as e:
                search_error = str(e)

        return HTMLResponse(
            render_page(
                config, session, query, tracks, search_error, navigation.replaced_url
            )
        )

    async def homepage(request: Request) -> Response:
        return await page_load(str(request.url), request.query_params.get("q", ""))

    async def implicit_callback(request: Request) -> Response:
        href = request.query_params.get("href")
        if not href:
            return Response("Missing href", status_code=400)
        return await page_load(href)

    async def login(request: Request) -> Response:
        navigation = RequestNavigation(str(request.url))
        controller = controller_for(navigation)
        try:
            controller.login()
        except StorageUnavailableError as e:
            logger.error(f"Cannot start login: {e}")
            return HTMLResponse(
                f"<p>Cannot start login: {html.escape(str(e))}</p>", status_code=503
            )
        return RedirectResponse(navigation.assigned_url, status_code=302)

    async def logout(request: Request) -> Response:
        try:
            controller_for(RequestNavigation(str(request.url))).logout()
        except StorageUnavailableError as e:
            logger.error(f"Cannot clear credentials: {e}")
            return HTMLResponse(
                f"<p>Cannot clear credentials: {html.escape(str(e))}</p>", status_code=503
            )
        return RedirectResponse("/", status_code=303)

    async def api_search(request: Request) -> Response:
        token = store.token
        if not token:
            return JSONResponse({"error": "Not authenticated"}, status_code=401)

        try:
            limit = int(request.query_params.get("limit", config.search_limit))
            tracks = await catalog.search(token, request.query_params.get("q", ""), limit)
        except ValueError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        except TokenRejectedError:
            controller_for(RequestNavigation(str(request.url))).invalidate_token()
            return JSONResponse({"error": "Access token rejected"}, status_code=401)
        except CatalogSearchError as e:
            return JSONResponse({"error": str(e)}, status_code=502)

        return JSONResponse(
            {"tracks": [track.model_dump(mode="json", by_alias=True) for track in tracks]}
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        if owns_client:
            await client.aclose()

    return Starlette(
        routes=[
            Route("/", homepage, methods=["GET"]),
            Route("/implicit", implicit_callback, methods=["GET"]),
            Route("/login", login, methods=["GET"]),
            Route("/logout", logout, methods=["POST"]),
            Route("/api/search", api_search, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


def render_page(
    config: ClientConfig,
    session: AuthSession,
    query: str = "",
    tracks: list[Track] | None = None,
    search_error: str | None = None,
    replaced_url: str | None = None,
) -> str:
    parts = ["<!doctype html>", "<title>Tunelink</title>", "<h1>Tunelink</h1>"]

    if replaced_url:
        # JSON literal, "<" escaped for <script>.
        target = json.dumps(replaced_url).replace("<", "\\u003c")
        parts.append(f"<script>history.replaceState(null, '', {target});</script>")
    if config.grant_kind is GrantKind.IMPLICIT_FRAGMENT:
        parts.append(FRAGMENT_FORWARD_SCRIPT)

    if session.token:
        parts.append('<form method="post" action="/logout"><button>Logout</button></form>')
    else:
        parts.append('<a href="/login">Login to Spotify</a>')

    if session.error:
        parts.append(f"<p><b>Authentication error:</b> {html.escape(session.error)}</p>")

    if not session.token:
        parts.append("<h2>Please login</h2>")
        return "\n".join(parts)

    parts.append(
        '<form method="get" action="/">'
        f'<input type="text" name="q" value="{html.escape(query)}" placeholder="Track name">'
        "<button>Search</button></form>"
    )
    if search_error:
        parts.append(f"<p>Search failed: {html.escape(search_error)}</p>")

    for track in tracks or []:
        artwork = (
            f'<img width="100%" src="{html.escape(track.album_artwork_url)}" alt="Track artwork">'
            if track.album_artwork_url
            else "<div>No Image</div>"
        )
        parts.append(
            f"<div>{artwork}<p>{html.escape(track.name)}</p>"
            f"<p>{html.escape(', '.join(track.artists))}</p></div>"
        )

    return "\n".join(parts)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = ClientConfig.from_env()
    host = os.getenv("TUNELINK_HOST", "127.0.0.1")
    port = int(os.getenv("TUNELINK_PORT", "3000"))
    logger.info(f"Serving on http://{host}:{port}/ (redirect URI {config.redirect_uri})")
    uvicorn.run(create_app(config), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
