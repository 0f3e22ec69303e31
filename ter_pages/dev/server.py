"""Static file server for the build output with a live-reload endpoint.

Resolution order for a request path ``P``:

1. ``<output>/P`` when it is a readable file.
2. ``<output>/P/index.html`` when ``P`` names a directory.
3. Otherwise ``<output>/404/index.html`` with status 404 when that page
   exists, or a plain-text ``404 Not Found``.

Any WebSocket request whose path ends in ``/refresh`` is accepted as a
live-reload channel and registered with the :class:`LiveReloadBroadcaster`
until the client goes away.
"""

from __future__ import annotations

import logging
import os
import typing as typ
from pathlib import Path

from fastapi import FastAPI, Request, WebSocket, status
from fastapi.responses import FileResponse, PlainTextResponse, Response

from .._constants import (
    INDEX_FILENAME,
    NOT_FOUND_PAGE,
    NOT_FOUND_TEXT,
    REFRESH_PATH_SUFFIX,
)

if typ.TYPE_CHECKING:
    from .broadcaster import LiveReloadBroadcaster

logger = logging.getLogger(__name__)


class StaticServer:
    """Serve one build output directory and its live-reload channels."""

    def __init__(self, output_root: Path, broadcaster: LiveReloadBroadcaster) -> None:
        """Initialize the server for ``output_root``.

        Parameters
        ----------
        output_root : Path
            Directory written by the page builder. It does not need to exist
            yet; requests simply 404 until the first build completes.
        broadcaster : LiveReloadBroadcaster
            Owner of the live-reload connection set.
        """
        self.output_root = output_root.resolve()
        self.broadcaster = broadcaster

    @property
    def not_found_page(self) -> Path:
        """Path of the custom not-found page inside the output root."""
        return self.output_root.joinpath(*NOT_FOUND_PAGE)

    def resolve(self, request_path: str) -> Path | None:
        """Return the file that answers ``request_path`` or ``None``."""
        candidate = (self.output_root / request_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.output_root):
            return None
        if candidate.is_dir():
            candidate = candidate / INDEX_FILENAME
        if candidate.is_file() and os.access(candidate, os.R_OK):
            return candidate
        return None

    async def handle_http(self, request: Request) -> Response:
        """Answer a GET request from the output directory."""
        request_path = request.url.path
        target = self.resolve(request_path)
        response: Response
        if target is not None:
            response = FileResponse(target)
        elif self.not_found_page.is_file():
            response = FileResponse(
                self.not_found_page, status_code=status.HTTP_404_NOT_FOUND
            )
        else:
            response = PlainTextResponse(
                NOT_FOUND_TEXT, status_code=status.HTTP_404_NOT_FOUND
            )
        logger.info("[%s]\t%s", response.status_code, request_path)
        return response

    async def handle_refresh(self, websocket: WebSocket) -> None:
        """Hold a live-reload channel open until the client disconnects.

        Messages sent by the client are read and discarded.
        """
        if not websocket.url.path.endswith(REFRESH_PATH_SUFFIX):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        await websocket.accept()
        async with self.broadcaster.connection(websocket):
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        logger.debug("Live-reload client left %s", websocket.url.path)

    def build_app(self) -> FastAPI:
        """Return an ASGI application bound to this server instance."""
        app = FastAPI(
            title="ter dev server",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )
        app.add_api_websocket_route("/{path:path}", self.handle_refresh)
        app.add_api_route(
            "/{path:path}",
            self.handle_http,
            methods=["GET"],
            response_model=None,
            include_in_schema=False,
        )
        return app


__all__ = ["StaticServer"]
