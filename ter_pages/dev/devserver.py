"""Run the watcher, the broadcaster, and the static server together."""

from __future__ import annotations

import asyncio
import logging
import typing as typ

import uvicorn

from .broadcaster import LiveReloadBroadcaster
from .rebuild import RebuildRequest
from .server import StaticServer
from .watcher import ContentWatcher

if typ.TYPE_CHECKING:
    from ..config import BuildConfig
    from .rebuild import Rebuilder

logger = logging.getLogger(__name__)


class DevServer:
    """All process-wide dev state for one ``ter serve`` run.

    The broadcaster is shared by reference between the watcher, which
    requests reloads, and the static server, which registers the browsers'
    live-reload channels.
    """

    def __init__(
        self,
        config: BuildConfig,
        rebuild: Rebuilder,
        *,
        host: str = "127.0.0.1",
        port: int = 8000,
    ) -> None:
        self.config = config
        self.rebuild = rebuild
        self.host = host
        self.port = port
        self.broadcaster = LiveReloadBroadcaster()
        self.static_server = StaticServer(config.output_path, self.broadcaster)
        self.watcher = ContentWatcher(config, rebuild, self.broadcaster)

    async def initial_build(self) -> None:
        """Build the site once, with the live-reload script embedded."""
        await self.rebuild(
            RebuildRequest(config=self.config, quiet=False, include_refresh=True)
        )

    async def run(self) -> None:
        """Serve HTTP and watch for changes until the server shuts down."""
        http = uvicorn.Server(
            uvicorn.Config(
                self.static_server.build_app(),
                host=self.host,
                port=self.port,
                log_level="warning",
            )
        )
        stop_event = asyncio.Event()
        watch_task = asyncio.create_task(
            self.watcher.run(stop_event), name="ter-watcher"
        )
        logger.info(
            "Serving %s at http://%s:%d/", self.config.output_path, self.host, self.port
        )
        try:
            await http.serve()
        finally:
            stop_event.set()
            await watch_task
            self.broadcaster.cancel()


__all__ = ["DevServer"]
