"""Push debounced refresh notices to connected live-reload browsers.

Browsers viewing a page served by the dev server keep a WebSocket open on the
page's ``/refresh`` endpoint. After every successful rebuild the watcher asks
the broadcaster for a reload; requests are debounced so that a burst of
rebuilds produces a single ``refresh`` message per connection.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import typing as typ

from .._constants import REFRESH_MESSAGE, RELOAD_DEBOUNCE_SECONDS

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


class Connection(typ.Protocol):
    """Push channel to one browser; Starlette's ``WebSocket`` satisfies it."""

    async def send_text(self, data: str) -> None:
        """Deliver ``data`` to the client."""


class LiveReloadBroadcaster:
    """Track open push channels and deliver debounced reload messages.

    Thread-safe: the connection set is protected by a lock and broadcasts
    iterate over a snapshot, so connections may register or close while a
    reload is being delivered. The debounce timer lives on the running event
    loop and must only be re-armed from that loop.
    """

    def __init__(self, delay: float = RELOAD_DEBOUNCE_SECONDS) -> None:
        self.delay = delay
        self._connections: set[Connection] = set()
        self._lock = threading.Lock()
        self._timer: asyncio.TimerHandle | None = None
        self._sends: set[asyncio.Task[None]] = set()

    @property
    def connection_count(self) -> int:
        """Number of currently registered connections."""
        with self._lock:
            return len(self._connections)

    @property
    def reload_pending(self) -> bool:
        """Whether a debounced reload is waiting to fire."""
        return self._timer is not None

    def register(self, connection: Connection) -> None:
        """Add ``connection`` to the active set."""
        with self._lock:
            self._connections.add(connection)

    def unregister(self, connection: Connection) -> None:
        """Remove ``connection``; unknown connections are ignored."""
        with self._lock:
            self._connections.discard(connection)

    def snapshot(self) -> frozenset[Connection]:
        """Return the active connections (no lock held on return)."""
        with self._lock:
            return frozenset(self._connections)

    @contextlib.asynccontextmanager
    async def connection(
        self, connection: Connection
    ) -> cabc.AsyncIterator[Connection]:
        """Keep ``connection`` registered for the duration of the block.

        The connection is removed however the block exits, including client
        disconnects, handler errors, and task cancellation.
        """
        self.register(connection)
        try:
            yield connection
        finally:
            self.unregister(connection)

    def request_reload(self) -> None:
        """Schedule a ``refresh`` broadcast after the quiet period.

        Each call re-arms the shared timer, so rapid requests collapse into a
        single broadcast ``delay`` seconds after the last one.
        """
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.delay, self._broadcast)

    def cancel(self) -> None:
        """Drop any pending reload without sending it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def drain(self) -> None:
        """Wait for in-flight sends started by previous broadcasts."""
        if self._sends:
            await asyncio.gather(*self._sends, return_exceptions=True)

    def _broadcast(self) -> None:
        self._timer = None
        connections = self.snapshot()
        logger.debug("Sending %s to %d client(s)", REFRESH_MESSAGE, len(connections))
        for connection in connections:
            task = asyncio.ensure_future(self._send(connection))
            self._sends.add(task)
            task.add_done_callback(self._sends.discard)

    async def _send(self, connection: Connection) -> None:
        """Deliver one refresh message; a failed send drops the connection."""
        try:
            await connection.send_text(REFRESH_MESSAGE)
        except Exception:  # noqa: BLE001 - delivery is fire-and-forget
            logger.debug("Dropping live-reload client after failed send", exc_info=True)
            self.unregister(connection)


__all__ = ["Connection", "LiveReloadBroadcaster"]
