"""Rebuild the site when its sources change.

Monitors the content root and the hidden configuration directory. Raw
``watchfiles`` batches are split into :class:`WatchEvent` records and queued;
a single consumer drains the queue, filters noise, runs the external rebuild
for every surviving event, and asks the broadcaster to refresh browsers.

Backpressure policy: events are queued and processed strictly in arrival
order, one rebuild at a time. Events that arrive while a rebuild is running
wait in the queue; none are dropped or merged.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import re
import typing as typ
from pathlib import Path

from watchfiles import Change, awatch

from .rebuild import RebuildRequest

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ..config import BuildConfig
    from .broadcaster import LiveReloadBroadcaster
    from .rebuild import Rebuilder

logger = logging.getLogger(__name__)

NOOP_KINDS = frozenset({"any", "access", "other"})
HIDDEN_OR_UNDERSCORED_PATTERN = re.compile(r"(?:^|/)[._]")

# Mapping from watchfiles Change enum to event kinds.
_CHANGE_KIND_MAP: dict[Change, str] = {
    Change.added: "create",
    Change.modified: "modify",
    Change.deleted: "remove",
}


@dc.dataclass(frozen=True, slots=True)
class WatchEvent:
    """A filesystem change affecting one or more paths.

    Attributes
    ----------
    kind : str
        Type of change (``create``, ``modify``, ``remove``, ...).
    paths : tuple[Path, ...]
        Absolute paths affected by the change.
    """

    kind: str
    paths: tuple[Path, ...]


def events_from_changes(
    changes: cabc.Iterable[tuple[Change, str]],
) -> list[WatchEvent]:
    """Group a raw ``watchfiles`` batch into one event per change kind."""
    grouped: dict[str, list[Path]] = {}
    for change, raw_path in sorted(changes):
        kind = _CHANGE_KIND_MAP.get(change, "other")
        grouped.setdefault(kind, []).append(Path(raw_path))
    return [
        WatchEvent(kind=kind, paths=tuple(paths)) for kind, paths in grouped.items()
    ]


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


class ContentWatcher:
    """Drive rebuilds and live reloads from filesystem events.

    The watcher is constructed once per dev-server run and receives the
    rebuild operation and the broadcaster by reference.
    """

    def __init__(
        self,
        config: BuildConfig,
        rebuild: Rebuilder,
        broadcaster: LiveReloadBroadcaster,
        *,
        debounce_ms: int = 50,
    ) -> None:
        self._config = config
        self._rebuild = rebuild
        self._broadcaster = broadcaster
        self._debounce_ms = debounce_ms
        self._queue: asyncio.Queue[WatchEvent | None] = asyncio.Queue()

    @property
    def roots(self) -> tuple[Path, ...]:
        """Directories being watched: the content root and the config dir."""
        return (self._config.input_path, self._config.config_dir)

    def is_vetoed(self, path: Path) -> bool:
        """Return whether a change to ``path`` must never trigger a rebuild.

        Paths inside the build output are vetoed so the generator's own
        writes cannot cause rebuild loops. Paths with a segment starting with
        ``.`` or ``_`` below the watched root that contains them are vetoed
        as hidden or private files.
        """
        if _is_within(path, self._config.output_path):
            return True
        containing = [root for root in self.roots if _is_within(path, root)]
        if containing:
            root = max(containing, key=lambda candidate: len(candidate.parts))
            relative = path.relative_to(root).as_posix()
        else:
            relative = path.as_posix()
        if relative == ".":
            return False
        return HIDDEN_OR_UNDERSCORED_PATTERN.search(relative) is not None

    def accepts(self, event: WatchEvent) -> bool:
        """Return whether ``event`` should trigger a rebuild.

        No-op kinds and events without paths are ignored. A single vetoed path
        discards the whole event.
        """
        if event.kind in NOOP_KINDS or not event.paths:
            return False
        return not any(self.is_vetoed(path) for path in event.paths)

    async def handle(self, event: WatchEvent) -> bool:
        """Rebuild for ``event`` and request a reload.

        Returns
        -------
        bool
            ``True`` when a rebuild ran successfully and a reload was
            requested; ``False`` when the event was filtered out or the
            rebuild failed. Failures are logged with the triggering paths and
            do not propagate, so the watch loop keeps running.
        """
        if not self.accepts(event):
            return False
        logger.info(">>> %s: %s", event.kind, self._display(event.paths[0]))
        request = RebuildRequest(config=self._config, quiet=True, include_refresh=True)
        try:
            await self._rebuild(request)
        except Exception:
            logger.exception(
                "Rebuild failed after %s of %s",
                event.kind,
                ", ".join(self._display(path) for path in event.paths),
            )
            return False
        self._broadcaster.request_reload()
        return True

    def submit(self, event: WatchEvent) -> None:
        """Queue ``event`` for the consumer."""
        self._queue.put_nowait(event)

    def close(self) -> None:
        """Ask the consumer to stop once the queued events are handled."""
        self._queue.put_nowait(None)

    async def consume(self) -> None:
        """Handle queued events one at a time until :meth:`close` is called."""
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                await self.handle(event)
            finally:
                self._queue.task_done()

    async def produce(self, stop_event: asyncio.Event | None = None) -> None:
        """Queue events from ``watchfiles`` until ``stop_event`` is set."""
        roots = [root for root in self.roots if root.exists()]
        async for changes in awatch(
            *roots, stop_event=stop_event, debounce=self._debounce_ms, step=50
        ):
            for event in events_from_changes(changes):
                self.submit(event)

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Watch both roots and process events until ``stop_event`` is set."""
        consumer = asyncio.create_task(self.consume(), name="ter-watch-consumer")
        try:
            await self.produce(stop_event)
        finally:
            self.close()
            await consumer

    @staticmethod
    def _display(path: Path) -> str:
        """Return ``path`` relative to the working directory when possible."""
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)


__all__ = ["ContentWatcher", "WatchEvent", "events_from_changes"]
