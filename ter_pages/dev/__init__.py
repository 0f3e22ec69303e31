"""Development server: file watching, rebuilds, and live reload."""

from .broadcaster import Connection, LiveReloadBroadcaster
from .devserver import DevServer
from .livereload import REFRESH_SCRIPT, inject_refresh_script
from .rebuild import CommandRebuilder, RebuildError, RebuildRequest
from .server import StaticServer
from .watcher import ContentWatcher, WatchEvent, events_from_changes

__all__ = [
    "REFRESH_SCRIPT",
    "CommandRebuilder",
    "Connection",
    "ContentWatcher",
    "DevServer",
    "LiveReloadBroadcaster",
    "RebuildError",
    "RebuildRequest",
    "StaticServer",
    "WatchEvent",
    "events_from_changes",
    "inject_refresh_script",
]
