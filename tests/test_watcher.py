"""Tests for the content watcher's filtering, rebuild, and reload behaviour.

The watcher is driven directly through :meth:`ContentWatcher.handle` and its
queue so no real filesystem notifications are needed.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import typing as typ

import pytest
from watchfiles import Change

from ter_pages.dev import ContentWatcher, RebuildRequest, WatchEvent
from ter_pages.dev.watcher import events_from_changes

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ter_pages.config import BuildConfig


@pytest.fixture
def watcher(build_config: BuildConfig, rebuilder, reload_recorder) -> ContentWatcher:
    """Return a watcher wired to recording doubles."""
    return ContentWatcher(build_config, rebuilder, reload_recorder)


def test_content_change_triggers_rebuild_and_reload(
    watcher: ContentWatcher, site_root: Path, rebuilder, reload_recorder
) -> None:
    """A change to a content file rebuilds once and requests a reload."""
    event = WatchEvent("modify", (site_root / "posts" / "hello.md",))

    handled = asyncio.run(watcher.handle(event))

    assert handled, "a content change should be handled"
    assert len(rebuilder.requests) == 1
    request = rebuilder.requests[0]
    assert isinstance(request, RebuildRequest)
    assert request.quiet, "watch rebuilds are quiet"
    assert request.include_refresh, "watch rebuilds embed the refresh script"
    assert reload_recorder.reloads == 1


def test_output_directory_changes_are_ignored(
    watcher: ContentWatcher, site_root: Path, rebuilder, reload_recorder
) -> None:
    """The generator's own writes never trigger a rebuild."""
    event = WatchEvent("create", (site_root / "_site" / "posts" / "index.html",))

    assert not asyncio.run(watcher.handle(event))
    assert rebuilder.requests == []
    assert reload_recorder.reloads == 0


def test_plain_output_directory_is_vetoed(
    build_config: BuildConfig, site_root: Path, rebuilder, reload_recorder
) -> None:
    """Output dirs without a ``.`` or ``_`` prefix are still never rebuilt."""
    config = dc.replace(build_config, output_path=site_root / "public")
    watcher = ContentWatcher(config, rebuilder, reload_recorder)
    page = site_root / "public" / "x.html"

    assert watcher.is_vetoed(page)
    assert not asyncio.run(watcher.handle(WatchEvent("create", (page,))))
    assert rebuilder.requests == [], "writes to the output dir must not rebuild"
    assert reload_recorder.reloads == 0


def test_one_hidden_path_discards_the_event(
    watcher: ContentWatcher, site_root: Path, rebuilder
) -> None:
    """A single hidden or underscored path vetoes the whole batch."""
    event = WatchEvent(
        "modify",
        (site_root / "posts" / "hello.md", site_root / "posts" / ".hello.md.swp"),
    )

    assert not asyncio.run(watcher.handle(event))
    assert rebuilder.requests == []


@pytest.mark.parametrize("kind", ["any", "access", "other"])
def test_noop_kinds_are_ignored(
    watcher: ContentWatcher, site_root: Path, rebuilder, kind: str
) -> None:
    """Events that do not describe a content change are dropped."""
    event = WatchEvent(kind, (site_root / "posts" / "hello.md",))

    assert not asyncio.run(watcher.handle(event))
    assert rebuilder.requests == []


def test_config_directory_changes_trigger_rebuild(
    watcher: ContentWatcher, build_config: BuildConfig
) -> None:
    """Files inside the hidden config directory are watched content."""
    assert not watcher.is_vetoed(build_config.config_dir / "config.json")
    assert not watcher.is_vetoed(build_config.config_dir / "views" / "page.html")
    assert watcher.is_vetoed(build_config.config_dir / "views" / "_draft.html")


@pytest.mark.parametrize(
    "relative",
    ["_drafts/post.md", "posts/_partial.md", ".git/HEAD", "posts/.DS_Store"],
)
def test_hidden_and_underscored_segments_are_vetoed(
    watcher: ContentWatcher, site_root: Path, relative: str
) -> None:
    """Any path segment beginning with ``.`` or ``_`` is private."""
    assert watcher.is_vetoed(site_root / relative)


def test_rebuild_failure_is_logged_and_not_reloaded(
    build_config: BuildConfig,
    site_root: Path,
    failing_rebuilder,
    reload_recorder,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A failed rebuild is reported with its paths and skips the reload."""
    watcher = ContentWatcher(build_config, failing_rebuilder, reload_recorder)
    broken = site_root / "posts" / "broken.md"

    with caplog.at_level(logging.ERROR, logger="ter_pages.dev.watcher"):
        handled = asyncio.run(watcher.handle(WatchEvent("modify", (broken,))))

    assert not handled
    assert reload_recorder.reloads == 0
    assert "broken.md" in caplog.text, "the failing path should be logged"
    assert "template exploded" in caplog.text, "the cause should be logged"


def test_loop_continues_after_failure(
    build_config: BuildConfig, site_root: Path, failing_rebuilder, reload_recorder
) -> None:
    """Events queued after a failure are still processed."""
    watcher = ContentWatcher(build_config, failing_rebuilder, reload_recorder)

    async def _drive() -> None:
        watcher.submit(WatchEvent("modify", (site_root / "posts" / "a.md",)))
        watcher.submit(WatchEvent("modify", (site_root / "posts" / "b.md",)))
        watcher.close()
        await watcher.consume()

    asyncio.run(_drive())

    assert len(failing_rebuilder.requests) == 2, "both events should rebuild"
    assert reload_recorder.reloads == 1, "only the successful rebuild reloads"


def test_rebuilds_are_serialized(
    build_config: BuildConfig, site_root: Path, reload_recorder
) -> None:
    """Queued events never overlap; each waits for the previous rebuild."""
    active = 0
    peak = 0
    order: list[str] = []

    async def slow_rebuild(request: RebuildRequest) -> None:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        order.append("start")
        await asyncio.sleep(0.01)
        order.append("end")
        active -= 1

    watcher = ContentWatcher(build_config, slow_rebuild, reload_recorder)

    async def _drive() -> None:
        consumer = asyncio.create_task(watcher.consume())
        for name in ("a.md", "b.md", "c.md"):
            watcher.submit(WatchEvent("modify", (site_root / "posts" / name,)))
        watcher.close()
        await consumer

    asyncio.run(_drive())

    assert peak == 1, "rebuilds must not run concurrently"
    assert order == ["start", "end"] * 3
    assert reload_recorder.reloads == 3


def test_events_from_changes_groups_by_kind(tmp_path: Path) -> None:
    """A raw watchfiles batch becomes one event per change kind."""
    changes = {
        (Change.added, str(tmp_path / "a.md")),
        (Change.modified, str(tmp_path / "b.md")),
        (Change.added, str(tmp_path / "c.md")),
        (Change.deleted, str(tmp_path / "d.md")),
    }

    events = events_from_changes(changes)

    assert events == [
        WatchEvent("create", (tmp_path / "a.md", tmp_path / "c.md")),
        WatchEvent("modify", (tmp_path / "b.md",)),
        WatchEvent("remove", (tmp_path / "d.md",)),
    ]


def test_roots_cover_content_and_config(
    watcher: ContentWatcher, build_config: BuildConfig
) -> None:
    """Both the content root and the config directory are watched."""
    assert watcher.roots == (build_config.input_path, build_config.config_dir)
