"""Shared fixtures for the ter test suite.

The watcher and dev-server tests run against a throwaway site tree and use
lightweight doubles for the rebuild operation and the broadcaster so they can
assert on exactly what the watcher asked for.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ter_pages.config import BuildConfig
from ter_pages.dev import RebuildRequest


class RecordingRebuilder:
    """Async rebuild double that records every request it receives."""

    def __init__(self, *, fail_on: int | None = None) -> None:
        self.requests: list[RebuildRequest] = []
        self.fail_on = fail_on

    async def __call__(self, request: RebuildRequest) -> None:
        self.requests.append(request)
        if self.fail_on is not None and len(self.requests) == self.fail_on:
            msg = "template exploded"
            raise RuntimeError(msg)


class RecordingBroadcaster:
    """Broadcaster double counting reload requests."""

    def __init__(self) -> None:
        self.reloads = 0

    def request_reload(self) -> None:
        self.reloads += 1


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Return a content root with a config directory and an output directory."""
    root = tmp_path / "site"
    (root / ".ter").mkdir(parents=True)
    (root / "_site").mkdir()
    (root / "posts").mkdir()
    return root


@pytest.fixture
def build_config(site_root: Path) -> BuildConfig:
    """Return a build configuration rooted at ``site_root``."""
    config_dir = site_root / ".ter"
    return BuildConfig(
        input_path=site_root,
        output_path=site_root / "_site",
        config_dir=config_dir,
        assets_path=config_dir / "assets",
        views_path=config_dir / "views",
        user_config_path=config_dir / "config.json",
    )


@pytest.fixture
def rebuilder() -> RecordingRebuilder:
    """Return a rebuild double that always succeeds."""
    return RecordingRebuilder()


@pytest.fixture
def failing_rebuilder() -> RecordingRebuilder:
    """Return a rebuild double whose first call raises."""
    return RecordingRebuilder(fail_on=1)


@pytest.fixture
def reload_recorder() -> RecordingBroadcaster:
    """Return a broadcaster double for watcher tests."""
    return RecordingBroadcaster()
