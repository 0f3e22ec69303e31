"""Adapters between the watcher and the external page builder.

The dev server never builds pages itself. It calls a *rebuild operation*: an
awaitable that receives a :class:`RebuildRequest`, performs a full build of
the site, and raises when the build fails. :class:`CommandRebuilder` adapts
any shell command (for example the project's own build script) to that
interface.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import logging
import os
import shlex
import subprocess
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from ..config import BuildConfig

logger = logging.getLogger(__name__)


class RebuildError(RuntimeError):
    """Raised when the external build reports a failure."""


@dc.dataclass(frozen=True, slots=True)
class RebuildRequest:
    """Options passed to the rebuild operation.

    Attributes
    ----------
    config : BuildConfig
        Configuration of the site being built.
    quiet : bool
        Suppress per-file build output.
    include_refresh : bool
        Ask the page builder to embed the live-reload client script.
    """

    config: BuildConfig
    quiet: bool = False
    include_refresh: bool = False


Rebuilder: typ.TypeAlias = "cabc.Callable[[RebuildRequest], cabc.Awaitable[None]]"


def build_env(request: RebuildRequest) -> dict[str, str]:
    """Return the environment exported to a build command for ``request``.

    List-valued settings are joined with commas.
    """
    config = request.config
    env = dict(os.environ)
    env.update(
        {
            "TER_INPUT_PATH": str(config.input_path),
            "TER_OUTPUT_PATH": str(config.output_path),
            "TER_CONFIG_PATH": str(config.user_config_path),
            "TER_ASSETS_PATH": str(config.assets_path),
            "TER_VIEWS_PATH": str(config.views_path),
            "TER_BASE_URL": config.base_url,
            "TER_RENDER_DRAFTS": "1" if config.render_drafts else "0",
            "TER_IGNORE_KEYS": ",".join(config.ignore_keys),
            "TER_STATIC_EXTS": ",".join(config.static_exts),
            "TER_QUIET": "1" if request.quiet else "0",
            "TER_INCLUDE_REFRESH": "1" if request.include_refresh else "0",
        }
    )
    return env


class CommandRebuilder:
    """Run a shell command as the rebuild operation.

    The command runs in a worker thread so the event loop keeps serving
    requests during the build. Quiet requests capture the command output and
    only surface it when the build fails.
    """

    def __init__(
        self, command: str | cabc.Sequence[str], *, cwd: Path | None = None
    ) -> None:
        self.args = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.args:
            msg = "Build command must not be empty."
            raise ValueError(msg)
        self.cwd = cwd

    async def __call__(self, request: RebuildRequest) -> None:
        """Run the build for ``request``; raise :class:`RebuildError` on failure."""
        await asyncio.to_thread(self._run, request)

    def _run(self, request: RebuildRequest) -> None:
        try:
            subprocess.run(  # noqa: S603
                self.args,
                check=True,
                cwd=self.cwd,
                env=build_env(request),
                text=True,
                capture_output=request.quiet,
            )
        except FileNotFoundError as exc:
            msg = f"Build command not found: {self.args[0]}"
            raise RebuildError(msg) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            msg = f"Build command exited with status {exc.returncode}"
            if detail:
                msg = f"{msg}: {detail}"
            raise RebuildError(msg) from exc
        logger.debug("Build command finished: %s", shlex.join(self.args))


__all__ = [
    "CommandRebuilder",
    "RebuildError",
    "RebuildRequest",
    "Rebuilder",
    "build_env",
]
