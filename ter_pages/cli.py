"""Cyclopts CLI entrypoint for rendering markdown and serving ter sites.

The ``ter`` console script defined here can render a single markdown document
(printing the HTML, or a JSON payload with the resolved links and headings)
and run the development server that watches the content tree, invokes the
site's build command after every change, and refreshes connected browsers.

Examples
--------
Render a document as the index page of ``/guides``:

>>> from ter_pages.cli import app
>>> app(["render", "guides/index.md", "--json"])  # doctest: +SKIP

Serve a site, rebuilding with its build script:

>>> app(["serve", "--build-command", "make site"])  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import json
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_build_config
from .dev import CommandRebuilder, DevServer
from .rendering import MarkdownRenderer

app = App(name="ter", config=cyclopts.config.Env("TER_", command=False))  # type: ignore[unknown-argument]


def _document_path(file: Path) -> tuple[str, bool]:
    """Derive the site path and index flag for a markdown file.

    ``guides/setup.md`` becomes ``("/guides/setup", False)`` and
    ``guides/index.md`` becomes ``("/guides", True)``.
    """
    try:
        relative = file.resolve().relative_to(Path.cwd())
    except ValueError:  # pragma: no cover - fallback for different roots
        relative = Path(file.name)
    stem = relative.with_suffix("")
    if stem.name.lower() == "index":
        parent = stem.parent.as_posix()
        return "/" + ("" if parent == "." else parent), True
    return "/" + stem.as_posix(), False


@app.command(help="Render a markdown file to HTML.")
def render(
    file: Path,
    *,
    path: typ.Annotated[
        str | None, Parameter(help="Site path of the document, e.g. /blog/post")
    ] = None,
    index: typ.Annotated[
        bool | None, Parameter(help="Treat the document as its directory's index")
    ] = None,
    base_url: typ.Annotated[
        str, Parameter(help="Site URL used to absolutize internal links")
    ] = "https://example.com/",
    pygments_style: typ.Annotated[
        str, Parameter(help="Pygments style for highlighted code")
    ] = "monokai",
    json_output: typ.Annotated[
        bool, Parameter(name="--json", help="Print HTML, links and headings as JSON")
    ] = False,
) -> None:
    """Render ``file`` and print the result.

    Parameters
    ----------
    file : Path
        Markdown document to render.
    path : str or None, optional
        Site path of the document; derived from ``file`` when omitted.
    index : bool or None, optional
        Whether the document is an index page; derived from ``file`` when
        omitted (``index.md`` files are index pages).
    base_url : str, optional
        Canonical site URL for the reported internal links.
    pygments_style : str, optional
        Pygments style name.
    json_output : bool, optional
        Print a JSON object instead of bare HTML.
    """
    derived_path, derived_index = _document_path(file)
    renderer = MarkdownRenderer(pygments_style)
    result = renderer.render(
        file.read_text(encoding="utf-8"),
        current_path=path or derived_path,
        is_index=derived_index if index is None else index,
        base_url=base_url,
    )
    if not json_output:
        print(result.html)
        return
    payload = {
        "html": result.html,
        "links": list(result.links),
        "headings": [dc.asdict(heading) for heading in result.headings],
    }
    print(json.dumps(payload, indent=2))


@app.command(help="Serve the build output and rebuild on changes.")
def serve(
    *,
    build_command: typ.Annotated[
        str, Parameter(help="Command that builds the site into the output dir")
    ],
    input_dir: typ.Annotated[
        Path | None, Parameter(help="Content root (defaults to the cwd)")
    ] = None,
    output_dir: typ.Annotated[
        Path | None, Parameter(help="Build output directory (defaults to _site)")
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="User config file (defaults to .ter/config.json)")
    ] = None,
    host: typ.Annotated[str, Parameter(help="Bind address")] = "127.0.0.1",
    port: typ.Annotated[int, Parameter(help="Bind port")] = 8000,
    drafts: typ.Annotated[bool, Parameter(help="Render draft pages")] = False,
) -> None:
    """Build the site, then serve it with file watching and live reload.

    Parameters
    ----------
    build_command : str
        Shell command run for the initial build and after every change. It
        receives ``TER_QUIET``, ``TER_INCLUDE_REFRESH``, and the resolved paths
        as environment variables.
    input_dir : Path or None, optional
        Content root to watch.
    output_dir : Path or None, optional
        Directory written by the build command and served over HTTP.
    config : Path or None, optional
        Location of the user configuration file.
    host : str, optional
        Address the HTTP server binds to.
    port : int, optional
        Port the HTTP server binds to.
    drafts : bool, optional
        Whether draft pages are rendered.

    Raises
    ------
    RebuildError
        If the initial build fails; later failures are logged and the
        server keeps running.
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    build_config = load_build_config(
        config_path=config,
        input_path=input_dir,
        output_path=output_dir,
        render_drafts=drafts,
    )
    dev_server = DevServer(
        build_config,
        CommandRebuilder(build_command, cwd=Path.cwd()),
        host=host,
        port=port,
    )

    async def _serve() -> None:
        await dev_server.initial_build()
        await dev_server.run()

    asyncio.run(_serve())


def main() -> None:
    """Invoke the Cyclopts application that powers the ``ter`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
