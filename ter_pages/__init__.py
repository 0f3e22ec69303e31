"""Markdown rendering and live-reload dev serving for ter sites.

This package exposes the CLI entry points used by the ``ter`` console script
to render markdown documents and to run the development server that watches
the content tree, triggers rebuilds, and refreshes connected browsers.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from ter_pages import main
>>> main()  # doctest: +SKIP
>>> from ter_pages import app
>>> app.name[0]  # doctest: +SKIP
'ter'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
