"""Classify and resolve link targets found in markdown documents.

Every anchor in a rendered document is either *external* (it carries a URI
scheme or is a ``mailto`` address) or *internal* (it points at another page of
the generated site). Internal references are rewritten into clean,
extension-less site paths and reported as canonical absolute URLs so the page
graph can compute backlinks.

Example
-------
>>> link = resolve_link(
...     "../about.md#team",
...     current_path="/blog/post",
...     is_index=False,
...     base_url="https://example.com/",
... )
>>> link.href, link.target
('/about#team', 'https://example.com/about')
"""

from __future__ import annotations

import posixpath
import re
from urllib.parse import urldefrag, urljoin, urlsplit

from .models import ParsedReference, ResolvedLink

INDEX_SUFFIX_PATTERN = re.compile(r"/index$", re.IGNORECASE)


def parse_reference(raw: str) -> ParsedReference:
    """Split ``raw`` into scheme presence, pathname, and hash fragment.

    Query strings are discarded. Inputs that ``urlsplit`` rejects (for
    example malformed IPv6 hosts) fall back to a plain textual split so the
    function never raises.
    """
    try:
        parts = urlsplit(raw)
    except ValueError:
        head, sep, fragment = raw.partition("#")
        pathname = head.partition("?")[0]
        return ParsedReference(
            has_scheme="://" in pathname,
            pathname=pathname,
            hash=f"#{fragment}" if sep else "",
        )
    fragment = f"#{parts.fragment}" if parts.fragment or raw.endswith("#") else ""
    return ParsedReference(
        has_scheme=bool(parts.scheme or parts.netloc),
        pathname=parts.path,
        hash=fragment,
    )


def clean_pathname(pathname: str) -> str:
    """Strip the file extension and trailing slash from ``pathname``.

    Examples
    --------
    >>> clean_pathname("guides/setup.md")
    'guides/setup'
    >>> clean_pathname("/docs/")
    '/docs'
    >>> clean_pathname("")
    ''
    """
    if not pathname:
        return ""
    trimmed = pathname.rstrip("/")
    if not trimmed:
        return "/"
    head, tail = posixpath.split(trimmed)
    stem = posixpath.splitext(tail)[0]
    return posixpath.join(head, stem) if head else stem


def canonical_url(href: str, base_url: str) -> str:
    """Return the absolute, fragment-free URL of a site path under ``base_url``."""
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return urldefrag(urljoin(base, href.lstrip("/"))).url


def _document_dir(current_path: str, *, is_index: bool) -> str:
    """Return the rooted directory that relative references resolve against."""
    directory = current_path if is_index else posixpath.dirname(current_path)
    return "/" + directory.strip("/")


def resolve_link(
    raw: str, *, current_path: str, is_index: bool, base_url: str
) -> ResolvedLink:
    """Classify an anchor ``href`` and compute its rewritten value.

    Parameters
    ----------
    raw : str
        Reference exactly as written in the markdown source.
    current_path : str
        Site path of the document being rendered, e.g. ``"/blog/post"``.
    is_index : bool
        Whether the document is the index page of ``current_path``; index
        documents resolve relative references inside their own directory.
    base_url : str
        Canonical site URL used to absolutize internal targets.

    Returns
    -------
    ResolvedLink
        External links keep ``raw`` untouched. Internal links carry the
        cleaned site path and its canonical absolute target. References that
        resolve to an empty path (a bare fragment, or a relative path that
        collapses to the site root index) become hash-only self-links with no
        target.
    """
    parsed = parse_reference(raw)
    if parsed.is_external:
        return ResolvedLink(href=raw, external=True)

    cleaned = clean_pathname(parsed.pathname)
    if not cleaned:
        return ResolvedLink(href=parsed.hash, external=False)

    if cleaned.startswith("/"):
        href = cleaned + parsed.hash
        return ResolvedLink(
            href=href, external=False, target=canonical_url(href, base_url)
        )

    base_dir = _document_dir(current_path, is_index=is_index)
    joined = posixpath.normpath(posixpath.join(base_dir, cleaned))
    resolved = INDEX_SUFFIX_PATTERN.sub("", joined).strip("/")
    if not resolved:
        return ResolvedLink(href=parsed.hash, external=False)
    href = f"/{resolved}{parsed.hash}"
    return ResolvedLink(href=href, external=False, target=canonical_url(href, base_url))


def resolve_image_src(raw: str, *, current_path: str) -> str:
    """Return the ``src`` for an image reference found in ``current_path``.

    Absolute paths and references with a scheme pass through unchanged;
    relative paths are joined onto the directory containing the document.
    """
    parsed = parse_reference(raw)
    if parsed.has_scheme or not parsed.pathname or parsed.pathname.startswith("/"):
        return raw
    base_dir = _document_dir(current_path, is_index=False)
    return posixpath.normpath(posixpath.join(base_dir, parsed.pathname))


__all__ = [
    "canonical_url",
    "clean_pathname",
    "parse_reference",
    "resolve_image_src",
    "resolve_link",
]
