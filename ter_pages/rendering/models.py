"""Shared dataclasses used by the markdown rendering pipeline."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class ParsedReference:
    """Decomposition of a raw ``href`` or ``src`` value.

    Attributes
    ----------
    has_scheme : bool
        ``True`` when the reference carries a URI scheme or network location.
    pathname : str
        Path component without query string or fragment.
    hash : str
        Fragment including the leading ``#``; empty when absent.
    """

    has_scheme: bool
    pathname: str
    hash: str

    @property
    def is_external(self) -> bool:
        """Return whether the reference points outside the generated site."""
        return self.has_scheme or self.pathname.startswith("mailto")


@dc.dataclass(frozen=True, slots=True)
class ResolvedLink:
    """Outcome of resolving an anchor reference.

    Attributes
    ----------
    href : str
        Value to emit in the anchor's ``href`` attribute.
    external : bool
        Whether the anchor must carry the external ``rel`` marker.
    target : str or None
        Canonical absolute URL of the internal target, or ``None`` for
        external links and self-links.
    """

    href: str
    external: bool
    target: str | None = None


@dc.dataclass(frozen=True, slots=True)
class Heading:
    """A heading extracted from a rendered document."""

    text: str
    level: int
    slug: str


@dc.dataclass(frozen=True, slots=True)
class RenderResult:
    """HTML body plus the navigation data gathered during one render call.

    Attributes
    ----------
    html : str
        Rendered HTML without the leading title heading.
    links : tuple[str, ...]
        Deduplicated absolute URLs of internal targets, in first-seen order.
    headings : tuple[Heading, ...]
        Every heading in document order, including the removed title.
    """

    html: str
    links: tuple[str, ...]
    headings: tuple[Heading, ...]


__all__ = ["Heading", "ParsedReference", "RenderResult", "ResolvedLink"]
