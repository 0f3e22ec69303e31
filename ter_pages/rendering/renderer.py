r"""Render markdown documents into HTML with resolved links and headings.

Each call to :meth:`MarkdownRenderer.render` builds a fresh
``markdown.Markdown`` instance and registers a :class:`SiteRenderExtension`
that owns the per-document state: the heading slug allocator, the collected
headings, and the set of internal link targets. Nothing is shared between
calls apart from the read-only Pygments lexer registry, so documents can be
rendered concurrently.

Example
-------
>>> renderer = MarkdownRenderer()
>>> result = renderer.render(
...     "# Title\n\nSee [setup](setup.md).",
...     current_path="/guides/intro",
...     is_index=False,
...     base_url="https://example.com/",
... )
>>> result.links
('https://example.com/guides/setup',)
>>> [heading.slug for heading in result.headings]
['title']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import unescape
from xml.etree.ElementTree import SubElement

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import AMP_SUBSTITUTE, ETX, HTML_PLACEHOLDER_RE, STX

from .._constants import EXTERNAL_LINK_REL
from .highlight import LanguageTaggedFormatter
from .links import resolve_image_src, resolve_link
from .models import Heading, RenderResult
from .slugger import HeadingSlugger

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

TAG_STRIP_PATTERN = re.compile(r"<[^>]+>")
ESCAPED_CHAR_PATTERN = re.compile(f"{STX}([0-9]+){ETX}")
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)


def _decode(value: str) -> str:
    """Restore backslash-escaped characters and entities in ``value``.

    Inline parsing leaves escapes as ``STX<ord>ETX`` markers and obfuscates
    autolinked e-mail addresses with substituted entities; both are only
    undone by later treeprocessors.
    """
    restored = ESCAPED_CHAR_PATTERN.sub(
        lambda match: chr(int(match.group(1))), value
    )
    return unescape(restored.replace(AMP_SUBSTITUTE, "&"))


@dc.dataclass(slots=True)
class _RenderState:
    """Mutable state owned by exactly one render call."""

    current_path: str
    is_index: bool
    base_url: str
    slugger: HeadingSlugger = dc.field(default_factory=HeadingSlugger)
    headings: list[Heading] = dc.field(default_factory=list)
    links: dict[str, None] = dc.field(default_factory=dict)


class SiteRenderExtension(Extension):
    """Override link, image, and heading output for one document.

    The extension is created per render call and carries that call's
    :class:`_RenderState`; registering it on a shared ``Markdown`` instance
    would leak headings and links between documents.
    """

    def __init__(self, state: _RenderState) -> None:
        super().__init__()
        self.state = state

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the site treeprocessor after inline parsing has run."""
        processor = SiteTreeprocessor(md, self.state)
        md.treeprocessors.register(processor, "ter_site", 15)


class SiteTreeprocessor(Treeprocessor):
    """Collect headings, rewrite references, and drop the leading title."""

    def __init__(self, md: Markdown, state: _RenderState) -> None:
        super().__init__(md)
        self.state = state

    def run(self, root: Element) -> Element:
        """Apply the site rules to the parsed document tree."""
        anchored: list[tuple[Element, str]] = [
            (element, self._collect_heading(element))
            for element in root.iter()
            if element.tag in HEADING_TAGS
        ]

        # The title is dropped before links are resolved so its links are
        # never registered.
        if len(root) and root[0].tag == "h1":
            title = root[0]
            root.remove(title)
            anchored = [pair for pair in anchored if pair[0] is not title]

        for element in root.iter():
            if element.tag == "a":
                self._rewrite_anchor(element)
            elif element.tag == "img":
                self._rewrite_image(element)

        for element, slug in anchored:
            element.set("id", slug)
            SubElement(element, "a", {"class": "anchor", "href": f"#{slug}"})
        return root

    def _text(self, element: Element) -> str:
        """Return the plain text of ``element`` with stashed markup removed."""
        stash = self.md.htmlStash.rawHtmlBlocks

        def _unstash(match: re.Match[str]) -> str:
            index = int(match.group(1))
            if index >= len(stash):
                return ""
            return TAG_STRIP_PATTERN.sub("", str(stash[index]))

        text = HTML_PLACEHOLDER_RE.sub(_unstash, "".join(element.itertext()))
        return _decode(text).strip()

    def _collect_heading(self, element: Element) -> str:
        text = self._text(element)
        slug = self.state.slugger.slug(text)
        self.state.headings.append(
            Heading(text=text, level=int(element.tag[1]), slug=slug)
        )
        return slug

    def _rewrite_anchor(self, element: Element) -> None:
        """Classify an anchor and rewrite internal targets to site paths."""
        href = element.get("href")
        if href is None:
            return
        resolved = resolve_link(
            _decode(href),
            current_path=self.state.current_path,
            is_index=self.state.is_index,
            base_url=self.state.base_url,
        )
        if resolved.external:
            element.set("rel", EXTERNAL_LINK_REL)
        else:
            element.set("href", resolved.href)
            if resolved.target:
                self.state.links.setdefault(resolved.target, None)
        if not element.get("title"):
            text = self._text(element)
            if text:
                element.set("title", text)

    def _rewrite_image(self, element: Element) -> None:
        src = element.get("src")
        if src is None:
            return
        resolved = resolve_image_src(
            _decode(src), current_path=self.state.current_path
        )
        element.set("src", resolved)


class MarkdownRenderer:
    """Render site documents with consistent link and code styling."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with the Pygments style used for code blocks.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        """
        self.pygments_style = pygments_style
        self._formatter = LanguageTaggedFormatter(
            style=pygments_style, cssclass="codehilite"
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(
        self, text: str, *, current_path: str, is_index: bool, base_url: str
    ) -> RenderResult:
        """Render ``text`` as the document at ``current_path``.

        Parameters
        ----------
        text : str
            Markdown source of the document.
        current_path : str
            Site path of the document without extension or trailing slash.
        is_index : bool
            Whether the document is the default page of its directory.
        base_url : str
            Canonical site URL used to absolutize internal link targets.

        Returns
        -------
        RenderResult
            HTML without the leading level-one title, the internal targets as
            absolute URLs, and every heading in document order.
        """
        state = _RenderState(
            current_path=current_path, is_index=is_index, base_url=base_url
        )
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderResult(html="", links=(), headings=())
        md = Markdown(
            extensions=[
                "fenced_code",
                "codehilite",
                "tables",
                "sane_lists",
                SiteRenderExtension(state),
            ],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                    "pygments_formatter": LanguageTaggedFormatter,
                }
            },
        )
        html = md.convert(normalized)
        return RenderResult(
            html=html, links=tuple(state.links), headings=tuple(state.headings)
        )

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        """Unindent fences and drop trailing labels such as ``rust,no_run``."""
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def render(
    text: str, *, current_path: str, is_index: bool, base_url: str
) -> RenderResult:
    """Render ``text`` with a default :class:`MarkdownRenderer`."""
    return MarkdownRenderer().render(
        text, current_path=current_path, is_index=is_index, base_url=base_url
    )


__all__ = ["MarkdownRenderer", "SiteRenderExtension", "render"]
