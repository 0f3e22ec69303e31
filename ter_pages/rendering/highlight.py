"""Pygments formatter that tags highlighted blocks with their language."""

from __future__ import annotations

import typing as typ
from html import escape

from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

FALLBACK_LANGUAGE = "text"
LANG_PREFIX = "language-"


def resolve_language(name: str | None) -> str:
    """Return the canonical Pygments alias for ``name`` or ``"text"``.

    Examples
    --------
    >>> resolve_language("py")
    'python'
    >>> resolve_language("no-such-language")
    'text'
    """
    if not name:
        return FALLBACK_LANGUAGE
    try:
        lexer = get_lexer_by_name(name)
    except ClassNotFound:
        return FALLBACK_LANGUAGE
    return lexer.aliases[0] if lexer.aliases else name


class LanguageTaggedFormatter(HtmlFormatter):
    """HTML formatter that labels each block with the resolved language.

    ``markdown.extensions.codehilite`` instantiates the configured formatter
    class with a ``lang_str`` option (``"language-<name>"``). The wrapping
    ``div`` gains a ``language-<name>`` class and the ``pre`` element a
    ``data-language`` attribute; unknown languages are reported as ``text``.
    """

    def __init__(self, **options: typ.Any) -> None:
        lang_str = str(options.pop("lang_str", "") or "")
        super().__init__(**options)
        self.language = resolve_language(lang_str.removeprefix(LANG_PREFIX))
        self.cssclass = f"{self.cssclass} {LANG_PREFIX}{self.language}".strip()

    def wrap(self, source: typ.Any, *args: typ.Any) -> typ.Iterator[tuple[int, str]]:
        """Wrap highlighted lines, annotating the opening ``pre`` tag."""
        tagged = False
        for kind, line in super().wrap(source, *args):
            if not tagged and kind == 0 and line.startswith("<pre"):
                safe_lang = escape(self.language, quote=True)
                line = line.replace("<pre", f'<pre data-language="{safe_lang}"', 1)
                tagged = True
            yield kind, line


__all__ = ["FALLBACK_LANGUAGE", "LanguageTaggedFormatter", "resolve_language"]
