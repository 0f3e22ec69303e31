"""Heading slug allocation scoped to a single render pass."""

from __future__ import annotations

import re

PUNCTUATION_PATTERN = re.compile(
    r"[\u2000-\u206F\u2E00-\u2E7F\\'!\"#$%&()*+,./:;<=>?@\[\]^`{|}~]"
)
TAG_PATTERN = re.compile(r"<[!/a-z].*?>", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s")


def slugify(text: str) -> str:
    """Convert heading text into a lowercase, hyphen-separated identifier.

    Examples
    --------
    >>> slugify("Hello, World!")
    'hello-world'
    >>> slugify("  Spaced  out ")
    'spaced--out'
    """
    value = TAG_PATTERN.sub("", text.lower().strip())
    value = PUNCTUATION_PATTERN.sub("", value)
    return WHITESPACE_PATTERN.sub("-", value)


class HeadingSlugger:
    """Hand out slugs that are unique within one document.

    Repeated headings receive numeric suffixes in order of appearance, so
    ``Intro`` followed by another ``Intro`` yields ``intro`` and ``intro-1``.
    A fresh instance must be used for every render call.
    """

    def __init__(self) -> None:
        self._seen: dict[str, int] = {}

    def slug(self, text: str) -> str:
        """Return the next unique slug for ``text``."""
        base = slugify(text)
        candidate = base
        if base in self._seen:
            count = self._seen[base]
            while candidate in self._seen:
                count += 1
                candidate = f"{base}-{count}"
            self._seen[base] = count
        self._seen[candidate] = 0
        return candidate


__all__ = ["HeadingSlugger", "slugify"]
