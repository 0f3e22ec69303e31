"""Utilities for rendering markdown documents and resolving their links."""

from .links import parse_reference, resolve_image_src, resolve_link
from .models import Heading, ParsedReference, RenderResult, ResolvedLink
from .renderer import MarkdownRenderer, SiteRenderExtension, render
from .slugger import HeadingSlugger, slugify

__all__ = [
    "Heading",
    "HeadingSlugger",
    "MarkdownRenderer",
    "ParsedReference",
    "RenderResult",
    "ResolvedLink",
    "SiteRenderExtension",
    "parse_reference",
    "render",
    "resolve_image_src",
    "resolve_link",
    "slugify",
]
