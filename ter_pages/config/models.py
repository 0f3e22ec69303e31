"""Typed dataclasses describing ter build and site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

DEFAULT_STATIC_EXTS = (
    "png",
    "jpg",
    "jpeg",
    "gif",
    "webp",
    "pdf",
    "ico",
    "webm",
    "mp4",
)


class ConfigError(ValueError):
    """Raised when the site configuration is invalid or cannot be parsed."""


@dc.dataclass(slots=True)
class SiteInfo:
    """Site-wide metadata rendered into page chrome and feeds."""

    title: str = "Your Blog Name"
    description: str = "I am writing about my experiences as a naval navel-gazer"
    url: str = "https://example.com/"
    root_crumb: str = "index"


@dc.dataclass(slots=True)
class AuthorInfo:
    """Author details surfaced in page metadata."""

    name: str = "Your Name Here"
    email: str = "youremailaddress@example.com"
    url: str = "https://example.com/about-me/"


@dc.dataclass(slots=True)
class UserConfig:
    """User-editable settings stored under the hidden configuration directory.

    Attributes
    ----------
    site : SiteInfo
        Title, description, and canonical URL of the site.
    author : AuthorInfo
        Author metadata.
    navigation : dict[str, str]
        Label to URL mapping for the top navigation bar.
    date_locale : str or None
        Locale used when formatting dates, when configured.
    """

    site: SiteInfo = dc.field(default_factory=SiteInfo)
    author: AuthorInfo = dc.field(default_factory=AuthorInfo)
    navigation: dict[str, str] = dc.field(default_factory=dict)
    date_locale: str | None = None

    def to_mapping(self) -> dict[str, object]:
        """Return the on-disk representation used for the config file."""
        payload: dict[str, object] = {
            "site": {
                "title": self.site.title,
                "description": self.site.description,
                "url": self.site.url,
                "rootCrumb": self.site.root_crumb,
            },
            "author": {
                "name": self.author.name,
                "email": self.author.email,
                "url": self.author.url,
            },
            "navigation": dict(self.navigation),
        }
        if self.date_locale:
            payload["locale"] = {"date": self.date_locale}
        return payload


@dc.dataclass(slots=True)
class BuildConfig:
    """Resolved paths and switches that drive a build and the dev server.

    Attributes
    ----------
    input_path : Path
        Content root containing the markdown sources.
    output_path : Path
        Build output directory served by the dev server.
    config_dir : Path
        Hidden configuration directory watched alongside the content root.
    assets_path : Path
        Directory holding theme assets.
    views_path : Path
        Directory holding page and feed templates.
    user_config_path : Path
        Location of the user configuration file.
    ignore_keys : list[str]
        Front matter keys that mark a page as excluded from the build.
    static_exts : list[str]
        File extensions copied verbatim to the output.
    render_drafts : bool
        Whether draft pages are rendered.
    user_config : UserConfig
        Parsed user configuration.
    """

    input_path: Path
    output_path: Path
    config_dir: Path
    assets_path: Path
    views_path: Path
    user_config_path: Path
    ignore_keys: list[str] = dc.field(default_factory=lambda: ["draft"])
    static_exts: list[str] = dc.field(default_factory=lambda: list(DEFAULT_STATIC_EXTS))
    render_drafts: bool = False
    user_config: UserConfig = dc.field(default_factory=UserConfig)

    @property
    def base_url(self) -> str:
        """Return the canonical site URL used to absolutize internal links."""
        return self.user_config.site.url


__all__ = [
    "DEFAULT_STATIC_EXTS",
    "AuthorInfo",
    "BuildConfig",
    "ConfigError",
    "SiteInfo",
    "UserConfig",
]
