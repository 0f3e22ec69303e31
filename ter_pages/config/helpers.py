"""Utility helpers shared by the ter configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import AuthorInfo, ConfigError, SiteInfo, UserConfig


def _resolve_path(value: str | Path | None, cwd: Path, default: Path) -> Path:
    """Return ``value`` as an absolute path, anchored at ``cwd`` when relative."""
    if value is None or str(value) == "":
        return default
    path = Path(value)
    return path if path.is_absolute() else cwd / path


def _deep_merge(
    base: typ.Mapping[str, typ.Any], override: typ.Mapping[str, typ.Any]
) -> dict[str, typ.Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the value in ``base``.
    """
    merged: dict[str, typ.Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, typ.Mapping) and isinstance(value, typ.Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _section(payload: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    """Return the nested mapping stored at ``key`` or raise ``ConfigError``."""
    value = payload.get(key) or {}
    if not isinstance(value, typ.Mapping):
        msg = f"Configuration section '{key}' must be a mapping."
        raise ConfigError(msg)
    return value


def _build_user_config(payload: typ.Mapping[str, typ.Any]) -> UserConfig:
    """Build a UserConfig from a merged configuration mapping."""
    site = _section(payload, "site")
    author = _section(payload, "author")
    locale = _section(payload, "locale")
    navigation = _section(payload, "navigation")
    base_site = SiteInfo()
    base_author = AuthorInfo()
    return UserConfig(
        site=SiteInfo(
            title=str(site.get("title", base_site.title)),
            description=str(site.get("description", base_site.description)),
            url=str(site.get("url", base_site.url)),
            root_crumb=str(site.get("rootCrumb", base_site.root_crumb)),
        ),
        author=AuthorInfo(
            name=str(author.get("name", base_author.name)),
            email=str(author.get("email", base_author.email)),
            url=str(author.get("url", base_author.url)),
        ),
        navigation={str(label): str(href) for label, href in navigation.items()},
        date_locale=locale.get("date"),
    )
