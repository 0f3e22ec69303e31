"""Load the ter build configuration and user settings into typed dataclasses."""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .._constants import (
    CONFIG_DIR_NAME,
    DEFAULT_OUTPUT_DIR_NAME,
    DEFAULT_USER_CONFIG_NAME,
)
from .helpers import _build_user_config, _deep_merge, _resolve_path
from .models import BuildConfig, ConfigError, UserConfig

logger = logging.getLogger(__name__)


def load_build_config(
    *,
    cwd: Path | None = None,
    config_path: str | Path | None = None,
    input_path: str | Path | None = None,
    output_path: str | Path | None = None,
    render_drafts: bool = False,
) -> BuildConfig:
    """Resolve build paths and load the user configuration file.

    Parameters
    ----------
    cwd : Path, optional
        Directory used to anchor relative paths; defaults to ``Path.cwd()``.
    config_path : str or Path, optional
        Location of the user configuration file; defaults to
        ``<cwd>/.ter/config.json``.
    input_path : str or Path, optional
        Content root; defaults to ``cwd``.
    output_path : str or Path, optional
        Build output directory; defaults to ``<cwd>/_site``.
    render_drafts : bool, optional
        Whether draft pages should be rendered by the page builder.

    Returns
    -------
    BuildConfig
        Configuration with absolute paths and the merged user settings.

    Raises
    ------
    ConfigError
        If the user configuration file cannot be parsed or is not a mapping.

    Notes
    -----
    When the user configuration file does not exist, a default one is written
    to disk and a warning is logged before loading continues.
    """
    root = (cwd or Path.cwd()).resolve()
    config_dir = root / CONFIG_DIR_NAME
    user_config_path = _resolve_path(
        config_path, root, config_dir / DEFAULT_USER_CONFIG_NAME
    )
    defaults = UserConfig()
    if not user_config_path.exists():
        logger.warning(
            "Config file missing, initializing default config at %s",
            user_config_path,
        )
        _init_user_config(defaults, user_config_path)

    merged = _deep_merge(defaults.to_mapping(), _read_user_config(user_config_path))
    return BuildConfig(
        input_path=_resolve_path(input_path, root, root),
        output_path=_resolve_path(output_path, root, root / DEFAULT_OUTPUT_DIR_NAME),
        config_dir=config_dir,
        assets_path=config_dir / "assets",
        views_path=config_dir / "views",
        user_config_path=user_config_path,
        render_drafts=render_drafts,
        user_config=_build_user_config(merged),
    )


def _read_user_config(path: Path) -> dict[str, typ.Any]:
    """Parse the user configuration file (JSON or YAML) into a mapping."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Configuration file error in {path}"
        raise ConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Configuration file {path} must contain a mapping."
        raise ConfigError(msg)
    return dict(loaded)


def _init_user_config(config: UserConfig, path: Path) -> None:
    """Write ``config`` as pretty-printed JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_mapping(), indent=2) + "\n", encoding="utf-8")


__all__ = ["load_build_config"]
