"""Load and validate the ter build configuration.

This subpackage resolves the content, output, and hidden configuration
directories, initializes a default user configuration file when none exists,
and merges the user's settings over the built-in defaults. The primary entry
point is :func:`load_build_config`, which returns a :class:`BuildConfig` ready
for the dev server, the watcher, and the external page builder.

Examples
--------
>>> from pathlib import Path
>>> from ter_pages.config import load_build_config
>>> config = load_build_config(cwd=Path("my-site"))  # doctest: +SKIP
>>> config.output_path.name  # doctest: +SKIP
'_site'
"""

from .loader import load_build_config
from .models import (
    AuthorInfo,
    BuildConfig,
    ConfigError,
    SiteInfo,
    UserConfig,
)

__all__ = [
    "AuthorInfo",
    "BuildConfig",
    "ConfigError",
    "SiteInfo",
    "UserConfig",
    "load_build_config",
]
