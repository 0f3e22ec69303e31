"""Common literal values used across ter_pages.

These constants keep directory names, the live-reload endpoint, and the
not-found convention centralized so the renderer, the dev server, and tests
import the same values without drifting. Intended for internal use within the
ter_pages package.

Examples
--------
>>> from ter_pages import _constants
>>> "/blog/post/refresh".endswith(_constants.REFRESH_PATH_SUFFIX)
True
>>> "/".join(_constants.NOT_FOUND_PAGE)
'404/index.html'
"""

CONFIG_DIR_NAME = ".ter"
DEFAULT_OUTPUT_DIR_NAME = "_site"
DEFAULT_USER_CONFIG_NAME = "config.json"

INDEX_FILENAME = "index.html"
NOT_FOUND_PAGE = ("404", INDEX_FILENAME)
NOT_FOUND_TEXT = "404 Not Found"

REFRESH_PATH_SUFFIX = "/refresh"
REFRESH_MESSAGE = "refresh"
RELOAD_DEBOUNCE_SECONDS = 0.1

EXTERNAL_LINK_REL = "external noopener noreferrer"
