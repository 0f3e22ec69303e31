"""Live-reload client script for pages built in dev mode.

When the watcher requests a rebuild it sets ``include_refresh``; the page
builder then calls :func:`inject_refresh_script` so every page opens a
WebSocket to ``<page path>/refresh`` and reloads itself when the dev server
sends ``refresh``.
"""

from __future__ import annotations

from .._constants import REFRESH_MESSAGE, REFRESH_PATH_SUFFIX

REFRESH_SCRIPT = f"""\
<script data-ter-refresh>
(function() {{
  var path = location.pathname.replace(/\\/+$/, '');
  var scheme = location.protocol === 'https:' ? 'wss://' : 'ws://';
  var socket = new WebSocket(scheme + location.host + path + '{REFRESH_PATH_SUFFIX}');
  socket.addEventListener('message', function(event) {{
    if (event.data === '{REFRESH_MESSAGE}') location.reload();
  }});
}})();
</script>
"""


def inject_refresh_script(html: str) -> str:
    """Insert the live-reload script before ``</body>`` (or ``</html>``).

    Documents without either closing tag get the script appended. The
    script is only added once.
    """
    if "data-ter-refresh" in html:
        return html
    if "</body>" in html:
        return html.replace("</body>", REFRESH_SCRIPT + "</body>", 1)
    if "</html>" in html:
        return html.replace("</html>", REFRESH_SCRIPT + "</html>", 1)
    return html + REFRESH_SCRIPT


__all__ = ["REFRESH_SCRIPT", "inject_refresh_script"]
