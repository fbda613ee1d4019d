"""Live reload script injection for served HTML.

Every HTML page served in ``run`` mode gets a small script appended that
opens the reload WebSocket and reloads the page on any message.  The
server never interprets messages coming from the browser.
"""

from __future__ import annotations

# WebSocket endpoint the injected script connects to.
RELOAD_ENDPOINT = "/__ws"

# The only server -> client payload.
RELOAD_MESSAGE = "reload"

RELOAD_SCRIPT = f"""\
<script data-tabby-reload>
(function() {{
  var ws = new WebSocket('ws://' + location.host + '{RELOAD_ENDPOINT}');
  ws.onmessage = function() {{ location.reload(); }};
}})();
</script>
"""


def inject_reload_script(body: bytes) -> bytes:
    """Append the reload script to an HTML document."""
    return body + b"\n" + RELOAD_SCRIPT.encode("utf-8")
