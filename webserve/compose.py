"""Inject the live reload client into HTML responses."""
from __future__ import annotations

from typing import Tuple

from .config import Transport
from .resolver import NotFound, Resolution

RELOAD_MARKER = "__LIVE_SERVER__"

HTML_TYPES = frozenset({"text/html", "application/xhtml+xml"})

POLL_JS = """
<script>
(function(){
  if (window.__LIVE_SERVER__) return;
  window.__LIVE_SERVER__ = true;
  function poll() {
    fetch("/reload", {cache: "no-store"}).then(function(res) {
      if (res.ok) {
        location.reload();
      } else {
        setTimeout(poll, 1000);
      }
    }).catch(function() {
      setTimeout(poll, 1000);
    });
  }
  poll();
})();
</script>
"""

WEBSOCKET_JS = """
<script>
(function(){
  if (window.__LIVE_SERVER__) return;
  window.__LIVE_SERVER__ = true;
  function connect() {
    const scheme = location.protocol === "https:" ? "wss" : "ws";
    const ws = new WebSocket(`${scheme}://${location.host}/__ws`);
    ws.onmessage = () => location.reload();
    ws.onclose = () => setTimeout(connect, 1000);
  }
  connect();
})();
</script>
"""


def reload_script(transport: Transport = Transport.POLL) -> str:
    if Transport(transport) is Transport.WEBSOCKET:
        return WEBSOCKET_JS
    return POLL_JS


def is_html(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in HTML_TYPES


def compose(
    resolution: Resolution,
    body: bytes,
    content_type: str,
    watch: bool,
    transport: Transport = Transport.POLL,
) -> Tuple[bytes, str]:
    """Return the bytes to send for ``resolution``.

    With ``watch`` on, HTML gets the reload client inserted before its last
    ``</body>`` (or appended when there is none). Anything else is passed
    through untouched.
    """

    if isinstance(resolution, NotFound):
        raise ValueError("cannot compose a response for a missing path")
    if not watch or not is_html(content_type):
        return body, content_type
    if RELOAD_MARKER.encode() in body:
        return body, content_type

    script = reload_script(transport).encode("utf-8")
    closing = body.lower().rfind(b"</body>")
    if closing == -1:
        return body + script, content_type
    return body[:closing] + script + body[closing:], content_type
