from pathlib import Path

import pytest

from webserve.compose import RELOAD_MARKER, compose, is_html, reload_script
from webserve.config import Transport
from webserve.resolver import ListDirectory, NotFound, ServeFile

PAGE = b"<html><body><h1>Hello</h1></body></html>"
FILE = ServeFile(Path("/site/index.html"))


def test_watch_off_returns_html_unchanged() -> None:
    assert compose(FILE, PAGE, "text/html", watch=False) == (PAGE, "text/html")


def test_non_html_is_byte_identical() -> None:
    css = b"body { color: red; } </body>"
    assert compose(ServeFile(Path("/site/a.css")), css, "text/css", watch=True) == (css, "text/css")
    png = bytes(range(256))
    assert compose(ServeFile(Path("/site/a.png")), png, "image/png", watch=True)[0] == png


def test_script_goes_before_closing_body() -> None:
    body, content_type = compose(FILE, PAGE, "text/html", watch=True)
    assert content_type == "text/html"
    assert body.startswith(b"<html><body><h1>Hello</h1>")
    assert body.endswith(b"</body></html>")
    assert RELOAD_MARKER.encode() in body
    assert body.index(b"<script>") < body.rindex(b"</body>")


def test_closing_body_is_case_insensitive() -> None:
    body, _ = compose(FILE, b"<BODY>x</BODY>", "text/html", watch=True)
    assert body.endswith(b"</script>\n</BODY>")


def test_fragment_without_body_gets_script_appended() -> None:
    body, _ = compose(FILE, b"<p>fragment</p>", "text/html; charset=utf-8", watch=True)
    assert body.startswith(b"<p>fragment</p>")
    assert body.endswith(b"</script>\n")


def test_already_injected_page_is_left_alone() -> None:
    once, _ = compose(FILE, PAGE, "text/html", watch=True)
    twice, _ = compose(FILE, once, "text/html", watch=True)
    assert twice == once


def test_listing_is_composed_like_a_page() -> None:
    body, _ = compose(ListDirectory(Path("/site")), PAGE, "text/html", watch=True)
    assert RELOAD_MARKER.encode() in body


def test_not_found_cannot_be_composed() -> None:
    with pytest.raises(ValueError):
        compose(NotFound(), b"", "text/html", watch=True)


def test_transport_selects_script() -> None:
    body, _ = compose(FILE, PAGE, "text/html", watch=True, transport=Transport.WEBSOCKET)
    assert b"/__ws" in body
    assert b"/reload" not in body
    assert "/reload" in reload_script(Transport.POLL)
    assert "setTimeout" in reload_script(Transport.POLL)
    assert "setTimeout" in reload_script("websocket")


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("text/html", True),
        ("TEXT/HTML; charset=utf-8", True),
        ("application/xhtml+xml", True),
        ("text/plain", False),
        ("application/javascript", False),
    ],
)
def test_is_html(content_type: str, expected: bool) -> None:
    assert is_html(content_type) is expected
