import re
from pathlib import Path

import pytest

from webserve.listing import render_listing


def _hrefs(document: str):
    return sorted(re.findall(r'href="([^"]*)"', document))


def test_empty_directory(site: Path) -> None:
    document = render_listing(site / "sub")
    assert "<ul>" in document
    assert "</ul>" in document
    assert _hrefs(document) == []


def test_lists_immediate_children_only(site: Path) -> None:
    (site / "sub" / "deep.txt").write_text("deep")
    document = render_listing(site)
    assert _hrefs(document) == ["a.txt", "sub/"]
    assert "deep.txt" not in document
    assert ".." not in document


def test_entries_are_sorted(site: Path) -> None:
    for name in ["c.txt", "b.txt"]:
        (site / name).write_text(name)
    document = render_listing(site)
    positions = [document.index(f'href="{name}"') for name in ["a.txt", "b.txt", "c.txt"]]
    assert positions == sorted(positions)


def test_url_prefix_roots_links(site: Path) -> None:
    (site / "sub" / "x.txt").write_text("x")
    assert _hrefs(render_listing(site / "sub", url_prefix="/sub")) == ["/sub/x.txt"]
    assert _hrefs(render_listing(site / "sub", url_prefix="/sub/")) == ["/sub/x.txt"]


def test_names_are_escaped_and_quoted(site: Path) -> None:
    (site / "a b&<c>.txt").write_text("odd")
    document = render_listing(site)
    assert 'href="a%20b%26%3Cc%3E.txt"' in document
    assert "a b&amp;&lt;c&gt;.txt" in document


def test_missing_directory_raises(site: Path) -> None:
    with pytest.raises(OSError):
        render_listing(site / "gone")


def test_unreadable_entries_are_skipped(site: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    real_scandir = os.scandir

    class BrokenEntry:
        name = "broken"

        def is_dir(self):
            raise PermissionError("denied")

    class Wrapped:
        def __init__(self, path):
            self._it = real_scandir(path)

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            self._it.close()

        def __iter__(self):
            yield BrokenEntry()
            yield from self._it

    monkeypatch.setattr("webserve.listing.os.scandir", Wrapped)
    document = render_listing(site)
    assert "broken" not in document
    assert _hrefs(document) == ["a.txt", "sub/"]
