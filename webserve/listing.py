"""HTML listings for directories without an index document."""
from __future__ import annotations

import html
import os
from pathlib import Path
from typing import List, Tuple
from urllib.parse import quote

PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Index of {title}</title></head>
<body>
<ul>
{items}
</ul>
</body>
</html>
"""

ITEM = '<li><a href="{href}" style="text-decoration:none; font-size:1.1em; display:block;">{label}</a></li>'


def render_listing(path: Path, url_prefix: str = "") -> str:
    """Render the immediate children of ``path`` as a list of links.

    ``url_prefix`` is the URL the directory was requested under. When given,
    links are rooted at it so they work whether or not the request carried a
    trailing slash.
    """

    base = ""
    if url_prefix:
        base = quote(url_prefix.rstrip("/") + "/")

    items = []
    for name, is_dir in _entries(path):
        suffix = "/" if is_dir else ""
        items.append(
            ITEM.format(
                href=base + quote(name) + suffix,
                label=html.escape(name + suffix),
            )
        )

    title = html.escape(url_prefix or path.name or str(path))
    return PAGE.format(title=title, items="\n".join(items))


def _entries(path: Path) -> List[Tuple[str, bool]]:
    entries = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            entries.append((entry.name, is_dir))
    entries.sort()
    return entries
