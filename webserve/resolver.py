"""Map request paths onto the served directory tree."""
from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

INDEX_FILE = "index.html"


@dataclass(frozen=True)
class ServeFile:
    """An existing regular file to stream back."""

    path: Path


@dataclass(frozen=True)
class ListDirectory:
    """An existing directory without an index document."""

    path: Path


@dataclass(frozen=True)
class NotFound:
    """Nothing to serve and no fallback applies."""


Resolution = Union[ServeFile, ListDirectory, NotFound]


def canonical_root(path: Union[str, Path]) -> Path:
    """Return the absolute, symlink-free form of a serving root."""

    return Path(path).expanduser().resolve()


def resolve(root: Path, request_path: str, spa: bool = False) -> Resolution:
    """Decide what a request for ``request_path`` under ``root`` should return.

    Directories are served through their ``index.html`` when it exists and
    listed otherwise. Missing paths fall back to ``<root>/index.html`` in SPA
    mode. Paths escaping ``root`` are never served.
    """

    target = _join(root, request_path)
    if target is None:
        return NotFound()

    info = _stat(target)
    if info is not None and stat.S_ISDIR(info.st_mode):
        index = target / INDEX_FILE
        if _is_file(index):
            return ServeFile(index)
        return ListDirectory(target)

    if info is None or not stat.S_ISREG(info.st_mode):
        if spa:
            index = root / INDEX_FILE
            if _is_file(index):
                return ServeFile(index)
        return NotFound()

    return ServeFile(target)


def _join(root: Path, request_path: str) -> Optional[Path]:
    if "\x00" in request_path:
        return None
    relative = request_path.lstrip("/\\")
    joined = os.path.normpath(os.path.join(root, relative))
    if os.path.commonpath([str(root), joined]) != str(root):
        return None
    return Path(joined)


def _stat(path: Path) -> Optional[os.stat_result]:
    # Follows symlinks; a dangling link counts as missing.
    try:
        return path.stat()
    except (OSError, ValueError):
        return None


def _is_file(path: Path) -> bool:
    info = _stat(path)
    return info is not None and stat.S_ISREG(info.st_mode)
