"""Recursive filesystem watcher feeding the reload broadcaster."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .broadcaster import ReloadBroadcaster

logger = logging.getLogger(__name__)

CHANGE_EVENT_TYPES = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}
)


class WatcherStartError(Exception):
    """Raised when the serving root cannot be watched."""


class ChangeEventHandler(FileSystemEventHandler):
    """Forward content changes to ``callback``.

    Access-only notifications (opened, closed) are ignored, otherwise
    serving a page would immediately trigger its own reload.
    """

    def __init__(self, callback: Callable[[FileSystemEvent], None]):
        super().__init__()
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in CHANGE_EVENT_TYPES:
            return
        self._callback(event)


class ChangeWatcher:
    """Watch ``root`` recursively and publish one change event per notification."""

    def __init__(
        self,
        root: Path,
        broadcaster: ReloadBroadcaster,
        loop: asyncio.AbstractEventLoop,
    ):
        self._root = root
        self._broadcaster = broadcaster
        self._loop = loop
        self._observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        if not self._root.is_dir():
            raise WatcherStartError(f"Cannot watch {self._root}: not a directory")

        observer = Observer()
        try:
            observer.schedule(ChangeEventHandler(self._on_change), str(self._root), recursive=True)
            observer.start()
        except OSError as exc:
            raise WatcherStartError(f"Cannot watch {self._root}: {exc}") from exc

        self._observer = observer
        logger.info("Watching %s for changes", self._root)

    def stop(self) -> None:
        if self._observer is None:
            return
        observer, self._observer = self._observer, None
        observer.stop()
        observer.join()
        logger.info("Stopped watching %s", self._root)

    def _on_change(self, event: FileSystemEvent) -> None:
        # Runs on the observer thread.
        logger.debug("%s: %s", event.event_type, event.src_path)
        try:
            self._broadcaster.publish_threadsafe(self._loop)
        except RuntimeError:
            logger.debug("Event loop closed; dropped change for %s", event.src_path)
