"""
Template discovery and file-system watching.

The walker lists every template below the templates root for the initial
scan. The watcher forwards watchdog events from the observer thread onto the
asyncio event loop; everything past that point runs on the loop.
"""

import asyncio
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing_extensions import override

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


def iter_templates(templates_root: Path, extension: str) -> Iterator[Path]:
    """
    Recursively list template files in a stable order.

    Args:
        templates_root: Directory to scan
        extension: Template file extension, e.g. ``.blade.php``

    Yields:
        Paths of regular files ending with the extension
    """
    if not templates_root.is_dir():
        return
    for path in sorted(templates_root.rglob(f"*{extension}")):
        if path.is_file():
            yield path


def _event_path(raw: str | bytes) -> Path:
    return Path(raw if isinstance(raw, str) else raw.decode("utf-8"))


class TemplateEventHandler(FileSystemEventHandler):
    """Routes template file events onto the event loop."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        extension: str,
        on_path: Callable[[Path], None],
        on_directory_removed: Callable[[Path], None],
    ) -> None:
        """
        Initialize the event handler.

        Args:
            loop: Event loop the callbacks must run on
            extension: Template file extension to react to
            on_path: Called for a template that was added, changed or removed
            on_directory_removed: Called for a directory that disappeared
        """
        super().__init__()
        self.loop: asyncio.AbstractEventLoop = loop
        self.extension: str = extension
        self._on_path: Callable[[Path], None] = on_path
        self._on_directory_removed: Callable[[Path], None] = on_directory_removed

    @override
    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation events."""
        if not event.is_directory:
            self._forward(_event_path(event.src_path), "added")

    @override
    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification events."""
        if not event.is_directory:
            self._forward(_event_path(event.src_path), "changed")

    @override
    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file and directory deletion events."""
        path = _event_path(event.src_path)
        if event.is_directory:
            logger.info(f"Directory removed: {path}")
            _ = self.loop.call_soon_threadsafe(self._on_directory_removed, path)
        else:
            self._forward(path, "removed")

    @override
    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle moves as a removal of the source plus an addition of the destination."""
        source = _event_path(event.src_path)
        destination = (
            _event_path(event.dest_path)
            if isinstance(event, FileSystemMovedEvent)
            else None
        )

        if event.is_directory:
            logger.info(f"Directory moved: {source} -> {destination}")
            _ = self.loop.call_soon_threadsafe(self._on_directory_removed, source)
            if destination is not None:
                for template in iter_templates(destination, self.extension):
                    self._forward(template, "added")
            return

        self._forward(source, "removed")
        if destination is not None:
            self._forward(destination, "added")

    def _forward(self, path: Path, action: str) -> None:
        if not path.name.endswith(self.extension):
            return
        logger.info(f"File {action}: {path}")
        _ = self.loop.call_soon_threadsafe(self._on_path, path)


class TemplateWatcher:
    """Owns the watchdog observer for the templates root."""

    def __init__(
        self,
        templates_root: Path,
        extension: str,
        on_path: Callable[[Path], None],
        on_directory_removed: Callable[[Path], None],
    ) -> None:
        self.templates_root: Path = templates_root
        self.extension: str = extension
        self._on_path: Callable[[Path], None] = on_path
        self._on_directory_removed: Callable[[Path], None] = on_directory_removed
        self._observer: BaseObserver | None = None

    @property
    def is_running(self) -> bool:
        """Whether the observer thread is active."""
        return self._observer is not None and self._observer.is_alive()

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Start watching the templates root recursively.

        Args:
            loop: Event loop that receives the forwarded events
        """
        if self._observer is not None:
            self.stop()

        handler = TemplateEventHandler(
            loop, self.extension, self._on_path, self._on_directory_removed
        )
        observer = Observer()
        _ = observer.schedule(handler, str(self.templates_root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info(f"Watching {self.templates_root} for *{self.extension} changes")

    def stop(self) -> None:
        """Stop the observer thread and wait for it to exit."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.debug("File watcher stopped")
