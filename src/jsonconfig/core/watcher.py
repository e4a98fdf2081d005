"""
Watching a single configuration file with watchdog.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..config.defaults import DEFAULT_SETTINGS


logger = logging.getLogger(__name__)


class UserConfigFileHandler(FileSystemEventHandler):
    """Forwards events concerning one file to a callback."""

    def __init__(self, path: Path, on_change: Callable[[], None]):
        super().__init__()
        self.path = os.path.abspath(path)
        self.on_change = on_change

    def _concerns_file(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            paths.append(dest_path)
        return any(os.path.abspath(os.fsdecode(p)) == self.path for p in paths)

    def _dispatch_change(self, event: FileSystemEvent) -> None:
        if not self._concerns_file(event):
            return
        logger.debug(f"Config file event {event.event_type}: {self.path}")
        try:
            self.on_change()
        except Exception as e:
            # Keep the observer thread alive whatever the callback does
            logger.error(f"Config change handler failed for {self.path}: {e}", exc_info=True)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._dispatch_change(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._dispatch_change(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        # editors that save through a temporary file replace the target by a move
        dest_path = getattr(event, "dest_path", None)
        if dest_path and os.path.abspath(os.fsdecode(dest_path)) == self.path:
            self._dispatch_change(event)


class UserConfigWatcher:
    """Runs a watchdog observer on the directory of one configuration file."""

    def __init__(self, path: Path, on_change: Callable[[], None]):
        self.path = Path(path).resolve()
        self._handler = UserConfigFileHandler(self.path, on_change)
        self._observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self._handler, str(self.path.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(f"Started configuration file watcher for: {self.path}")

    def stop(self) -> None:
        observer = self._observer
        if observer is None:
            return
        try:
            observer.stop()
            # stop() may be called by a change callback running on the observer thread
            if threading.current_thread() is not observer:
                observer.join(timeout=DEFAULT_SETTINGS["watch"]["join_timeout"])
        finally:
            self._observer = None
        logger.info(f"Stopped configuration file watcher for: {self.path}")
