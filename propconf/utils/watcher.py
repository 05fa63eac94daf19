"""File watching for properties hot reload."""

import logging
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..errors import ConfigurationError
from ..models.schemas import HotReloadSettings

if TYPE_CHECKING:
    from ..manager import PropertiesManager

logger = logging.getLogger(__name__)

_RELOAD_EVENT_TYPES = (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)


def _normalize(path) -> Path:
    return Path(os.fsdecode(path)).resolve()


class SourceFileHandler(FileSystemEventHandler):
    """Handles file system events for watched source files."""

    def __init__(self, watcher: "HotReloadWatcher"):
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        # Open/close events come from our own reads and must not trigger reloads
        if event.is_directory or event.event_type not in _RELOAD_EVENT_TYPES:
            return

        candidates = [event.src_path]
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            candidates.append(dest_path)

        for candidate in candidates:
            path = _normalize(candidate)
            if self.watcher.is_watching_file(path):
                logger.debug(f"Source {event.event_type}: {path}")
                self.watcher.schedule_reload(path)
                return


class HotReloadWatcher:
    """Reloads a properties manager when its source files change.

    Parent directories of the manager's filesystem sources are watched, so
    creating a source that did not exist yet also triggers a reload. Rapid
    successive changes are debounced into a single reload.
    """

    def __init__(
        self,
        manager: "PropertiesManager",
        settings: Optional[HotReloadSettings] = None,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        """Initialize the watcher.

        Args:
            manager: Manager reloaded on changes
            settings: Hot reload settings, defaults when omitted
            observer_factory: Factory creating the watchdog observer
        """
        self.manager = manager
        self.settings = settings or HotReloadSettings()
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self._watched_files: set[Path] = set()
        self._watched_directories: set[Path] = set()
        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()
        self._reload_count = 0
        self._is_watching = False

    def __enter__(self) -> "HotReloadWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def is_watching(self) -> bool:
        return self._is_watching

    @property
    def reload_count(self) -> int:
        """Number of reloads triggered by file changes."""
        with self._timer_lock:
            return self._reload_count

    def get_watched_files(self) -> list[Path]:
        return sorted(self._watched_files)

    def is_watching_file(self, file_path: Path) -> bool:
        return _normalize(file_path) in self._watched_files

    def start(self) -> bool:
        """Start monitoring the manager's source files.

        Returns:
            True if watching started, False if it is disabled or has no files
        """
        if self._is_watching:
            logger.warning("Watcher is already running")
            return True

        if not self.settings.enabled:
            logger.info("Hot reload disabled, not watching sources")
            return False

        self._watched_files = {_normalize(path) for path in self.manager.source_paths()}
        directories = {path.parent for path in self._watched_files if path.parent.is_dir()}

        if not directories:
            logger.warning(
                f"No watchable source directories for {self.manager.schema.identifier}"
            )
            self._watched_files.clear()
            return False

        self._observer = self._observer_factory()
        handler = SourceFileHandler(self)
        for directory in sorted(directories):
            self._observer.schedule(
                handler, str(directory), recursive=self.settings.recursive
            )
            self._watched_directories.add(directory)
            logger.info(f"Watching directory: {directory}")

        self._observer.start()
        self._is_watching = True
        logger.info(f"Started watching {len(self._watched_files)} source files")
        return True

    def stop(self) -> bool:
        """Stop monitoring and cancel any pending reload."""
        if not self._is_watching:
            return True

        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._is_watching = False
        self._watched_files.clear()
        self._watched_directories.clear()
        logger.info("Stopped source file watching")
        return True

    def schedule_reload(self, file_path: Path) -> None:
        """Reload after the debounce delay, restarting any pending delay."""
        delay = self.settings.debounce_delay
        if delay <= 0:
            self._reload(file_path)
            return

        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(delay, self._reload, args=(file_path,))
            self._timer.daemon = True
            self._timer.start()

    def _reload(self, file_path: Path) -> None:
        with self._timer_lock:
            self._timer = None

        try:
            self.manager.reload()
        except ConfigurationError as e:
            logger.error(f"Failed to reload properties after change to {file_path}: {e}")
            return

        with self._timer_lock:
            self._reload_count += 1
        logger.info(f"Reloaded properties after change to {file_path}")
