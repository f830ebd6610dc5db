"""Watch the include closure of a config and report changes using watchdog."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from sshcfg.classifier import should_skip
from sshcfg.errors import SSHConfigError
from sshcfg.includes import absolute
from sshcfg.store import ConfigStore

logger = logging.getLogger(__name__)


class ConfigChangeHandler(FileSystemEventHandler):
    """Forwards file events in watched directories to the watcher."""

    def __init__(self, watcher: "ConfigWatcher"):
        self.watcher = watcher
        super().__init__()

    def on_any_event(self, event: FileSystemEvent):
        if event.is_directory:
            return
        self.watcher.queue_change(event.src_path)
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            self.watcher.queue_change(dest_path)


class ConfigWatcher:
    """Calls *on_change* whenever a file of the include closure changes.

    Files that start matching an Include glob are picked up too, as long as
    they appear in a directory that already holds part of the closure.
    """

    def __init__(
        self,
        store: ConfigStore,
        on_change: Callable[[], None],
        debounce_seconds: float = 0.5,
    ):
        self.store = store
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.running = True

        self.files: set[Path] = set()
        self.pending = False
        self.pending_lock = threading.Lock()

        self.observer: Observer | None = None
        self._scheduled: set[Path] = set()

    def refresh_closure(self) -> None:
        try:
            self.files = set(self.store.list_config_files())
        except SSHConfigError as e:
            # Keep watching the last known closure; the entry may be mid-write
            logger.warning("Could not re-read include closure: %s", e)

    @property
    def directories(self) -> set[Path]:
        return {path.parent for path in self.files}

    def is_relevant(self, path: str | Path) -> bool:
        path = absolute(path)
        if path in self.files:
            return True
        if path.parent not in self.directories or not path.exists():
            return False
        return not should_skip(path)

    def queue_change(self, path: str | Path) -> None:
        if not self.is_relevant(path):
            return
        logger.debug("Config change detected: %s", path)
        with self.pending_lock:
            self.pending = True

    def process_pending(self) -> bool:
        """Reload and notify if anything changed since the last call."""
        with self.pending_lock:
            if not self.pending:
                return False
            self.pending = False

        self.refresh_closure()
        self._schedule_directories()
        self.on_change()
        return True

    def _schedule_directories(self) -> None:
        if self.observer is None:
            return
        handler = ConfigChangeHandler(self)
        for directory in self.directories - self._scheduled:
            if directory.is_dir():
                self.observer.schedule(handler, str(directory), recursive=False)
                self._scheduled.add(directory)

    def start(self) -> None:
        self.refresh_closure()
        self.observer = Observer()
        self._schedule_directories()
        self.observer.start()

    def run(self) -> None:
        """Start watching and block until :meth:`stop` is called."""
        self.start()
        try:
            while self.running:
                self.process_pending()
                time.sleep(self.debounce_seconds)
        finally:
            self._shutdown()

    def stop(self) -> None:
        """Stop the watch loop."""
        self.running = False
        if self.observer:
            self.observer.stop()

    def _shutdown(self) -> None:
        if self.observer:
            self.observer.stop()
            self.observer.join()
