"""
Filesystem watcher for SSH config files

Watches the top-level config and every file it includes, and reloads the
config store when any of them is written or replaced.
"""
import os
import queue
import threading
import time
from typing import Callable, Dict, Iterable, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ...core.constants import WATCH_DEBOUNCE_SECONDS
from ...core.logging import get_logger
from .store import ConfigStore, ReloadResult

logger = get_logger(__name__)

# How often the run loop wakes up to check for stop requests
_POLL_SECONDS = 0.5


def _normalize(path) -> str:
    return os.path.abspath(os.fsdecode(path))


class _ConfigEventHandler(FileSystemEventHandler):
    """Watchdog handler that forwards config file events to the watcher"""

    def __init__(self, watcher: "ConfigWatcher"):
        super().__init__()
        self._watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher.notify(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._watcher.notify(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._watcher.notify(event)


class ConfigWatcher:
    """
    Reloads a ConfigStore whenever one of its files changes.

    Watchdog observes directories, so each watched file's parent directory
    is scheduled and events are filtered down to the watch set. Editors
    that save by writing a new file and renaming it over the old one show
    up as created/moved events; those re-arm the file's watch.

    run() blocks until stop() is called or the observer thread dies, so it
    belongs on a dedicated thread.
    """

    def __init__(
        self,
        store: ConfigStore,
        on_reload: Callable[[ReloadResult], None],
        debounce: float = WATCH_DEBOUNCE_SECONDS,
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self._store = store
        self._on_reload = on_reload
        self._debounce = debounce
        self._observer = observer_factory()
        self._observer.daemon = True
        self._handler = _ConfigEventHandler(self)
        self._events: "queue.Queue[str]" = queue.Queue()
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._watch_set: Set[str] = set()
        self._watched_dirs: Dict[str, object] = {}
        self.arm(store.config.watch_set)

    @property
    def watch_set(self) -> Set[str]:
        with self._lock:
            return set(self._watch_set)

    @property
    def watched_dirs(self) -> Set[str]:
        with self._lock:
            return set(self._watched_dirs)

    # ------------------------------------------------------------
    # Arming
    # ------------------------------------------------------------

    def arm(self, paths: Iterable[str]) -> None:
        """Add paths to the watch set and schedule their directories"""
        for path in paths:
            path = _normalize(path)
            with self._lock:
                self._watch_set.add(path)
            self._arm_dir(os.path.dirname(path))

    def _arm_dir(self, directory: str) -> None:
        with self._lock:
            if directory in self._watched_dirs:
                return
            try:
                watch = self._observer.schedule(self._handler, directory, recursive=False)
            except OSError as e:
                logger.warning("unable to watch %s: %s", directory, e)
                return
            self._watched_dirs[directory] = watch
        logger.debug("watching %s", directory)

    def rearm(self, path: str) -> None:
        """
        Make sure a replaced file is still being watched.

        A rename can drop the old watch (the directory may have been
        recreated), so the directory watch is re-established if missing.
        """
        directory = os.path.dirname(path)
        with self._lock:
            watch = self._watched_dirs.get(directory)
            if watch is not None and not os.path.isdir(directory):
                try:
                    self._observer.unschedule(watch)
                except (KeyError, OSError):
                    pass
                del self._watched_dirs[directory]
        self._arm_dir(directory)

    # ------------------------------------------------------------
    # Events
    # ------------------------------------------------------------

    def _relevant_path(self, event: FileSystemEvent) -> Optional[str]:
        if event.is_directory:
            return None
        candidates = [event.src_path]
        dest = getattr(event, "dest_path", None)
        if dest:
            candidates.insert(0, dest)
        with self._lock:
            for candidate in candidates:
                path = _normalize(candidate)
                if path in self._watch_set:
                    return path
        return None

    def notify(self, event: FileSystemEvent) -> None:
        """Queue a reload if the event touches a watched file"""
        path = self._relevant_path(event)
        if path is None:
            return
        logger.debug("%s event on %s", event.event_type, path)
        if event.event_type in ("moved", "created"):
            self.rearm(path)
        self._events.put(path)

    def _drain(self) -> None:
        """Swallow follow-up events until the files are quiet for the debounce window"""
        deadline = time.monotonic() + self._debounce
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                self._events.get(timeout=remaining)
            except queue.Empty:
                return
            deadline = time.monotonic() + self._debounce

    def reload(self) -> ReloadResult:
        """Reload the store, arm newly included files and report the outcome"""
        result = self._store.reload()
        if result.success:
            self.arm(result.config.watch_set)
        self._on_reload(result)
        return result

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def run(self) -> None:
        """Watch until stopped; each change triggers one reload"""
        self._observer.start()
        logger.info("watching %d file(s)", len(self.watch_set))
        try:
            while not self._stop.is_set():
                try:
                    self._events.get(timeout=_POLL_SECONDS)
                except queue.Empty:
                    if not self._observer.is_alive():
                        logger.error("file watcher stopped unexpectedly")
                        return
                    continue
                self._drain()
                if self._stop.is_set():
                    return
                self.reload()
        finally:
            self._observer.stop()
            self._observer.join(timeout=2)

    def stop(self) -> None:
        """Ask run() to return"""
        self._stop.set()
