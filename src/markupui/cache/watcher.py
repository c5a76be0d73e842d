"""File watcher - evicts cached templates when their source files change.

One watchdog observer serves every watched file. Files are registered through
their parent directory, so files sharing a directory share one OS watch; each
directory gets its own event handler that maps the bare file name of an event
back to the registered path.

Handlers run on the observer's dispatch thread while it holds the observer's
own lock, so they only queue the event. A separate drain thread takes the
watcher locks and does the eviction.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from markupui.cache.store import TemplateCache, canonical_path
from markupui.errors import NotFoundError

log = logging.getLogger(__name__)

InvalidateCallback = Callable[[Path], None]

CHANGED = "changed"
DELETED = "deleted"
DIRECTORY_LOST = "directory_lost"


class _DirectoryEventHandler(FileSystemEventHandler):
    """Forwards events for one watched directory to its FileWatcher."""

    def __init__(self, watcher: "FileWatcher", directory: Path):
        super().__init__()
        self.watcher = watcher
        self.directory = directory

    def _path(self, raw: str | bytes) -> Path:
        return self.directory / Path(os.fsdecode(raw)).name

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher._post(CHANGED, self._path(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        # Editors that save by replacing the file show up as delete + create.
        if not event.is_directory:
            self.watcher._post(CHANGED, self._path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            if Path(os.fsdecode(event.src_path)) == self.directory:
                self.watcher._post(DIRECTORY_LOST, self.directory)
            return
        self.watcher._post(DELETED, self._path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self.watcher._post(DELETED, self._path(event.src_path))
        dest = getattr(event, "dest_path", None)
        if dest and Path(os.fsdecode(dest)).parent == self.directory:
            self.watcher._post(CHANGED, self._path(dest))


class FileWatcher:
    """Watches template files and evicts their cache entries on change.

    The observer and drain threads are started lazily by the first ``watch``
    call and stopped by ``stop_all``. Cache contents are never cleared by the
    watcher apart from entries of files that changed.

    ``_lock`` guards the path indexes and is never held while calling the
    observer. ``_schedule_lock`` serializes registration changes and is held
    across ``schedule``/``unschedule``. The observer's dispatch thread takes
    neither.
    """

    def __init__(
        self,
        cache: TemplateCache,
        *,
        shutdown_timeout: float = 5.0,
        on_invalidate: InvalidateCallback | None = None,
        observer_factory: Callable[[], Any] = Observer,
    ):
        self.cache = cache
        self.shutdown_timeout = shutdown_timeout
        self.on_invalidate = on_invalidate
        self._observer_factory = observer_factory
        self._observer: Any = None
        self._events: queue.Queue[tuple[str, Path] | None] | None = None
        self._drainer: threading.Thread | None = None
        self._lock = threading.RLock()
        self._schedule_lock = threading.RLock()

        # file -> directory watch, and the reverse index watch -> directory
        self._watched: dict[Path, Any] = {}
        self._watch_dirs: dict[Any, Path] = {}
        self._dir_watches: dict[Path, Any] = {}

    @property
    def running(self) -> bool:
        return self._observer is not None

    @property
    def watched_count(self) -> int:
        with self._lock:
            return len(self._watched)

    def watched_paths(self) -> list[Path]:
        with self._lock:
            return list(self._watched)

    def is_watching(self, path: str | os.PathLike[str]) -> bool:
        with self._lock:
            return canonical_path(path) in self._watched

    def watch(self, path: str | os.PathLike[str]) -> None:
        """Start watching a file. Watching an already watched file is a no-op.

        Raises:
            NotFoundError: If the file does not exist.
        """
        file_path = canonical_path(path)
        directory = file_path.parent

        with self._schedule_lock:
            with self._lock:
                if file_path in self._watched:
                    return
                if not file_path.is_file():
                    raise NotFoundError(file_path)
                watch = self._dir_watches.get(directory)
                if watch is not None:
                    self._watched[file_path] = watch

            if watch is None:
                observer = self._ensure_observer()
                watch = observer.schedule(
                    _DirectoryEventHandler(self, directory), str(directory), recursive=False
                )
                with self._lock:
                    self._dir_watches[directory] = watch
                    self._watch_dirs[watch] = directory
                    self._watched[file_path] = watch
                log.debug("Watching directory %s", directory)

        log.info("Watching %s for changes", file_path)

    def stop_watching(self, path: str | os.PathLike[str]) -> None:
        """Stop watching one file; its directory watch goes when no file needs it."""
        with self._schedule_lock:
            self._forget(canonical_path(path))

    def stop_all(self) -> None:
        """Deregister every file and shut the observer down.

        Waits up to ``shutdown_timeout`` seconds for each background thread.
        """
        with self._schedule_lock, self._lock:
            observer, self._observer = self._observer, None
            events, self._events = self._events, None
            drainer, self._drainer = self._drainer, None
            self._watched.clear()
            self._watch_dirs.clear()
            self._dir_watches.clear()

        if observer is None:
            return

        observer.unschedule_all()
        observer.stop()
        observer.join(self.shutdown_timeout)
        stuck = observer.is_alive()

        if events is not None:
            events.put(None)
        if drainer is not None and drainer is not threading.current_thread():
            drainer.join(self.shutdown_timeout)
            stuck = stuck or drainer.is_alive()

        if stuck:
            log.warning(
                "File watcher did not stop within %.1fs, abandoning the thread",
                self.shutdown_timeout,
            )
        else:
            log.debug("File watcher stopped")

    def flush(self) -> None:
        """Block until every file event queued so far has been handled.

        Must not be called from an ``on_invalidate`` callback.
        """
        events = self._events
        if events is not None:
            events.join()

    def _ensure_observer(self) -> Any:
        if self._observer is None:
            events: queue.Queue[tuple[str, Path] | None] = queue.Queue()
            drainer = threading.Thread(
                target=self._run_events,
                args=(events,),
                name="markupui-watcher-events",
                daemon=True,
            )
            drainer.start()
            self._events = events
            self._drainer = drainer

            observer = self._observer_factory()
            observer.daemon = True
            observer.start()
            self._observer = observer
            log.debug("Started file watcher thread")
        return self._observer

    def _forget(self, file_path: Path) -> None:
        # Caller holds _schedule_lock.
        with self._lock:
            watch = self._watched.pop(file_path, None)
            if watch is None:
                return
            shared = watch in self._watched.values()
            if not shared:
                directory = self._watch_dirs.pop(watch, None)
                if directory is not None:
                    self._dir_watches.pop(directory, None)
            observer = self._observer

        if not shared and observer is not None:
            try:
                observer.unschedule(watch)
            except KeyError:
                log.debug("Watch for %s was already gone", file_path.parent)
        log.debug("Stopped watching %s", file_path)

    # -- event handling -------------------------------------------------------

    def _post(self, kind: str, path: Path) -> None:
        # Observer dispatch thread: no watcher locks here.
        events = self._events
        if events is not None:
            events.put((kind, path))

    def _run_events(self, events: queue.Queue[tuple[str, Path] | None]) -> None:
        while True:
            item = events.get()
            try:
                if item is None:
                    return
                kind, path = item
                if kind == CHANGED:
                    self._handle_changed(path)
                elif kind == DELETED:
                    self._handle_deleted(path)
                elif kind == DIRECTORY_LOST:
                    self._handle_directory_lost(path)
            finally:
                events.task_done()

    def _handle_changed(self, path: Path) -> None:
        try:
            with self._lock:
                watched = path in self._watched
            if watched and path.exists():
                self._invalidate(path)
        except Exception:
            log.exception("Error handling change of %s", path)

    def _handle_deleted(self, path: Path) -> None:
        try:
            with self._lock:
                watched = path in self._watched
            if watched:
                # Deregister first so a re-watch from the callback sticks.
                self.stop_watching(path)
                self._invalidate(path)
        except Exception:
            log.exception("Error handling deletion of %s", path)

    def _handle_directory_lost(self, directory: Path) -> None:
        try:
            with self._lock:
                lost = [p for p in self._watched if p.parent == directory]
            log.warning("Watched directory %s disappeared", directory)
            for path in lost:
                self.stop_watching(path)
                self._invalidate(path)
        except Exception:
            log.exception("Error handling loss of %s", directory)

    def _invalidate(self, path: Path) -> None:
        self.cache.remove(path)
        log.info("Template %s changed, cache entry evicted", path)
        if self.on_invalidate is not None:
            self.on_invalidate(path)
