"""In-memory cache of compiled templates keyed by source path."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from markupui.template import CompiledTemplate

log = logging.getLogger(__name__)

# (clear epoch, per-path eviction count) observed before a file is read.
Generation = tuple[int, int]


def canonical_path(path: str | os.PathLike[str]) -> Path:
    """Absolute, symlink-resolved form of ``path`` used as the cache key."""
    return Path(path).expanduser().resolve()


class TemplateCache:
    """Thread-safe path -> CompiledTemplate map.

    No eviction policy; entries leave only through ``remove`` or ``clear``,
    which the file watcher calls when a source changes.

    Every ``remove`` bumps the generation of its path, even when no entry was
    present, so a compile that started before an eviction can detect it with
    ``put_if`` and avoid storing a template built from the old file.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, CompiledTemplate] = {}
        self._generations: dict[Path, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def get(self, path: str | os.PathLike[str]) -> CompiledTemplate | None:
        key = canonical_path(path)
        with self._lock:
            return self._entries.get(key)

    def put(self, path: str | os.PathLike[str], template: CompiledTemplate | None) -> None:
        if template is None:
            return
        key = canonical_path(path)
        with self._lock:
            self._entries[key] = template
        log.debug("Cached template for %s", key)

    def generation(self, path: str | os.PathLike[str]) -> Generation:
        """Token to pass to ``put_if``; take it before reading the file."""
        key = canonical_path(path)
        with self._lock:
            return (self._epoch, self._generations.get(key, 0))

    def put_if(
        self,
        path: str | os.PathLike[str],
        template: CompiledTemplate | None,
        generation: Generation,
    ) -> bool:
        """Store ``template`` unless ``path`` was evicted since ``generation``.

        Returns:
            True if the template was stored.
        """
        if template is None:
            return False
        key = canonical_path(path)
        with self._lock:
            if (self._epoch, self._generations.get(key, 0)) != generation:
                stored = False
            else:
                self._entries[key] = template
                stored = True
        if stored:
            log.debug("Cached template for %s", key)
        else:
            log.debug("Not caching %s, it changed while compiling", key)
        return stored

    def remove(self, path: str | os.PathLike[str]) -> bool:
        """Drop the entry for ``path``. Returns True if one was present."""
        key = canonical_path(path)
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            self._generations[key] = self._generations.get(key, 0) + 1
        if removed:
            log.debug("Evicted cached template for %s", key)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generations.clear()
            self._epoch += 1

    def paths(self) -> list[Path]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        key = canonical_path(path)
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
