"""Compiled template cache and file-change invalidation."""

from .store import TemplateCache, canonical_path
from .watcher import FileWatcher

__all__ = ["FileWatcher", "TemplateCache", "canonical_path"]
