"""InterfaceBuilder - the public entry point that owns parser, cache and watcher."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Mapping

from markupui.cache.store import TemplateCache, canonical_path
from markupui.cache.watcher import FileWatcher
from markupui.components.defaults import TagFactory
from markupui.components.raster import RasterOptions
from markupui.components.resolver import ComponentResolver, TagRegistry
from markupui.config import BuilderSettings
from markupui.errors import NotFoundError
from markupui.markup.parser import MarkupParser
from markupui.template import CompiledTemplate

log = logging.getLogger(__name__)

Source = str | os.PathLike[str]


class InterfaceBuilder:
    """Compiles markup documents and caches the ones read from files.

    Args:
        settings: Builder settings; defaults are used when omitted.
        registry: Custom tag registry shared with other builders, if any.
        cache: Template cache; a private one is created when omitted.
        watcher: File watcher evicting ``cache`` entries; created on first use.

    Example:
        >>> with InterfaceBuilder() as builder:
        ...     print(builder.parse('<div id="c"></div>').build())
        Group #C {
        }
    """

    def __init__(
        self,
        settings: BuilderSettings | None = None,
        registry: TagRegistry | None = None,
        cache: TemplateCache | None = None,
        watcher: FileWatcher | None = None,
    ):
        self.settings = settings or BuilderSettings()
        self.registry = registry if registry is not None else TagRegistry()
        self.cache = cache if cache is not None else TemplateCache()
        self._watcher = watcher
        self._lock = threading.Lock()

        resolver = ComponentResolver(
            self.registry,
            RasterOptions(
                block_size=self.settings.image_block_size,
                max_width=self.settings.image_max_width,
                max_height=self.settings.image_max_height,
            ),
        )
        self.parser = MarkupParser(
            resolver,
            common_alias_path=self.settings.common_alias_path,
            root_dir=self.settings.root_dir,
            minimal=self.settings.minimal,
        )

    def __enter__(self) -> "InterfaceBuilder":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def watcher(self) -> FileWatcher:
        with self._lock:
            if self._watcher is None:
                self._watcher = FileWatcher(
                    self.cache, shutdown_timeout=self.settings.shutdown_timeout
                )
            return self._watcher

    def parse(self, source: Source, overrides: Mapping[str, Any] | None = None) -> CompiledTemplate:
        """Compile markup text, or a file when ``source`` is a path object.

        A plain ``str`` is always markup text, never a file name.
        """
        if isinstance(source, os.PathLike):
            return self.parse_file(source, overrides)
        return self.parser.parse(source, overrides)

    def parse_file(
        self, path: str | os.PathLike[str], overrides: Mapping[str, Any] | None = None
    ) -> CompiledTemplate:
        """Compile a markup file, going through the cache.

        Overrides change the compiled output, so a call with overrides neither
        reads nor fills the cache.

        Raises:
            NotFoundError: If the file does not exist.
        """
        file_path = canonical_path(path)
        use_cache = self.settings.cache_enabled and not overrides

        if use_cache:
            cached = self.cache.get(file_path)
            if cached is not None:
                log.debug("Cache hit for %s", file_path)
                return cached
            log.debug("Cache miss for %s", file_path)

        if not file_path.is_file():
            raise NotFoundError(file_path)

        # Watch and take the generation before reading, so an edit landing
        # mid-compile keeps the stale result out of the cache.
        if self.settings.watch_files:
            self.watch_file_changes(file_path)
        generation = self.cache.generation(file_path)

        text = file_path.read_text(encoding="utf-8")
        template = self.parser.parse(
            text, overrides, base_dir=file_path.parent, source_path=file_path
        )
        log.info("Compiled %s", file_path)

        if use_cache:
            self.cache.put_if(file_path, template, generation)
        return template

    def watch_file_changes(self, path: str | os.PathLike[str]) -> None:
        """Evict the cached template of ``path`` whenever the file changes."""
        self.watcher.watch(Path(path))

    def register_custom_tag(self, name: str, factory: TagFactory) -> None:
        """Resolve ``<name>`` with ``factory`` ahead of every built-in mapping."""
        self.registry.register(name, factory)

    def close(self) -> None:
        """Stop the file watcher. Cached templates stay available."""
        with self._lock:
            watcher = self._watcher
        if watcher is not None:
            watcher.stop_all()
