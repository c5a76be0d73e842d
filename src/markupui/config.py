"""Configuration parsing for markupui.yaml"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

SETTINGS_FILE = "markupui.yaml"


class BuilderSettings(BaseModel):
    """Settings shared by every template an InterfaceBuilder compiles."""

    common_alias_path: str = Field(
        default="../Common.ui",
        description="Target of the built-in $C and $Common aliases",
    )
    root_dir: str = Field(
        default="../",
        description="Replacement for '@/' in javascript import statements",
    )
    minimal: bool = Field(default=False, description="Emit single-line component blocks")
    cache_enabled: bool = Field(default=True, description="Cache templates parsed from files")
    watch_files: bool = Field(
        default=False,
        description="Watch every parsed file and evict its cache entry on change",
    )
    shutdown_timeout: float = Field(
        default=5.0, gt=0, description="Seconds to wait for the watcher thread to stop"
    )
    image_block_size: int = Field(default=1, ge=1, description="Pixel block size for <_img>")
    image_max_width: int = Field(default=96, ge=1, description="Max <_img> width in blocks")
    image_max_height: int = Field(default=96, ge=1, description="Max <_img> height in blocks")

    model_config = {"extra": "forbid"}


def find_settings_file(start: Optional[Path] = None) -> Optional[Path]:
    """Find markupui.yaml in the start directory (default cwd) or its parents."""
    cwd = (start or Path.cwd()).resolve()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / SETTINGS_FILE
        if candidate.is_file():
            return candidate
    return None


def load_settings(path: Optional[str | os.PathLike[str]] = None) -> BuilderSettings:
    """Load settings from a YAML file.

    Args:
        path: Explicit settings file. When omitted, markupui.yaml is looked up
            from the cwd upwards and defaults are used if none is found.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        pydantic.ValidationError: For unknown keys or invalid values.
    """
    if path is None:
        found = find_settings_file()
        if found is None:
            return BuilderSettings()
        path = found

    settings_path = Path(path)
    if not settings_path.is_file():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{settings_path}: expected a mapping at the top level")
    return BuilderSettings.model_validate(data)
