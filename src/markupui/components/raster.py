"""Rasterizer for the internal ``_img`` tag.

The runtime cannot reference arbitrary image files, so the image is baked into
the template as one coloured block per pixel.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from markupui.components.node import ComponentNode, Group

log = logging.getLogger(__name__)


@dataclass
class RasterOptions:
    """Rasterization parameters for one ``_img`` element."""

    block_size: int = 1
    max_width: int = 96
    max_height: int = 96
    skip_white: bool = False


def pixel_hex(r: int, g: int, b: int, a: int) -> str:
    if a == 255:
        return f"#{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}{a:02X}"


def is_white(r: int, g: int, b: int) -> bool:
    return r >= 240 and g >= 240 and b >= 240


def pixel_block(color: str, x: int, y: int, block: int) -> ComponentNode:
    """One square of side ``block`` anchored at grid cell ``(x, y)``."""
    return Group(
        {
            "Background": color,
            "Anchor": {"Top": y * block, "Left": x * block, "Width": block, "Height": block},
        }
    )


def rasterize(image: Image.Image, options: RasterOptions) -> ComponentNode:
    """Turn an image into a Group of absolutely anchored pixel blocks.

    Images larger than the configured bounds are downscaled by sampling every
    n-th pixel. Fully transparent pixels are skipped, as are near-white pixels
    when ``skip_white`` is set.

    Args:
        image: Any Pillow image; it is converted to RGBA.
        options: Block size, bounds and white skipping.

    Returns:
        A minimal-mode Group holding one child per rendered pixel.
    """
    rgba = image.convert("RGBA")
    width, height = rgba.size

    skip_x = math.ceil(width / options.max_width) if width > options.max_width else 1
    skip_y = math.ceil(height / options.max_height) if height > options.max_height else 1
    render_width = width // skip_x
    render_height = height // skip_y

    block = options.block_size
    container = Group(
        {"Anchor": {"Width": render_width * block, "Height": render_height * block}},
        minimal=True,
    )

    pixels = rgba.load()
    for y in range(render_height):
        for x in range(render_width):
            r, g, b, a = pixels[x * skip_x, y * skip_y]
            if a == 0:
                continue
            if options.skip_white and is_white(r, g, b):
                continue

            container.add_child(pixel_block(pixel_hex(r, g, b, a), x, y, block))

    return container


def render_image_file(source: str, options: RasterOptions, base_dir: Path | None = None) -> ComponentNode:
    """Load and rasterize a local image, degrading to an empty Group on failure."""
    if source.startswith(("http://", "https://")):
        log.warning("Remote images are not fetched, _img src ignored: %s", source)
        return Group()

    path = Path(source)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path

    try:
        with Image.open(path) as image:
            return rasterize(image, options)
    except (OSError, UnidentifiedImageError) as exc:
        log.warning("Could not rasterize %s: %s", path, exc)
        return Group()
