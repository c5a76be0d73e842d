"""Built-in ``<qrcode>`` tag.

The QR matrix is computed at compile time and baked into the template the same
way ``_img`` is: one anchored block per dark module.
"""

from __future__ import annotations

import logging
from typing import Mapping

import segno

from markupui.components.node import ComponentNode, Group
from markupui.components.raster import pixel_block

log = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 6
DARK = "#000000"
QUIET_ZONE = 1


def _block_size(attributes: Mapping[str, str]) -> int:
    raw = attributes.get("blocksize") or attributes.get("block-size")
    if not raw:
        return DEFAULT_BLOCK_SIZE
    try:
        return max(1, int(raw))
    except ValueError:
        log.debug("Ignoring qrcode block size %r", raw)
        return DEFAULT_BLOCK_SIZE


def qr_code(attributes: Mapping[str, str]) -> ComponentNode:
    """Build the ``<qrcode data="..." blocksize="...">`` component.

    ``value`` is accepted in place of ``data``. Without data, or when the data
    does not fit in a QR code, the result is an empty Group.
    """
    data = attributes.get("data") or attributes.get("value")
    if not data:
        return Group()

    try:
        code = segno.make_qr(data, error="m")
    except segno.DataOverflowError as exc:
        log.warning("Cannot encode qrcode data of %d characters: %s", len(data), exc)
        return Group()

    block = _block_size(attributes)
    rows = [list(row) for row in code.matrix_iter(scale=1, border=QUIET_ZONE)]
    size = len(rows)

    container = Group(
        {"Anchor": {"Width": size * block, "Height": size * block}},
        minimal=True,
    )
    for y, row in enumerate(rows):
        for x, dark in enumerate(row):
            if dark:
                container.add_child(pixel_block(DARK, x, y, block))
    return container
