"""Content bounding-box detection."""

from __future__ import annotations

import numpy as np

from .page_types import BoundingBox

WHITE_THRESHOLD = 245


def detect_bounds(gray: np.ndarray, white_threshold: int = WHITE_THRESHOLD) -> BoundingBox:
    """Return the tightest box around pixels darker than ``white_threshold``.

    An all-background raster yields the whole-raster box with
    ``has_content`` set to False.
    """
    height, width = gray.shape[:2]
    content = gray < white_threshold
    rows = np.flatnonzero(content.any(axis=1))
    if rows.size == 0:
        return BoundingBox(0, 0, width - 1, height - 1, has_content=False)
    cols = np.flatnonzero(content.any(axis=0))
    return BoundingBox(
        left=int(cols[0]),
        top=int(rows[0]),
        right=int(cols[-1]),
        bottom=int(rows[-1]),
    )


def expand_bounds(
    box: BoundingBox, width: int, height: int, padding_fraction: float
) -> BoundingBox:
    """Pad a box by a fraction of the raster dimensions, clipped to the raster."""
    pad_x = int(round(width * padding_fraction))
    pad_y = int(round(height * padding_fraction))
    return BoundingBox(
        left=max(0, box.left - pad_x),
        top=max(0, box.top - pad_y),
        right=min(width - 1, box.right + pad_x),
        bottom=min(height - 1, box.bottom + pad_y),
        has_content=box.has_content,
    )
