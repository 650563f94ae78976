"""Connected ink-region analysis using OpenCV's 4-connected component labeling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .binarization import INK
from .page_types import BlobStats

try:
    import cv2
except ImportError:
    cv2 = None  # type: ignore

logger = logging.getLogger(__name__)

TINY_BLOB_MAX_PIXELS = 20  # components smaller than this are specks
MEDIUM_BLOB_MIN_PIXELS = 100
MEDIUM_BLOB_MAX_RATIO = 0.02
SUSPECTED_FILL_MIN_LARGEST_RATIO = 0.01


@dataclass
class Component:
    """Size and extent of one labeled region; member pixels are not kept."""

    size: int
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def fill_ratio(self) -> float:
        return self.size / (self.width * self.height)

    @property
    def aspect_ratio(self) -> float:
        return max(self.width, self.height) / min(self.width, self.height)


def labeling_available() -> bool:
    """Return True when OpenCV could be imported."""
    return cv2 is not None


def find_components(
    binary: np.ndarray,
    row_start: int = 0,
    row_stop: Optional[int] = None,
) -> List[Component]:
    """Return every 4-connected ink component inside the given row band.

    Rows outside ``[row_start, row_stop)`` are cut away before labeling, so a
    region that crosses the band edge is measured by its part inside the
    band only. Labeling is iterative and works on a label buffer owned by
    the call, so large solid regions cost time proportional to their area
    and nothing else.

    Raises:
        RuntimeError: If OpenCV is not installed.
    """
    if cv2 is None:
        raise RuntimeError("OpenCV is not installed; cannot label ink components")
    height = binary.shape[0]
    if row_stop is None:
        row_stop = height
    row_start = max(0, row_start)
    row_stop = min(height, row_stop)
    if row_stop <= row_start:
        return []

    band = (binary[row_start:row_stop] == INK).astype(np.uint8)
    count, _, stats, _ = cv2.connectedComponentsWithStats(band, connectivity=4)

    components: List[Component] = []
    for label in range(1, count):
        x = int(stats[label, cv2.CC_STAT_LEFT])
        y = int(stats[label, cv2.CC_STAT_TOP]) + row_start
        w = int(stats[label, cv2.CC_STAT_WIDTH])
        h = int(stats[label, cv2.CC_STAT_HEIGHT])
        components.append(
            Component(int(stats[label, cv2.CC_STAT_AREA]), x, y, x + w - 1, y + h - 1)
        )
    return components


def analyze_blobs(binary: np.ndarray) -> BlobStats:
    """Summarise the connected ink regions of a binary raster.

    Args:
        binary: H×W raster with ink at 0 and background at 255.

    Returns:
        Size statistics used by the quality gate to spot solid fills,
        filled eyes and stippling.
    """
    total = binary.shape[0] * binary.shape[1]
    components = find_components(binary)
    sizes = tuple(c.size for c in components)

    largest = max(sizes, default=0)
    tiny = sum(1 for s in sizes if s < TINY_BLOB_MAX_PIXELS)
    medium_max = total * MEDIUM_BLOB_MAX_RATIO
    medium = sum(1 for s in sizes if MEDIUM_BLOB_MIN_PIXELS <= s <= medium_max)
    largest_ratio = largest / total

    # Several eye-sized patches next to a sizeable region usually mean
    # filled pupils or hair rather than outlines.
    suspected = medium >= 2 and largest_ratio > SUSPECTED_FILL_MIN_LARGEST_RATIO

    logger.debug(
        "analyze_blobs: %d components, largest %.4f, %d tiny, %d medium",
        len(sizes),
        largest_ratio,
        tiny,
        medium,
    )
    return BlobStats(
        largest_blob_ratio=largest_ratio,
        tiny_blob_count=tiny,
        total_blobs=len(sizes),
        suspected_fill_issue=suspected,
        largest_blob_pixels=largest,
        medium_blob_count=medium,
        blob_sizes=sizes,
    )
