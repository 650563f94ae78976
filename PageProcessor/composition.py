"""Composition analysis: subject height, band emptiness and face-region fills."""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np

from .binarization import INK
from .blobs import MEDIUM_BLOB_MAX_RATIO, MEDIUM_BLOB_MIN_PIXELS, Component, find_components
from .page_types import CompositionStats, EmptyBands, FaceRegionStats

logger = logging.getLogger(__name__)

BOTTOM_BAND_FRACTION = 0.15

FACE_REGION: Tuple[float, float] = (0.30, 0.60)
FACE_BLOB_MIN_PIXELS = 50
MAX_FACE_BLOB_RATIO = 0.012
SOLID_FILL_RATIO = 0.60
SOLID_MAX_ASPECT = 3.0

EMPTY_BAND_SAMPLE_FRACTION = 0.08
EMPTY_BAND_THRESHOLD = 0.92
EMPTY_BAND_WHITE_LEVEL = 250


def band_background_ratio(
    raster: np.ndarray,
    fraction: float,
    *,
    edge: str = "bottom",
    white_level: int = 255,
) -> float:
    """Fraction of pixels at or above ``white_level`` in a top or bottom band.

    The bottom band starts at row ``floor(H * (1 - fraction))``; the top band
    ends at row ``ceil(H * fraction)``. At least one row is always sampled.
    """
    height = raster.shape[0]
    if edge == "bottom":
        start = min(height - 1, int(math.floor(height * (1.0 - fraction))))
        band = raster[start:]
    elif edge == "top":
        stop = max(1, int(math.ceil(height * fraction)))
        band = raster[:stop]
    else:
        raise ValueError(f"Unknown band edge '{edge}'")
    return float(np.count_nonzero(band >= white_level)) / band.size


def analyze_composition(
    binary: np.ndarray, bottom_band_fraction: float = BOTTOM_BAND_FRACTION
) -> CompositionStats:
    """Measure how much of the page height the ink spans and how empty the bottom is."""
    height = binary.shape[0]
    rows = np.flatnonzero((binary == INK).any(axis=1))
    bottom_blank = band_background_ratio(binary, bottom_band_fraction, edge="bottom")

    if rows.size == 0:
        return CompositionStats(
            subject_height_ratio=0.0,
            top_margin_ratio=1.0,
            bottom_margin_ratio=1.0,
            bottom_blank_ratio=bottom_blank,
            has_content=False,
        )

    top = int(rows[0])
    bottom = int(rows[-1])
    stats = CompositionStats(
        subject_height_ratio=(bottom - top + 1) / height,
        top_margin_ratio=top / height,
        bottom_margin_ratio=(height - 1 - bottom) / height,
        bottom_blank_ratio=bottom_blank,
    )
    logger.debug("analyze_composition: rows %d-%d of %d, %s", top, bottom, height, stats)
    return stats


def _is_solid(component: Component) -> bool:
    # Outlined eyes and strokes leave most of their box empty or are long
    # and thin; filled pupils and patches are compact and dense.
    return (
        component.fill_ratio >= SOLID_FILL_RATIO
        and component.aspect_ratio <= SOLID_MAX_ASPECT
    )


def analyze_face_region(
    binary: np.ndarray,
    region: Tuple[float, float] = FACE_REGION,
    max_face_blob_ratio: float = MAX_FACE_BLOB_RATIO,
) -> FaceRegionStats:
    """Look for solid fills inside the horizontal band where faces usually sit.

    Args:
        binary: H×W binary raster.
        region: Start and end of the band as fractions of the height.
        max_face_blob_ratio: Largest solid blob allowed, relative to the page.

    Returns:
        Blob counts for the band and whether it looks like it has filled
        eyes or patches.
    """
    height, width = binary.shape[:2]
    total = height * width
    row_start = int(math.floor(height * region[0]))
    row_stop = int(math.floor(height * region[1]))

    components = [
        c
        for c in find_components(binary, row_start, row_stop)
        if c.size > FACE_BLOB_MIN_PIXELS
    ]
    medium_max = total * MEDIUM_BLOB_MAX_RATIO
    solid = [c for c in components if _is_solid(c)]
    solid_medium = sum(1 for c in solid if MEDIUM_BLOB_MIN_PIXELS <= c.size <= medium_max)
    medium = sum(1 for c in components if MEDIUM_BLOB_MIN_PIXELS <= c.size <= medium_max)

    largest_ratio = max((c.size for c in components), default=0) / total
    largest_solid_ratio = max((c.size for c in solid), default=0) / total
    has_issue = solid_medium >= 2 or largest_solid_ratio > max_face_blob_ratio

    logger.debug(
        "analyze_face_region: rows %d-%d, %d blobs, %d solid, largest solid %.4f",
        row_start,
        row_stop,
        len(components),
        len(solid),
        largest_solid_ratio,
    )
    return FaceRegionStats(
        largest_blob_ratio=largest_ratio,
        blob_count=len(components),
        medium_blob_count=medium,
        solid_blob_count=len(solid),
        has_fill_issue=has_issue,
    )


def detect_empty_bands(
    gray: np.ndarray,
    sample_fraction: float = EMPTY_BAND_SAMPLE_FRACTION,
    empty_threshold: float = EMPTY_BAND_THRESHOLD,
    white_level: int = EMPTY_BAND_WHITE_LEVEL,
) -> EmptyBands:
    """Report whether the top or bottom strip of a page is almost pure white."""
    top = band_background_ratio(gray, sample_fraction, edge="top", white_level=white_level)
    bottom = band_background_ratio(gray, sample_fraction, edge="bottom", white_level=white_level)
    return EmptyBands(
        top_white_ratio=top,
        bottom_white_ratio=bottom,
        has_empty_top=top > empty_threshold,
        has_empty_bottom=bottom > empty_threshold,
    )
