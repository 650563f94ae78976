"""Grayscale conversion, inversion detection and black/white thresholding."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from .image_io import RasterInput, load_raster
from .page_types import ColorContent
from .thresholds import get_default_thresholds

logger = logging.getLogger(__name__)

INK = 0
BACKGROUND = 255

DARK_MIDPOINT = 128
INVERTED_DARK_RATIO = 0.50
DEGENERATE_DARK_RATIO = 0.98

COLOR_CHANNEL_SPREAD = 30
GRAY_LOW = 30
GRAY_HIGH = 220
COLOR_PIXEL_RATIO = 0.05
GRAY_PIXEL_RATIO = 0.10


class DegenerateRasterError(ValueError):
    """Raised when a raster is essentially all dark and carries no line art."""


def to_grayscale(raster: np.ndarray) -> np.ndarray:
    """Return an H×W uint8 luma raster; grayscale input is copied unchanged."""
    if raster.ndim == 2:
        return raster.copy()
    return np.array(Image.fromarray(raster).convert("L"))


def dark_pixel_ratio(gray: np.ndarray) -> float:
    """Fraction of pixels below the mid-gray point."""
    return float(np.count_nonzero(gray < DARK_MIDPOINT)) / gray.size


def detect_inversion(gray: np.ndarray) -> bool:
    """Return True when the raster looks like light lines on a dark canvas.

    Raises:
        DegenerateRasterError: If nearly every pixel is dark, in which case
            there is nothing left to invert.
    """
    ratio = dark_pixel_ratio(gray)
    if ratio > DEGENERATE_DARK_RATIO:
        raise DegenerateRasterError(
            f"Image is {ratio:.1%} dark; no line art can be recovered"
        )
    inverted = ratio > INVERTED_DARK_RATIO
    if inverted:
        logger.debug("Detected inverted canvas (%.1f%% dark pixels)", ratio * 100)
    return inverted


def binarize_gray(gray: np.ndarray, threshold: int, inverted: bool) -> np.ndarray:
    """Threshold a grayscale raster into 0 (ink) and 255 (background)."""
    if inverted:
        ink = gray > (255 - threshold)
    else:
        ink = gray < threshold
    return np.where(ink, INK, BACKGROUND).astype(np.uint8)


def binarize(raster: RasterInput, threshold: Optional[int] = None) -> np.ndarray:
    """Force a raster to pure black ink on white.

    Args:
        raster: Encoded bytes, a PIL image or a NumPy raster.
        threshold: Luminance cutoff for ink; defaults to the configured
            binarize threshold.

    Returns:
        A new H×W uint8 array containing only 0 and 255.
    """
    if threshold is None:
        threshold = get_default_thresholds().binarize_threshold
    gray = to_grayscale(load_raster(raster))
    inverted = detect_inversion(gray)
    return binarize_gray(gray, threshold, inverted)


def measure_color_content(raster: np.ndarray) -> ColorContent:
    """Measure color and mid-gray pixels of an RGB or grayscale raster."""
    total = raster.shape[0] * raster.shape[1]
    if raster.ndim == 2:
        values = raster.astype(np.int16)
        color_pixels = 0
        gray_mask = (values > GRAY_LOW) & (values < GRAY_HIGH)
    else:
        channels = raster[:, :, :3].astype(np.int16)
        spread = channels.max(axis=2) - channels.min(axis=2)
        color_mask = spread > COLOR_CHANNEL_SPREAD
        mean = channels.mean(axis=2)
        gray_mask = ~color_mask & (mean > GRAY_LOW) & (mean < GRAY_HIGH)
        color_pixels = int(np.count_nonzero(color_mask))

    gray_pixels = int(np.count_nonzero(gray_mask))
    color_ratio = color_pixels / total
    gray_ratio = gray_pixels / total
    return ColorContent(
        color_ratio=color_ratio,
        gray_ratio=gray_ratio,
        had_color=color_ratio > COLOR_PIXEL_RATIO,
        had_gray=gray_ratio > GRAY_PIXEL_RATIO,
    )
