"""Crop, scale and center an accepted page onto a fixed print size."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image

from .bounds import detect_bounds, expand_bounds
from .composition import band_background_ratio
from .image_io import RasterInput, load_raster, to_rgb_array
from .page_types import BottomFillResult, BoundingBox, PageSize, ReframeResult

logger = logging.getLogger(__name__)

# US Letter at 300 DPI.
LETTER: PageSize = (2550, 3300)
LETTER_LANDSCAPE: PageSize = (3300, 2550)

PAGE_SIZES: Dict[str, PageSize] = {
    "letter": LETTER,
    "letter-landscape": LETTER_LANDSCAPE,
    "letter-preview": (1275, 1650),
    "letter-web": (612, 792),
}

DEFAULT_MARGIN_PERCENT = 2.0
MIN_MARGIN_PERCENT = 1.5
MAX_MARGIN_PERCENT = 4.0
CONTENT_PADDING_FRACTION = 0.03
ADAPTIVE_PADDING_COVERAGE = 0.7

CONTENT_WHITE_THRESHOLD = 245
BOTTOM_CHECK_FRACTION = 0.15
BOTTOM_EMPTY_THRESHOLD = 0.85

_WHITE = (255, 255, 255)


def resolve_page_size(name: str) -> PageSize:
    """Return the pixel size for a named page preset."""
    key = (name or "").strip().lower()
    if key not in PAGE_SIZES:
        raise ValueError(
            f"Unsupported page size '{name}'. Choose from: {', '.join(sorted(PAGE_SIZES))}."
        )
    return PAGE_SIZES[key]


def _gray(rgb: np.ndarray) -> np.ndarray:
    return np.asarray(Image.fromarray(rgb).convert("L"))


def validate_bottom_fill(
    page: np.ndarray,
    *,
    band_fraction: float = BOTTOM_CHECK_FRACTION,
    empty_threshold: float = BOTTOM_EMPTY_THRESHOLD,
    white_threshold: int = CONTENT_WHITE_THRESHOLD,
) -> BottomFillResult:
    """Check whether the bottom band of a composed page is mostly white."""
    gray = _gray(page) if page.ndim == 3 else page
    empty_ratio = band_background_ratio(
        gray, band_fraction, edge="bottom", white_level=white_threshold
    )
    box = detect_bounds(gray, white_threshold)
    coverage = box.area / gray.size if box.has_content else 0.0
    return BottomFillResult(
        bottom_empty_ratio=empty_ratio,
        has_empty_bottom=empty_ratio >= empty_threshold,
        artwork_coverage=coverage,
    )


def adaptive_padding(box: BoundingBox, width: int, height: int) -> float:
    """Pick a tight padding for artwork that already fills the raster, a wider one otherwise."""
    coverage = box.area / (width * height)
    if coverage > ADAPTIVE_PADDING_COVERAGE:
        return MIN_MARGIN_PERCENT / 100
    return MAX_MARGIN_PERCENT / 100


def _compose(
    rgb: np.ndarray,
    margin_percent: float,
    page_size: PageSize,
    padding_fraction: Optional[float],
    white_threshold: int,
) -> Tuple[np.ndarray, dict]:
    height, width = rgb.shape[:2]
    content_box = detect_bounds(_gray(rgb), white_threshold)
    if not content_box.has_content:
        logger.warning("reframe: no content found; scaling the whole raster")
    if padding_fraction is None:
        padding_fraction = adaptive_padding(content_box, width, height)
    crop_box = expand_bounds(content_box, width, height, padding_fraction)
    cropped = Image.fromarray(rgb).crop(crop_box.as_crop_box())
    logger.debug("reframe: cropped to %s", crop_box)

    page_w, page_h = page_size
    margin_px = int(round(min(page_w, page_h) * margin_percent / 100))
    usable_w = page_w - 2 * margin_px
    usable_h = page_h - 2 * margin_px
    crop_w, crop_h = cropped.size
    scale = min(usable_w / crop_w, usable_h / crop_h)
    scaled_w = min(usable_w, max(1, int(round(crop_w * scale))))
    scaled_h = min(usable_h, max(1, int(round(crop_h * scale))))
    resized = cropped.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
    logger.debug("reframe: scaled %dx%d by %.4f to %dx%d", crop_w, crop_h, scale, scaled_w, scaled_h)

    canvas = Image.new("RGB", page_size, _WHITE)
    offset = ((page_w - scaled_w) // 2, (page_h - scaled_h) // 2)
    canvas.paste(resized, offset)
    logger.debug("reframe: composited at offset %s with %.1f%% margin", offset, margin_percent)

    geometry = {
        "bounding_box": crop_box,
        "content_box": content_box,
        "scale": scale,
        "scaled_size": (scaled_w, scaled_h),
        "offset": offset,
    }
    return np.asarray(canvas), geometry


def reframe(
    raster: RasterInput,
    margin_percent: float = DEFAULT_MARGIN_PERCENT,
    *,
    page_size: PageSize = LETTER,
    retry_on_empty_bottom: bool = True,
    min_margin_percent: float = MIN_MARGIN_PERCENT,
    padding_fraction: Optional[float] = CONTENT_PADDING_FRACTION,
    white_threshold: int = CONTENT_WHITE_THRESHOLD,
) -> ReframeResult:
    """Place the content of a raster on a white page of a fixed size.

    The content box is padded, scaled to fit inside the margins without
    distortion and centered. If the bottom band of the result is mostly
    white and ``min_margin_percent`` is smaller than the requested margin,
    the page is composed once more at ``min_margin_percent`` and that
    second result is accepted as-is.

    Args:
        raster: Encoded bytes, a PIL image or a NumPy raster.
        margin_percent: Margin on every side, as a percentage of the
            shorter page dimension.
        page_size: Target ``(width, height)`` in pixels.
        retry_on_empty_bottom: Whether to attempt the smaller-margin retry.
        min_margin_percent: Margin used for the retry. No retry happens
            when the requested margin is already this small.
        padding_fraction: Padding added around the content box, relative
            to the source dimensions. ``None`` picks it from how much of
            the raster the artwork covers.
        white_threshold: Pixels at or above this luminance count as
            background.

    Returns:
        The page raster together with the geometry and bottom validation
        of the attempt that was accepted.
    """
    if not 0 <= margin_percent < 50:
        raise ValueError(f"margin_percent must be in [0, 50), got {margin_percent}")
    page_w, page_h = page_size
    if page_w <= 0 or page_h <= 0:
        raise ValueError(f"Invalid page size {page_size}")

    rgb = to_rgb_array(load_raster(raster))
    page, geometry = _compose(rgb, margin_percent, page_size, padding_fraction, white_threshold)
    validation = validate_bottom_fill(page, white_threshold=white_threshold)
    used_margin = margin_percent
    retried = False

    # The retry only ever shrinks the margin; a request already at or below
    # the minimum is accepted as composed.
    retry_margin = min(margin_percent, min_margin_percent)
    if validation.has_empty_bottom and retry_on_empty_bottom and retry_margin < margin_percent:
        logger.info(
            "reframe: bottom band %.0f%% empty; retrying with %.1f%% margin",
            validation.bottom_empty_ratio * 100,
            retry_margin,
        )
        page, geometry = _compose(
            rgb, retry_margin, page_size, padding_fraction, white_threshold
        )
        validation = validate_bottom_fill(page, white_threshold=white_threshold)
        used_margin = retry_margin
        retried = True

    logger.debug("reframe: accepted page with %.1f%% margin (retried=%s)", used_margin, retried)
    return ReframeResult(
        image=page,
        bounding_box=geometry["bounding_box"],
        content_box=geometry["content_box"],
        margin_percent=used_margin,
        was_retried=retried,
        scale=geometry["scale"],
        scaled_size=geometry["scaled_size"],
        offset=geometry["offset"],
        validation=validation,
    )
