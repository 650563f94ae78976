"""Data structures for coloring-page quality analysis and reframing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


PageSize = Tuple[int, int]  # (width, height) in pixels


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive pixel bounds of the non-background content of a raster.

    When no content is found the box covers the whole raster and
    ``has_content`` is False, so callers must check the flag before
    trusting the extents.
    """

    left: int
    top: int
    right: int
    bottom: int
    has_content: bool = True

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    @property
    def area(self) -> int:
        return self.width * self.height

    def as_crop_box(self) -> Tuple[int, int, int, int]:
        """Return the box as an exclusive (x1, y1, x2, y2) tuple for PIL crops."""
        return (self.left, self.top, self.right + 1, self.bottom + 1)


@dataclass(frozen=True)
class ColorContent:
    """How much color or mid-gray the raster carried before binarization."""

    color_ratio: float
    gray_ratio: float
    had_color: bool
    had_gray: bool

    @property
    def needs_correction(self) -> bool:
        return self.had_color or self.had_gray


@dataclass(frozen=True)
class BlobStats:
    """Size distribution of the 4-connected ink regions of a binary raster."""

    largest_blob_ratio: float
    tiny_blob_count: int
    total_blobs: int
    suspected_fill_issue: bool
    largest_blob_pixels: int = 0
    medium_blob_count: int = 0
    blob_sizes: Tuple[int, ...] = field(default=(), repr=False)


@dataclass(frozen=True)
class CompositionStats:
    """Vertical placement of the ink on the page."""

    subject_height_ratio: float
    top_margin_ratio: float
    bottom_margin_ratio: float
    bottom_blank_ratio: float
    has_content: bool = True


@dataclass(frozen=True)
class FaceRegionStats:
    """Blob statistics restricted to the band where faces usually sit."""

    largest_blob_ratio: float
    blob_count: int
    medium_blob_count: int
    solid_blob_count: int
    has_fill_issue: bool


@dataclass(frozen=True)
class EmptyBands:
    """White coverage of the top and bottom sample bands of a page."""

    top_white_ratio: float
    bottom_white_ratio: float
    has_empty_top: bool
    has_empty_bottom: bool

    @property
    def valid(self) -> bool:
        return not self.has_empty_top and not self.has_empty_bottom


@dataclass
class QualityMetrics:
    """Numbers the quality gate measured, kept for logging and display."""

    ink_ratio: float = 0.0
    max_ink_ratio: float = 0.0
    largest_blob_ratio: float = 0.0
    tiny_blob_count: int = 0
    total_blobs: int = 0
    subject_height_ratio: float = 0.0
    bottom_blank_ratio: float = 0.0
    face_largest_blob_ratio: float = 0.0
    face_blob_count: int = 0
    suspected_fill_issue: bool = False
    face_fill_issue: bool = False
    was_inverted: bool = False
    original_had_color: bool = False
    original_had_gray: bool = False
    was_color_corrected: bool = False


@dataclass
class QualityVerdict:
    """Pass/fail outcome of the quality gate.

    ``corrected`` always holds the binarized raster, whether or not the
    page passed, so callers can reuse it without binarizing again.
    """

    passed: bool
    reasons: List[str] = field(default_factory=list)
    metrics: QualityMetrics = field(default_factory=QualityMetrics)
    corrected: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
    blob_stats: Optional[BlobStats] = None
    composition: Optional[CompositionStats] = None
    face_region: Optional[FaceRegionStats] = None
    degraded: bool = False
    processing_time_ms: float = field(default=0.0, compare=False)

    @property
    def failure_reason(self) -> Optional[str]:
        if not self.reasons:
            return None
        return "; ".join(self.reasons)


@dataclass(frozen=True)
class BottomFillResult:
    """Bottom-band emptiness of a reframed page."""

    bottom_empty_ratio: float
    has_empty_bottom: bool
    artwork_coverage: float

    @property
    def is_valid(self) -> bool:
        return not self.has_empty_bottom


@dataclass
class ReframeResult:
    """A page-sized raster and the geometry used to produce it."""

    image: np.ndarray = field(compare=False, repr=False)
    bounding_box: BoundingBox
    content_box: BoundingBox
    margin_percent: float
    was_retried: bool
    scale: float
    scaled_size: PageSize
    offset: Tuple[int, int]
    validation: BottomFillResult

    @property
    def size(self) -> PageSize:
        height, width = self.image.shape[:2]
        return (width, height)
