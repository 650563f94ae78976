"""Quality gate combining binarization, blob and composition checks."""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

import numpy as np
from . import binarization as binarizer
from . import blobs as blob_analysis
from .composition import analyze_composition, analyze_face_region
from .image_io import RasterInput, load_raster
from .page_types import (
    BlobStats,
    CompositionStats,
    FaceRegionStats,
    QualityMetrics,
    QualityVerdict,
)
from .thresholds import Thresholds, get_default_thresholds, resolve_complexity

logger = logging.getLogger(__name__)


def get_quality_thresholds(
    complexity: str = "medium", thresholds: Optional[Thresholds] = None
) -> Dict[str, float]:
    """Return the limits the gate applies for a complexity tier, for display."""
    limits = thresholds or get_default_thresholds()
    return {
        "max_ink_ratio": limits.max_ink_ratio(complexity),
        "max_blob_ratio": limits.max_blob_ratio,
        "max_tiny_blob_count": limits.max_tiny_blob_count,
        "min_subject_height_ratio": limits.min_subject_height_ratio,
        "max_bottom_blank_ratio": limits.max_bottom_blank_ratio,
        "max_face_blob_ratio": limits.max_face_blob_ratio,
    }


def _collect_failures(
    ink_ratio: float,
    max_ink_ratio: float,
    blobs: BlobStats,
    composition: CompositionStats,
    face: FaceRegionStats,
    limits: Thresholds,
) -> List[str]:
    # Every check runs so the retry prompt can address all problems at once.
    reasons: List[str] = []
    if ink_ratio > max_ink_ratio:
        reasons.append(
            f"ink ratio {ink_ratio:.1%} exceeds max {max_ink_ratio:.0%}"
        )
    if blobs.largest_blob_ratio > limits.max_blob_ratio:
        reasons.append(
            f"largest blob {blobs.largest_blob_ratio:.2%} exceeds max {limits.max_blob_ratio:.2%}"
        )
    if blobs.suspected_fill_issue:
        reasons.append(
            f"suspected solid eye fills ({blobs.medium_blob_count} medium blobs)"
        )
    if face.has_fill_issue:
        reasons.append(
            f"face region fill: {face.solid_blob_count} solid eye-area blobs, "
            f"largest {face.largest_blob_ratio:.2%}"
        )
    if blobs.tiny_blob_count > limits.max_tiny_blob_count:
        reasons.append(
            f"texture/stippling noise: {blobs.tiny_blob_count} tiny specks "
            f"(max {limits.max_tiny_blob_count})"
        )
    if composition.subject_height_ratio < limits.min_subject_height_ratio:
        reasons.append(
            f"subject height {composition.subject_height_ratio:.0%} of page "
            f"(min {limits.min_subject_height_ratio:.0%})"
        )
    if composition.bottom_blank_ratio > limits.max_bottom_blank_ratio:
        reasons.append(
            f"bottom {limits.bottom_band_fraction:.0%} band is "
            f"{composition.bottom_blank_ratio:.0%} empty (max {limits.max_bottom_blank_ratio:.0%})"
        )
    return reasons


def _pass_through(raster: np.ndarray, max_ink_ratio: float, started: float) -> QualityVerdict:
    logger.warning("OpenCV is unavailable; quality gate skipped and page passed through")
    gray = binarizer.to_grayscale(raster)
    return QualityVerdict(
        passed=True,
        reasons=[],
        metrics=QualityMetrics(max_ink_ratio=max_ink_ratio),
        corrected=gray,
        degraded=True,
        processing_time_ms=(time.perf_counter() - started) * 1000,
    )


def evaluate(
    raster: RasterInput,
    complexity: str = "medium",
    thresholds: Optional[Thresholds] = None,
) -> QualityVerdict:
    """Decide whether a generated page is usable as a coloring page.

    Args:
        raster: Encoded bytes, a PIL image or a NumPy raster.
        complexity: Tier name; ``kids`` and ``ultra`` map to ``simple`` and
            ``detailed``.
        thresholds: Limits to apply; the process-wide defaults when omitted.

    Returns:
        A verdict holding the ordered failure reasons, the measured metrics
        and the binarized raster.

    Raises:
        DegenerateRasterError: If the page is essentially all dark.
        DecodeError: If the input cannot be decoded.
        UnknownComplexityError: If the tier is not recognised.
    """
    started = time.perf_counter()
    limits = thresholds or get_default_thresholds()
    tier = resolve_complexity(complexity)
    max_ink_ratio = limits.max_ink_ratios[tier]

    rgb = load_raster(raster)
    if not blob_analysis.labeling_available():
        return _pass_through(rgb, max_ink_ratio, started)

    color = binarizer.measure_color_content(rgb)
    gray = binarizer.to_grayscale(rgb)
    inverted = binarizer.detect_inversion(gray)
    binary = binarizer.binarize_gray(gray, limits.binarize_threshold, inverted)

    total = binary.size
    ink_ratio = float(np.count_nonzero(binary == binarizer.INK)) / total
    blobs = blob_analysis.analyze_blobs(binary)
    composition = analyze_composition(binary, limits.bottom_band_fraction)
    face = analyze_face_region(binary, max_face_blob_ratio=limits.max_face_blob_ratio)

    reasons = _collect_failures(ink_ratio, max_ink_ratio, blobs, composition, face, limits)
    metrics = QualityMetrics(
        ink_ratio=ink_ratio,
        max_ink_ratio=max_ink_ratio,
        largest_blob_ratio=blobs.largest_blob_ratio,
        tiny_blob_count=blobs.tiny_blob_count,
        total_blobs=blobs.total_blobs,
        subject_height_ratio=composition.subject_height_ratio,
        bottom_blank_ratio=composition.bottom_blank_ratio,
        face_largest_blob_ratio=face.largest_blob_ratio,
        face_blob_count=face.blob_count,
        suspected_fill_issue=blobs.suspected_fill_issue,
        face_fill_issue=face.has_fill_issue,
        was_inverted=inverted,
        original_had_color=color.had_color,
        original_had_gray=color.had_gray,
        was_color_corrected=color.needs_correction,
    )

    elapsed_ms = (time.perf_counter() - started) * 1000
    if reasons:
        logger.info("Quality gate failed (%s) in %.0f ms: %s", tier, elapsed_ms, "; ".join(reasons))
    else:
        logger.info("Quality gate passed (%s) in %.0f ms", tier, elapsed_ms)

    return QualityVerdict(
        passed=not reasons,
        reasons=reasons,
        metrics=metrics,
        corrected=binary,
        blob_stats=blobs,
        composition=composition,
        face_region=face,
        processing_time_ms=elapsed_ms,
    )
