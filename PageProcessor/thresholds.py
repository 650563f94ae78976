"""Quality-gate thresholds, complexity tiers and environment overrides."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

COMPLEXITY_TIERS = ("simple", "medium", "detailed")

DEFAULT_MAX_INK_RATIOS: Dict[str, float] = {
    "simple": 0.22,
    "medium": 0.28,
    "detailed": 0.34,
}

# Extended product tiers share the limits of their nearest base tier.
_COMPLEXITY_ALIASES: Dict[str, str] = {
    "kids": "simple",
    "ultra": "detailed",
}

# Lower thresholds need darker strokes before a pixel counts as ink.
BINARIZE_STRICTNESS: Dict[str, int] = {
    "strict": 220,
    "balanced": 230,
    "lenient": 235,
}
DEFAULT_BINARIZE_THRESHOLD = BINARIZE_STRICTNESS["balanced"]

_DEFAULT_THRESHOLDS: Optional["Thresholds"] = None
_THRESHOLDS_LOCK = threading.Lock()


class UnknownComplexityError(ValueError):
    """Raised when an unsupported complexity tier is requested."""


@dataclass(frozen=True)
class Thresholds:
    """Limits applied by the quality gate.

    Only the ink ratio depends on the complexity tier; everything else is
    shared across tiers.
    """

    max_ink_ratios: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_MAX_INK_RATIOS)
    )
    max_blob_ratio: float = 0.15
    max_tiny_blob_count: int = 500
    min_subject_height_ratio: float = 0.35
    max_bottom_blank_ratio: float = 0.92
    max_face_blob_ratio: float = 0.012
    bottom_band_fraction: float = 0.15
    binarize_threshold: int = DEFAULT_BINARIZE_THRESHOLD

    def max_ink_ratio(self, complexity: str) -> float:
        return self.max_ink_ratios[resolve_complexity(complexity)]


def resolve_complexity(complexity: str) -> str:
    """Map a requested complexity onto one of the base tiers."""
    tier = (complexity or "").strip().lower()
    tier = _COMPLEXITY_ALIASES.get(tier, tier)
    if tier not in COMPLEXITY_TIERS:
        choices = sorted(set(COMPLEXITY_TIERS) | set(_COMPLEXITY_ALIASES))
        raise UnknownComplexityError(
            f"Unsupported complexity '{complexity}'. Choose from: {', '.join(choices)}."
        )
    return tier


def resolve_binarize_threshold(strictness: Optional[str], default: int) -> int:
    """Return the threshold for a named strictness preset."""
    if not strictness:
        return default
    key = strictness.strip().lower()
    if key in BINARIZE_STRICTNESS:
        return BINARIZE_STRICTNESS[key]
    logger.warning("Unknown binarize strictness '%s'; defaulting to %s", strictness, default)
    return default


def _resolve_ratio(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("Invalid ratio '%s'; defaulting to %s", value, default)
        return default
    if not 0.0 <= parsed <= 1.0:
        logger.warning("Ratio %s is outside [0, 1]; defaulting to %s", parsed, default)
        return default
    return parsed


def _resolve_int(value: Optional[str], default: int, *, minimum: int = 0, maximum: Optional[int] = None) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Invalid integer '%s'; defaulting to %s", value, default)
        return default
    if parsed < minimum or (maximum is not None and parsed > maximum):
        logger.warning("Integer %s is out of range; defaulting to %s", parsed, default)
        return default
    return parsed


def load_thresholds(environ: Optional[Mapping[str, str]] = None) -> Thresholds:
    """Build thresholds from ``PAGE_*`` environment variables.

    Malformed values are logged and replaced by the defaults rather than
    raised, so a bad setting never takes the gate down.
    """
    env = os.environ if environ is None else environ
    base = Thresholds()

    ink_ratios = {
        tier: _resolve_ratio(env.get(f"PAGE_MAX_INK_RATIO_{tier.upper()}"), base.max_ink_ratios[tier])
        for tier in COMPLEXITY_TIERS
    }

    threshold = resolve_binarize_threshold(
        env.get("PAGE_BINARIZE_STRICTNESS"), base.binarize_threshold
    )
    threshold = _resolve_int(
        env.get("PAGE_BINARIZE_THRESHOLD"), threshold, minimum=1, maximum=254
    )

    return Thresholds(
        max_ink_ratios=ink_ratios,
        max_blob_ratio=_resolve_ratio(env.get("PAGE_MAX_BLOB_RATIO"), base.max_blob_ratio),
        max_tiny_blob_count=_resolve_int(
            env.get("PAGE_MAX_TINY_BLOB_COUNT"), base.max_tiny_blob_count
        ),
        min_subject_height_ratio=_resolve_ratio(
            env.get("PAGE_MIN_SUBJECT_HEIGHT_RATIO"), base.min_subject_height_ratio
        ),
        max_bottom_blank_ratio=_resolve_ratio(
            env.get("PAGE_MAX_BOTTOM_BLANK_RATIO"), base.max_bottom_blank_ratio
        ),
        max_face_blob_ratio=_resolve_ratio(
            env.get("PAGE_MAX_FACE_BLOB_RATIO"), base.max_face_blob_ratio
        ),
        bottom_band_fraction=_resolve_ratio(
            env.get("PAGE_BOTTOM_BAND_FRACTION"), base.bottom_band_fraction
        ),
        binarize_threshold=threshold,
    )


def get_default_thresholds() -> Thresholds:
    """Return the process-wide thresholds, reading the environment once."""
    global _DEFAULT_THRESHOLDS
    if _DEFAULT_THRESHOLDS is not None:
        return _DEFAULT_THRESHOLDS

    with _THRESHOLDS_LOCK:
        if _DEFAULT_THRESHOLDS is None:
            _DEFAULT_THRESHOLDS = load_thresholds()
            logger.debug("Loaded quality thresholds: %s", _DEFAULT_THRESHOLDS)
        return _DEFAULT_THRESHOLDS
