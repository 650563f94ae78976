"""Quality checks and print reframing for generated coloring pages.

This package exposes the binarization, blob and composition analysis,
quality gate, retry advice and page reframing routines used by the
page generation pipeline.
"""

from .binarization import DegenerateRasterError, binarize, measure_color_content  # noqa: F401
from .blobs import analyze_blobs  # noqa: F401
from .bounds import detect_bounds, expand_bounds  # noqa: F401
from .composition import (  # noqa: F401
    analyze_composition,
    analyze_face_region,
    detect_empty_bands,
)
from .image_io import DecodeError, encode_image_bytes, load_raster  # noqa: F401
from .quality_gate import evaluate, get_quality_thresholds  # noqa: F401
from .reframe import (  # noqa: F401
    LETTER,
    LETTER_LANDSCAPE,
    PAGE_SIZES,
    reframe,
    resolve_page_size,
    validate_bottom_fill,
)
from .retry_advice import (  # noqa: F401
    adjust_prompt,
    bottom_coverage_reinforcement,
    empty_band_addendum,
)
from .thresholds import (  # noqa: F401
    Thresholds,
    UnknownComplexityError,
    get_default_thresholds,
    load_thresholds,
    resolve_complexity,
)
