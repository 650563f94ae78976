"""Synthetic raster builders shared by the tests."""

from io import BytesIO
from typing import Tuple

import numpy as np
from PIL import Image


def blank_page(height: int = 200, width: int = 200) -> np.ndarray:
    """Return an all-white grayscale raster."""
    return np.full((height, width), 255, dtype=np.uint8)


def draw_rect(raster: np.ndarray, top: int, left: int, bottom: int, right: int, value: int = 0) -> np.ndarray:
    """Fill rows [top, bottom) and columns [left, right) in place and return the raster."""
    raster[top:bottom, left:right] = value
    return raster


def outlined_box(
    height: int,
    width: int,
    rows: Tuple[int, int],
    cols: Tuple[int, int],
    stroke: int,
) -> np.ndarray:
    """Return a white page with a single hollow rectangle of the given stroke width."""
    page = blank_page(height, width)
    draw_rect(page, rows[0], cols[0], rows[1], cols[1], 0)
    draw_rect(page, rows[0] + stroke, cols[0] + stroke, rows[1] - stroke, cols[1] - stroke, 255)
    return page


def png_bytes(raster: np.ndarray) -> bytes:
    buf = BytesIO()
    Image.fromarray(raster).save(buf, format="PNG")
    return buf.getvalue()
