"""Image decoding and encoding helpers for page analysis."""

from __future__ import annotations

from io import BytesIO
from typing import Tuple, Union, cast

import numpy as np
from PIL import Image

RasterInput = Union[bytes, bytearray, memoryview, np.ndarray, Image.Image]

_WHITE = (255, 255, 255, 255)


class DecodeError(ValueError):
    """Raised when raster input cannot be decoded or has an unusable shape."""


def _flatten_onto_white(img: Image.Image) -> Image.Image:
    """Composite transparent pixels onto white and return an RGB or L image."""
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )
    if has_alpha:
        background = Image.new("RGBA", img.size, _WHITE)
        return Image.alpha_composite(background, img.convert("RGBA")).convert("RGB")
    if img.mode == "L":
        return img
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def load_rgb_image(image_bytes: bytes) -> Image.Image:
    """Decode image bytes into an RGB PIL Image with transparency flattened to white."""
    try:
        img = cast(Image.Image, Image.open(BytesIO(image_bytes)))
        img.load()
    except Exception as exc:
        raise DecodeError("Invalid image bytes") from exc

    img = _flatten_onto_white(img)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def _coerce_array(arr: np.ndarray) -> np.ndarray:
    if arr.size == 0:
        raise DecodeError("Raster is empty")
    if arr.dtype == np.bool_:
        # True marks ink, matching the binary raster convention.
        arr = np.where(arr, 0, 255).astype(np.uint8)
    elif arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)

    if arr.ndim == 2:
        return arr
    if arr.ndim == 3 and arr.shape[2] == 1:
        return arr[:, :, 0]
    if arr.ndim == 3 and arr.shape[2] == 3:
        return arr
    if arr.ndim == 3 and arr.shape[2] == 4:
        img = Image.fromarray(arr)
        return np.asarray(_flatten_onto_white(img))
    raise DecodeError(f"Unsupported raster shape {arr.shape}")


def load_raster(data: RasterInput) -> np.ndarray:
    """Return a uint8 raster as an H×W grayscale or H×W×3 RGB array.

    Args:
        data: Encoded image bytes, a PIL image or a NumPy array.

    Returns:
        A new array; the caller's input is never modified.

    Raises:
        DecodeError: If the bytes cannot be decoded or the array shape is
            not a grayscale, RGB or RGBA raster.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.asarray(load_rgb_image(bytes(data))).copy()
    if isinstance(data, Image.Image):
        return np.asarray(_flatten_onto_white(data)).copy()
    if isinstance(data, np.ndarray):
        return _coerce_array(data).copy()
    raise DecodeError(f"Unsupported raster input type {type(data).__name__}")


def to_rgb_array(raster: np.ndarray) -> np.ndarray:
    """Expand a grayscale raster to three channels; RGB input is returned as-is."""
    if raster.ndim == 2:
        return np.stack([raster] * 3, axis=-1)
    return raster


def encode_image_bytes(
    raster: Union[np.ndarray, Image.Image], *, format: str = "png", quality: int = 90
) -> Tuple[bytes, str]:
    img = raster if isinstance(raster, Image.Image) else Image.fromarray(raster)
    buf = BytesIO()
    save_kwargs = {"format": format.upper()}
    if format.lower() == "jpeg":
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        save_kwargs["quality"] = quality
        save_kwargs["optimize"] = True
    img.save(buf, **save_kwargs)
    mime = f"image/{'jpeg' if format.lower() == 'jpeg' else 'png'}"
    return buf.getvalue(), mime
