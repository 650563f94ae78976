import io

import numpy as np
import pytest
from PIL import Image

from PageProcessor.image_io import (
    DecodeError,
    encode_image_bytes,
    load_raster,
    load_rgb_image,
    to_rgb_array,
)
from Tests.helpers import blank_page, png_bytes


def test_load_rgb_image_invalid_bytes():
    with pytest.raises(ValueError):
        load_rgb_image(b"not an image")


def test_load_raster_invalid_bytes_raises_decode_error():
    with pytest.raises(DecodeError):
        load_raster(b"\x89PNG broken")


def test_load_raster_decodes_png_bytes_to_rgb():
    page = blank_page(30, 40)
    page[5:10, 5:10] = 0
    raster = load_raster(png_bytes(page))
    assert raster.shape == (30, 40, 3)
    assert raster.dtype == np.uint8
    assert raster[7, 7].tolist() == [0, 0, 0]


def test_load_raster_flattens_transparency_onto_white():
    rgba = np.zeros((4, 4, 4), dtype=np.uint8)
    rgba[0, 0] = (0, 0, 0, 255)
    raster = load_raster(rgba)
    assert raster.shape == (4, 4, 3)
    assert raster[0, 0].tolist() == [0, 0, 0]
    assert raster[3, 3].tolist() == [255, 255, 255]


def test_load_raster_does_not_alias_input():
    page = blank_page(10, 10)
    raster = load_raster(page)
    raster[0, 0] = 0
    assert page[0, 0] == 255


def test_load_raster_accepts_boolean_ink_masks():
    mask = np.zeros((3, 3), dtype=bool)
    mask[1, 1] = True
    raster = load_raster(mask)
    assert raster[1, 1] == 0
    assert raster[0, 0] == 255


def test_load_raster_accepts_pil_images():
    img = Image.new("RGB", (8, 6), color="white")
    assert load_raster(img).shape == (6, 8, 3)


@pytest.mark.parametrize(
    "arr",
    [np.zeros((0, 5), dtype=np.uint8), np.zeros((4, 4, 2), dtype=np.uint8)],
)
def test_load_raster_rejects_unusable_shapes(arr):
    with pytest.raises(DecodeError):
        load_raster(arr)


def test_to_rgb_array_expands_grayscale():
    assert to_rgb_array(blank_page(5, 7)).shape == (5, 7, 3)


def test_encode_image_bytes_png_and_jpeg():
    page = blank_page(10, 20)
    data, mime = encode_image_bytes(page)
    assert mime == "image/png"
    assert Image.open(io.BytesIO(data)).size == (20, 10)

    data, mime = encode_image_bytes(page, format="jpeg", quality=80)
    assert mime == "image/jpeg"
    assert Image.open(io.BytesIO(data)).format == "JPEG"
