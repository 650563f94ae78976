from PageProcessor.bounds import detect_bounds, expand_bounds
from PageProcessor.page_types import BoundingBox
from Tests.helpers import blank_page, draw_rect


def test_detect_bounds_finds_inclusive_extent():
    page = draw_rect(blank_page(100, 80), 10, 20, 30, 50)
    box = detect_bounds(page)
    assert box == BoundingBox(left=20, top=10, right=49, bottom=29)
    assert box.width == 30
    assert box.height == 20
    assert box.as_crop_box() == (20, 10, 50, 30)


def test_detect_bounds_ignores_near_white_pixels():
    page = blank_page(50, 50)
    page[5, 5] = 250
    page[40, 40] = 200
    box = detect_bounds(page, white_threshold=245)
    assert (box.left, box.top, box.right, box.bottom) == (40, 40, 40, 40)


def test_detect_bounds_flags_empty_raster():
    box = detect_bounds(blank_page(60, 40))
    assert box.has_content is False
    assert (box.left, box.top, box.right, box.bottom) == (0, 0, 39, 59)


def test_expand_bounds_pads_and_clips():
    box = BoundingBox(left=2, top=50, right=90, bottom=60)
    expanded = expand_bounds(box, width=100, height=100, padding_fraction=0.05)
    assert expanded == BoundingBox(left=0, top=45, right=95, bottom=65)

    edge = BoundingBox(left=0, top=0, right=99, bottom=99)
    assert expand_bounds(edge, 100, 100, 0.1) == edge
