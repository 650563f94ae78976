import numpy as np
import pytest

from PageProcessor.composition import (
    analyze_composition,
    analyze_face_region,
    band_background_ratio,
    detect_empty_bands,
)
from Tests.helpers import blank_page, draw_rect, outlined_box


def test_subject_height_and_margins():
    page = draw_rect(blank_page(100, 50), 20, 10, 80, 40)
    stats = analyze_composition(page)
    assert stats.subject_height_ratio == pytest.approx(0.60)
    assert stats.top_margin_ratio == pytest.approx(0.20)
    assert stats.bottom_margin_ratio == pytest.approx(0.20)
    assert stats.has_content is True


def test_bottom_blank_ratio_measures_bottom_band():
    page = blank_page(100, 100)
    draw_rect(page, 90, 0, 100, 50)  # ink covers half of the last 10 rows
    stats = analyze_composition(page, bottom_band_fraction=0.10)
    assert stats.bottom_blank_ratio == pytest.approx(0.5)


def test_empty_page_composition():
    stats = analyze_composition(blank_page(40, 40))
    assert stats.has_content is False
    assert stats.subject_height_ratio == 0.0
    assert stats.bottom_blank_ratio == 1.0


def test_band_background_ratio_edges():
    page = blank_page(100, 10)
    draw_rect(page, 0, 0, 10, 10)
    assert band_background_ratio(page, 0.10, edge="top") == 0.0
    assert band_background_ratio(page, 0.10, edge="bottom") == 1.0
    with pytest.raises(ValueError):
        band_background_ratio(page, 0.10, edge="left")


def test_filled_eyes_in_face_region_are_flagged():
    page = blank_page(400, 400)
    yy, xx = np.ogrid[:400, :400]
    for cx in (160, 240):
        page[(yy - 170) ** 2 + (xx - cx) ** 2 <= 12 ** 2] = 0
    stats = analyze_face_region(page)
    assert stats.solid_blob_count == 2
    assert stats.has_fill_issue is True


def test_outlined_eyes_in_face_region_pass():
    page = blank_page(400, 400)
    yy, xx = np.ogrid[:400, :400]
    for cx in (160, 240):
        dist = (yy - 170) ** 2 + (xx - cx) ** 2
        page[(dist <= 14 ** 2) & (dist >= 11 ** 2)] = 0
    stats = analyze_face_region(page)
    assert stats.blob_count == 2
    assert stats.solid_blob_count == 0
    assert stats.has_fill_issue is False


def test_long_strokes_are_not_solid_fills():
    page = blank_page(400, 400)
    draw_rect(page, 150, 50, 156, 350)
    draw_rect(page, 200, 50, 206, 350)
    stats = analyze_face_region(page)
    assert stats.blob_count == 2
    assert stats.has_fill_issue is False


def test_large_solid_patch_in_face_region_is_flagged():
    page = draw_rect(blank_page(400, 400), 150, 150, 210, 210)
    stats = analyze_face_region(page)
    assert stats.has_fill_issue is True
    assert stats.largest_blob_ratio == pytest.approx(3600 / 160000)


def test_solid_patch_larger_than_eye_size_is_measured_whole():
    # 10000 px: far above the medium-blob range, still compact and dense.
    page = draw_rect(blank_page(500, 500), 160, 180, 260, 280)
    stats = analyze_face_region(page)
    assert stats.blob_count == 1
    assert stats.solid_blob_count == 1
    assert stats.largest_blob_ratio == pytest.approx(10000 / 250000)
    assert stats.has_fill_issue is True


def test_large_outline_in_face_region_is_not_a_fill():
    page = outlined_box(500, 500, (160, 290), (100, 400), 6)
    stats = analyze_face_region(page)
    assert stats.blob_count == 1
    assert stats.solid_blob_count == 0
    assert stats.has_fill_issue is False


def test_ink_outside_face_band_is_ignored():
    page = draw_rect(blank_page(400, 400), 300, 100, 340, 140)
    stats = analyze_face_region(page)
    assert stats.blob_count == 0
    assert stats.has_fill_issue is False


def test_detect_empty_bands():
    page = outlined_box(200, 100, (40, 200), (10, 90), 4)
    bands = detect_empty_bands(page)
    assert bands.has_empty_top is True
    assert bands.has_empty_bottom is False
    assert bands.valid is False
