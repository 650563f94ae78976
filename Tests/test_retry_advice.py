import pytest

from PageProcessor.page_types import EmptyBands
from PageProcessor.retry_advice import (
    adjust_prompt,
    bottom_coverage_reinforcement,
    empty_band_addendum,
)


@pytest.mark.parametrize(
    "reason,expected",
    [
        ("ink ratio 41.2% exceeds max 28%", "REDUCE BLACK"),
        ("largest blob 18.00% exceeds max 15.00%", "NO SOLID FILLS"),
        ("texture/stippling noise: 812 tiny specks (max 500)", "NO texture"),
        ("subject height 20% of page (min 35%)", "zoom in"),
        ("bottom 15% band is 97% empty (max 92%)", "ground plane"),
    ],
)
def test_each_category_maps_to_its_fragment(reason, expected):
    advice = adjust_prompt([reason], 1)
    assert expected in advice
    assert len(advice.splitlines()) >= 1


def test_eye_reason_adds_eye_and_fill_fragments():
    advice = adjust_prompt(["suspected solid eye fills (2 medium blobs)"], 1)
    assert "EYES" in advice
    assert "NO SOLID FILLS" in advice


def test_face_region_reason_adds_eye_and_fill_fragments():
    advice = adjust_prompt(["face region fill: 1 solid eye-area blobs, largest 4.00%"], 1)
    assert "EYES" in advice
    assert "NO SOLID FILLS" in advice


def test_stippling_reason_does_not_add_fill_fragment():
    advice = adjust_prompt(["texture/stippling noise: 812 tiny specks (max 500)"], 1)
    assert "NO SOLID FILLS" not in advice
    assert "EYES" not in advice


def test_matching_is_case_insensitive():
    assert adjust_prompt("Bottom band is EMPTY", 1) == adjust_prompt("bottom band is empty", 1)


def test_second_attempt_escalates():
    reason = ["ink ratio 41.2% exceeds max 28%"]
    first = adjust_prompt(reason, 1)
    second = adjust_prompt(reason, 2)
    assert first != second
    assert second.startswith("CRITICAL")
    assert adjust_prompt(reason, 5) == second


def test_escalated_bottom_fragment_zooms_in():
    advice = adjust_prompt(["bottom 15% band is 97% empty (max 92%)"], 2)
    assert "zoom in 20%" in advice
    assert "bottom edge" in advice


def test_multiple_reasons_give_independent_fragments():
    advice = adjust_prompt(
        [
            "ink ratio 41.2% exceeds max 28%",
            "subject height 20% of page (min 35%)",
            "bottom 15% band is 97% empty (max 92%)",
        ],
        1,
    )
    assert "REDUCE BLACK" in advice
    assert "COMPOSITION" in advice
    assert "BOTTOM FIX" in advice


def test_unmatched_reasons_give_empty_text():
    assert adjust_prompt([], 1) == ""
    assert adjust_prompt(["something unrelated"], 3) == ""


def test_bottom_coverage_reinforcement_escalates():
    first = bottom_coverage_reinforcement(1)
    second = bottom_coverage_reinforcement(2)
    assert "ATTEMPT 1" in first
    assert "CRITICAL" in second and "ATTEMPT 2" in second


def test_empty_band_addendum():
    assert empty_band_addendum(None) == ""
    assert empty_band_addendum(EmptyBands(0.5, 0.5, False, False)) == ""

    text = empty_band_addendum(EmptyBands(0.99, 0.5, True, False))
    assert "TOP edge" in text
    assert "BOTTOM edge" not in text

    text = empty_band_addendum(EmptyBands(0.99, 0.99, True, True))
    assert "TOP edge" in text and "BOTTOM edge" in text
