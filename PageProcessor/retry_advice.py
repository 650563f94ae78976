"""Prompt fragments that steer the next generation attempt away from a failure."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from .page_types import EmptyBands

# (trigger substring, standard fragment, escalated fragment)
_ADJUSTMENTS: Tuple[Tuple[str, str, str], ...] = (
    (
        "ink ratio",
        "REDUCE BLACK: thinner lines, fewer details, more white space, simpler shapes.",
        "CRITICAL: much thinner lines, minimal detail, maximum white space, outline-only style.",
    ),
    (
        "blob",
        "NO SOLID FILLS and no black patches. Dark areas must be drawn as outlines only.",
        "ABSOLUTELY NO SOLID FILLS. Hair, clothing and shadows must be open outlines with white interiors.",
    ),
    (
        "eye",
        "EYES: small hollow circles with tiny dot pupils. No filled black eyes.",
        "CRITICAL EYES: draw eyes as empty outlined circles only; pupils no larger than a dot.",
    ),
    (
        "texture",
        "NO texture, stippling or halftone dots. Clean smooth lines only.",
        "CRITICAL: remove every dot, speck and hatching pattern. Flat white areas between clean lines.",
    ),
    (
        "height",
        "COMPOSITION: zoom in on the subject so it fills 70-80% of the frame height.",
        "CRITICAL COMPOSITION: move the camera much closer; the subject must span nearly the full frame height.",
    ),
    (
        "bottom",
        "BOTTOM FIX: the bottom 15% of the page must contain content.\n"
        "- Add a visible ground plane (grass, floor tiles, carpet, path, water edge)\n"
        "- Place 3-5 foreground objects near the bottom edge (flowers, pebbles, toys, leaves)\n"
        "- No floating subject with empty space below",
        "CRITICAL BOTTOM FIX: zoom in 20% and add a large foreground element.\n"
        "- Add a large ground element that touches the bottom edge (rug, pathway, grass patch)\n"
        "- Fill the bottom 20% with floor texture and 4+ small foreground props\n"
        "- Place the subject in the lower part of the frame, not centered vertically",
    ),
)


def adjust_prompt(failure_reasons: Union[str, Sequence[str]], attempt: int) -> str:
    """Return prompt fragments addressing each failure category.

    Matching is a case-insensitive substring test against the reasons, and
    each category contributes at most one fragment. From the second attempt
    on the escalated wording is used.

    Args:
        failure_reasons: A single reason string or the verdict's reason list.
        attempt: 1-based number of the attempt that just failed.

    Returns:
        Newline-joined fragments, or an empty string when nothing matched.
    """
    if isinstance(failure_reasons, str):
        text = failure_reasons.lower()
    else:
        text = "\n".join(failure_reasons).lower()

    fragments: List[str] = []
    for trigger, standard, escalated in _ADJUSTMENTS:
        if trigger in text:
            fragments.append(standard if attempt <= 1 else escalated)
    return "\n".join(fragments)


def bottom_coverage_reinforcement(attempt: int) -> str:
    """Return a standalone reinforcement block for an empty page bottom."""
    if attempt <= 1:
        return (
            f"=== BOTTOM FILL FIX (ATTEMPT {attempt}) ===\n"
            "The previous image had too much empty space at the bottom.\n"
            "REQUIRED FIXES:\n"
            "1. Add a ground plane that reaches the bottom edge (floor, grass, path, rug, tiles)\n"
            "2. Place 3+ foreground objects near the bottom margin\n"
            "3. Keep the subject in the lower-middle of the frame\n"
            "4. No floating subject with white space below"
        )
    return (
        f"=== CRITICAL BOTTOM FILL FIX (ATTEMPT {attempt}) ===\n"
        "The bottom is STILL too empty.\n"
        "MANDATORY CHANGES:\n"
        "1. Zoom in 20% and get closer to the subject\n"
        "2. Add a large floor element across the full width at the bottom\n"
        "3. Place 5+ foreground props touching the bottom edge\n"
        "4. Fill the bottom 20% with texture (wood grain, grass blades, tile pattern)\n"
        "5. Move the subject down so its center sits in the lower third\n"
        "6. No sky or ceiling in view"
    )


def empty_band_addendum(bands: Optional[EmptyBands]) -> str:
    """Return instructions for filling empty top or bottom bands, if any."""
    if bands is None or bands.valid:
        return ""
    parts = ["=== FIX EMPTY BANDS (MANDATORY) ==="]
    if bands.has_empty_top:
        parts.append(
            "Add visible elements at the TOP edge (clouds, ceiling, sky, wall detail, tree branches)."
        )
    if bands.has_empty_bottom:
        parts.append("Add ground or floor texture and foreground props that reach the BOTTOM edge.")
    parts.append("The image must have visible line-art content at both the top and bottom edges.")
    return "\n".join(parts)
