"""Utility to test the coloring-page pipeline locally.

This script reads an image file from disk, runs the quality gate and, when
the page passes (or ``--force`` is given), reframes it onto a print page.
The binarized raster and the reframed page are written to an output
directory. To invoke it, run::

    python test.py --input /path/to/page.png --output out_dir

Retry advice for a failed page is printed so prompt changes can be tried
by hand. The script never calls an image generation service.
"""
import argparse
import logging
from pathlib import Path

from PageProcessor import (
    PAGE_SIZES,
    adjust_prompt,
    detect_empty_bands,
    empty_band_addendum,
    encode_image_bytes,
    evaluate,
    reframe,
    resolve_page_size,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Test coloring-page quality checks locally")
    parser.add_argument("--input", required=True, help="Path to input image")
    parser.add_argument("--output", required=True, help="Directory to save outputs")
    parser.add_argument("--complexity", default="medium", help="Complexity tier (simple, medium, detailed, kids, ultra)")
    parser.add_argument("--attempt", type=int, default=1, help="Attempt number used for retry advice")
    parser.add_argument("--margin", type=float, default=2.0, help="Page margin in percent")
    parser.add_argument("--page", default="letter", choices=sorted(PAGE_SIZES), help="Target page preset")
    parser.add_argument("--force", action="store_true", help="Reframe even if the quality gate fails")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    input_path = Path(args.input)
    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    with input_path.open("rb") as f:
        data = f.read()

    verdict = evaluate(data, args.complexity)
    metrics = verdict.metrics
    print(f"Passed: {verdict.passed}")
    print(f"Ink ratio: {metrics.ink_ratio:.1%} (max {metrics.max_ink_ratio:.0%})")
    print(f"Largest blob: {metrics.largest_blob_ratio:.2%}, tiny blobs: {metrics.tiny_blob_count}")
    print(f"Subject height: {metrics.subject_height_ratio:.0%}, bottom blank: {metrics.bottom_blank_ratio:.0%}")
    if verdict.degraded:
        print("OpenCV unavailable; gate was skipped.")

    corrected_path = output_dir / f"{input_path.stem}_binary.png"
    with corrected_path.open("wb") as out_file:
        out_file.write(encode_image_bytes(verdict.corrected)[0])
    print(f"Saved {corrected_path}")

    if not verdict.passed:
        for reason in verdict.reasons:
            print(f"  - {reason}")
        advice = "\n".join(
            part
            for part in (
                adjust_prompt(verdict.reasons, args.attempt),
                empty_band_addendum(detect_empty_bands(verdict.corrected)),
            )
            if part
        )
        if advice:
            print("Retry advice:")
            print(advice)
        if not args.force:
            return

    result = reframe(verdict.corrected, args.margin, page_size=resolve_page_size(args.page))
    page_path = output_dir / f"{input_path.stem}_{args.page}.png"
    with page_path.open("wb") as out_file:
        out_file.write(encode_image_bytes(result.image)[0])
    print(
        f"Saved {page_path} (margin {result.margin_percent}%, retried={result.was_retried}, "
        f"bottom empty {result.validation.bottom_empty_ratio:.0%})"
    )


if __name__ == "__main__":
    main()
