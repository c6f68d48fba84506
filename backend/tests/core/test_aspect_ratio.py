"""Aspect Ratio — tests for simplification, standard matching and resizing.

Tests cover:
    - simplify reduces by gcd
    - match_standard for integer and decimal standards, and no-match cases
    - resize helpers keep the ratio
    - format_aspect_ratio labels and x.x fallbacks
"""

from app.core.aspect_ratio import (
    STANDARD_RATIOS,
    format_aspect_ratio,
    match_standard,
    resize_to_height,
    resize_to_pixels,
    resize_to_width,
    simplify,
)


# ─── simplify / match_standard ───────────────────────────────────

def test_simplify_full_hd():
    assert simplify(1920, 1080) == (16, 9)


def test_simplify_rounds_fractional_sides():
    assert simplify(1919.6, 1080.2) == (16, 9)


def test_simplify_keeps_exact_ratio_when_rounding_distorts_it():
    assert simplify(1.4, 1) == (7, 5)
    assert simplify(0.3, 0.4) == (3, 4)
    assert match_standard(0.3, 0.4) == "3:4"


def test_match_standard_integer_ratio():
    assert match_standard(1920, 1080) == "16:9"
    assert match_standard(1080, 1080) == "1:1"
    assert match_standard(1080, 1920) == "9:16"


def test_match_standard_decimal_ratio():
    assert match_standard(2350, 1000) == "2.35:1"


def test_match_standard_none_for_odd_sizes():
    assert match_standard(1234, 567) is None


def test_match_standard_rejects_non_positive():
    assert match_standard(1000, 0) is None


def test_standard_ratio_labels_unique():
    labels = [r.label for r in STANDARD_RATIOS]
    assert len(labels) == len(set(labels))


# ─── resizing ────────────────────────────────────────────────────

def test_resize_to_width_keeps_ratio():
    assert resize_to_width(16, 9, 1280) == (1280, 720)


def test_resize_to_height_keeps_ratio():
    assert resize_to_height(16, 9, 1080) == (1920, 1080)


def test_resize_to_pixels_square():
    assert resize_to_pixels(1, 1, 1_000_000) == (1000, 1000)


def test_resize_to_pixels_widescreen():
    assert resize_to_pixels(16, 9, 1920 * 1080) == (1920, 1080)


# ─── format_aspect_ratio ─────────────────────────────────────────

def test_format_common_label():
    assert format_aspect_ratio(16 / 9) == "16:9"
    assert format_aspect_ratio(1.02) == "1:1"


def test_format_wide_fallback():
    assert format_aspect_ratio(5.0) == "5.0:1"


def test_format_tall_fallback():
    assert format_aspect_ratio(0.2) == "1:5.0"


def test_format_zero_is_square():
    assert format_aspect_ratio(0) == "1:1"
