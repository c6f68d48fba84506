"""Aspect Ratio Math — simplification, standard-ratio matching and resizing.

Invariants:
    - simplify() divides the rounded sides by their gcd, unless rounding moves the
      ratio by more than 1%; then the exact ratio is reduced (1.4x1 -> 7:5)
    - Integer standard ratios match when both sides simplify to the same pair;
      decimal ones (2.35:1) match width/height within 0.01
    - Resizing preserves the ratio and rounds to whole pixels
"""

import math
from dataclasses import dataclass
from fractions import Fraction


@dataclass(frozen=True)
class StandardRatio:
    label: str
    width: float
    height: float
    description: str

    @property
    def is_decimal(self) -> bool:
        return "." in self.label


STANDARD_RATIOS: tuple[StandardRatio, ...] = (
    StandardRatio("1:1", 1, 1, "Popular for social media profiles and posts."),
    StandardRatio("3:2", 3, 2, "Classic - Common in photography and print sizes."),
    StandardRatio("4:3", 4, 3, "Standard - Used in older TV screens and computer monitors."),
    StandardRatio("4:5", 4, 5, "Instagram - Feed posts for display and photography."),
    StandardRatio("16:9", 16, 9, "Widescreen - The standard for HD videos and most modern TVs."),
    StandardRatio("16:10", 16, 10, "A more recent display aspect ratio."),
    StandardRatio("21:9", 21, 9, "Ultrawide - Used for ultrawide cinema."),
    StandardRatio("2.35:1", 2.35, 1, "Cinemascope - Another widescreen ratio."),
    StandardRatio("2.39:1", 2.39, 1, "Anamorphic - Yet another widescreen ratio."),
    StandardRatio("2:3", 2, 3, "Portrait - Vertical format."),
    StandardRatio("3:4", 3, 4, "Portrait - Vertical format."),
    StandardRatio("9:16", 9, 16, "Mobile - Vertical widescreen for portrait social media."),
    StandardRatio("1.91:1", 1.91, 1, "Common social media horizontal."),
)

# Labels used when describing an analyzed image (looser 0.1 tolerance).
_COMMON_LABELS: tuple[tuple[float, str], ...] = (
    (1.0, "1:1"), (4 / 3, "4:3"), (3 / 2, "3:2"), (16 / 9, "16:9"),
    (21 / 9, "21:9"), (9 / 16, "9:16"), (2 / 3, "2:3"), (3 / 4, "3:4"),
)


ROUNDING_TOLERANCE: float = 0.01


def simplify(width: float, height: float) -> tuple[int, int]:
    w, h = round(width), round(height)
    if width <= 0 or height <= 0:
        divisor = math.gcd(w, h) or 1
        return w // divisor, h // divisor
    exact = width / height
    if w and h and abs(w / h - exact) <= exact * ROUNDING_TOLERANCE:
        divisor = math.gcd(w, h)
        return w // divisor, h // divisor
    reduced = Fraction(exact).limit_denominator(1000)
    return reduced.numerator, reduced.denominator


def match_standard(width: float, height: float) -> str | None:
    """Label of the standard ratio this size matches, if any."""
    if width <= 0 or height <= 0:
        return None
    simple_w, simple_h = simplify(width, height)
    current = width / height
    for ratio in STANDARD_RATIOS:
        if ratio.is_decimal:
            if abs(current - ratio.width / ratio.height) < 0.01:
                return ratio.label
        elif simplify(ratio.width, ratio.height) == (simple_w, simple_h):
            return ratio.label
    return None


def resize_to_width(ratio_w: float, ratio_h: float, new_width: float) -> tuple[int, int]:
    return round(new_width), round(new_width / ratio_w * ratio_h)


def resize_to_height(ratio_w: float, ratio_h: float, new_height: float) -> tuple[int, int]:
    return round(new_height / ratio_h * ratio_w), round(new_height)


def resize_to_pixels(ratio_w: float, ratio_h: float, pixel_count: float) -> tuple[int, int]:
    """Dimensions with the given ratio whose area is close to pixel_count."""
    scale = math.sqrt(pixel_count / (ratio_w * ratio_h))
    return round(ratio_w * scale), round(ratio_h * scale)


def format_aspect_ratio(ratio: float) -> str:
    """Closest common label within 0.1, else "x.x:1" / "1:x.x"."""
    if not ratio or not math.isfinite(ratio):
        return "1:1"
    for value, label in _COMMON_LABELS:
        if abs(ratio - value) < 0.1:
            return label
    if ratio > 1:
        return f"{ratio:.1f}:1"
    return f"1:{1 / ratio:.1f}"
