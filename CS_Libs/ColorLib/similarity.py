"""
Color similarity detection.

Two colors are "similar" when every constrained tolerance axis holds:

- HSV: circular hue distance, absolute saturation and value differences,
  each checked against its own axis (hue, saturation, lightness).
- LAB / RGB: a single Euclidean distance checked against ``euclidean``.

An axis left as ``None`` in the Tolerance always passes.

Functions:
    is_similar: Tolerance test for a pair of colors
    calculate_distance: Diagnostic distance breakdown for a pair of colors
    hue_difference: Circular distance between two hues
    pixel_components / components_within_tolerance: vectorized matching
"""

import math
from typing import Any, Tuple

import numpy as np

from CS_Libs.ColorLib.color_model import (
    rgb_to_hsv,
    rgb_to_hsv_array,
    rgb_to_lab,
    rgb_to_lab_array,
    round_half_up,
)
from CS_Libs.ColorLib.color_types import Color, ColorDistance, ColorSpace, Tolerance
from CS_Libs.constants import HUE_FULL_CIRCLE


def hue_difference(hue1: float, hue2: float) -> float:
    """Minimum angular distance between two hues, in [0, 180]."""
    diff = abs(hue1 - hue2)
    return min(diff, HUE_FULL_CIRCLE - diff)


def _within(value: float, limit: Any) -> bool:
    return limit is None or value <= limit


def is_similar(color1: Any, color2: Any, tolerance: Tolerance, color_space: Any) -> bool:
    """
    Check whether two colors match within tolerance in a color space.

    Args:
        color1: First color (Color or RGB/RGBA tuple)
        color2: Second color (Color or RGB/RGBA tuple)
        tolerance: Per-axis tolerance
        color_space: ColorSpace member or its string value

    Returns:
        True if every constrained axis is within tolerance

    Raises:
        UnsupportedColorSpaceError: If color_space is not recognized
    """
    space = ColorSpace.coerce(color_space)
    c1 = Color.coerce(color1)
    c2 = Color.coerce(color2)

    if space is ColorSpace.HSV:
        hsv1 = rgb_to_hsv(c1)
        hsv2 = rgb_to_hsv(c2)
        return (
            _within(hue_difference(hsv1.h, hsv2.h), tolerance.hue)
            and _within(abs(hsv1.s - hsv2.s), tolerance.saturation)
            and _within(abs(hsv1.v - hsv2.v), tolerance.lightness)
        )

    if space is ColorSpace.LAB:
        lab1 = rgb_to_lab(c1)
        lab2 = rgb_to_lab(c2)
        dl, da, db = lab1.l - lab2.l, lab1.a - lab2.a, lab1.b - lab2.b
        return _within(math.sqrt(dl * dl + da * da + db * db), tolerance.euclidean)

    if space is ColorSpace.RGB:
        dr, dg, db = c1.r - c2.r, c1.g - c2.g, c1.b - c2.b
        return _within(math.sqrt(dr * dr + dg * dg + db * db), tolerance.euclidean)

    raise AssertionError(f"Unhandled color space: {space}")


def calculate_distance(color1: Any, color2: Any, color_space: Any) -> ColorDistance:
    """
    Compute the distance between two colors for diagnostics.

    HSV reports hue, saturation and value separately. LAB reports the
    Euclidean distance rounded to 0.1, RGB rounded to 0.01.

    Raises:
        UnsupportedColorSpaceError: If color_space is not recognized
    """
    space = ColorSpace.coerce(color_space)
    c1 = Color.coerce(color1)
    c2 = Color.coerce(color2)

    if space is ColorSpace.HSV:
        hsv1 = rgb_to_hsv(c1)
        hsv2 = rgb_to_hsv(c2)
        return ColorDistance(
            hue=hue_difference(hsv1.h, hsv2.h),
            saturation=abs(hsv1.s - hsv2.s),
            value=abs(hsv1.v - hsv2.v),
        )

    if space is ColorSpace.LAB:
        lab1 = rgb_to_lab(c1)
        lab2 = rgb_to_lab(c2)
        euclidean = math.sqrt(
            (lab1.l - lab2.l) ** 2 + (lab1.a - lab2.a) ** 2 + (lab1.b - lab2.b) ** 2
        )
        return ColorDistance(euclidean=round_half_up(euclidean, 1))

    if space is ColorSpace.RGB:
        euclidean = math.sqrt(
            (c1.r - c2.r) ** 2 + (c1.g - c2.g) ** 2 + (c1.b - c2.b) ** 2
        )
        return ColorDistance(euclidean=round_half_up(euclidean, 2))

    raise AssertionError(f"Unhandled color space: {space}")


# ============================================================================
# Vectorized matching
# ============================================================================

def pixel_components(rgb: Any, color_space: ColorSpace, xp: Any = np) -> Tuple[Any, Any, Any]:
    """
    Convert an (..., 3) RGB array into the components compared in a space.

    Computed once per image and reused for every target color.
    """
    if color_space is ColorSpace.HSV:
        return rgb_to_hsv_array(rgb, xp)
    if color_space is ColorSpace.LAB:
        return rgb_to_lab_array(rgb, xp)
    if color_space is ColorSpace.RGB:
        rgb = xp.asarray(rgb, dtype=xp.float64)
        return rgb[..., 0], rgb[..., 1], rgb[..., 2]
    raise AssertionError(f"Unhandled color space: {color_space}")


def _target_components(target: Color, color_space: ColorSpace) -> Tuple[float, float, float]:
    if color_space is ColorSpace.HSV:
        return tuple(rgb_to_hsv(target))
    if color_space is ColorSpace.LAB:
        return tuple(rgb_to_lab(target))
    return (float(target.r), float(target.g), float(target.b))


def components_within_tolerance(
    components: Tuple[Any, Any, Any],
    target: Color,
    tolerance: Tolerance,
    color_space: ColorSpace,
    xp: Any = np,
) -> Any:
    """
    Vectorized ``is_similar`` of every pixel against one target.

    Args:
        components: Output of ``pixel_components`` for the same space
        target: Target color
        tolerance: Per-axis tolerance
        color_space: Resolved ColorSpace member
        xp: Array module

    Returns:
        Boolean array with the shape of each component array
    """
    c0, c1, c2 = components
    t0, t1, t2 = _target_components(target, color_space)
    matched = xp.ones(c0.shape, dtype=bool)

    if color_space is ColorSpace.HSV:
        if tolerance.hue is not None:
            diff = xp.abs(c0 - t0)
            matched &= xp.minimum(diff, HUE_FULL_CIRCLE - diff) <= tolerance.hue
        if tolerance.saturation is not None:
            matched &= xp.abs(c1 - t1) <= tolerance.saturation
        if tolerance.lightness is not None:
            matched &= xp.abs(c2 - t2) <= tolerance.lightness
        return matched

    if tolerance.euclidean is not None:
        d0, d1, d2 = c0 - t0, c1 - t1, c2 - t2
        matched &= xp.sqrt(d0 * d0 + d1 * d1 + d2 * d2) <= tolerance.euclidean
    return matched
