"""
Color space conversions.

Scalar conversions work on single ``Color`` values; the ``*_array``
variants apply the same arithmetic, in the same order, to whole pixel
arrays through an array module (``numpy`` or ``cupy``) so that vectorized
backends reproduce the scalar results exactly.

Functions:
    rgb_to_hsv: RGB (0-255) -> HSV (H 0-360, S/V 0-100)
    hsv_to_rgb: HSV -> RGB (0-255)
    rgb_to_lab: RGB (0-255) -> CIE L*a*b* (D65)
    rgb_to_hsv_array / rgb_to_lab_array: vectorized equivalents
    round_half_up: rounding helper shared by every module
"""

import math
from typing import Any, Tuple

import numpy as np

from CS_Libs.ColorLib.color_types import Color, HsvColor, LabColor
from CS_Libs.constants import (
    D65_WHITE_X,
    D65_WHITE_Y,
    D65_WHITE_Z,
    HUE_FULL_CIRCLE,
    LAB_EPSILON,
    LAB_KAPPA_SLOPE,
    LAB_LINEAR_OFFSET,
    SRGB_GAMMA_EXPONENT,
    SRGB_GAMMA_OFFSET,
    SRGB_GAMMA_SCALE,
    SRGB_GAMMA_THRESHOLD,
    SRGB_LINEAR_DIVISOR,
    SRGB_TO_XYZ,
)


def round_half_up(value: Any, decimals: int = 0, xp: Any = None) -> Any:
    """
    Round halves towards positive infinity.

    Python's built-in ``round`` uses banker's rounding; pixel math here
    needs 0.5 -> 1 so that 127.5 maps to 128.

    Args:
        value: Scalar or array to round
        decimals: Number of decimal places to keep
        xp: Array module for array input; None for plain floats
    """
    factor = 10 ** decimals
    if xp is None:
        return math.floor(value * factor + 0.5) / factor
    return xp.floor(value * factor + 0.5) / factor


def rgb_to_hsv(color: Color) -> HsvColor:
    """
    Convert an RGB color to HSV.

    Args:
        color: RGB color (0-255 per channel); alpha is ignored

    Returns:
        HsvColor with hue in degrees [0, 360) and saturation/value in
        percent, each rounded to one decimal place
    """
    r = color.r / 255
    g = color.g / 255
    b = color.b / 255

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    v = max_c * 100
    s = 0.0 if max_c == 0 else (delta / max_c) * 100

    if delta == 0:
        h = 0.0
    elif max_c == r:
        h = ((g - b) / delta) * 60
        if h < 0:
            h += HUE_FULL_CIRCLE
    elif max_c == g:
        h = ((b - r) / delta + 2) * 60
    else:
        h = ((r - g) / delta + 4) * 60

    return HsvColor(round_half_up(h, 1), round_half_up(s, 1), round_half_up(v, 1))


def hsv_to_rgb(hsv: HsvColor) -> Color:
    """Convert HSV (H 0-360, S/V 0-100) back to an opaque RGB color."""
    h = hsv.h
    s = hsv.s / 100
    v = hsv.v / 100

    chroma = v * s
    x = chroma * (1 - abs(((h / 60) % 2) - 1))
    m = v - chroma

    if 0 <= h < 60:
        r1, g1, b1 = chroma, x, 0.0
    elif 60 <= h < 120:
        r1, g1, b1 = x, chroma, 0.0
    elif 120 <= h < 180:
        r1, g1, b1 = 0.0, chroma, x
    elif 180 <= h < 240:
        r1, g1, b1 = 0.0, x, chroma
    elif 240 <= h < 300:
        r1, g1, b1 = x, 0.0, chroma
    else:
        r1, g1, b1 = chroma, 0.0, x

    return Color(
        int(round_half_up((r1 + m) * 255)),
        int(round_half_up((g1 + m) * 255)),
        int(round_half_up((b1 + m) * 255)),
    )


def _gamma_decode(channel: float) -> float:
    if channel > SRGB_GAMMA_THRESHOLD:
        return ((channel + SRGB_GAMMA_OFFSET) / SRGB_GAMMA_SCALE) ** SRGB_GAMMA_EXPONENT
    return channel / SRGB_LINEAR_DIVISOR


def _lab_f(t: float) -> float:
    if t > LAB_EPSILON:
        return t ** (1 / 3)
    return LAB_KAPPA_SLOPE * t + LAB_LINEAR_OFFSET


def rgb_to_lab(color: Color) -> LabColor:
    """
    Convert an RGB color to CIE L*a*b* under the D65 illuminant.

    sRGB gamma decode -> linear RGB -> XYZ -> D65 normalization ->
    L*a*b* nonlinearity. Components are rounded to one decimal place.
    """
    r = _gamma_decode(color.r / 255)
    g = _gamma_decode(color.g / 255)
    b = _gamma_decode(color.b / 255)

    (m00, m01, m02), (m10, m11, m12), (m20, m21, m22) = SRGB_TO_XYZ
    x = r * m00 + g * m01 + b * m02
    y = r * m10 + g * m11 + b * m12
    z = r * m20 + g * m21 + b * m22

    fx = _lab_f(x / D65_WHITE_X)
    fy = _lab_f(y / D65_WHITE_Y)
    fz = _lab_f(z / D65_WHITE_Z)

    l = (116 * fy) - 16
    a = 500 * (fx - fy)
    b_lab = 200 * (fy - fz)

    return LabColor(round_half_up(l, 1), round_half_up(a, 1), round_half_up(b_lab, 1))


# ============================================================================
# Vectorized conversions
# ============================================================================

def _split_channels(rgb: Any, xp: Any) -> Tuple[Any, Any, Any]:
    rgb = xp.asarray(rgb, dtype=xp.float64)
    return rgb[..., 0] / 255, rgb[..., 1] / 255, rgb[..., 2] / 255


def rgb_to_hsv_array(rgb: Any, xp: Any = np) -> Tuple[Any, Any, Any]:
    """
    Vectorized ``rgb_to_hsv``.

    Args:
        rgb: Array of shape (..., 3) with 0-255 channel values
        xp: Array module (numpy or cupy)

    Returns:
        Tuple of (h, s, v) float64 arrays with the leading shape of rgb
    """
    r, g, b = _split_channels(rgb, xp)

    max_c = xp.maximum(xp.maximum(r, g), b)
    min_c = xp.minimum(xp.minimum(r, g), b)
    delta = max_c - min_c

    v = max_c * 100
    safe_max = xp.where(max_c == 0, 1.0, max_c)
    s = xp.where(max_c == 0, 0.0, (delta / safe_max) * 100)

    safe_delta = xp.where(delta == 0, 1.0, delta)
    h_red = ((g - b) / safe_delta) * 60
    h_red = xp.where(h_red < 0, h_red + HUE_FULL_CIRCLE, h_red)
    h_green = ((b - r) / safe_delta + 2) * 60
    h_blue = ((r - g) / safe_delta + 4) * 60

    h = xp.where(max_c == r, h_red, xp.where(max_c == g, h_green, h_blue))
    h = xp.where(delta == 0, 0.0, h)

    return round_half_up(h, 1, xp), round_half_up(s, 1, xp), round_half_up(v, 1, xp)


def _gamma_decode_array(channel: Any, xp: Any) -> Any:
    decoded = ((channel + SRGB_GAMMA_OFFSET) / SRGB_GAMMA_SCALE) ** SRGB_GAMMA_EXPONENT
    return xp.where(channel > SRGB_GAMMA_THRESHOLD, decoded, channel / SRGB_LINEAR_DIVISOR)


def _lab_f_array(t: Any, xp: Any) -> Any:
    # Negative inputs cannot occur for 0-255 channels; clip keeps the
    # discarded branch of the where() free of NaNs.
    cube_root = xp.maximum(t, 0.0) ** (1 / 3)
    return xp.where(t > LAB_EPSILON, cube_root, LAB_KAPPA_SLOPE * t + LAB_LINEAR_OFFSET)


def rgb_to_lab_array(rgb: Any, xp: Any = np) -> Tuple[Any, Any, Any]:
    """
    Vectorized ``rgb_to_lab``.

    Args:
        rgb: Array of shape (..., 3) with 0-255 channel values
        xp: Array module (numpy or cupy)

    Returns:
        Tuple of (l, a, b) float64 arrays
    """
    r, g, b = _split_channels(rgb, xp)
    r = _gamma_decode_array(r, xp)
    g = _gamma_decode_array(g, xp)
    b = _gamma_decode_array(b, xp)

    (m00, m01, m02), (m10, m11, m12), (m20, m21, m22) = SRGB_TO_XYZ
    x = r * m00 + g * m01 + b * m02
    y = r * m10 + g * m11 + b * m12
    z = r * m20 + g * m21 + b * m22

    fx = _lab_f_array(x / D65_WHITE_X, xp)
    fy = _lab_f_array(y / D65_WHITE_Y, xp)
    fz = _lab_f_array(z / D65_WHITE_Z, xp)

    l = (116 * fy) - 16
    a = 500 * (fx - fy)
    b_lab = 200 * (fy - fz)

    return round_half_up(l, 1, xp), round_half_up(a, 1, xp), round_half_up(b_lab, 1, xp)
