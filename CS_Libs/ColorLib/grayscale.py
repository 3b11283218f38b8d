"""
Grayscale conversion formulas.

- luminance:    round(0.299*R + 0.587*G + 0.114*B)
- average:      round((R + G + B) / 3)
- desaturation: round((max(R,G,B) + min(R,G,B)) / 2)

Rounding is half-up.
"""

from typing import Any

import numpy as np

from CS_Libs.ColorLib.color_model import round_half_up
from CS_Libs.ColorLib.color_types import Color, GrayscaleMethod
from CS_Libs.constants import LUMINANCE_WEIGHT_B, LUMINANCE_WEIGHT_G, LUMINANCE_WEIGHT_R


def convert(color: Any, method: Any = GrayscaleMethod.LUMINANCE) -> int:
    """
    Compute the gray level of a color.

    Args:
        color: Color or RGB/RGBA tuple
        method: GrayscaleMethod member or its string value

    Returns:
        Gray level (0-255)
    """
    method = GrayscaleMethod.coerce(method)
    c = Color.coerce(color)
    r, g, b = c.r, c.g, c.b

    if method is GrayscaleMethod.LUMINANCE:
        gray = LUMINANCE_WEIGHT_R * r + LUMINANCE_WEIGHT_G * g + LUMINANCE_WEIGHT_B * b
    elif method is GrayscaleMethod.AVERAGE:
        gray = (r + g + b) / 3
    elif method is GrayscaleMethod.DESATURATION:
        gray = (max(r, g, b) + min(r, g, b)) / 2
    else:
        raise AssertionError(f"Unhandled grayscale method: {method}")

    return int(round_half_up(gray))


def convert_array(rgb: Any, method: GrayscaleMethod, xp: Any = np) -> Any:
    """
    Vectorized ``convert``.

    Args:
        rgb: Array of shape (..., 3) with 0-255 channel values
        method: Resolved GrayscaleMethod member
        xp: Array module (numpy or cupy)

    Returns:
        uint8 array with the leading shape of rgb
    """
    rgb = xp.asarray(rgb, dtype=xp.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    if method is GrayscaleMethod.LUMINANCE:
        gray = LUMINANCE_WEIGHT_R * r + LUMINANCE_WEIGHT_G * g + LUMINANCE_WEIGHT_B * b
    elif method is GrayscaleMethod.AVERAGE:
        gray = (r + g + b) / 3
    elif method is GrayscaleMethod.DESATURATION:
        gray = (xp.maximum(xp.maximum(r, g), b) + xp.minimum(xp.minimum(r, g), b)) / 2
    else:
        raise AssertionError(f"Unhandled grayscale method: {method}")

    return round_half_up(gray, 0, xp).astype(xp.uint8)
