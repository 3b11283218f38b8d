"""
ColorLib - Color models and color matching

This module provides color value types, color space conversions,
tolerance-based similarity and grayscale formulas.
"""

from CS_Libs.ColorLib.color_types import (
    Color,
    ColorDistance,
    ColorSpace,
    GrayscaleMethod,
    HsvColor,
    LabColor,
    PreviewQuality,
    RgbaColor,
    Tolerance,
)
from CS_Libs.ColorLib.color_model import rgb_to_hsv, hsv_to_rgb, rgb_to_lab
from CS_Libs.ColorLib.similarity import is_similar, calculate_distance, hue_difference
from CS_Libs.ColorLib.grayscale import convert as convert_to_gray

__all__ = [
    "Color",
    "ColorDistance",
    "ColorSpace",
    "GrayscaleMethod",
    "HsvColor",
    "LabColor",
    "PreviewQuality",
    "RgbaColor",
    "Tolerance",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "rgb_to_lab",
    "is_similar",
    "calculate_distance",
    "hue_difference",
    "convert_to_gray",
]
