"""
Target color mask construction.

A pixel is selected when it is similar to ANY of the target colors.
An empty target list selects nothing.
"""

from typing import Any, Sequence

import numpy as np

from CS_Libs.ColorLib.color_types import Color, ColorSpace, Tolerance
from CS_Libs.ColorLib.similarity import components_within_tolerance, pixel_components
from CS_Libs.ImageEditingLib.image_models import RasterImage


def build_mask_array(
    rgb: Any,
    targets: Sequence[Any],
    tolerance: Tolerance,
    color_space: Any,
    xp: Any = np,
) -> Any:
    """
    Match an (..., 3) RGB array against target colors.

    Args:
        rgb: Array of shape (..., 3), already on the device of xp
        targets: Target colors (Color or RGB/RGBA tuples)
        tolerance: Per-axis tolerance
        color_space: ColorSpace member or its string value
        xp: Array module (numpy or cupy)

    Returns:
        Boolean array with the leading shape of rgb

    Raises:
        UnsupportedColorSpaceError: If color_space is not recognized
    """
    space = ColorSpace.coerce(color_space)
    target_colors = [Color.coerce(target) for target in targets]
    leading_shape = tuple(rgb.shape[:-1])

    if not target_colors:
        return xp.zeros(leading_shape, dtype=bool)

    components = pixel_components(rgb, space, xp)
    mask = xp.zeros(leading_shape, dtype=bool)
    for target in target_colors:
        mask |= components_within_tolerance(components, target, tolerance, space, xp)
    return mask


def build_mask(
    image: RasterImage,
    targets: Sequence[Any],
    tolerance: Tolerance,
    color_space: Any,
) -> np.ndarray:
    """
    Build a per-pixel "matches any target" mask.

    Args:
        image: Source image
        targets: Target colors; empty selects nothing
        tolerance: Per-axis tolerance
        color_space: ColorSpace member or its string value

    Returns:
        Flat boolean array of length width*height (row-major)
    """
    mask = build_mask_array(image.pixels[..., :3], targets, tolerance, color_space, np)
    return mask.reshape(-1)
