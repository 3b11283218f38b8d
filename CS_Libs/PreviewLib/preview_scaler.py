"""
Preview sizing and nearest-neighbor resizing.

Quality tiers map to scale factors:
    LOW 1/8, MEDIUM 1/4, HIGH 1/2, REALTIME picked from the pixel count
    (1/8 above 2 MP, 1/4 above 0.5 MP, else 1/2).

The scaled size is then clamped so its larger side does not exceed
``max_dim``. Images that already fit within ``max_dim`` are never
downscaled.
"""

from typing import Any, NamedTuple

import numpy as np

from CS_Libs.ColorLib.color_model import round_half_up
from CS_Libs.ColorLib.color_types import PreviewQuality
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.constants import (
    DEFAULT_MAX_PREVIEW_SIZE,
    HIGH_QUALITY_SCALE,
    LOW_QUALITY_SCALE,
    MEDIUM_QUALITY_SCALE,
    REALTIME_LARGE_PIXEL_COUNT,
    REALTIME_MEDIUM_PIXEL_COUNT,
)


class PreviewSize(NamedTuple):
    width: int
    height: int


def scale_factor(width: int, height: int, quality: Any) -> float:
    """
    Scale factor for a quality tier.

    Raises:
        UnsupportedPreviewQualityError: If quality is not recognized
    """
    quality = PreviewQuality.coerce(quality)

    if quality is PreviewQuality.LOW:
        return LOW_QUALITY_SCALE
    if quality is PreviewQuality.MEDIUM:
        return MEDIUM_QUALITY_SCALE
    if quality is PreviewQuality.HIGH:
        return HIGH_QUALITY_SCALE
    if quality is PreviewQuality.REALTIME:
        pixel_count = width * height
        if pixel_count > REALTIME_LARGE_PIXEL_COUNT:
            return LOW_QUALITY_SCALE
        if pixel_count > REALTIME_MEDIUM_PIXEL_COUNT:
            return MEDIUM_QUALITY_SCALE
        return HIGH_QUALITY_SCALE
    raise AssertionError(f"Unhandled preview quality: {quality}")


def optimal_size(
    width: int,
    height: int,
    quality: Any,
    max_dim: int = DEFAULT_MAX_PREVIEW_SIZE,
) -> PreviewSize:
    """
    Compute preview dimensions for an image.

    Args:
        width: Source width
        height: Source height
        quality: PreviewQuality member or its string value
        max_dim: Upper bound for the larger preview side

    Returns:
        PreviewSize; the source size when it already fits within max_dim
        or has no pixels
    """
    if width == 0 or height == 0:
        return PreviewSize(width, height)

    factor = scale_factor(width, height, quality)

    target_width = int(round_half_up(width * factor))
    target_height = int(round_half_up(height * factor))

    if target_width > max_dim or target_height > max_dim:
        aspect_ratio = width / height
        if target_width > target_height:
            target_width = max_dim
            target_height = int(round_half_up(max_dim / aspect_ratio))
        else:
            target_height = max_dim
            target_width = int(round_half_up(max_dim * aspect_ratio))

    target_width = max(target_width, 1)
    target_height = max(target_height, 1)

    if width <= max_dim and height <= max_dim:
        return PreviewSize(width, height)

    return PreviewSize(target_width, target_height)


def resize(image: RasterImage, target_width: int, target_height: int) -> RasterImage:
    """
    Nearest-neighbor resize.

    Target pixel (tx, ty) samples source pixel
    (floor(tx * src_w / target_w), floor(ty * src_h / target_h)).
    """
    if target_width == image.width and target_height == image.height:
        return image.copy()

    source_x = (np.arange(target_width, dtype=np.int64) * image.width) // target_width
    source_y = (np.arange(target_height, dtype=np.int64) * image.height) // target_height
    pixels = image.pixels[source_y[:, None], source_x[None, :]]
    return RasterImage(target_width, target_height, pixels)
