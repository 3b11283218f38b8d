"""
Color splash composition.

Merges an image with its grayscale rendition according to a target
color mask: matched pixels keep their RGBA values, everything else is
replaced by a gray level in R, G and B. The alpha channel is always
carried over from the source pixel.

Functions:
    compose: Merge original and grayscale pixels by a boolean mask
    apply_color_splash: Mask construction followed by composition
    convert_to_grayscale: Whole-image grayscale with alpha preserved
    blend_by_alpha: Per-pixel linear interpolation between two images
"""

from typing import Any, Sequence

import numpy as np

from CS_Libs.ColorLib.color_model import round_half_up
from CS_Libs.ColorLib.color_types import ColorSpace, GrayscaleMethod, Tolerance
from CS_Libs.ColorLib.grayscale import convert_array
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.mask_builder import build_mask_array
from CS_Libs.errors import InvalidImageDataError


def compose_array(pixels: Any, mask: Any, method: GrayscaleMethod, xp: Any = np) -> Any:
    """
    Compose an (H, W, 4) pixel array with an (H, W) mask on device xp.

    Returns:
        New uint8 array; the input is not modified
    """
    gray = convert_array(pixels[..., :3], method, xp)
    result = xp.empty_like(pixels)
    keep = mask[..., None]
    result[..., :3] = xp.where(keep, pixels[..., :3], gray[..., None])
    result[..., 3] = pixels[..., 3]
    return result


def compose(image: RasterImage, mask: Any, grayscale_method: Any) -> RasterImage:
    """
    Merge original and grayscale pixels according to a mask.

    Args:
        image: Source image (not modified)
        mask: Flat boolean sequence of length width*height
        grayscale_method: GrayscaleMethod member or its string value

    Returns:
        New RasterImage with unmatched pixels desaturated

    Raises:
        InvalidImageDataError: If the mask length does not match the image
        UnsupportedGrayscaleMethodError: If the method is not recognized
    """
    method = GrayscaleMethod.coerce(grayscale_method)
    mask_array = np.asarray(mask, dtype=bool).reshape(-1)
    if mask_array.size != image.pixel_count:
        raise InvalidImageDataError(
            f"Mask length {mask_array.size} does not match pixel count {image.pixel_count}"
        )
    mask_array = mask_array.reshape(image.height, image.width)
    return RasterImage(image.width, image.height, compose_array(image.pixels, mask_array, method))


def apply_color_splash(
    image: RasterImage,
    targets: Sequence[Any],
    tolerance: Tolerance,
    color_space: Any,
    grayscale_method: Any,
) -> RasterImage:
    """
    Preserve pixels matching any target color and desaturate the rest.

    Raises:
        UnsupportedColorSpaceError: If color_space is not recognized
        UnsupportedGrayscaleMethodError: If grayscale_method is not recognized
    """
    space = ColorSpace.coerce(color_space)
    method = GrayscaleMethod.coerce(grayscale_method)
    mask = build_mask_array(image.pixels[..., :3], targets, tolerance, space, np)
    return RasterImage(image.width, image.height, compose_array(image.pixels, mask, method))


def convert_to_grayscale(image: RasterImage, grayscale_method: Any = GrayscaleMethod.LUMINANCE) -> RasterImage:
    """Desaturate every pixel, keeping the alpha channel."""
    method = GrayscaleMethod.coerce(grayscale_method)
    mask = np.zeros((image.height, image.width), dtype=bool)
    return RasterImage(image.width, image.height, compose_array(image.pixels, mask, method))


def blend_by_alpha(original: RasterImage, fallback: RasterImage, alpha_mask: Any) -> RasterImage:
    """
    Interpolate between two images per pixel.

    Each channel becomes ``round(original * (1 - a) + fallback * a)`` with
    half-up rounding, so a = 0 keeps ``original`` and a = 1 takes
    ``fallback``.

    Args:
        original: Image shown where alpha is 0
        fallback: Image shown where alpha is 1
        alpha_mask: Flat sequence of width*height values in [0, 1]

    Raises:
        InvalidImageDataError: If sizes do not match
    """
    if original.size != fallback.size:
        raise InvalidImageDataError(
            f"Images must have the same size: {original.size} vs {fallback.size}"
        )
    alpha = np.asarray(alpha_mask, dtype=np.float64).reshape(-1)
    if alpha.size != original.pixel_count:
        raise InvalidImageDataError(
            f"Alpha mask length {alpha.size} does not match pixel count {original.pixel_count}"
        )
    alpha = alpha.reshape(original.height, original.width, 1)

    blended = (
        original.pixels.astype(np.float64) * (1 - alpha)
        + fallback.pixels.astype(np.float64) * alpha
    )
    pixels = np.clip(round_half_up(blended, 0, np), 0, 255).astype(np.uint8)
    return RasterImage(original.width, original.height, pixels)
