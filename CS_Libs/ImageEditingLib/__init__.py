"""
ImageEditingLib - Raster model, masks and composition

This module provides the RGBA raster container, target color masks,
splash composition and geometric selection areas.
"""

from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.mask_builder import build_mask
from CS_Libs.ImageEditingLib.splash_compositor import (
    apply_color_splash,
    blend_by_alpha,
    compose,
    convert_to_grayscale,
)
from CS_Libs.ImageEditingLib.area_processor import (
    AreaType,
    Point,
    SelectionArea,
    SelectionAreaProcessor,
    create_rectangle_selection,
    create_circle_selection,
    create_polygon_selection,
    create_freehand_selection,
)

__all__ = [
    "RasterImage",
    "build_mask",
    "apply_color_splash",
    "blend_by_alpha",
    "compose",
    "convert_to_grayscale",
    "AreaType",
    "Point",
    "SelectionArea",
    "SelectionAreaProcessor",
    "create_rectangle_selection",
    "create_circle_selection",
    "create_polygon_selection",
    "create_freehand_selection",
]
