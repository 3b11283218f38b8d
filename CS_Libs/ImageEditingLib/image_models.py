"""
Image data models for Color Splash.

This module defines the raster container passed between every stage of
the engine.

Classes:
    RasterImage: Width, height and an RGBA8 pixel array (row-major)
"""

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from PIL import Image

from CS_Libs.ColorLib.color_types import Color
from CS_Libs.errors import InvalidImageDataError


@dataclass(eq=False)
class RasterImage:
    """RGBA raster with 8 bits per channel.

    Attributes:
        width: Image width in pixels
        height: Image height in pixels
        pixels: uint8 array of shape (height, width, 4)
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise InvalidImageDataError(
                f"Image dimensions must be non-negative, got {self.width}x{self.height}"
            )
        self.pixels = np.asarray(self.pixels)
        expected = (self.height, self.width, 4)
        if tuple(self.pixels.shape) != expected:
            raise InvalidImageDataError(
                f"Pixel array shape {tuple(self.pixels.shape)} does not match {expected}"
            )
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    @property
    def size(self):
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def data(self) -> np.ndarray:
        """Flat row-major RGBA buffer of length width*height*4."""
        return self.pixels.reshape(-1)

    def get_pixel(self, x: int, y: int) -> Color:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return Color(r, g, b, a)

    def copy(self) -> "RasterImage":
        return RasterImage(self.width, self.height, self.pixels.copy())

    @classmethod
    def new(cls, width: int, height: int, color: Sequence[int] = (0, 0, 0, 0)) -> "RasterImage":
        """Create an image filled with a single RGBA color."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = Color.coerce(color).as_tuple()
        return cls(width, height, pixels)

    @classmethod
    def from_buffer(cls, width: int, height: int, data: Any) -> "RasterImage":
        """
        Create from a flat RGBA buffer (bytes, bytearray, list or array).

        Raises:
            InvalidImageDataError: If the buffer length is not width*height*4
        """
        flat = np.array(data, dtype=np.uint8).reshape(-1)
        if flat.size != width * height * 4:
            raise InvalidImageDataError(
                f"Buffer length {flat.size} does not match {width}x{height}x4"
            )
        return cls(width, height, flat.reshape(height, width, 4))

    @classmethod
    def from_pixels(cls, rows: Sequence[Sequence[Sequence[int]]]) -> "RasterImage":
        """Create from nested rows of RGB or RGBA tuples."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise InvalidImageDataError(f"Row {y} has {len(row)} pixels, expected {width}")
            for x, value in enumerate(row):
                pixels[y, x] = Color.coerce(value).as_tuple()
        return cls(width, height, pixels)

    @classmethod
    def from_pil(cls, image: Any) -> "RasterImage":
        """
        Create from a PIL Image (converted to RGBA).

        Raises:
            TypeError: If image is not a PIL Image
        """
        if not hasattr(image, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        pixels = np.array(image, dtype=np.uint8)
        return cls(image.width, image.height, pixels)

    def to_pil(self) -> Any:
        """Return a PIL Image (RGBA mode) holding a copy of the pixels."""
        return Image.fromarray(self.pixels.copy())
