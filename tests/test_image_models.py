"""
Unit tests for the RasterImage model.

Tests construction from buffers, nested pixel rows and PIL images, and
validation of mismatched dimensions.
"""

import numpy as np
import pytest
from PIL import Image

from CS_Libs.ColorLib.color_types import Color
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.errors import ColorSplashError, InvalidImageDataError


class TestRasterImageConstruction:
    """Tests for RasterImage constructors."""

    def test_new_fills_color(self):
        image = RasterImage.new(3, 2, (10, 20, 30, 40))

        assert image.size == (3, 2)
        assert image.pixel_count == 6
        assert image.pixels.dtype == np.uint8
        assert image.get_pixel(2, 1) == Color(10, 20, 30, 40)

    def test_from_buffer(self):
        data = bytes(range(16))
        image = RasterImage.from_buffer(2, 2, data)

        assert image.get_pixel(1, 0) == Color(4, 5, 6, 7)
        assert image.get_pixel(0, 1) == Color(8, 9, 10, 11)
        assert list(image.data) == list(range(16))

    def test_from_buffer_wrong_length(self):
        with pytest.raises(InvalidImageDataError):
            RasterImage.from_buffer(2, 2, bytes(15))

    def test_from_pixels_defaults_alpha(self):
        image = RasterImage.from_pixels([[(1, 2, 3), (4, 5, 6, 7)]])

        assert image.get_pixel(0, 0) == Color(1, 2, 3, 255)
        assert image.get_pixel(1, 0) == Color(4, 5, 6, 7)

    def test_from_pixels_ragged_rows(self):
        with pytest.raises(InvalidImageDataError):
            RasterImage.from_pixels([[(0, 0, 0)], [(0, 0, 0), (0, 0, 0)]])

    def test_shape_mismatch(self):
        with pytest.raises(InvalidImageDataError):
            RasterImage(3, 2, np.zeros((3, 2, 4), dtype=np.uint8))

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            RasterImage(1, 1, np.zeros((1, 1, 3)))
        assert issubclass(InvalidImageDataError, ColorSplashError)


class TestRasterImageBehaviour:
    """Tests for copying, equality and PIL conversion."""

    def test_copy_is_independent(self):
        image = RasterImage.new(2, 2, (1, 1, 1, 1))
        clone = image.copy()
        clone.pixels[0, 0] = (9, 9, 9, 9)

        assert image.get_pixel(0, 0) == Color(1, 1, 1, 1)
        assert clone != image

    def test_equality_compares_pixels(self):
        assert RasterImage.new(2, 1, (5, 5, 5, 5)) == RasterImage.new(2, 1, (5, 5, 5, 5))
        assert RasterImage.new(2, 1, (5, 5, 5, 5)) != RasterImage.new(1, 2, (5, 5, 5, 5))

    def test_pil_round_trip(self):
        pil_image = Image.new("RGBA", (4, 3), (255, 0, 0, 128))
        image = RasterImage.from_pil(pil_image)

        assert image.size == (4, 3)
        assert image.get_pixel(3, 2) == Color(255, 0, 0, 128)

        back = image.to_pil()
        assert back.mode == "RGBA"
        assert back.size == (4, 3)
        assert back.getpixel((0, 0)) == (255, 0, 0, 128)

    def test_from_pil_converts_rgb(self):
        image = RasterImage.from_pil(Image.new("RGB", (2, 2), (0, 128, 255)))
        assert image.get_pixel(1, 1) == Color(0, 128, 255, 255)

    def test_from_pil_rejects_other_types(self):
        with pytest.raises(TypeError):
            RasterImage.from_pil("not an image")
