"""
Tests for mask construction and splash composition.

Tests cover:
- Empty and multi-target masks
- Alpha preservation during composition
- Mask length validation
- The red/green/blue strip end-to-end case
- Alpha blending between two images
"""

import unittest

import numpy as np
import pytest

from CS_Libs.ColorLib.color_types import Color, ColorSpace, GrayscaleMethod, Tolerance
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.mask_builder import build_mask
from CS_Libs.ImageEditingLib.splash_compositor import (
    apply_color_splash,
    blend_by_alpha,
    compose,
    convert_to_grayscale,
)
from CS_Libs.errors import InvalidImageDataError, UnsupportedColorSpaceError


class TestBuildMask(unittest.TestCase):
    """Test target color masks."""

    def setUp(self):
        self.image = RasterImage.from_pixels([
            [(255, 0, 0), (0, 255, 0), (0, 0, 255)],
            [(250, 5, 5), (128, 128, 128), (0, 250, 10)],
        ])
        self.tolerance = Tolerance(hue=10, saturation=10, lightness=10)

    def test_empty_targets_select_nothing(self):
        mask = build_mask(self.image, [], self.tolerance, ColorSpace.HSV)

        self.assertEqual(len(mask), self.image.width * self.image.height)
        self.assertFalse(mask.any())

    def test_single_target(self):
        mask = build_mask(self.image, [Color(255, 0, 0)], self.tolerance, ColorSpace.HSV)
        self.assertEqual(list(mask), [True, False, False, True, False, False])

    def test_targets_are_or_combined(self):
        mask = build_mask(self.image, [Color(255, 0, 0), (0, 255, 0)], self.tolerance, "hsv")
        self.assertEqual(list(mask), [True, True, False, True, False, True])

    def test_unknown_space_fails_fast(self):
        with self.assertRaises(UnsupportedColorSpaceError):
            build_mask(self.image, [Color(255, 0, 0)], self.tolerance, "xyz")


class TestCompose:
    """Tests for compose."""

    def test_alpha_preserved_regardless_of_mask(self, noisy_image):
        rng = np.random.default_rng(99)
        mask = rng.integers(0, 2, size=noisy_image.pixel_count).astype(bool)

        result = compose(noisy_image, mask, GrayscaleMethod.AVERAGE)

        np.testing.assert_array_equal(result.pixels[..., 3], noisy_image.pixels[..., 3])

    def test_masked_pixels_copied_verbatim(self, noisy_image):
        mask = np.ones(noisy_image.pixel_count, dtype=bool)
        result = compose(noisy_image, mask, GrayscaleMethod.LUMINANCE)
        assert result == noisy_image

    def test_unmasked_pixels_are_gray(self, noisy_image):
        mask = np.zeros(noisy_image.pixel_count, dtype=bool)
        result = compose(noisy_image, mask, GrayscaleMethod.DESATURATION)

        rgb = result.pixels[..., :3]
        assert (rgb[..., 0] == rgb[..., 1]).all()
        assert (rgb[..., 1] == rgb[..., 2]).all()

    def test_source_not_modified(self, noisy_image):
        before = noisy_image.copy()
        compose(noisy_image, np.zeros(noisy_image.pixel_count, dtype=bool), "luminance")
        assert noisy_image == before

    def test_mask_length_mismatch(self, noisy_image):
        with pytest.raises(InvalidImageDataError):
            compose(noisy_image, [True, False], GrayscaleMethod.LUMINANCE)


class TestApplyColorSplash:
    """End-to-end mask + composition."""

    def test_rgb_strip_keeps_red(self, rgb_strip):
        result = apply_color_splash(
            rgb_strip,
            [Color(255, 0, 0)],
            Tolerance(hue=10, saturation=10, lightness=10),
            ColorSpace.HSV,
            GrayscaleMethod.LUMINANCE,
        )

        assert result.get_pixel(0, 0) == Color(255, 0, 0, 255)
        assert result.get_pixel(1, 0) == Color(150, 150, 150, 255)
        assert result.get_pixel(2, 0) == Color(29, 29, 29, 255)

    def test_no_targets_is_full_grayscale(self, rgb_strip):
        result = apply_color_splash(rgb_strip, [], Tolerance(), ColorSpace.RGB, GrayscaleMethod.LUMINANCE)
        assert result == convert_to_grayscale(rgb_strip, GrayscaleMethod.LUMINANCE)

    def test_convert_to_grayscale_keeps_alpha(self):
        image = RasterImage.from_pixels([[(255, 0, 0, 10), (0, 0, 255, 200)]])
        result = convert_to_grayscale(image)

        assert result.get_pixel(0, 0) == Color(76, 76, 76, 10)
        assert result.get_pixel(1, 0) == Color(29, 29, 29, 200)


class TestBlendByAlpha:
    """Tests for per-pixel linear interpolation."""

    def test_endpoints_and_midpoint(self):
        original = RasterImage.new(3, 1, (0, 0, 0, 0))
        fallback = RasterImage.new(3, 1, (255, 100, 1, 255))

        result = blend_by_alpha(original, fallback, [0.0, 0.5, 1.0])

        assert result.get_pixel(0, 0) == Color(0, 0, 0, 0)
        assert result.get_pixel(1, 0) == Color(128, 50, 1, 128)
        assert result.get_pixel(2, 0) == Color(255, 100, 1, 255)

    def test_size_mismatch(self):
        with pytest.raises(InvalidImageDataError):
            blend_by_alpha(RasterImage.new(2, 1), RasterImage.new(1, 2), [0.0, 0.0])

    def test_alpha_length_mismatch(self):
        with pytest.raises(InvalidImageDataError):
            blend_by_alpha(RasterImage.new(2, 1), RasterImage.new(2, 1), [0.0])
