"""
Tests for preview sizing, resizing, caching and timing.

Tests cover:
- Quality tier scale factors (including REALTIME thresholds)
- Preview size clamping and the "already fits" rule
- Nearest-neighbor resize sampling
- Insertion-order cache eviction and structured keys
- Rolling performance statistics
"""

import unittest

import numpy as np
import pytest

from CS_Libs.ColorLib.color_types import Color, ColorSpace, GrayscaleMethod, PreviewQuality, Tolerance
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.PreviewLib.performance_monitor import PerformanceMonitor
from CS_Libs.PreviewLib.preview_cache import PreviewCache
from CS_Libs.PreviewLib.preview_scaler import PreviewSize, optimal_size, resize, scale_factor
from CS_Libs.errors import UnsupportedPreviewQualityError


class TestScaleFactor(unittest.TestCase):
    """Test quality tier scale factors."""

    def test_fixed_tiers(self):
        self.assertEqual(scale_factor(100, 100, PreviewQuality.LOW), 0.125)
        self.assertEqual(scale_factor(100, 100, PreviewQuality.MEDIUM), 0.25)
        self.assertEqual(scale_factor(100, 100, "high"), 0.5)

    def test_realtime_thresholds(self):
        self.assertEqual(scale_factor(2000, 1001, PreviewQuality.REALTIME), 0.125)
        self.assertEqual(scale_factor(2000, 1000, PreviewQuality.REALTIME), 0.25)
        self.assertEqual(scale_factor(1000, 600, PreviewQuality.REALTIME), 0.25)
        self.assertEqual(scale_factor(1000, 500, PreviewQuality.REALTIME), 0.5)

    def test_unknown_quality(self):
        with self.assertRaises(UnsupportedPreviewQualityError):
            scale_factor(100, 100, "ultra")


class TestOptimalSize:
    """Tests for optimal_size."""

    def test_small_image_keeps_size(self):
        for quality in PreviewQuality:
            assert optimal_size(400, 300, quality) == PreviewSize(400, 300)

    def test_scaled_within_max(self):
        assert optimal_size(1600, 1200, PreviewQuality.MEDIUM) == PreviewSize(400, 300)
        assert optimal_size(1600, 1200, PreviewQuality.LOW) == PreviewSize(200, 150)

    def test_landscape_clamped_to_max(self):
        assert optimal_size(1600, 1200, PreviewQuality.HIGH) == PreviewSize(500, 375)

    def test_portrait_clamped_to_max(self):
        assert optimal_size(1200, 1600, PreviewQuality.HIGH) == PreviewSize(375, 500)

    def test_custom_max_dim(self):
        assert optimal_size(1600, 1200, PreviewQuality.MEDIUM, max_dim=200) == PreviewSize(200, 150)

    def test_empty_image_keeps_size(self):
        assert optimal_size(1000, 0, PreviewQuality.MEDIUM) == PreviewSize(1000, 0)
        assert optimal_size(0, 800, PreviewQuality.REALTIME) == PreviewSize(0, 800)

    @pytest.mark.parametrize("size", [(1600, 1200), (4000, 3000), (640, 2000), (5000, 800)])
    def test_quality_tiers_are_monotonic(self, size):
        width, height = size
        low = optimal_size(width, height, PreviewQuality.LOW)
        medium = optimal_size(width, height, PreviewQuality.MEDIUM)
        high = optimal_size(width, height, PreviewQuality.HIGH)

        assert low.width <= medium.width <= high.width
        assert low.height <= medium.height <= high.height


class TestResize(unittest.TestCase):
    """Test nearest-neighbor resizing."""

    def setUp(self):
        pixels = np.zeros((2, 4, 4), dtype=np.uint8)
        for y in range(2):
            for x in range(4):
                pixels[y, x] = (x * 10, y * 10, 0, 255)
        self.image = RasterImage(4, 2, pixels)

    def test_downscale_samples_floor(self):
        result = resize(self.image, 2, 1)

        self.assertEqual(result.size, (2, 1))
        self.assertEqual(result.get_pixel(0, 0), Color(0, 0, 0, 255))
        self.assertEqual(result.get_pixel(1, 0), Color(20, 0, 0, 255))

    def test_upscale_repeats_pixels(self):
        result = resize(self.image, 8, 2)
        row = [result.get_pixel(x, 0).r for x in range(8)]
        self.assertEqual(row, [0, 0, 10, 10, 20, 20, 30, 30])

    def test_odd_ratio(self):
        result = resize(self.image, 3, 2)
        self.assertEqual([result.get_pixel(x, 1).r for x in range(3)], [0, 10, 20])

    def test_same_size_returns_copy(self):
        result = resize(self.image, 4, 2)

        self.assertEqual(result, self.image)
        self.assertIsNot(result, self.image)
        self.assertFalse(np.shares_memory(result.pixels, self.image.pixels))


class TestPreviewCache:
    """Tests for PreviewCache."""

    def test_get_missing_returns_none(self):
        assert PreviewCache().get("missing") is None

    def test_evicts_first_inserted(self):
        cache = PreviewCache(capacity=3)
        for key in ("a", "b", "c", "d"):
            cache.set(key, RasterImage.new(1, 1))

        assert cache.size() == 3
        assert "a" not in cache
        assert cache.keys() == ["b", "c", "d"]

    def test_reset_does_not_refresh_position(self):
        cache = PreviewCache(capacity=3)
        for key in ("a", "b", "c"):
            cache.set(key, RasterImage.new(1, 1))

        replacement = RasterImage.new(1, 1, (1, 2, 3, 4))
        cache.set("a", replacement)
        assert cache.size() == 3
        assert cache.get("a") == replacement

        cache.set("d", RasterImage.new(1, 1))
        assert cache.keys() == ["b", "c", "d"]

    def test_reads_do_not_refresh_position(self):
        cache = PreviewCache(capacity=2)
        cache.set("a", RasterImage.new(1, 1))
        cache.set("b", RasterImage.new(1, 1))
        cache.get("a")
        cache.set("c", RasterImage.new(1, 1))

        assert "a" not in cache
        assert len(cache) == 2

    def test_clear(self):
        cache = PreviewCache()
        cache.set("a", RasterImage.new(1, 1))
        cache.clear()
        assert cache.size() == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            PreviewCache(capacity=0)


class TestPreviewCacheKey:
    """Tests for PreviewCache.key."""

    def setup_method(self):
        self.image = RasterImage.new(4, 3, (10, 20, 30, 255))
        self.targets = [Color(255, 0, 0), Color(0, 255, 0)]

    def _key(self, **overrides):
        params = {
            "image": self.image,
            "targets": self.targets,
            "tolerance": Tolerance(hue=15, saturation=20, lightness=25),
            "color_space": ColorSpace.HSV,
            "quality": PreviewQuality.MEDIUM,
            "grayscale_method": GrayscaleMethod.LUMINANCE,
        }
        params.update(overrides)
        return PreviewCache.key(**params)

    def test_deterministic(self):
        assert self._key() == self._key()

    def test_string_tags_equal_members(self):
        assert self._key(color_space="hsv", quality="medium") == self._key()

    def test_unset_axis_differs_from_zero(self):
        assert self._key(tolerance=Tolerance(hue=15)) != self._key(tolerance=Tolerance(hue=15, saturation=0))

    def test_target_order_matters(self):
        assert self._key(targets=list(reversed(self.targets))) != self._key()

    def test_image_content_matters(self):
        other = RasterImage.new(4, 3, (10, 20, 31, 255))
        assert self._key(image=other) != self._key()

    @pytest.mark.parametrize("override", [
        {"color_space": ColorSpace.LAB},
        {"quality": PreviewQuality.HIGH},
        {"grayscale_method": GrayscaleMethod.AVERAGE},
        {"tolerance": Tolerance(hue=16, saturation=20, lightness=25)},
    ])
    def test_every_parameter_changes_key(self, override):
        assert self._key(**override) != self._key()


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestPerformanceMonitor(unittest.TestCase):
    """Test rolling performance statistics."""

    def setUp(self):
        self.clock = FakeClock()
        self.monitor = PerformanceMonitor(clock=self.clock)

    def test_no_samples(self):
        self.assertIsNone(self.monitor.get_stats("apply"))
        self.assertEqual(self.monitor.get_all_stats(), {})

    def test_start_timer_records_milliseconds(self):
        stop = self.monitor.start_timer("apply")
        self.clock.now = 0.25
        duration = stop()

        self.assertEqual(duration, 250.0)
        self.assertEqual(
            self.monitor.get_stats("apply"),
            {"average": 250.0, "min": 250.0, "max": 250.0, "count": 1},
        )

    def test_window_keeps_last_fifty(self):
        for value in range(60):
            self.monitor.record_measurement("apply", float(value))

        stats = self.monitor.get_stats("apply")
        self.assertEqual(stats["count"], 50)
        self.assertEqual(stats["min"], 10)
        self.assertEqual(stats["max"], 59)
        self.assertEqual(stats["average"], 34.5)

    def test_two_decimal_rounding(self):
        for value in (1.0, 1.0, 1.005):
            self.monitor.record_measurement("apply", value)
        self.assertEqual(self.monitor.get_stats("apply")["max"], pytest.approx(1.0, abs=0.011))
        self.assertEqual(self.monitor.get_stats("apply")["average"], 1.0)

    def test_measure_records_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.monitor.measure("apply"):
                self.clock.now = 1.0
                raise RuntimeError("boom")

        self.assertEqual(self.monitor.get_stats("apply")["count"], 1)

    def test_get_all_stats_and_clear(self):
        self.monitor.record_measurement("a", 1.0)
        self.monitor.record_measurement("b", 2.0)

        self.assertEqual(set(self.monitor.get_all_stats()), {"a", "b"})

        self.monitor.clear()
        self.assertEqual(self.monitor.get_all_stats(), {})
