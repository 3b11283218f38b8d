"""
Pytest configuration and shared fixtures for Color Splash tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest

from CS_Libs.BackendLib.backend_registry import BackendRegistry, register_default_backends
from CS_Libs.ColorLib.color_types import Color
from CS_Libs.ImageEditingLib.image_models import RasterImage


@pytest.fixture
def reference_colors():
    """Primaries, extremes and mid gray, with partial alpha on the last one."""
    return [
        Color(255, 0, 0),
        Color(0, 255, 0),
        Color(0, 0, 255),
        Color(255, 255, 255),
        Color(0, 0, 0),
        Color(128, 128, 128, 64),
    ]


@pytest.fixture
def rgb_strip():
    """A 3x1 image: red, green, blue."""
    return RasterImage.from_pixels([[(255, 0, 0), (0, 255, 0), (0, 0, 255)]])


@pytest.fixture
def noisy_image():
    """
    Provide a 12x9 image with seeded random colors and alpha values.

    A few saturated reds are planted so red targets always match something.
    """
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(9, 12, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 0, 0, 255)
    pixels[4, 6] = (250, 10, 5, 128)
    pixels[8, 11] = (200, 0, 0, 0)
    return RasterImage(12, 9, pixels)


@pytest.fixture
def fresh_registry():
    """A registry with the built-in backends, isolated from the global one."""
    registry = BackendRegistry()
    register_default_backends(registry)
    return registry
