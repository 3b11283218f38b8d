"""
Matching backends for the fused mask + composition step.

Every backend implements the same contract: given an image, target
colors, tolerance, color space and grayscale method, return the splash
result. All of them must produce identical pixels; the conformance
tests run one fixture suite against each available backend.

Backends:
    - python: Per-pixel reference built on the scalar similarity and
      grayscale functions
    - numpy: Vectorized CPU implementation (default)
    - cupy: The vectorized kernels executed on the GPU (requires cupy)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Sequence, Tuple

import numpy as np

from CS_Libs.ColorLib.color_types import Color, ColorSpace, GrayscaleMethod, Tolerance
from CS_Libs.ColorLib.grayscale import convert
from CS_Libs.ColorLib.similarity import is_similar
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.mask_builder import build_mask_array
from CS_Libs.ImageEditingLib.splash_compositor import compose_array
from CS_Libs.constants import BACKEND_CUPY, BACKEND_NUMPY, BACKEND_PYTHON

try:
    import cupy
except ImportError:
    cupy = None

logger = logging.getLogger(__name__)


class MatchingBackend(ABC):
    """Capability shared by every splash implementation."""

    name: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this backend can run in the current environment."""

    @abstractmethod
    def apply_splash(
        self,
        image: RasterImage,
        targets: Sequence[Any],
        tolerance: Tolerance,
        color_space: ColorSpace,
        grayscale_method: GrayscaleMethod,
    ) -> RasterImage:
        """Return a new image with unmatched pixels desaturated."""


class PythonMatchingBackend(MatchingBackend):
    """
    Per-pixel reference implementation.

    Slow; used to check the vectorized backends. Results are memoized per
    distinct RGB value within one call.
    """

    name = BACKEND_PYTHON

    def is_available(self) -> bool:
        return True

    def apply_splash(self, image, targets, tolerance, color_space, grayscale_method):
        space = ColorSpace.coerce(color_space)
        method = GrayscaleMethod.coerce(grayscale_method)
        target_colors = [Color.coerce(target) for target in targets]

        result = np.empty_like(image.pixels)
        decisions: Dict[Tuple[int, int, int], Tuple[bool, int]] = {}

        for y in range(image.height):
            for x in range(image.width):
                r, g, b, a = (int(v) for v in image.pixels[y, x])
                key = (r, g, b)
                if key not in decisions:
                    pixel = Color(r, g, b)
                    matched = any(
                        is_similar(pixel, target, tolerance, space) for target in target_colors
                    )
                    decisions[key] = (matched, convert(pixel, method))
                matched, gray = decisions[key]
                if matched:
                    result[y, x] = (r, g, b, a)
                else:
                    result[y, x] = (gray, gray, gray, a)

        return RasterImage(image.width, image.height, result)


class ArrayMatchingBackend(MatchingBackend):
    """Vectorized implementation over an array module."""

    def __init__(self, xp: Any):
        self.xp = xp

    def to_device(self, pixels: np.ndarray) -> Any:
        return pixels

    def to_host(self, pixels: Any) -> np.ndarray:
        return pixels

    def apply_splash(self, image, targets, tolerance, color_space, grayscale_method):
        space = ColorSpace.coerce(color_space)
        method = GrayscaleMethod.coerce(grayscale_method)
        xp = self.xp

        pixels = self.to_device(image.pixels)
        mask = build_mask_array(pixels[..., :3], targets, tolerance, space, xp)
        result = compose_array(pixels, mask, method, xp)
        return RasterImage(image.width, image.height, self.to_host(result))


class NumpyMatchingBackend(ArrayMatchingBackend):
    name = BACKEND_NUMPY

    def __init__(self):
        super().__init__(np)

    def is_available(self) -> bool:
        return True


class CupyMatchingBackend(ArrayMatchingBackend):
    """
    GPU backend running the vectorized kernels through cupy.

    Holds device state; do not share one instance between concurrent
    callers.
    """

    name = BACKEND_CUPY

    def __init__(self):
        super().__init__(cupy)

    def is_available(self) -> bool:
        if cupy is None:
            return False
        try:
            return cupy.cuda.runtime.getDeviceCount() > 0
        except Exception as e:
            logger.debug(f"CUDA device query failed: {e}")
            return False

    def to_device(self, pixels: np.ndarray) -> Any:
        return cupy.asarray(pixels)

    def to_host(self, pixels: Any) -> np.ndarray:
        return cupy.asnumpy(pixels)
