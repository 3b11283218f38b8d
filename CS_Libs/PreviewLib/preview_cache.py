"""
Preview result cache.

Entries are keyed by every parameter that affects a preview and evicted
in insertion order: when a new key arrives at capacity the oldest
inserted key is dropped, regardless of how recently it was read.
Overwriting an existing key keeps its original position.
"""

import hashlib
import logging
from typing import Any, Dict, List, Optional, Sequence

from CS_Libs.ColorLib.color_types import Color, ColorSpace, GrayscaleMethod, PreviewQuality, Tolerance
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.constants import DEFAULT_CACHE_CAPACITY, UNSET_AXIS_TOKEN

logger = logging.getLogger(__name__)


def _axis_token(value: Optional[float]) -> str:
    if value is None:
        return UNSET_AXIS_TOKEN
    return repr(float(value))


def image_digest(image: RasterImage) -> str:
    """Short content hash of the pixel buffer."""
    return hashlib.blake2b(image.pixels.tobytes(), digest_size=16).hexdigest()


class PreviewCache:
    """Capacity-bounded, insertion-ordered cache of preview images."""

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: Dict[str, RasterImage] = {}

    @staticmethod
    def key(
        image: RasterImage,
        targets: Sequence[Any],
        tolerance: Tolerance,
        color_space: Any,
        quality: Any,
        grayscale_method: Any = GrayscaleMethod.LUMINANCE,
    ) -> str:
        """
        Build a deterministic key from processing parameters.

        Target colors keep their call order. A tolerance axis that was not
        supplied is encoded as ``unset`` so it never collides with 0.
        """
        colors = ";".join(
            ",".join(str(channel) for channel in Color.coerce(target).rgb())
            for target in targets
        )
        parts = (
            f"{image.width}x{image.height}",
            image_digest(image),
            colors,
            f"h={_axis_token(tolerance.hue)}",
            f"s={_axis_token(tolerance.saturation)}",
            f"l={_axis_token(tolerance.lightness)}",
            f"e={_axis_token(tolerance.euclidean)}",
            ColorSpace.coerce(color_space).value,
            GrayscaleMethod.coerce(grayscale_method).value,
            PreviewQuality.coerce(quality).value,
        )
        return "|".join(parts)

    def get(self, key: str) -> Optional[RasterImage]:
        """Return the cached image, or None. Reads do not affect eviction."""
        return self._entries.get(key)

    def set(self, key: str, image: RasterImage) -> None:
        """Store an image, evicting the oldest inserted key when full."""
        if key not in self._entries and len(self._entries) >= self.capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted preview cache entry: {oldest}")
        self._entries[key] = image

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        """Keys in insertion order (oldest first)."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
