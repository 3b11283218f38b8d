"""
Color Splash engine facade.

Sequences the color, mask, preview and selection components into three
workflows:

- fast preview: resize -> match -> compose on a reduced image, cached
- incremental update: re-run the fast preview on the preloaded image
  with a partially changed configuration
- full-resolution apply: match -> compose at full size, never cached,
  optionally restricted to a (feathered) selection area

Session state (the preloaded image and the last preview configuration)
lives in an explicit PreviewSession. A ColorSplash instance is not
thread-safe: use one instance per worker or serialize calls externally.

Example:
    >>> engine = ColorSplash()
    >>> image = RasterImage.from_pil(Image.open("photo.png"))
    >>> engine.preload_image(image)
    >>> preview = engine.create_fast_preview(image, [Color(255, 0, 0)])
    >>> preview = engine.update_preview({"tolerance": Tolerance(hue=30)})
    >>> final = engine.apply_color_splash(image, SplashConfig([Color(255, 0, 0)], Tolerance(hue=30)))
"""

import logging
import math
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from CS_Libs.BackendLib.backend_registry import (
    BackendRegistry,
    get_default_registry,
    resolve_backend,
)
from CS_Libs.BackendLib.matching_backend import MatchingBackend, NumpyMatchingBackend
from CS_Libs.ColorLib.color_types import (
    Color,
    ColorSpace,
    GrayscaleMethod,
    PreviewQuality,
    Tolerance,
)
from CS_Libs.ImageEditingLib.area_processor import SelectionArea, SelectionAreaProcessor
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.splash_compositor import blend_by_alpha, convert_to_grayscale
from CS_Libs.PreviewLib.performance_monitor import PerformanceMonitor
from CS_Libs.PreviewLib.preview_cache import PreviewCache
from CS_Libs.PreviewLib.preview_scaler import optimal_size, resize
from CS_Libs.constants import (
    BACKEND_AUTO,
    BACKEND_CUPY,
    DEFAULT_CACHE_CAPACITY,
    DEFAULT_HUE_TOLERANCE,
    DEFAULT_LIGHTNESS_TOLERANCE,
    DEFAULT_MAX_PREVIEW_SIZE,
    DEFAULT_OUTSIDE_COLOR,
    DEFAULT_SATURATION_TOLERANCE,
)
from CS_Libs.errors import BackendUnavailableError, PreviewStateError

logger = logging.getLogger(__name__)


def _default_tolerance() -> Tolerance:
    return Tolerance(
        hue=DEFAULT_HUE_TOLERANCE,
        saturation=DEFAULT_SATURATION_TOLERANCE,
        lightness=DEFAULT_LIGHTNESS_TOLERANCE,
    )


@dataclass
class SplashConfig:
    """Parameters of one color splash run.

    Attributes:
        target_colors: Colors to preserve
        tolerance: Per-axis matching tolerance
        color_space: Space used for matching
        grayscale_method: Formula used for unmatched pixels
        area: Optional selection restricting the effect
    """
    target_colors: List[Color] = field(default_factory=list)
    tolerance: Tolerance = field(default_factory=_default_tolerance)
    color_space: ColorSpace = ColorSpace.HSV
    grayscale_method: GrayscaleMethod = GrayscaleMethod.LUMINANCE
    area: Optional[SelectionArea] = None

    def __post_init__(self):
        self.target_colors = [Color.coerce(color) for color in self.target_colors]
        self.tolerance = Tolerance.coerce(self.tolerance)
        self.color_space = ColorSpace.coerce(self.color_space)
        self.grayscale_method = GrayscaleMethod.coerce(self.grayscale_method)
        if self.area is not None and not isinstance(self.area, SelectionArea):
            self.area = SelectionArea(**dict(self.area))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (enums as their string values)."""
        return {
            "target_colors": [color.as_tuple() for color in self.target_colors],
            "tolerance": self.tolerance.to_dict(),
            "color_space": self.color_space.value,
            "grayscale_method": self.grayscale_method.value,
            "area": None if self.area is None else {
                "type": self.area.type.value,
                "coordinates": [tuple(point) for point in self.area.coordinates],
                "feather_radius": self.area.feather_radius,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SplashConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    @classmethod
    def coerce(cls, value: Any) -> "SplashConfig":
        if isinstance(value, SplashConfig):
            return value
        return cls.from_dict(value)


@dataclass
class ColorSplashOptions:
    """Engine-wide defaults.

    Attributes:
        default_color_space: Space used when a call does not name one
        default_tolerance: Tolerance used when a call does not give one
        default_grayscale_method: Formula used when a call does not name one
        preview_quality: Quality tier for fast previews
        max_preview_size: Upper bound for the larger preview side
        cache_capacity: Number of cached previews
        backend: Matching backend name ('auto', 'numpy', 'cupy', 'python')
    """
    default_color_space: ColorSpace = ColorSpace.HSV
    default_tolerance: Tolerance = field(default_factory=_default_tolerance)
    default_grayscale_method: GrayscaleMethod = GrayscaleMethod.LUMINANCE
    preview_quality: PreviewQuality = PreviewQuality.MEDIUM
    max_preview_size: int = DEFAULT_MAX_PREVIEW_SIZE
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    backend: str = BACKEND_AUTO

    def __post_init__(self):
        self.default_color_space = ColorSpace.coerce(self.default_color_space)
        self.default_tolerance = Tolerance.coerce(self.default_tolerance)
        self.default_grayscale_method = GrayscaleMethod.coerce(self.default_grayscale_method)
        self.preview_quality = PreviewQuality.coerce(self.preview_quality)
        if self.max_preview_size < 1:
            raise ValueError(f"max_preview_size must be at least 1, got {self.max_preview_size}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColorSplashOptions":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


class SessionState(str, Enum):
    IDLE = "idle"
    PRIMED = "primed"


@dataclass
class PreviewSession:
    """Preloaded image and the configuration of the last successful preview."""
    image: Optional[RasterImage] = None
    last_config: Optional[SplashConfig] = None

    @property
    def state(self) -> SessionState:
        return SessionState.IDLE if self.image is None else SessionState.PRIMED


class ColorSplash:
    """Unified API for color splash effects."""

    def __init__(
        self,
        options: Optional[ColorSplashOptions] = None,
        registry: Optional[BackendRegistry] = None,
    ):
        self.options = options or ColorSplashOptions()
        self._registry = registry or get_default_registry()
        self._cache = PreviewCache(self.options.cache_capacity)
        self._monitor = PerformanceMonitor()
        self._area_processor = SelectionAreaProcessor()
        self._cpu_backend = NumpyMatchingBackend()
        self._backend = self._resolve_initial_backend()
        self._session = PreviewSession()
        logger.debug(f"ColorSplash using matching backend: {self._backend.name}")

    def _resolve_initial_backend(self) -> MatchingBackend:
        try:
            return resolve_backend(self.options.backend, self._registry)
        except BackendUnavailableError as e:
            if str(self.options.backend).strip().lower() != BACKEND_CUPY:
                raise
            logger.warning(f"{e}; falling back to CPU")
            return self._cpu_backend

    # ------------------------------------------------------------------
    # Options and state
    # ------------------------------------------------------------------

    @property
    def session(self) -> PreviewSession:
        return self._session

    @property
    def backend(self) -> MatchingBackend:
        return self._backend

    def get_options(self) -> ColorSplashOptions:
        """Copy of the current options."""
        return replace(self.options)

    def set_preview_quality(self, quality: Any) -> None:
        self.options.preview_quality = PreviewQuality.coerce(quality)
        self._cache.clear()

    def set_default_color_space(self, color_space: Any) -> None:
        self.options.default_color_space = ColorSpace.coerce(color_space)
        self._cache.clear()

    def enable_gpu_acceleration(self) -> bool:
        """
        Switch to the cupy backend if a CUDA device is usable.

        Returns:
            True if the GPU backend is now active, False otherwise
        """
        with self._monitor.measure("enable_gpu"):
            try:
                self._backend = resolve_backend(BACKEND_CUPY, self._registry)
            except (KeyError, BackendUnavailableError) as e:
                logger.info(f"GPU acceleration unavailable: {e}")
                return False
            self.options.backend = BACKEND_CUPY
            return True

    # ------------------------------------------------------------------
    # Color picking
    # ------------------------------------------------------------------

    def select_color(self, image: RasterImage, x: float, y: float) -> Color:
        """
        Read the color under a coordinate.

        Coordinates are floored and clamped into the image; non-finite
        values are treated as 0.
        """
        clamped_x = self._clamp_coordinate(x, image.width)
        clamped_y = self._clamp_coordinate(y, image.height)
        r, g, b, _ = (int(v) for v in image.pixels[clamped_y, clamped_x])
        return Color(r, g, b)

    @staticmethod
    def _clamp_coordinate(value: float, extent: int) -> int:
        if value is None or not math.isfinite(value):
            return 0
        return max(0, min(int(math.floor(value)), extent - 1))

    # ------------------------------------------------------------------
    # Preview workflows
    # ------------------------------------------------------------------

    def preload_image(self, image: RasterImage) -> PreviewSession:
        """
        Start a new session for incremental previews.

        Clears the preview cache and discards the last configuration.

        Returns:
            The new PreviewSession (state PRIMED)
        """
        with self._monitor.measure("preload_image"):
            self._cache.clear()
            self._session = PreviewSession(image=image)
            logger.info(f"Preloaded {image.width}x{image.height} image; preview cache cleared")
            return self._session

    def create_fast_preview(
        self,
        image: RasterImage,
        colors: Sequence[Any],
        tolerance: Optional[Any] = None,
        quality: Optional[Any] = None,
        color_space: Optional[Any] = None,
        grayscale_method: Optional[Any] = None,
    ) -> RasterImage:
        """
        Render a reduced-resolution splash preview.

        Unspecified parameters fall back to the engine options. Results are
        cached; on success the resolved configuration becomes the
        session's last configuration.

        Args:
            image: Source image
            colors: Target colors to preserve
            tolerance: Tolerance (or dict of its fields)
            quality: PreviewQuality member or string value
            color_space: ColorSpace member or string value
            grayscale_method: GrayscaleMethod member or string value

        Returns:
            New RasterImage at preview resolution
        """
        with self._monitor.measure("create_fast_preview"):
            config = SplashConfig(
                target_colors=list(colors),
                tolerance=self.options.default_tolerance if tolerance is None else tolerance,
                color_space=self.options.default_color_space if color_space is None else color_space,
                grayscale_method=(
                    self.options.default_grayscale_method
                    if grayscale_method is None else grayscale_method
                ),
            )
            quality = PreviewQuality.coerce(self.options.preview_quality if quality is None else quality)

            key = PreviewCache.key(
                image,
                config.target_colors,
                config.tolerance,
                config.color_space,
                quality,
                config.grayscale_method,
            )
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Preview cache hit: {key}")
                self._session.last_config = config
                return cached.copy()

            size = optimal_size(image.width, image.height, quality, self.options.max_preview_size)
            reduced = resize(image, size.width, size.height)
            preview = self._run_backend(reduced, config)

            self._cache.set(key, preview.copy())
            self._session.last_config = config
            return preview

    def update_preview(
        self,
        partial_config: Optional[Mapping[str, Any]] = None,
        quality: Optional[Any] = None,
    ) -> RasterImage:
        """
        Re-render the preview of the preloaded image with changed settings.

        Args:
            partial_config: SplashConfig field names mapped to new values;
                unspecified fields keep their last (or default) values
            quality: Optional quality override for this call

        Raises:
            PreviewStateError: If no image has been preloaded
            ValueError: If partial_config names an unknown field
                or "area"; previews are never restricted to a selection
        """
        with self._monitor.measure("update_preview"):
            if self._session.state is SessionState.IDLE:
                raise PreviewStateError("No image preloaded. Call preload_image() first.")

            changes = dict(partial_config or {})
            allowed = {f.name for f in fields(SplashConfig)} - {"area"}
            unknown = sorted(set(changes) - allowed)
            if unknown:
                raise ValueError(f"Unknown configuration fields: {', '.join(unknown)}")

            base = self._session.last_config or SplashConfig(
                tolerance=self.options.default_tolerance,
                color_space=self.options.default_color_space,
                grayscale_method=self.options.default_grayscale_method,
            )
            merged = replace(base, **changes)

            result = self.create_fast_preview(
                self._session.image,
                merged.target_colors,
                merged.tolerance,
                quality,
                merged.color_space,
                merged.grayscale_method,
            )
            self._session.last_config = merged
            return result

    # ------------------------------------------------------------------
    # Full-resolution workflows
    # ------------------------------------------------------------------

    def apply_color_splash(self, image: RasterImage, config: Any) -> RasterImage:
        """
        Apply the effect at full resolution. Never cached.

        When ``config.area`` is set the effect is restricted to that area.
        """
        config = SplashConfig.coerce(config)
        if config.area is not None:
            return self.apply_color_splash_in_selection(image, config.area, config)

        with self._monitor.measure("apply_color_splash"):
            return self._run_backend(image, config)

    def apply_color_splash_in_selection(
        self,
        image: RasterImage,
        area: SelectionArea,
        config: Any,
    ) -> RasterImage:
        """
        Apply the effect inside a selection, blending feathered edges.

        Outside the selection the original pixels are kept; inside, the
        splash result; in between, a linear mix weighted by the alpha mask.
        """
        config = SplashConfig.coerce(config)
        with self._monitor.measure("apply_color_splash_in_selection"):
            alpha_mask = self._area_processor.create_alpha_mask(image.width, image.height, area)
            splashed = self._run_backend(image, config)
            return blend_by_alpha(image, splashed, alpha_mask)

    def convert_to_grayscale(self, image: RasterImage, method: Any = GrayscaleMethod.LUMINANCE) -> RasterImage:
        return convert_to_grayscale(image, method)

    def _run_backend(self, image: RasterImage, config: SplashConfig) -> RasterImage:
        backend = self._backend
        try:
            return backend.apply_splash(
                image,
                config.target_colors,
                config.tolerance,
                config.color_space,
                config.grayscale_method,
            )
        except Exception as e:
            if backend.name != BACKEND_CUPY:
                raise
            logger.warning(f"GPU backend failed ({e}); falling back to CPU")
            return self._cpu_backend.apply_splash(
                image,
                config.target_colors,
                config.tolerance,
                config.color_space,
                config.grayscale_method,
            )

    # ------------------------------------------------------------------
    # Selection areas
    # ------------------------------------------------------------------

    def create_selection_mask(self, width: int, height: int, area: SelectionArea):
        return self._area_processor.create_selection_mask(width, height, area)

    def create_alpha_mask(self, width: int, height: int, area: SelectionArea):
        return self._area_processor.create_alpha_mask(width, height, area)

    def apply_selection_to_image(
        self,
        image: RasterImage,
        area: SelectionArea,
        outside_color: Sequence[int] = DEFAULT_OUTSIDE_COLOR,
    ) -> RasterImage:
        return self._area_processor.apply_selection_to_image(image, area, outside_color)

    def is_point_in_area(self, x: float, y: float, area: SelectionArea) -> bool:
        return self._area_processor.is_point_in_area(x, y, area)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_performance_stats(self) -> Dict[str, Optional[Dict[str, float]]]:
        return self._monitor.get_all_stats()

    def clear_performance_stats(self) -> None:
        self._monitor.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> Dict[str, int]:
        return {"size": self._cache.size(), "max_size": self._cache.capacity}
