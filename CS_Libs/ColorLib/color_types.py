"""
Color value types and processing enumerations.

Classes:
    Color: Immutable RGBA color (0-255 per channel)
    HsvColor: Hue (degrees) / saturation / value (percent)
    LabColor: CIE L*a*b* color
    Tolerance: Per-axis matching tolerance; unset axes always pass
    ColorDistance: Diagnostic distance breakdown
    ColorSpace, GrayscaleMethod, PreviewQuality: Closed processing tags

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple, Type

from CS_Libs.errors import (
    InvalidToleranceError,
    UnsupportedColorSpaceError,
    UnsupportedGrayscaleMethodError,
    UnsupportedPreviewQualityError,
)

RgbaColor = Tuple[int, int, int, int]


def coerce_tag(enum_cls: Type[Enum], value: Any, error_cls: Type[Exception], label: str) -> Any:
    """
    Resolve an enum member from a member or its string value.

    Args:
        enum_cls: Target enumeration
        value: Enum member or string value (case-insensitive)
        error_cls: Exception type raised for unknown values
        label: Human-readable tag name used in the error message

    Raises:
        error_cls: If value does not name a member of enum_cls
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_cls:
            if member.value == normalized:
                return member
    raise error_cls(f"Unsupported {label}: {value}")


class ColorSpace(str, Enum):
    RGB = "rgb"
    HSV = "hsv"
    LAB = "lab"

    @classmethod
    def coerce(cls, value: Any) -> "ColorSpace":
        return coerce_tag(cls, value, UnsupportedColorSpaceError, "color space")


class GrayscaleMethod(str, Enum):
    LUMINANCE = "luminance"        # 0.299*R + 0.587*G + 0.114*B
    AVERAGE = "average"            # (R + G + B) / 3
    DESATURATION = "desaturation"  # (max + min) / 2

    @classmethod
    def coerce(cls, value: Any) -> "GrayscaleMethod":
        return coerce_tag(cls, value, UnsupportedGrayscaleMethodError, "grayscale method")


class PreviewQuality(str, Enum):
    LOW = "low"            # 1/8 resolution
    MEDIUM = "medium"      # 1/4 resolution
    HIGH = "high"          # 1/2 resolution
    REALTIME = "realtime"  # picked from the source pixel count

    @classmethod
    def coerce(cls, value: Any) -> "PreviewQuality":
        return coerce_tag(cls, value, UnsupportedPreviewQualityError, "preview quality")


@dataclass(frozen=True)
class Color:
    """RGBA color with 8-bit channels. Alpha defaults to opaque."""
    r: int
    g: int
    b: int
    a: int = 255

    def as_tuple(self) -> RgbaColor:
        return (self.r, self.g, self.b, self.a)

    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_tuple(cls, values: Sequence[int]) -> "Color":
        """Create from an (R, G, B) or (R, G, B, A) sequence."""
        if len(values) == 3:
            r, g, b = values
            return cls(int(r), int(g), int(b))
        if len(values) == 4:
            r, g, b, a = values
            return cls(int(r), int(g), int(b), int(a))
        raise ValueError(f"Expected 3 or 4 channel values, got {len(values)}")

    @classmethod
    def coerce(cls, value: Any) -> "Color":
        if isinstance(value, Color):
            return value
        return cls.from_tuple(value)


class HsvColor(NamedTuple):
    h: float  # 0-360
    s: float  # 0-100
    v: float  # 0-100


class LabColor(NamedTuple):
    l: float  # 0-100
    a: float  # about -128..127
    b: float  # about -128..127


@dataclass(frozen=True)
class Tolerance:
    """Per-axis tolerance. ``None`` leaves an axis unconstrained.

    Attributes:
        hue: Maximum circular hue distance in degrees (HSV)
        saturation: Maximum saturation difference in percent (HSV)
        lightness: Maximum value difference in percent (HSV)
        euclidean: Maximum Euclidean distance (RGB and LAB)
    """
    hue: Optional[float] = None
    saturation: Optional[float] = None
    lightness: Optional[float] = None
    euclidean: Optional[float] = None

    def __post_init__(self):
        for name in ("hue", "saturation", "lightness", "euclidean"):
            value = getattr(self, name)
            if value is None:
                continue
            if math.isnan(value) or value < 0:
                raise InvalidToleranceError(
                    f"Tolerance '{name}' must be a non-negative number, got {value}"
                )

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tolerance":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    @classmethod
    def coerce(cls, value: Any) -> "Tolerance":
        if isinstance(value, Tolerance):
            return value
        return cls.from_dict(dict(value))


@dataclass(frozen=True)
class ColorDistance:
    """Distance breakdown returned by ``calculate_distance``."""
    hue: Optional[float] = None
    saturation: Optional[float] = None
    value: Optional[float] = None
    euclidean: Optional[float] = None
