"""
Selection Area Processing.

Supports rectangle, circle, polygon and freehand selections, hard
selection masks and feathered (soft-edged) alpha masks.

Geometry:
    - rectangle: [top_left, bottom_right] for an axis-aligned box (edges
      inclusive); with more than 2 points the corners are treated as a
      polygon, which allows rotated rectangles
    - circle: [center, edge_point]; radius is their distance and the
      boundary is inclusive
    - polygon / freehand: even-odd ray casting over the ordered vertices

Feathering:
    Pixels outside the selection get alpha 0.5 * (1 + cos(pi * d / r)),
    where d is the distance to the nearest selected pixel found by a
    bounded search over a (2 * ceil(r) + 1)-wide window, and r is the
    feather radius. Pixels further than r get 0. Cost is O(r^2) per pixel.

Example:
    >>> processor = SelectionAreaProcessor()
    >>> area = create_circle_selection(50, 50, 20, feather_radius=5)
    >>> alpha = processor.create_alpha_mask(100, 100, area)
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from CS_Libs.ColorLib.color_types import Color, coerce_tag
from CS_Libs.ImageEditingLib.image_models import RasterImage
from CS_Libs.ImageEditingLib.splash_compositor import blend_by_alpha
from CS_Libs.constants import DEFAULT_OUTSIDE_COLOR
from CS_Libs.errors import SelectionGeometryError, UnsupportedAreaTypeError

logger = logging.getLogger(__name__)


class AreaType(str, Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    POLYGON = "polygon"
    FREEHAND = "freehand"

    @classmethod
    def coerce(cls, value: Any) -> "AreaType":
        return coerce_tag(cls, value, UnsupportedAreaTypeError, "area type")


class Point(NamedTuple):
    x: float
    y: float


@dataclass
class SelectionArea:
    """A geometric selection.

    Attributes:
        type: AreaType member (string values are accepted)
        coordinates: Ordered points defining the shape
        feather_radius: Soft edge width in pixels (None or 0 for a hard edge)
    """
    type: AreaType
    coordinates: List[Point] = field(default_factory=list)
    feather_radius: Optional[float] = None

    def __post_init__(self):
        self.type = AreaType.coerce(self.type)
        self.coordinates = [Point(float(p[0]), float(p[1])) for p in self.coordinates]
        if self.feather_radius is not None:
            radius = float(self.feather_radius)
            if math.isnan(radius) or radius < 0:
                raise SelectionGeometryError(
                    f"feather_radius must be a non-negative number, got {self.feather_radius}"
                )
            self.feather_radius = radius


class SelectionAreaProcessor:
    """Containment tests and mask generation for selection areas."""

    def is_point_in_area(self, x: float, y: float, area: SelectionArea) -> bool:
        """
        Check if a point lies inside a selection area.

        Raises:
            SelectionGeometryError: If the area has too few points
            UnsupportedAreaTypeError: If the area type is not recognized
        """
        area_type = AreaType.coerce(area.type)
        points = area.coordinates

        if area_type is AreaType.RECTANGLE:
            return self._is_point_in_rectangle(x, y, points)
        if area_type is AreaType.CIRCLE:
            return self._is_point_in_circle(x, y, points)
        if area_type is AreaType.POLYGON:
            return self._is_point_in_polygon(x, y, points)
        if area_type is AreaType.FREEHAND:
            if len(points) < 3:
                return False
            return self._is_point_in_polygon(x, y, points)
        raise AssertionError(f"Unhandled area type: {area_type}")

    def create_selection_mask(self, width: int, height: int, area: SelectionArea) -> np.ndarray:
        """
        Evaluate containment at every integer pixel coordinate.

        Returns:
            Flat boolean array of length width*height (row-major)
        """
        area_type = AreaType.coerce(area.type)
        points = area.coordinates
        self._validate_geometry(area_type, points)

        ys, xs = np.mgrid[0:height, 0:width]
        xs = xs.astype(np.float64)
        ys = ys.astype(np.float64)

        if area_type is AreaType.RECTANGLE and len(points) == 2:
            top_left, bottom_right = points
            inside = (
                (xs >= top_left.x) & (xs <= bottom_right.x)
                & (ys >= top_left.y) & (ys <= bottom_right.y)
            )
        elif area_type is AreaType.CIRCLE:
            center, radius = self._circle_geometry(points)
            dx = xs - center.x
            dy = ys - center.y
            inside = np.sqrt(dx * dx + dy * dy) <= radius
        elif area_type is AreaType.FREEHAND and len(points) < 3:
            inside = np.zeros((height, width), dtype=bool)
        else:
            inside = self._polygon_contains_array(xs, ys, points)

        return inside.reshape(-1)

    def apply_feathering(
        self,
        mask: Any,
        feather_radius: float,
        width: int,
        height: int,
    ) -> np.ndarray:
        """
        Turn a boolean mask into an alpha mask with soft edges.

        Args:
            mask: Flat boolean sequence of length width*height
            feather_radius: Transition width in pixels
            width: Image width
            height: Image height

        Returns:
            Flat float64 array of alpha values in [0, 1]
        """
        selected = np.asarray(mask, dtype=bool).reshape(height, width)
        if feather_radius <= 0:
            return selected.astype(np.float64).reshape(-1)

        distance = self._nearest_selected_distances(selected, feather_radius)
        ratio = distance / feather_radius
        falloff = np.where(distance <= feather_radius, 0.5 * (1 + np.cos(ratio * math.pi)), 0.0)
        alpha = np.where(selected, 1.0, falloff)
        return alpha.reshape(-1)

    def distance_to_nearest_selected(
        self,
        x: int,
        y: int,
        mask: Any,
        width: int,
        height: int,
        max_distance: float,
    ) -> float:
        """
        Distance from (x, y) to the closest selected pixel.

        Only a square window of half-size ceil(max_distance) is searched;
        when nothing is found the result is max_distance + 1.
        """
        selected = np.asarray(mask, dtype=bool).reshape(-1)
        best = max_distance + 1
        search = math.ceil(max_distance)

        for dy in range(-search, search + 1):
            for dx in range(-search, search + 1):
                nx = x + dx
                ny = y + dy
                if nx < 0 or nx >= width or ny < 0 or ny >= height:
                    continue
                if selected[ny * width + nx]:
                    best = min(best, math.sqrt(dx * dx + dy * dy))
        return best

    def create_alpha_mask(self, width: int, height: int, area: SelectionArea) -> np.ndarray:
        """Selection mask as alpha values, feathered when the area asks for it."""
        selection = self.create_selection_mask(width, height, area)
        if area.feather_radius and area.feather_radius > 0:
            logger.debug(
                f"Feathering {area.type.value} selection ({width}x{height}) "
                f"with radius {area.feather_radius}"
            )
            return self.apply_feathering(selection, area.feather_radius, width, height)
        return selection.astype(np.float64)

    def apply_selection_to_image(
        self,
        image: RasterImage,
        area: SelectionArea,
        outside_color: Sequence[int] = DEFAULT_OUTSIDE_COLOR,
    ) -> RasterImage:
        """
        Keep the selected region and paint the rest with outside_color.

        Feathered edges blend between the pixel and outside_color.
        """
        alpha = self.create_alpha_mask(image.width, image.height, area)
        outside = RasterImage.new(image.width, image.height, Color.coerce(outside_color).as_tuple())
        return blend_by_alpha(outside, image, alpha)

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def _validate_geometry(self, area_type: AreaType, points: Sequence[Point]) -> None:
        if area_type is AreaType.RECTANGLE and len(points) < 2:
            raise SelectionGeometryError(
                "Rectangle requires at least 2 coordinates (top_left, bottom_right)"
            )
        if area_type is AreaType.CIRCLE:
            self._circle_geometry(points)
        if area_type is AreaType.POLYGON and len(points) < 3:
            raise SelectionGeometryError("Polygon requires at least 3 coordinates")

    def _is_point_in_rectangle(self, x: float, y: float, points: Sequence[Point]) -> bool:
        if len(points) < 2:
            raise SelectionGeometryError(
                "Rectangle requires at least 2 coordinates (top_left, bottom_right)"
            )
        if len(points) == 2:
            top_left, bottom_right = points
            return top_left.x <= x <= bottom_right.x and top_left.y <= y <= bottom_right.y
        return self._is_point_in_polygon(x, y, points)

    def _circle_geometry(self, points: Sequence[Point]) -> Tuple[Point, float]:
        if len(points) < 1:
            raise SelectionGeometryError("Circle requires at least 1 coordinate (center)")
        if len(points) < 2:
            raise SelectionGeometryError(
                "Circle requires center and edge point to determine radius"
            )
        center, edge = points[0], points[1]
        ex = edge.x - center.x
        ey = edge.y - center.y
        return center, math.sqrt(ex * ex + ey * ey)

    def _is_point_in_circle(self, x: float, y: float, points: Sequence[Point]) -> bool:
        center, radius = self._circle_geometry(points)
        dx = x - center.x
        dy = y - center.y
        return math.sqrt(dx * dx + dy * dy) <= radius

    def _is_point_in_polygon(self, x: float, y: float, points: Sequence[Point]) -> bool:
        if len(points) < 3:
            raise SelectionGeometryError("Polygon requires at least 3 coordinates")

        inside = False
        j = len(points) - 1
        for i in range(len(points)):
            xi, yi = points[i]
            xj, yj = points[j]
            if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
                inside = not inside
            j = i
        return inside

    def _polygon_contains_array(self, xs: np.ndarray, ys: np.ndarray, points: Sequence[Point]) -> np.ndarray:
        inside = np.zeros(xs.shape, dtype=bool)
        j = len(points) - 1
        for i in range(len(points)):
            xi, yi = points[i]
            xj, yj = points[j]
            j = i
            # Horizontal edges never straddle a scanline.
            if yi == yj:
                continue
            straddles = (yi > ys) != (yj > ys)
            crossing = xs < (xj - xi) * (ys - yi) / (yj - yi) + xi
            inside ^= straddles & crossing
        return inside

    def _nearest_selected_distances(self, selected: np.ndarray, max_distance: float) -> np.ndarray:
        height, width = selected.shape
        best = np.full((height, width), max_distance + 1, dtype=np.float64)
        search = math.ceil(max_distance)

        for dy in range(-search, search + 1):
            if abs(dy) >= height:
                continue
            for dx in range(-search, search + 1):
                if abs(dx) >= width:
                    continue
                offset_distance = math.sqrt(dx * dx + dy * dy)
                # Offsets beyond the radius cannot produce a nonzero alpha.
                if offset_distance > max_distance:
                    continue
                shifted = np.zeros_like(selected)
                shifted[
                    max(0, -dy):height - max(0, dy),
                    max(0, -dx):width - max(0, dx),
                ] = selected[
                    max(0, dy):height - max(0, -dy),
                    max(0, dx):width - max(0, -dx),
                ]
                best = np.where(shifted & (offset_distance < best), offset_distance, best)
        return best


# Utility functions for creating common selection areas

def create_rectangle_selection(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    feather_radius: Optional[float] = None,
) -> SelectionArea:
    """Axis-aligned rectangle from any two opposite corners."""
    return SelectionArea(
        type=AreaType.RECTANGLE,
        coordinates=[
            Point(min(x1, x2), min(y1, y2)),
            Point(max(x1, x2), max(y1, y2)),
        ],
        feather_radius=feather_radius,
    )


def create_circle_selection(
    center_x: float,
    center_y: float,
    radius: float,
    feather_radius: Optional[float] = None,
) -> SelectionArea:
    """Circle encoded as its center plus an edge point on the +x axis."""
    return SelectionArea(
        type=AreaType.CIRCLE,
        coordinates=[Point(center_x, center_y), Point(center_x + radius, center_y)],
        feather_radius=feather_radius,
    )


def create_polygon_selection(
    points: Sequence[Any],
    feather_radius: Optional[float] = None,
) -> SelectionArea:
    """
    Polygon from an ordered vertex list.

    Raises:
        SelectionGeometryError: If fewer than 3 points are given
    """
    if len(points) < 3:
        raise SelectionGeometryError("Polygon requires at least 3 points")
    return SelectionArea(type=AreaType.POLYGON, coordinates=list(points), feather_radius=feather_radius)


def create_freehand_selection(
    points: Sequence[Any],
    feather_radius: Optional[float] = None,
) -> SelectionArea:
    """
    Freehand path; closed implicitly from the last point to the first.

    Raises:
        SelectionGeometryError: If fewer than 2 points are given
    """
    if len(points) < 2:
        raise SelectionGeometryError("Freehand path requires at least 2 points")
    return SelectionArea(type=AreaType.FREEHAND, coordinates=list(points), feather_radius=feather_radius)
