"""
Geographic to screen projection for the grid overlay.

Positions are scaled linearly from the user's coordinate (degrees times
pixels-per-degree, Y inverted) and then rotated about the visual center so
the map turns with the device heading:

- heading 0 keeps north up
- when the device turns right, the world rotates left
- the visual center sits between the top and bottom content insets, not at
  the raw middle of the view
"""

import logging
import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
from pydantic import BaseModel, Field

from cell_graph import GeoBounds, normalize_longitude

logger = logging.getLogger(__name__)


class Insets(BaseModel):
    """Chrome covering the edges of the view (nav bar, floating card)."""
    top: float = Field(default=0.0, ge=0, description="Pixels covered at the top")
    left: float = Field(default=0.0, ge=0, description="Pixels covered at the left")
    bottom: float = Field(default=0.0, ge=0, description="Pixels covered at the bottom")
    right: float = Field(default=0.0, ge=0, description="Pixels covered at the right")


class Viewport(BaseModel):
    """Pixel bounds of the drawing surface."""
    width: float = Field(description="View width in pixels")
    height: float = Field(description="View height in pixels")
    insets: Insets = Field(default_factory=Insets, description="Content insets")

    @property
    def visible_height(self) -> float:
        return self.height - self.insets.top - self.insets.bottom

    @property
    def visual_center(self) -> "ScreenPoint":
        """Horizontal middle, vertical middle of the band between the insets."""
        return ScreenPoint(self.width / 2.0, self.insets.top + self.visible_height / 2.0)

    @property
    def is_degenerate(self) -> bool:
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            return True
        return self.width <= 0 or self.height <= 0 or self.visible_height <= 0


class ScreenPoint(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class ScreenRect:
    """Axis-aligned rectangle in unrotated screen space."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> ScreenPoint:
        return ScreenPoint(self.left + self.width / 2.0, self.top + self.height / 2.0)


@dataclass(frozen=True)
class ScreenCircle:
    center: ScreenPoint
    radius: float


def rotation_matrix(angle_deg: float) -> np.ndarray:
    """2x2 rotation matrix for screen coordinates (Y down, positive = clockwise)."""
    rad = math.radians(angle_deg)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    return np.array([[cos_r, -sin_r], [sin_r, cos_r]], dtype=np.float64)


def rotate_points(points: np.ndarray, angle_deg: float, origin: Sequence[float]) -> np.ndarray:
    """
    Rotate an (N, 2) array of screen points about an origin.

    Args:
        points: Array of (x, y) rows
        angle_deg: Rotation in degrees
        origin: (x, y) rotation center

    Returns:
        New (N, 2) array of rotated points
    """
    origin_arr = np.asarray(origin, dtype=np.float64)
    offsets = np.asarray(points, dtype=np.float64) - origin_arr
    return offsets @ rotation_matrix(angle_deg).T + origin_arr


class Projector:
    """Projects geographic shapes into rotated screen space for one frame.

    Use ``Projector.create`` rather than the constructor so degenerate
    geometry yields None instead of a projector that divides by zero.

    Args:
        center_lat, center_lng: User position in degrees (drawn at the visual center)
        heading: Device heading in degrees, 0 = north
        viewport: Drawing surface geometry
        pixels_per_degree: Screen scale, positive and finite
    """

    def __init__(self, center_lat: float, center_lng: float, heading: float,
                 viewport: Viewport, pixels_per_degree: float):
        self.center_lat = center_lat
        self.center_lng = normalize_longitude(center_lng)
        self.heading = heading
        self.viewport = viewport
        self.pixels_per_degree = pixels_per_degree
        self.origin = viewport.visual_center

    @classmethod
    def create(cls, center_lat: float, center_lng: float, heading: float,
               viewport: Viewport, pixels_per_degree: Optional[float]) -> Optional["Projector"]:
        """Build a projector, or return None when the frame must be skipped."""
        if viewport.is_degenerate:
            logger.debug(f"Degenerate viewport {viewport.width}x{viewport.height}, skipping")
            return None
        if pixels_per_degree is None or not math.isfinite(pixels_per_degree) or pixels_per_degree <= 0:
            logger.debug(f"Invalid pixels-per-degree {pixels_per_degree}, skipping")
            return None
        if not all(math.isfinite(v) for v in (center_lat, center_lng)):
            logger.debug("Non-finite center coordinate, skipping")
            return None
        if not math.isfinite(heading):
            heading = 0.0
        return cls(center_lat, center_lng, heading, viewport, pixels_per_degree)

    @property
    def rotation(self) -> float:
        """Screen rotation in degrees applied to the map (-heading)."""
        return -self.heading

    def project_point(self, lat: float, lng: float) -> ScreenPoint:
        """Unrotated screen position of a coordinate."""
        dx = normalize_longitude(lng - self.center_lng) * self.pixels_per_degree
        dy = -(lat - self.center_lat) * self.pixels_per_degree
        return ScreenPoint(self.origin.x + dx, self.origin.y + dy)

    def project_bounds(self, bounds: GeoBounds) -> Optional[ScreenRect]:
        """
        Unrotated screen rectangle for a geographic bounding box.

        West and east are normalized independently; a box whose east edge is
        numerically less than its west edge straddles the antimeridian and is
        widened by 360 degrees. Edges on the same meridian with different raw
        values span the full circle. The box is placed at the longitude offset
        closest to the center.

        Returns:
            ScreenRect, or None for non-finite or zero-size boxes
        """
        west = normalize_longitude(bounds.west)
        lng_span = bounds.lng_span
        values = (west, lng_span, bounds.south, bounds.north)
        if not all(math.isfinite(v) for v in values):
            return None

        left_deg = normalize_longitude(west - self.center_lng)
        width = lng_span * self.pixels_per_degree
        height = (bounds.north - bounds.south) * self.pixels_per_degree
        if width <= 0 or height <= 0:
            return None

        left = self.origin.x + left_deg * self.pixels_per_degree
        top = self.origin.y - (bounds.north - self.center_lat) * self.pixels_per_degree
        return ScreenRect(left=left, top=top, width=width, height=height)

    def rotate(self, point: Sequence[float], angle_deg: float) -> ScreenPoint:
        """Rotate a single screen point about the visual center."""
        x, y = rotate_points(np.array([point]), angle_deg, self.origin)[0]
        return ScreenPoint(float(x), float(y))

    def to_screen(self, point: Sequence[float]) -> ScreenPoint:
        """Apply the heading rotation to an unrotated point."""
        return self.rotate(point, self.rotation)

    def inverse(self, point: Sequence[float]) -> ScreenPoint:
        """Undo the heading rotation."""
        return self.rotate(point, -self.rotation)

    def rect_corners(self, rect: ScreenRect) -> List[ScreenPoint]:
        """Rotated corners of a rectangle: top-left, top-right, bottom-right, bottom-left."""
        corners = np.array([
            (rect.left, rect.top),
            (rect.right, rect.top),
            (rect.right, rect.bottom),
            (rect.left, rect.bottom),
        ])
        rotated = rotate_points(corners, self.rotation, self.origin)
        return [ScreenPoint(float(x), float(y)) for x, y in rotated]

    def segment(self, start: Sequence[float], end: Sequence[float]) -> List[ScreenPoint]:
        """Rotated endpoints of a line segment."""
        rotated = rotate_points(np.array([start, end]), self.rotation, self.origin)
        return [ScreenPoint(float(x), float(y)) for x, y in rotated]

    def accuracy_circle(self, accuracy_m: float, cell_pixel_size: float,
                        cell_height_m: float) -> Optional[ScreenCircle]:
        """
        Accuracy circle centered on the user.

        The radius uses the per-latitude cell height so meters-per-pixel
        tracks the ellipsoid.

        Args:
            accuracy_m: Horizontal accuracy radius in meters
            cell_pixel_size: On-screen cell height in pixels
            cell_height_m: Cell height in meters at this latitude

        Returns:
            ScreenCircle, or None if any input is unusable
        """
        values = (accuracy_m, cell_pixel_size, cell_height_m)
        if not all(math.isfinite(v) for v in values):
            return None
        if accuracy_m < 0 or cell_pixel_size <= 0 or cell_height_m <= 0:
            return None
        radius = accuracy_m * (cell_pixel_size / cell_height_m)
        return ScreenCircle(center=self.origin, radius=radius)
