"""
WGS84 scale calculations for the grid overlay.

Converts a cell's latitude span into meters using the meridional radius of
curvature at the cell's center latitude, and derives the pixels-per-degree
and pixels-per-meter factors the projector needs.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from cell_graph import Cell
from constants import (
    WGS84_SEMI_MAJOR_AXIS,
    WGS84_ECCENTRICITY_SQ,
    FALLBACK_CELL_HEIGHT_METERS,
)

logger = logging.getLogger(__name__)


def meridional_radius(lat_deg: float) -> float:
    """Meridional radius of curvature M(phi) in meters.

    M = a * (1 - e^2) / (1 - e^2 * sin^2(phi))^(3/2)

    Args:
        lat_deg: Latitude in degrees

    Returns:
        Radius in meters (float64)
    """
    sin_lat = math.sin(math.radians(lat_deg))
    denominator = (1.0 - WGS84_ECCENTRICITY_SQ * sin_lat * sin_lat) ** 1.5
    return WGS84_SEMI_MAJOR_AXIS * (1.0 - WGS84_ECCENTRICITY_SQ) / denominator


def meters_per_degree_lat(lat_deg: float) -> float:
    """Length of one degree of latitude in meters at the given latitude."""
    return meridional_radius(lat_deg) * math.pi / 180.0


def _usable_lat_range(cell: Optional[Cell]) -> Optional[Tuple[float, float]]:
    """(south, north) of a cell, or None when there is no usable latitude span."""
    if cell is None:
        logger.debug("No cell available, using fallback cell height")
        return None

    try:
        south, north = cell.lat_range
    except Exception as e:
        logger.debug(f"Cell bounds unavailable ({e}), using fallback cell height")
        return None

    delta_lat = north - south
    if not math.isfinite(delta_lat) or delta_lat <= 0:
        logger.debug(f"Invalid cell latitude span {delta_lat}, using fallback")
        return None
    return south, north


def _height_for_range(south: float, north: float) -> float:
    center_lat = (north + south) / 2.0
    return meridional_radius(center_lat) * math.radians(north - south)


def cell_height_meters(cell: Optional[Cell]) -> float:
    """Height of a cell in meters along the meridian.

    Falls back to FALLBACK_CELL_HEIGHT_METERS when no cell is available or its
    latitude range is unusable. Never raises.
    """
    lat_range = _usable_lat_range(cell)
    if lat_range is None:
        return FALLBACK_CELL_HEIGHT_METERS
    return _height_for_range(*lat_range)


def pixels_per_degree(cell_pixel_size: float, lat_span_deg: float) -> Optional[float]:
    """Screen scale so that one cell height spans ``cell_pixel_size`` pixels.

    Returns None when either input is non-finite or non-positive.
    """
    if not (math.isfinite(cell_pixel_size) and math.isfinite(lat_span_deg)):
        return None
    if cell_pixel_size <= 0 or lat_span_deg <= 0:
        return None
    return cell_pixel_size / lat_span_deg


@dataclass(frozen=True)
class GeodesyScale:
    """Per-frame scale factors derived from the cell under the user."""
    cell_pixel_size: float
    cell_height_meters: float
    pixels_per_degree: Optional[float]
    degraded: bool = False

    @property
    def pixels_per_meter(self) -> Optional[float]:
        if self.cell_height_meters <= 0 or self.cell_pixel_size <= 0:
            return None
        return self.cell_pixel_size / self.cell_height_meters

    @classmethod
    def for_cell(cls, cell: Optional[Cell], cell_pixel_size: float) -> "GeodesyScale":
        """Build the scale for the cell at the current location.

        Args:
            cell: Cell containing the user, or None if the lookup failed
            cell_pixel_size: Target on-screen height of one cell in pixels

        Returns:
            GeodesyScale; ``degraded`` is True when no pixels-per-degree could
            be derived (no usable cell, or a non-positive cell size)
        """
        lat_range = _usable_lat_range(cell)
        if lat_range is None:
            height = FALLBACK_CELL_HEIGHT_METERS
            ppd = None
        else:
            south, north = lat_range
            height = _height_for_range(south, north)
            ppd = pixels_per_degree(cell_pixel_size, north - south)
        degraded = ppd is None
        return cls(
            cell_pixel_size=cell_pixel_size,
            cell_height_meters=height,
            pixels_per_degree=ppd,
            degraded=degraded,
        )
