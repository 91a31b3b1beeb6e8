"""
Visible cell enumeration for the grid overlay.

Computes the geographic region covered by the (rotated) viewport and walks the
cell adjacency graph breadth-first from the cell under the user, collecting
every cell whose center lies inside that region plus one cell of slack.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Set

from cell_graph import Cell, normalize_longitude
from constants import (
    LAT_BUFFER_FACTOR,
    LNG_BUFFER_FACTOR,
    LNG_BUFFER_MAX,
    MAX_VISIBLE_CELLS,
)

logger = logging.getLogger(__name__)

LNG_BUFFER_FLAT = "flat"
LNG_BUFFER_COSINE = "cosine"


@dataclass(frozen=True)
class VisibleRegion:
    """Geographic rectangle centered on the user.

    Longitudes are kept relative to ``center_lng`` so a region that crosses
    the antimeridian still tests correctly.
    """
    center_lat: float
    center_lng: float
    lat_half_span: float
    lng_half_span: float

    @property
    def min_lat(self) -> float:
        return self.center_lat - self.lat_half_span

    @property
    def max_lat(self) -> float:
        return self.center_lat + self.lat_half_span

    @property
    def min_lng(self) -> float:
        return self.center_lng - self.lng_half_span

    @property
    def max_lng(self) -> float:
        return self.center_lng + self.lng_half_span

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (
            self.center_lat, self.center_lng, self.lat_half_span, self.lng_half_span
        ))

    def contains(self, lat: float, lng: float,
                 lat_margin: float = 0.0, lng_margin: float = 0.0) -> bool:
        """Check whether a point lies in the region expanded by the margins."""
        if abs(lat - self.center_lat) > self.lat_half_span + lat_margin:
            return False
        d_lng = normalize_longitude(lng - self.center_lng)
        return abs(d_lng) <= self.lng_half_span + lng_margin


def longitude_buffer(center_lat: float, mode: str = LNG_BUFFER_FLAT) -> float:
    """Multiplier applied to the latitude span to get the longitude span.

    ``flat`` uses the constant LNG_BUFFER_FACTOR. ``cosine`` widens the span
    by 1/cos(latitude), never below the flat factor and clamped to
    LNG_BUFFER_MAX near the poles.
    """
    if mode == LNG_BUFFER_FLAT:
        return LNG_BUFFER_FACTOR
    if mode != LNG_BUFFER_COSINE:
        raise ValueError(f"Unknown longitude buffer mode: {mode!r}")

    cos_lat = math.cos(math.radians(center_lat))
    if cos_lat <= 1.0 / LNG_BUFFER_MAX:
        return LNG_BUFFER_MAX
    return max(LNG_BUFFER_FACTOR, 1.0 / cos_lat)


def compute_visible_region(
    center_lat: float,
    center_lng: float,
    viewport_width: float,
    viewport_height: float,
    pixels_per_degree: float,
    lng_buffer: str = LNG_BUFFER_FLAT,
) -> Optional[VisibleRegion]:
    """
    Compute the geographic region visible in the viewport at any rotation.

    The viewport diagonal covers every heading; it is converted to degrees and
    padded by LAT_BUFFER_FACTOR, then widened for longitude.

    Args:
        center_lat, center_lng: User position in degrees
        viewport_width, viewport_height: Viewport size in pixels
        pixels_per_degree: Screen scale (must be positive)
        lng_buffer: "flat" or "cosine"

    Returns:
        VisibleRegion, or None if the inputs are degenerate
    """
    values = (center_lat, center_lng, viewport_width, viewport_height, pixels_per_degree)
    if not all(math.isfinite(v) for v in values):
        return None
    if viewport_width <= 0 or viewport_height <= 0 or pixels_per_degree <= 0:
        return None

    diagonal = math.hypot(viewport_width, viewport_height)
    lat_span = diagonal / pixels_per_degree * LAT_BUFFER_FACTOR
    lng_span = lat_span * longitude_buffer(center_lat, lng_buffer)

    return VisibleRegion(
        center_lat=center_lat,
        center_lng=normalize_longitude(center_lng),
        lat_half_span=lat_span / 2.0,
        lng_half_span=lng_span / 2.0,
    )


def enumerate_visible_cells(
    center_cell: Optional[Cell],
    region: Optional[VisibleRegion],
    max_cells: int = MAX_VISIBLE_CELLS,
) -> List[Cell]:
    """
    Collect the cells to draw via BFS from the center cell.

    Cells are deduplicated by index. A cell whose center falls outside the
    region (expanded by one center-cell span on each axis) is dropped and its
    neighbors are not expanded, which bounds the search.

    Args:
        center_cell: Cell under the user, or None if the lookup failed
        region: Visible region, or None if it could not be computed
        max_cells: Hard cap on the number of cells returned

    Returns:
        Cells in BFS order (center first); empty when there is nothing to draw
    """
    if center_cell is None or region is None or not region.is_finite:
        return []

    center_bounds = center_cell.bounds
    lat_margin = center_bounds.lat_span
    lng_margin = center_bounds.lng_span
    if not (math.isfinite(lat_margin) and math.isfinite(lng_margin)):
        logger.debug(f"Center cell {center_cell.index} has non-finite bounds")
        return []

    cells: List[Cell] = []
    visited: Set[int] = {center_cell.index}
    queue: Deque[Cell] = deque([center_cell])

    while queue:
        cell = queue.popleft()

        if not region.contains(cell.center_lat, cell.center_lng, lat_margin, lng_margin):
            continue

        cells.append(cell)
        if len(cells) >= max_cells:
            logger.warning(f"Visible cell limit reached ({max_cells}), stopping traversal")
            break

        for neighbor in cell.neighbors().values():
            if neighbor is None or neighbor.index in visited:
                continue
            visited.add(neighbor.index)
            queue.append(neighbor)

    logger.debug(f"Enumerated {len(cells)} visible cells ({len(visited)} visited)")
    return cells
