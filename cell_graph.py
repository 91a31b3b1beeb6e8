"""
Cell-graph capability consumed by the grid overlay engine.

The grid's own subdivision scheme (index assignment, bounding boxes, k-level)
lives outside this project. The engine only talks to it through the
abstract ``CellGraph`` and ``Cell`` classes defined here.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple


def normalize_longitude(lng: float) -> float:
    """Normalize a longitude in degrees to the range (-180, 180].

    Non-finite values are returned unchanged so callers can reject them.
    """
    if not math.isfinite(lng):
        return lng
    lng = math.fmod(lng, 360.0)
    if lng > 180.0:
        lng -= 360.0
    elif lng <= -180.0:
        lng += 360.0
    return lng


class Direction(Enum):
    """Compass direction to a neighboring cell.

    Values are (d_row, d_col) offsets in the 3x3 layout where row 0 is north
    and col 0 is west. There is no center member: same-cell adjacency is
    expressed as ``None`` by the adjacency resolver.
    """
    N = (-1, 0)
    S = (1, 0)
    E = (0, 1)
    W = (0, -1)
    NE = (-1, 1)
    NW = (-1, -1)
    SE = (1, 1)
    SW = (1, -1)

    @property
    def d_row(self) -> int:
        return self.value[0]

    @property
    def d_col(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return Direction((-self.d_row, -self.d_col))

    @classmethod
    def from_signs(cls, row_sign: int, col_sign: int) -> Optional["Direction"]:
        """Combine per-axis overflow signs into a direction (None if neither)."""
        if row_sign == 0 and col_sign == 0:
            return None
        return cls((row_sign, col_sign))


@dataclass(frozen=True)
class GeoBounds:
    """Rectangular geographic bounding box in degrees.

    ``west`` may be numerically greater than ``east`` when the box straddles
    the antimeridian.
    """
    south: float
    north: float
    west: float
    east: float

    @property
    def lat_range(self) -> Tuple[float, float]:
        return (self.south, self.north)

    @property
    def lng_range(self) -> Tuple[float, float]:
        return (self.west, self.east)

    @property
    def lat_span(self) -> float:
        return self.north - self.south

    @property
    def lng_span(self) -> float:
        """Longitude width in degrees, accounting for antimeridian wrap.

        Edges that normalize to the same meridian but differ in raw value
        (e.g. -180 and 180) cover the full circle.
        """
        west = normalize_longitude(self.west)
        east = normalize_longitude(self.east)
        if east < west:
            east += 360.0
        elif east == west and self.east != self.west:
            return 360.0
        return east - west


class Cell(ABC):
    """
    Abstract grid cell.

    Implementations wrap whatever grid library provides the cells. Identity is
    the integer ``index``; two cells with the same index are the same cell.
    """

    @property
    @abstractmethod
    def index(self) -> int:
        """Stable, unique 64-bit signed identifier."""

    @property
    @abstractmethod
    def k(self) -> int:
        """Subdivision level. Only shown as diagnostic text."""

    @property
    @abstractmethod
    def bounds(self) -> GeoBounds:
        """Geographic bounding box of the cell."""

    @abstractmethod
    def neighbors(self) -> Mapping[Direction, Optional["Cell"]]:
        """Return the neighboring cells keyed by compass direction.

        A direction may be missing, or map to None, where the neighbor cannot
        be resolved (e.g. past a pole).
        """

    @abstractmethod
    def sub_cell_bounds(self, position_code: int) -> Optional[GeoBounds]:
        """Bounds of one of the 9 sub-regions, or None for an invalid code."""

    @property
    def lat_range(self) -> Tuple[float, float]:
        return self.bounds.lat_range

    @property
    def lng_range(self) -> Tuple[float, float]:
        return self.bounds.lng_range

    @property
    def center_lat(self) -> float:
        return (self.bounds.south + self.bounds.north) / 2.0

    @property
    def center_lng(self) -> float:
        b = self.bounds
        return normalize_longitude(normalize_longitude(b.west) + b.lng_span / 2.0)

    def neighbor(self, direction: Direction) -> Optional["Cell"]:
        """Return the neighbor in one direction, or None if it is undefined."""
        return self.neighbors().get(direction)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(index={self.index}, k={self.k})"


class CellGraph(ABC):
    """
    Abstract cell lookup.

    Example:
        class MyGrid(CellGraph):
            def cell_at(self, lat, lng):
                return wrap(grid_lib.cell(lat, lng))

        cell = MyGrid().cell_at(37.7749, -122.4194)
    """

    @abstractmethod
    def cell_at(self, lat: float, lng: float) -> Optional[Cell]:
        """Return the cell containing the coordinate, or None."""

    def position_code(self, lat: float, lng: float) -> Optional[int]:
        """Return the 1-9 position code of the coordinate within its cell.

        The default implementation reports no position code.
        """
        return None
