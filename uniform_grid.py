"""
Fixed-step latitude/longitude grid implementing the cell-graph capability.

Used for previews and tests. It is a plain equal-angle grid, not the
production subdivision scheme: rows run south to north from -90, columns run
east from ``lng_origin`` and wrap around the antimeridian.
"""

import math
from typing import Dict, Optional

from adjacency import InvalidPositionCode, position_to_row_col
from cell_graph import Cell, CellGraph, Direction, GeoBounds, normalize_longitude
from constants import POSITION_CODE_LAYOUT

DEFAULT_CELL_DEGREES = 0.001125  # 3 steps * 0.000375 deg


class UniformCell(Cell):
    """One cell of a UniformGrid."""

    def __init__(self, grid: "UniformGrid", row: int, col: int):
        self._grid = grid
        self.row = row
        self.col = col

    @property
    def index(self) -> int:
        return self.row * self._grid.n_cols + self.col

    @property
    def k(self) -> int:
        return self._grid.k

    @property
    def bounds(self) -> GeoBounds:
        grid = self._grid
        south = -90.0 + self.row * grid.lat_step
        north = min(south + grid.lat_step, 90.0)
        west = normalize_longitude(grid.lng_origin + self.col * grid.lng_step)
        if grid.lng_step >= 360.0:
            # Single column; keep the raw east edge so the span reads as 360
            east = west + 360.0
        else:
            east = normalize_longitude(west + grid.lng_step)
        return GeoBounds(south=south, north=north, west=west, east=east)

    def neighbors(self) -> Dict[Direction, Cell]:
        result: Dict[Direction, Cell] = {}
        for direction in Direction:
            # Layout rows grow southward, grid rows grow northward
            row = self.row - direction.d_row
            if row < 0 or row >= self._grid.n_rows:
                continue
            col = (self.col + direction.d_col) % self._grid.n_cols
            result[direction] = UniformCell(self._grid, row, col)
        return result

    def sub_cell_bounds(self, position_code: int) -> Optional[GeoBounds]:
        try:
            sub_row, sub_col = position_to_row_col(position_code)
        except InvalidPositionCode:
            return None

        b = self.bounds
        sub_height = b.lat_span / 3.0
        sub_width = b.lng_span / 3.0
        north = b.north - sub_row * sub_height
        west = b.west + sub_col * sub_width
        return GeoBounds(
            south=north - sub_height,
            north=north,
            west=normalize_longitude(west),
            east=normalize_longitude(west + sub_width),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniformCell):
            return NotImplemented
        return self._grid is other._grid and self.index == other.index

    def __hash__(self) -> int:
        return hash(self.index)


class UniformGrid(CellGraph):
    """
    Equal-angle grid.

    Args:
        lat_step: Cell height in degrees
        lng_step: Cell width in degrees (defaults to lat_step)
        lng_origin: Longitude of the west edge of column 0
        k: Subdivision level reported by every cell

    Example:
        grid = UniformGrid()
        cell = grid.cell_at(37.7749, -122.4194)
        code = grid.position_code(37.7749, -122.4194)
    """

    def __init__(self, lat_step: float = DEFAULT_CELL_DEGREES,
                 lng_step: Optional[float] = None,
                 lng_origin: float = -180.0, k: int = 0):
        lng_step = lat_step if lng_step is None else lng_step
        if not (0 < lat_step <= 180.0) or not (0 < lng_step <= 360.0):
            raise ValueError(f"Invalid grid steps: lat={lat_step}, lng={lng_step}")

        self.lat_step = lat_step
        self.lng_step = lng_step
        self.lng_origin = lng_origin
        self.k = k
        self.n_rows = math.ceil(180.0 / lat_step - 1e-9)
        self.n_cols = max(1, round(360.0 / lng_step))

    def _row_col(self, lat: float, lng: float):
        row = min(int(math.floor((lat + 90.0) / self.lat_step)), self.n_rows - 1)
        offset = (lng - self.lng_origin) % 360.0
        col = int(math.floor(offset / self.lng_step)) % self.n_cols
        return row, col

    def cell_at(self, lat: float, lng: float) -> Optional[UniformCell]:
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None
        if lat < -90.0 or lat > 90.0:
            return None
        row, col = self._row_col(lat, lng)
        return UniformCell(self, row, col)

    def position_code(self, lat: float, lng: float) -> Optional[int]:
        cell = self.cell_at(lat, lng)
        if cell is None:
            return None

        b = cell.bounds
        sub_height = b.lat_span / 3.0
        sub_width = b.lng_span / 3.0
        rows_from_north = int(math.floor((b.north - lat) / sub_height))
        cols_from_west = int(math.floor(((lng - b.west) % 360.0) / sub_width))
        sub_row = min(max(rows_from_north, 0), 2)
        sub_col = min(max(cols_from_west, 0), 2)
        return POSITION_CODE_LAYOUT[sub_row][sub_col]
