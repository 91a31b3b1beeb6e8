"""
Pytest configuration and fixtures for grid overlay tests.

Provides reusable grids, viewports, location fixes, and hand-built cell
graphs for exercising the engine without a real grid library.
"""

import pytest
from typing import Dict, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cell_graph import Cell, CellGraph, Direction, GeoBounds
from location import LocationFix
from projector import Insets, Viewport
from uniform_grid import UniformGrid


class FakeCell(Cell):
    """Cell with explicit bounds and a mutable neighbor table."""

    def __init__(self, index: int, bounds: GeoBounds, k: int = 7):
        self._index = index
        self._bounds = bounds
        self._k = k
        self.links: Dict[Direction, Optional[Cell]] = {}
        self.neighbor_calls = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def k(self) -> int:
        return self._k

    @property
    def bounds(self) -> GeoBounds:
        return self._bounds

    def neighbors(self):
        self.neighbor_calls += 1
        return dict(self.links)

    def sub_cell_bounds(self, position_code: int) -> Optional[GeoBounds]:
        return None


class FakeGraph(CellGraph):
    """Graph returning a fixed cell (or None) for every coordinate."""

    def __init__(self, cell: Optional[Cell] = None, code: Optional[int] = None):
        self.cell = cell
        self.code = code

    def cell_at(self, lat: float, lng: float) -> Optional[Cell]:
        return self.cell

    def position_code(self, lat: float, lng: float) -> Optional[int]:
        return self.code


@pytest.fixture
def grid():
    """Fixture providing the default preview grid (0.001125 deg cells)."""
    return UniformGrid()


@pytest.fixture
def antimeridian_grid():
    """Fixture providing a 1-degree grid with a cell spanning 179.5..-179.5."""
    return UniformGrid(lat_step=1.0, lng_origin=-179.5)


@pytest.fixture
def viewport():
    """Fixture providing a phone-sized viewport with nav bar and card insets."""
    return Viewport(width=390, height=844, insets=Insets(top=100, bottom=244))


@pytest.fixture
def square_viewport():
    """Fixture providing a square viewport without insets."""
    return Viewport(width=300, height=300)


@pytest.fixture
def sample_fix():
    """Fixture providing an accurate fix in San Francisco."""
    return LocationFix(latitude=37.7749, longitude=-122.4194, horizontal_accuracy=5.0, heading=0.0)


@pytest.fixture
def looping_graph():
    """Fixture providing three cells whose neighbor links form cycles.

    Every cell lists the others (and itself) as neighbors, so a traversal
    without deduplication would never terminate.
    """
    step = 0.001
    cells = [
        FakeCell(10 + i, GeoBounds(south=0.0, north=step, west=i * step, east=(i + 1) * step))
        for i in range(3)
    ]
    a, b, c = cells
    a.links = {Direction.E: b, Direction.W: c, Direction.N: a}
    b.links = {Direction.E: c, Direction.W: a, Direction.S: b}
    c.links = {Direction.E: a, Direction.W: b, Direction.NE: a}
    return cells
