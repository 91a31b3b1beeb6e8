"""
Constants for the nine-palace grid overlay engine.

Centralized definitions for geodesy parameters, viewport buffering, the
position code layout, and overlay colors.
"""

from typing import Tuple
from dataclasses import dataclass


# =============================================================================
# WGS84 Ellipsoid
# =============================================================================

WGS84_SEMI_MAJOR_AXIS = 6378137.0       # a, meters (equatorial radius)
WGS84_ECCENTRICITY_SQ = 0.00669437999014  # e^2, first eccentricity squared

# Bounds of the meridional radius of curvature M(phi) on WGS84
# (equator and pole respectively)
MERIDIONAL_RADIUS_MIN = 6335439.0
MERIDIONAL_RADIUS_MAX = 6399594.0

# Used when no cell is available at the current location (degraded accuracy)
FALLBACK_CELL_HEIGHT_METERS = 35.4


# =============================================================================
# Location Quality
# =============================================================================

MAX_ACCEPTABLE_ACCURACY = 11.8  # Meters; above this sub-cell highlights are hidden


# =============================================================================
# Viewport & Visible Region
# =============================================================================

CELLS_ACROSS = 3            # Grid cell size = viewport width / CELLS_ACROSS
LAT_BUFFER_FACTOR = 1.1     # 10% buffer on the rotated viewport diagonal
LNG_BUFFER_FACTOR = 1.2     # Cell width in degrees varies with latitude
LNG_BUFFER_MAX = 6.0        # Clamp for the cosine-derived longitude buffer
MAX_VISIBLE_CELLS = 10000   # Safety cap for the BFS


# =============================================================================
# Position Code Layout (nine-palace)
# =============================================================================

# (row, col) -> code, row 0 is north, col 0 is west
#   4(NW)  9(N)   2(NE)
#   3(W)   5(C)   7(E)
#   8(SW)  1(S)   6(SE)
POSITION_CODE_LAYOUT: Tuple[Tuple[int, int, int], ...] = (
    (4, 9, 2),
    (3, 5, 7),
    (8, 1, 6),
)
CENTER_POSITION_CODE = 5


# =============================================================================
# Colors (RGBA format for Pillow)
# =============================================================================

@dataclass(frozen=True)
class Colors:
    """Dark tech theme colors in RGB format."""
    BACKGROUND: Tuple[int, int, int] = (13, 28, 41)         # #0D1B2A deep blue-black
    GRID_LINE: Tuple[int, int, int] = (0, 207, 209)         # #00CFD1 cyan/teal
    HIGHLIGHT: Tuple[int, int, int] = (0, 207, 209)         # Sub-cell highlight
    CENTER_DOT: Tuple[int, int, int] = (0, 255, 136)        # #00FF88
    ACCURACY_OK: Tuple[int, int, int] = (0, 207, 209)       # Acceptable fix
    ACCURACY_BAD: Tuple[int, int, int] = (255, 59, 48)      # System red
    WHITE: Tuple[int, int, int] = (255, 255, 255)


COLORS = Colors()


# =============================================================================
# Overlay Styling
# =============================================================================

GRID_LINE_ALPHA = 0.5
GRID_LINE_WIDTH = 1.0
INNER_LINE_ALPHA = 0.3
INNER_LINE_WIDTH = 0.5
INNER_LINE_DASH = (2.0, 2.0)
LABEL_ALPHA = 0.6
LABEL_FONT_SIZE = 9

CURRENT_SUBCELL_ALPHA = 0.35
ADJACENT_SUBCELL_ALPHA = 0.12

ACCURACY_FILL_ALPHA = 0.08
ACCURACY_STROKE_ALPHA = 0.5

LOCATION_DOT_RADIUS = 5.0
LOCATION_GLOW_RADIUS = 35.0
LOCATION_GLOW_ALPHA = 0.25

WATERMARK_DIGITS = 1000000  # Last 6 digits of the cell index

RASTER_SUPERSAMPLE = 2  # Render at 2x resolution, downscale for anti-aliasing
