"""
Nine-palace grid overlay renderer.

Turns a location fix into device-independent drawing primitives:

1. Look up the cell under the user and derive the WGS84 scale
2. Enumerate every visible cell (BFS over the cell graph)
3. Outline each cell with its 3x3 sub-grid, position codes and index watermark
4. Highlight the user's sub-cell and its 8 neighbors (only for accurate fixes)
5. Draw the accuracy circle and location dot at the visual center

Everything except the location dot is rotated with the device heading.
Primitives carry final screen coordinates, so any backend (see raster.py)
can draw them without knowing about geography.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel, Field

from adjacency import (
    Adjacency,
    AdjacencyInvariantError,
    InvalidPositionCode,
    resolve_adjacent,
    verify_reversible,
)
from cell_graph import Cell, CellGraph, GeoBounds, normalize_longitude
from constants import (
    COLORS,
    CELLS_ACROSS,
    CENTER_POSITION_CODE,
    MAX_ACCEPTABLE_ACCURACY,
    POSITION_CODE_LAYOUT,
    GRID_LINE_ALPHA, GRID_LINE_WIDTH,
    INNER_LINE_ALPHA, INNER_LINE_WIDTH, INNER_LINE_DASH,
    LABEL_ALPHA, LABEL_FONT_SIZE,
    CURRENT_SUBCELL_ALPHA, ADJACENT_SUBCELL_ALPHA,
    ACCURACY_FILL_ALPHA, ACCURACY_STROKE_ALPHA,
    LOCATION_DOT_RADIUS, LOCATION_GLOW_RADIUS, LOCATION_GLOW_ALPHA,
    WATERMARK_DIGITS,
)
from enumerator import compute_visible_region, enumerate_visible_cells
from geodesy import GeodesyScale
from location import LocationFix
from projector import Projector, ScreenCircle, ScreenPoint, Viewport

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

SKIP_MISSING_CELL = "missing-cell"
SKIP_INVALID_GEOMETRY = "invalid-geometry"


# =============================================================================
# Drawing Primitives
# =============================================================================

@dataclass(frozen=True)
class FillRect:
    """Filled quad given by its 4 (already rotated) corners."""
    corners: Tuple[ScreenPoint, ...]
    color: Color
    alpha: float


@dataclass(frozen=True)
class StrokeRect:
    corners: Tuple[ScreenPoint, ...]
    color: Color
    alpha: float
    width: float


@dataclass(frozen=True)
class GridLine:
    start: ScreenPoint
    end: ScreenPoint
    color: Color
    alpha: float
    width: float
    dash: Optional[Tuple[float, float]] = None


@dataclass(frozen=True)
class FillCircle:
    center: ScreenPoint
    radius: float
    color: Color
    alpha: float


@dataclass(frozen=True)
class StrokeCircle:
    center: ScreenPoint
    radius: float
    color: Color
    alpha: float
    width: float


@dataclass(frozen=True)
class RadialGlow:
    """Soft glow fading from ``alpha`` at the center to 0 at ``radius``."""
    center: ScreenPoint
    radius: float
    color: Color
    alpha: float


@dataclass(frozen=True)
class TextLabel:
    """Text centered on ``position`` and rotated by ``rotation`` degrees."""
    position: ScreenPoint
    text: str
    color: Color
    alpha: float
    size: float
    rotation: float = 0.0


Primitive = Union[FillRect, StrokeRect, GridLine, FillCircle, StrokeCircle, RadialGlow, TextLabel]


@dataclass
class Frame:
    """Result of one render pass."""
    primitives: List[Primitive] = field(default_factory=list)
    cell_indices: List[int] = field(default_factory=list)
    position_code: Optional[int] = None
    adjacent: List[Adjacency] = field(default_factory=list)
    scale: Optional[GeodesyScale] = None
    acceptable: bool = False
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    def of_type(self, kind: Type) -> list:
        """Primitives of one kind, in draw order."""
        return [p for p in self.primitives if isinstance(p, kind)]


# =============================================================================
# Configuration
# =============================================================================

class RenderConfig(BaseModel):
    """Renderer options."""
    cells_across: int = Field(default=CELLS_ACROSS, ge=1, description="Cells spanning the view width")
    max_acceptable_accuracy: float = Field(
        default=MAX_ACCEPTABLE_ACCURACY, gt=0,
        description="Highlights are hidden above this accuracy (meters)",
    )
    show_debug_info: bool = Field(default=False, description="Append k level to cell watermarks")
    lng_buffer: Literal["flat", "cosine"] = Field(
        default="flat", description="Longitude buffer for the visible region",
    )
    strict: bool = Field(
        default=False,
        description="Raise on position code invariant violations instead of skipping highlights",
    )


def watermark_text(cell: Cell, show_debug_info: bool = False) -> str:
    """Last six digits of the cell index, optionally with the k level."""
    last_digits = abs(cell.index) % WATERMARK_DIGITS
    if show_debug_info:
        return f"{last_digits:06d} k{cell.k}"
    return f"{last_digits:06d}"


# =============================================================================
# Renderer
# =============================================================================

class GridRenderer:
    """Renders the nine-palace grid overlay for a location fix.

    The renderer keeps only its configuration; every call to ``render`` is a
    full recomputation from its inputs.

    Args:
        graph: Cell lookup capability
        config: Renderer options (defaults if omitted)

    Example:
        renderer = GridRenderer(UniformGrid())
        frame = renderer.render(LocationFix(latitude=37.77, longitude=-122.42),
                                Viewport(width=390, height=844))
    """

    def __init__(self, graph: CellGraph, config: Optional[RenderConfig] = None):
        self.graph = graph
        self.config = config or RenderConfig()

    def render(self, fix: LocationFix, viewport: Viewport) -> Frame:
        """
        Produce the drawing primitives for one frame.

        Args:
            fix: Current location, accuracy and heading
            viewport: Drawing surface geometry

        Returns:
            Frame with primitives; ``skipped_reason`` is set when nothing
            could be drawn
        """
        if viewport.is_degenerate:
            logger.debug("Skipping frame: degenerate viewport")
            return Frame(skipped_reason=SKIP_INVALID_GEOMETRY)
        cell_size = viewport.width / self.config.cells_across

        center_cell = self._lookup_cell(fix)
        if center_cell is None:
            return Frame(skipped_reason=SKIP_MISSING_CELL)

        lat = fix.latitude
        lng = normalize_longitude(fix.longitude)

        scale = GeodesyScale.for_cell(center_cell, cell_size)
        projector = Projector.create(lat, lng, fix.heading, viewport, scale.pixels_per_degree)
        if projector is None:
            return Frame(scale=scale, skipped_reason=SKIP_INVALID_GEOMETRY)

        region = compute_visible_region(
            lat, lng, viewport.width, viewport.height,
            projector.pixels_per_degree, lng_buffer=self.config.lng_buffer,
        )
        cells = enumerate_visible_cells(center_cell, region)

        frame = Frame(scale=scale, cell_indices=[c.index for c in cells])
        for cell in cells:
            self._draw_cell(frame, projector, cell)

        frame.acceptable = fix.is_acceptable(self.config.max_acceptable_accuracy)
        if frame.acceptable:
            self._draw_highlights(frame, projector, center_cell, lat, lng)

        self._draw_location_dot(frame, projector, fix, cell_size, scale)
        return frame

    def _lookup_cell(self, fix: LocationFix) -> Optional[Cell]:
        if not fix.is_valid:
            logger.debug(f"Invalid location ({fix.latitude}, {fix.longitude}), no grid drawn")
            return None
        try:
            cell = self.graph.cell_at(fix.latitude, normalize_longitude(fix.longitude))
        except Exception as e:
            logger.warning(f"Cell lookup failed: {e}")
            return None
        if cell is None:
            logger.debug(f"No cell at ({fix.latitude}, {fix.longitude})")
        return cell

    def _project_quad(self, projector: Projector, bounds: GeoBounds):
        rect = projector.project_bounds(bounds)
        if rect is None:
            return None, None
        return rect, tuple(projector.rect_corners(rect))

    def _draw_cell(self, frame: Frame, projector: Projector, cell: Cell) -> None:
        rect, corners = self._project_quad(projector, cell.bounds)
        if rect is None:
            logger.debug(f"Skipping cell {cell.index}: invalid geometry")
            return

        frame.primitives.append(StrokeRect(
            corners=corners, color=COLORS.GRID_LINE,
            alpha=GRID_LINE_ALPHA, width=GRID_LINE_WIDTH,
        ))

        # 3x3 sub-grid, dashed
        sub_w = rect.width / 3.0
        sub_h = rect.height / 3.0
        for i in (1, 2):
            x = rect.left + i * sub_w
            y = rect.top + i * sub_h
            for start, end in (((x, rect.top), (x, rect.bottom)),
                               ((rect.left, y), (rect.right, y))):
                p1, p2 = projector.segment(start, end)
                frame.primitives.append(GridLine(
                    start=p1, end=p2, color=COLORS.GRID_LINE,
                    alpha=INNER_LINE_ALPHA, width=INNER_LINE_WIDTH, dash=INNER_LINE_DASH,
                ))

        # Position codes at sub-cell centers
        for row, codes in enumerate(POSITION_CODE_LAYOUT):
            for col, code in enumerate(codes):
                center = (rect.left + (col + 0.5) * sub_w, rect.top + (row + 0.5) * sub_h)
                frame.primitives.append(self._label(projector, center, str(code)))

        # Index watermark just below the top edge
        anchor = (rect.center.x, rect.top + 3 + LABEL_FONT_SIZE / 2.0)
        text = watermark_text(cell, self.config.show_debug_info)
        frame.primitives.append(self._label(projector, anchor, text))

    def _label(self, projector: Projector, point: Sequence[float], text: str) -> TextLabel:
        return TextLabel(
            position=projector.to_screen(point), text=text,
            color=COLORS.GRID_LINE, alpha=LABEL_ALPHA,
            size=LABEL_FONT_SIZE, rotation=projector.rotation,
        )

    def _current_position_code(self, lat: float, lng: float) -> int:
        try:
            code = self.graph.position_code(lat, lng)
        except Exception as e:
            logger.warning(f"Position code lookup failed: {e}")
            code = None
        return CENTER_POSITION_CODE if code is None else code

    def _draw_highlights(self, frame: Frame, projector: Projector,
                         center_cell: Cell, lat: float, lng: float) -> None:
        code = self._current_position_code(lat, lng)
        try:
            adjacent = resolve_adjacent(code)
            if self.config.strict:
                verify_reversible(code)
        except (InvalidPositionCode, AdjacencyInvariantError) as e:
            if self.config.strict:
                raise
            logger.error(f"Skipping highlights: {e}")
            return

        frame.position_code = code
        frame.adjacent = adjacent

        self._fill_sub_cell(frame, projector, center_cell, code, CURRENT_SUBCELL_ALPHA)
        for direction, target_code in adjacent:
            if direction is None:
                target = center_cell
            else:
                target = center_cell.neighbor(direction)
            if target is None:
                logger.debug(f"No neighbor {direction} for cell {center_cell.index}")
                continue
            self._fill_sub_cell(frame, projector, target, target_code, ADJACENT_SUBCELL_ALPHA)

    def _fill_sub_cell(self, frame: Frame, projector: Projector, cell: Cell,
                       code: int, alpha: float) -> None:
        bounds = cell.sub_cell_bounds(code)
        if bounds is None:
            return
        rect, corners = self._project_quad(projector, bounds)
        if rect is None:
            return
        frame.primitives.append(FillRect(corners=corners, color=COLORS.HIGHLIGHT, alpha=alpha))

    def _draw_location_dot(self, frame: Frame, projector: Projector, fix: LocationFix,
                           cell_size: float, scale: GeodesyScale) -> None:
        center = projector.origin
        circle: Optional[ScreenCircle] = projector.accuracy_circle(
            fix.horizontal_accuracy, cell_size, scale.cell_height_meters,
        )
        if circle is not None:
            color = COLORS.ACCURACY_OK if frame.acceptable else COLORS.ACCURACY_BAD
            frame.primitives.append(FillCircle(
                center=circle.center, radius=circle.radius,
                color=color, alpha=ACCURACY_FILL_ALPHA,
            ))
            frame.primitives.append(StrokeCircle(
                center=circle.center, radius=circle.radius,
                color=color, alpha=ACCURACY_STROKE_ALPHA, width=1.0,
            ))

        frame.primitives.append(RadialGlow(
            center=center, radius=LOCATION_GLOW_RADIUS,
            color=COLORS.WHITE, alpha=LOCATION_GLOW_ALPHA,
        ))
        frame.primitives.append(FillCircle(
            center=center, radius=LOCATION_DOT_RADIUS, color=COLORS.WHITE, alpha=1.0,
        ))
