"""
Tests for geographic to screen projection.

Tests viewport geometry, linear projection with Y inversion, antimeridian
handling, heading rotation about the visual center, and the accuracy circle.
"""

import math

import numpy as np
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cell_graph import GeoBounds
from projector import (
    Insets,
    Projector,
    ScreenPoint,
    ScreenRect,
    Viewport,
    rotate_points,
    rotation_matrix,
)


def make_projector(center_lat=0.0, center_lng=0.0, heading=0.0, ppd=1000.0, viewport=None):
    viewport = viewport or Viewport(width=300, height=300)
    return Projector.create(center_lat, center_lng, heading, viewport, ppd)


class TestViewport:
    """Tests for Viewport geometry."""

    def test_visual_center_without_insets(self, square_viewport):
        """Without insets the visual center is the view center."""
        assert square_viewport.visual_center == ScreenPoint(150.0, 150.0)

    def test_visual_center_with_insets(self, viewport):
        """The vertical center sits between the top and bottom insets."""
        # 844 - 100 - 244 = 500 visible -> 100 + 250
        assert viewport.visual_center == ScreenPoint(195.0, 350.0)

    @pytest.mark.parametrize("width,height,top,bottom", [
        (0, 100, 0, 0),
        (100, 0, 0, 0),
        (-10, 100, 0, 0),
        (float("nan"), 100, 0, 0),
        (100, float("inf"), 0, 0),
        (100, 100, 60, 40),
    ])
    def test_degenerate(self, width, height, top, bottom):
        """Zero, negative, non-finite or fully covered views are degenerate."""
        vp = Viewport(width=width, height=height, insets=Insets(top=top, bottom=bottom))
        assert vp.is_degenerate

    def test_negative_inset_rejected(self):
        """Insets must be non-negative."""
        with pytest.raises(ValueError):
            Insets(top=-1)


class TestProjectorCreate:
    """Tests for Projector.create guards."""

    @pytest.mark.parametrize("ppd", [None, 0.0, -5.0, float("nan"), float("inf")])
    def test_invalid_scale(self, ppd):
        """Unusable pixels-per-degree -> no projector."""
        assert make_projector(ppd=ppd) is None

    def test_degenerate_viewport(self):
        """Degenerate viewport -> no projector."""
        assert make_projector(viewport=Viewport(width=0, height=100)) is None

    def test_nan_center(self):
        """NaN coordinate -> no projector."""
        assert make_projector(center_lat=float("nan")) is None

    def test_nan_heading_treated_as_north(self):
        """A missing heading falls back to north-up."""
        projector = make_projector(heading=float("nan"))
        assert projector is not None
        assert projector.rotation == 0.0


class TestProjectPoint:
    """Tests for unrotated point projection."""

    def test_center_maps_to_origin(self):
        """The user's coordinate is drawn at the visual center."""
        projector = make_projector(center_lat=10.0, center_lng=20.0, viewport=Viewport(
            width=390, height=844, insets=Insets(top=100, bottom=244)))
        assert projector.project_point(10.0, 20.0) == ScreenPoint(195.0, 350.0)

    def test_north_is_up(self):
        """Higher latitude -> smaller Y."""
        projector = make_projector()
        point = projector.project_point(0.01, 0.0)
        assert point.x == pytest.approx(150.0)
        assert point.y == pytest.approx(140.0)

    def test_east_is_right(self):
        """Higher longitude -> larger X."""
        projector = make_projector()
        point = projector.project_point(0.0, 0.01)
        assert point.x == pytest.approx(160.0)
        assert point.y == pytest.approx(150.0)

    def test_wraps_across_antimeridian(self):
        """A point just east of 180 is drawn just right of a center at 179.99."""
        projector = make_projector(center_lng=179.99)
        point = projector.project_point(0.0, -179.99)
        assert point.x == pytest.approx(150.0 + 0.02 * 1000.0)


class TestProjectBounds:
    """Tests for bounding box projection."""

    def test_simple_box(self):
        """A box north-east of the center projects up and to the right."""
        projector = make_projector()
        rect = projector.project_bounds(GeoBounds(south=0.01, north=0.02, west=0.03, east=0.05))

        assert rect.left == pytest.approx(180.0)
        assert rect.top == pytest.approx(130.0)
        assert rect.width == pytest.approx(20.0)
        assert rect.height == pytest.approx(10.0)

    @pytest.mark.parametrize("center_lng", [179.9, -179.9, 0.0, 180.0])
    def test_antimeridian_width(self, center_lng):
        """A cell spanning 179.5..-179.5 is exactly 1 degree wide."""
        ppd = 100.0
        projector = make_projector(center_lng=center_lng, ppd=ppd)
        rect = projector.project_bounds(GeoBounds(south=0.0, north=1.0, west=179.5, east=-179.5))

        assert rect.width == pytest.approx(1.0 * ppd)

    def test_antimeridian_position(self):
        """The straddling cell is placed around the center, not 360 deg away."""
        projector = make_projector(center_lng=179.9, ppd=100.0)
        rect = projector.project_bounds(GeoBounds(south=0.0, north=1.0, west=179.5, east=-179.5))

        assert rect.left == pytest.approx(150.0 - 0.4 * 100.0)
        assert rect.left < 150.0 < rect.right

    def test_unnormalized_longitudes(self):
        """West/east beyond 180 are normalized independently."""
        projector = make_projector(center_lng=-160.0, ppd=100.0)
        rect = projector.project_bounds(GeoBounds(south=0.0, north=1.0, west=200.0, east=201.0))

        assert rect.left == pytest.approx(150.0)
        assert rect.width == pytest.approx(100.0)

    def test_full_circle_box(self):
        """A box from -180 to 180 is 360 degrees wide, not empty."""
        projector = make_projector(ppd=10.0)
        rect = projector.project_bounds(GeoBounds(south=0.0, north=1.0, west=-180.0, east=180.0))

        assert rect is not None
        assert rect.width == pytest.approx(3600.0)

    @pytest.mark.parametrize("bounds", [
        GeoBounds(south=0.0, north=0.0, west=0.0, east=1.0),
        GeoBounds(south=1.0, north=0.0, west=0.0, east=1.0),
        GeoBounds(south=0.0, north=1.0, west=1.0, east=1.0),
        GeoBounds(south=float("nan"), north=1.0, west=0.0, east=1.0),
    ])
    def test_invalid_geometry(self, bounds):
        """Zero-size or non-finite boxes are skipped."""
        assert make_projector().project_bounds(bounds) is None


class TestRotation:
    """Tests for heading rotation about the visual center."""

    def test_heading_zero_is_identity(self):
        """North-up leaves points unchanged."""
        projector = make_projector(heading=0.0)
        assert projector.to_screen((200.0, 100.0)) == pytest.approx((200.0, 100.0))

    def test_facing_east_puts_east_up(self):
        """Heading 90: a point east of the user appears above the dot."""
        projector = make_projector(heading=90.0)
        point = projector.to_screen(projector.project_point(0.0, 0.01))
        assert point.x == pytest.approx(150.0)
        assert point.y == pytest.approx(140.0)

    def test_facing_south_puts_north_down(self):
        """Heading 180: north appears below the dot."""
        projector = make_projector(heading=180.0)
        point = projector.to_screen(projector.project_point(0.01, 0.0))
        assert point.x == pytest.approx(150.0)
        assert point.y == pytest.approx(160.0)

    def test_rotates_about_visual_center(self, viewport):
        """The visual center is a fixed point of the rotation."""
        projector = make_projector(heading=37.0, viewport=viewport)
        center = viewport.visual_center
        assert projector.to_screen(center) == pytest.approx(center)

    @pytest.mark.parametrize("heading", [0.0, 15.0, 90.0, 133.7, 180.0, 271.0, 359.9, -45.0])
    def test_round_trip(self, heading, viewport):
        """Rotating by theta then -theta returns the point within 1e-6 px."""
        projector = make_projector(heading=heading, viewport=viewport)
        rng = np.random.default_rng(int(abs(heading) * 10))
        for x, y in rng.uniform(-500, 1500, size=(20, 2)):
            back = projector.inverse(projector.to_screen((x, y)))
            assert back.x == pytest.approx(x, abs=1e-6)
            assert back.y == pytest.approx(y, abs=1e-6)

    def test_preserves_distance(self):
        """Rotation keeps distances from the center."""
        projector = make_projector(heading=63.0)
        point = projector.to_screen((250.0, 80.0))
        before = math.hypot(250.0 - 150.0, 80.0 - 150.0)
        after = math.hypot(point.x - 150.0, point.y - 150.0)
        assert after == pytest.approx(before)

    def test_rect_corners_unrotated(self):
        """At heading 0 the corners are the rectangle's own."""
        projector = make_projector()
        corners = projector.rect_corners(ScreenRect(left=10, top=20, width=30, height=40))
        assert corners == [(10, 20), (40, 20), (40, 60), (10, 60)]

    def test_rect_corners_half_turn(self):
        """At heading 180 corners are mirrored through the center."""
        projector = make_projector(heading=180.0)
        corners = projector.rect_corners(ScreenRect(left=150, top=150, width=10, height=20))
        assert corners[0] == pytest.approx((150.0, 150.0))
        assert corners[2] == pytest.approx((140.0, 130.0))

    def test_rotation_matrix_orthonormal(self):
        """Rotation matrices are orthonormal with determinant 1."""
        m = rotation_matrix(123.0)
        assert np.allclose(m @ m.T, np.eye(2))
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_rotate_points_batch(self):
        """Batch rotation by 90 deg (clockwise on screen) about the origin."""
        points = np.array([[1.0, 0.0], [0.0, 1.0]])
        rotated = rotate_points(points, 90.0, (0.0, 0.0))
        assert np.allclose(rotated, [[0.0, 1.0], [-1.0, 0.0]])


class TestAccuracyCircle:
    """Tests for the accuracy circle."""

    def test_radius_scales_with_cell_height(self):
        """Radius = accuracy * cell pixels / cell meters."""
        projector = make_projector()
        circle = projector.accuracy_circle(10.0, cell_pixel_size=130.0, cell_height_m=124.4)

        assert circle.radius == pytest.approx(10.0 * 130.0 / 124.4)
        assert circle.center == projector.origin

    def test_zero_accuracy(self):
        """Zero accuracy gives a zero-radius circle."""
        circle = make_projector().accuracy_circle(0.0, 130.0, 124.4)
        assert circle.radius == 0.0

    @pytest.mark.parametrize("accuracy,size,height", [
        (5.0, 130.0, 0.0),
        (5.0, 0.0, 124.4),
        (-1.0, 130.0, 124.4),
        (float("nan"), 130.0, 124.4),
        (5.0, 130.0, float("inf")),
    ])
    def test_guards(self, accuracy, size, height):
        """Zero denominators and non-finite inputs are rejected."""
        assert make_projector().accuracy_circle(accuracy, size, height) is None
