"""
Tests for nine-palace adjacency resolution.

Covers the layout table, completeness and reversibility of the 8-neighbor
mapping, literal expectations for the center and NW corner codes, and
fail-fast handling of invalid codes.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adjacency import (
    Adjacency,
    InvalidPositionCode,
    NEIGHBOR_OFFSETS,
    neighbor_in_direction,
    position_to_row_col,
    resolve_adjacent,
    resolve_offset,
    row_col_to_position,
    verify_reversible,
)
from cell_graph import Direction
from constants import POSITION_CODE_LAYOUT

ALL_CODES = list(range(1, 10))


class TestLayoutTable:
    """Tests for the code <-> (row, col) table."""

    def test_center_is_five(self):
        """Code 5 sits in the middle of the layout."""
        assert position_to_row_col(5) == (1, 1)

    @pytest.mark.parametrize("code,expected", [
        (4, (0, 0)), (9, (0, 1)), (2, (0, 2)),
        (3, (1, 0)), (5, (1, 1)), (7, (1, 2)),
        (8, (2, 0)), (1, (2, 1)), (6, (2, 2)),
    ])
    def test_non_lexicographic_layout(self, code, expected):
        """Codes follow the nine-palace layout, not 1..9 left-to-right."""
        assert position_to_row_col(code) == expected

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_round_trip(self, code):
        """row_col_to_position inverts position_to_row_col."""
        assert row_col_to_position(*position_to_row_col(code)) == code

    def test_layout_uses_each_code_once(self):
        """All nine codes appear exactly once."""
        flat = [code for row in POSITION_CODE_LAYOUT for code in row]
        assert sorted(flat) == ALL_CODES


class TestResolveAdjacent:
    """Tests for the 8-neighbor resolution."""

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_completeness(self, code):
        """Every code yields 8 distinct neighbors covering all offsets once."""
        result = resolve_adjacent(code)
        assert len(result) == 8
        assert len(set(result)) == 8
        assert all(isinstance(item, Adjacency) for item in result)
        assert all(1 <= item.position_code <= 9 for item in result)

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_never_returns_self_in_same_cell(self, code):
        """A same-cell neighbor is always a different sub-region."""
        for direction, target in resolve_adjacent(code):
            if direction is None:
                assert target != code

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_reversibility(self, code):
        """Stepping back from each neighbor returns to the original code."""
        for (d_row, d_col), (direction, target) in zip(NEIGHBOR_OFFSETS, resolve_adjacent(code)):
            back = resolve_offset(target, -d_row, -d_col)
            assert back.position_code == code
            expected = direction.opposite if direction is not None else None
            assert back.direction == expected

    @pytest.mark.parametrize("code", ALL_CODES)
    def test_verify_reversible_passes(self, code):
        """The built-in invariant check accepts every code."""
        verify_reversible(code)

    def test_center_literal(self):
        """Center code: all 8 neighbors are in the same cell."""
        result = resolve_adjacent(5)
        assert all(direction is None for direction, _ in result)
        assert sorted(code for _, code in result) == sorted([4, 9, 2, 3, 7, 8, 1, 6])

    def test_nw_corner_literal(self):
        """Code 4 wraps north, west and north-west into neighboring cells."""
        result = dict(zip(NEIGHBOR_OFFSETS, resolve_adjacent(4)))

        assert result[(-1, 0)] == Adjacency(Direction.N, 8)
        assert result[(0, -1)] == Adjacency(Direction.W, 2)
        assert result[(-1, -1)] == Adjacency(Direction.NW, 6)
        assert result[(0, 1)] == Adjacency(None, 9)
        assert result[(1, 0)] == Adjacency(None, 3)

    def test_se_corner_literal(self):
        """Code 6 wraps south, east and south-east."""
        result = dict(zip(NEIGHBOR_OFFSETS, resolve_adjacent(6)))

        assert result[(1, 0)] == Adjacency(Direction.S, 2)
        assert result[(0, 1)] == Adjacency(Direction.E, 8)
        assert result[(1, 1)] == Adjacency(Direction.SE, 4)

    def test_edge_code_mixes_cells(self):
        """Code 9 (north edge) has 3 neighbors in the cell to the north."""
        result = resolve_adjacent(9)
        north = [code for direction, code in result if direction == Direction.N]
        assert sorted(north) == sorted([8, 1, 6])

    def test_neighbor_in_direction(self):
        """Single-direction lookup matches the full resolution."""
        assert neighbor_in_direction(4, Direction.NW) == Adjacency(Direction.NW, 6)
        assert neighbor_in_direction(5, Direction.E) == Adjacency(None, 7)

    def test_deterministic(self):
        """Repeated calls give identical results."""
        assert resolve_adjacent(7) == resolve_adjacent(7)


class TestInvalidCodes:
    """Tests for fail-fast handling of invalid position codes."""

    @pytest.mark.parametrize("code", [0, 10, -1, 99])
    def test_out_of_range_raises(self, code):
        """Codes outside 1-9 raise InvalidPositionCode."""
        with pytest.raises(InvalidPositionCode):
            resolve_adjacent(code)

    @pytest.mark.parametrize("code", [None, "5", 5.0, True])
    def test_non_integer_raises(self, code):
        """Non-integers (including bools and floats) are rejected."""
        with pytest.raises(InvalidPositionCode):
            resolve_adjacent(code)

    def test_is_value_error(self):
        """InvalidPositionCode is a ValueError for callers that catch broadly."""
        with pytest.raises(ValueError, match="1-9"):
            position_to_row_col(0)

    def test_row_col_out_of_range(self):
        """Row/col outside the grid is rejected."""
        with pytest.raises(InvalidPositionCode):
            row_col_to_position(3, 0)


class TestDirection:
    """Tests for the Direction enum helpers."""

    @pytest.mark.parametrize("direction", list(Direction))
    def test_opposite_is_involution(self, direction):
        """opposite(opposite(d)) == d and opposite(d) != d."""
        assert direction.opposite.opposite == direction
        assert direction.opposite != direction

    def test_from_signs(self):
        """Overflow signs combine into cardinal and diagonal directions."""
        assert Direction.from_signs(0, 0) is None
        assert Direction.from_signs(-1, 0) == Direction.N
        assert Direction.from_signs(0, 1) == Direction.E
        assert Direction.from_signs(1, -1) == Direction.SW

    def test_eight_members(self):
        """There is no center member."""
        assert len(list(Direction)) == 8
