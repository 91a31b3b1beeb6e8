"""
Nine-palace adjacency resolution.

Maps a position code (1-9) to its 8 neighboring sub-regions. Neighbors that
fall outside the 3x3 layout wrap to the opposite edge of the neighboring cell
in the overflow direction.

Layout (row 0 = north, col 0 = west):

    4(NW)  9(N)   2(NE)
    3(W)   5(C)   7(E)
    8(SW)  1(S)   6(SE)
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

from cell_graph import Direction
from constants import POSITION_CODE_LAYOUT


# Inverse of POSITION_CODE_LAYOUT, derived once so the two can't diverge
_CODE_TO_ROW_COL: Dict[int, Tuple[int, int]] = {
    code: (row, col)
    for row, codes in enumerate(POSITION_CODE_LAYOUT)
    for col, code in enumerate(codes)
}

# Resolution order: row-major over the 8 offsets around (0, 0)
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


class InvalidPositionCode(ValueError):
    """Raised for a position code outside 1-9."""


class AdjacencyInvariantError(AssertionError):
    """Raised when adjacency resolution is not reversible."""


class Adjacency(NamedTuple):
    """One adjacent sub-region.

    ``direction`` is None for a sub-region of the same cell, otherwise the
    compass direction of the neighboring cell that holds ``position_code``.
    """
    direction: Optional[Direction]
    position_code: int


def position_to_row_col(code: int) -> Tuple[int, int]:
    """Map a position code to its (row, col) in the layout."""
    if isinstance(code, bool) or not isinstance(code, int) or code not in _CODE_TO_ROW_COL:
        raise InvalidPositionCode(f"Position code must be an integer 1-9, got {code!r}")
    return _CODE_TO_ROW_COL[code]


def row_col_to_position(row: int, col: int) -> int:
    """Map a (row, col) in [0, 2] x [0, 2] to its position code."""
    if not (0 <= row <= 2 and 0 <= col <= 2):
        raise InvalidPositionCode(f"Row/col out of range: ({row}, {col})")
    return POSITION_CODE_LAYOUT[row][col]


def _wrap(value: int) -> Tuple[int, int]:
    """Wrap a row or column index, returning (wrapped, overflow_sign)."""
    if value < 0:
        return 2, -1
    if value > 2:
        return 0, 1
    return value, 0


def resolve_offset(code: int, d_row: int, d_col: int) -> Adjacency:
    """Resolve a single (d_row, d_col) step from a position code."""
    row, col = position_to_row_col(code)
    new_row, row_sign = _wrap(row + d_row)
    new_col, col_sign = _wrap(col + d_col)
    return Adjacency(
        direction=Direction.from_signs(row_sign, col_sign),
        position_code=row_col_to_position(new_row, new_col),
    )


def neighbor_in_direction(code: int, direction: Direction) -> Adjacency:
    """Resolve the sub-region one step away from ``code`` toward ``direction``."""
    return resolve_offset(code, direction.d_row, direction.d_col)


def resolve_adjacent(code: int) -> List[Adjacency]:
    """
    Return the 8 sub-regions adjacent to a position code.

    Args:
        code: Current position code (1-9)

    Returns:
        8 Adjacency entries in NEIGHBOR_OFFSETS order

    Raises:
        InvalidPositionCode: If code is not an integer in 1-9
    """
    position_to_row_col(code)
    return [resolve_offset(code, d_row, d_col) for d_row, d_col in NEIGHBOR_OFFSETS]


def verify_reversible(code: int) -> None:
    """Check that stepping back from every neighbor returns to ``code``.

    Raises:
        AdjacencyInvariantError: If any round trip fails
    """
    for d_row, d_col in NEIGHBOR_OFFSETS:
        forward = resolve_offset(code, d_row, d_col)
        back = resolve_offset(forward.position_code, -d_row, -d_col)
        expected_dir = forward.direction.opposite if forward.direction else None
        if back.position_code != code or back.direction != expected_dir:
            raise AdjacencyInvariantError(
                f"Adjacency of {code} via ({d_row}, {d_col}) is not reversible: "
                f"{forward} -> {back}"
            )
