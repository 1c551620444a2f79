"""Constraint extraction from a revealed grid."""

from typing import Dict, Iterable, List

from .board import BoardSnapshot
from .models import Constraint, Coordinate


def extract_constraints(board: BoardSnapshot) -> List[Constraint]:
    """
    Derive the constraint network from the revealed cells of a board.

    One constraint is emitted per revealed, non-mine cell that still has at
    least one unrevealed, unflagged neighbor. Its required count is the
    cell's adjacent-mine count minus its flagged neighbors. Constraints whose
    count falls outside ``[0, len(affected_cells)]`` are emitted unchanged so
    that the solver can report them.

    Args:
        board: Grid snapshot to analyse.

    Returns:
        Constraints in row-major order of their center cells; affected cells
        keep the board's neighbor order.
    """
    constraints: List[Constraint] = []

    for cell in board.revealed_cells():
        if cell.has_mine:
            # A revealed mine carries no count information.
            continue

        x, y = cell.coordinates
        affected: List[Coordinate] = []
        flagged = 0
        for n in board.adjacent_cells(x, y):
            if n.is_revealed:
                continue
            if n.is_flagged:
                flagged += 1
            else:
                affected.append(n.coordinates)

        if not affected:
            continue

        constraints.append(
            Constraint(
                center=cell.coordinates,
                required_mines=cell.adjacent_mines - flagged,
                affected_cells=tuple(affected),
            )
        )

    return constraints


def validate_constraints(constraints: Iterable[Constraint]) -> List[Constraint]:
    """Return the constraints whose required count is impossible."""
    return [c for c in constraints if not c.is_valid]


def frontier_cells(constraints: Iterable[Constraint]) -> List[Coordinate]:
    """Cells appearing in at least one constraint, in first-seen order."""
    seen: Dict[Coordinate, None] = {}
    for constraint in constraints:
        for cell in constraint.affected_cells:
            seen.setdefault(cell, None)
    return list(seen)
