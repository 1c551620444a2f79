from minesweeper_hints import BoardSnapshot
from minesweeper_hints.constraints import (
    extract_constraints,
    frontier_cells,
    validate_constraints,
)
from minesweeper_hints.models import Coordinate


def test_single_revealed_cell_yields_one_constraint():
    board = BoardSnapshot.from_layout(5, 5, [(0, 0), (1, 0), (2, 0)], revealed=[(1, 1)])

    constraints = extract_constraints(board)

    assert len(constraints) == 1
    (constraint,) = constraints
    assert constraint.center == Coordinate(1, 1)
    assert constraint.required_mines == 3
    assert len(constraint.affected_cells) == 8
    assert constraint.is_valid


def test_flagged_neighbors_reduce_required_count():
    board = BoardSnapshot.from_strings(["F..", ".2.", "..."], mine_count=2)

    (constraint,) = extract_constraints(board)

    assert constraint.required_mines == 1
    assert Coordinate(0, 0) not in constraint.affected_cells
    assert len(constraint.affected_cells) == 7


def test_cells_without_unrevealed_neighbors_emit_nothing():
    board = BoardSnapshot.from_layout(3, 1, [], revealed=[(0, 0), (1, 0), (2, 0)])
    assert extract_constraints(board) == []


def test_over_flagged_cell_yields_malformed_constraint():
    board = BoardSnapshot.from_strings(["1F", "F."])

    constraints = extract_constraints(board)

    assert len(constraints) == 1
    assert constraints[0].required_mines == -1
    assert constraints[0].affected_cells == (Coordinate(1, 1),)
    assert validate_constraints(constraints) == constraints


def test_revealed_mine_carries_no_constraint():
    board = BoardSnapshot.from_strings(["*.", ".."], mine_count=2)
    assert extract_constraints(board) == []


def test_constraints_follow_row_major_order():
    board = BoardSnapshot.from_strings(["1..", "...", "..1"], mine_count=2)

    constraints = extract_constraints(board)

    assert [c.center for c in constraints] == [Coordinate(0, 0), Coordinate(2, 2)]
    assert frontier_cells(constraints) == [
        Coordinate(1, 0),
        Coordinate(0, 1),
        Coordinate(1, 1),
        Coordinate(2, 1),
        Coordinate(1, 2),
    ]
