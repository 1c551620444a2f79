import pytest

import minesweeper_hints
from minesweeper_hints import BoardSnapshot, HintEngine
from minesweeper_hints.models import (
    INCONSISTENT_BOARD,
    TIMEOUT,
    Coordinate,
    EnumerationTimeout,
)

from .conftest import random_board

C = Coordinate


@pytest.fixture
def zero_board() -> BoardSnapshot:
    return BoardSnapshot.from_strings(["0..", "...", "..."], mine_count=1)


@pytest.fixture
def saturated_board() -> BoardSnapshot:
    revealed = [(x, y) for y in range(3) for x in range(3) if (x, y) != (0, 0)]
    return BoardSnapshot.from_layout(3, 3, [(0, 0)], revealed=revealed)


def test_three_required_mines_yield_no_guarantees(engine):
    board = BoardSnapshot.from_layout(5, 5, [(0, 0), (1, 0), (2, 0)], revealed=[(1, 1)])

    analysis = engine.analyze_board(board)

    assert analysis.guaranteed_safe == []
    assert analysis.guaranteed_mines == []
    assert set(analysis.probabilities) == set(board.candidate_cells())
    lowest = min(analysis.probabilities.values())
    assert analysis.probabilities[analysis.recommended_move] == lowest
    assert analysis.confidence == 0.7
    assert not analysis.degraded


def test_saturated_cell_is_reported_as_mine(engine, saturated_board):
    analysis = engine.analyze_board(saturated_board)

    assert analysis.guaranteed_mines == [C(0, 0)]
    assert analysis.probabilities == {C(0, 0): 1.0}
    assert analysis.recommended_move is None
    assert analysis.confidence == 0.9
    assert engine.get_best_move(saturated_board) == (None, 0.9)


def test_recommends_safe_cell_with_most_information(engine, zero_board):
    analysis = engine.analyze_board(zero_board)

    assert analysis.guaranteed_safe == [C(1, 0), C(0, 1), C(1, 1)]
    assert analysis.recommended_move == C(1, 1)
    assert analysis.confidence == 0.9
    assert engine.get_best_move(zero_board) == (C(1, 1), 0.9)


def test_fully_revealed_board_has_nothing_to_suggest(engine):
    board = BoardSnapshot.from_layout(2, 2, [], revealed=[(0, 0), (1, 0), (0, 1), (1, 1)])

    analysis = engine.analyze_board(board)

    assert analysis.probabilities == {}
    assert analysis.guaranteed_safe == []
    assert analysis.guaranteed_mines == []
    assert analysis.recommended_move is None
    assert analysis.confidence == 0.1
    assert engine.get_best_move(board) == (None, 0.1)
    assert engine.get_top_moves(board) == []
    assert engine.get_fallback_move(board) is None


def test_recommended_move_is_safe_or_least_risky(engine, random_case):
    board, _ = random_case

    analysis = engine.analyze_board(board)

    if analysis.guaranteed_safe:
        assert analysis.recommended_move in analysis.guaranteed_safe
    else:
        candidates = {
            c: p
            for c, p in analysis.probabilities.items()
            if c not in analysis.guaranteed_mines
        }
        assert analysis.probabilities[analysis.recommended_move] == min(candidates.values())


def test_analysis_is_deterministic(engine, random_case):
    board, _ = random_case

    first = engine.analyze_board(board).to_dict()
    second = engine.analyze_board(board).to_dict()

    first.pop("duration")
    second.pop("duration")
    assert first == second


def test_get_best_move_agrees_with_full_analysis(engine, random_case):
    board, _ = random_case

    move, confidence = engine.get_best_move(board)
    analysis = engine.analyze_board(board)

    assert move == analysis.recommended_move
    assert confidence == analysis.confidence


@pytest.mark.parametrize("seed", range(40))
def test_get_best_move_sees_safe_cells_found_by_enumeration(engine, seed):
    board, _ = random_board(seed, width=6, height=6, mines_count=7, revealed_count=10)

    move, _ = engine.get_best_move(board)

    assert move == engine.analyze_board(board).recommended_move


def test_get_probabilities_covers_candidates(engine, random_case):
    board, _ = random_case
    probabilities = engine.get_probabilities(board)
    assert list(probabilities) == list(board.candidate_cells())


def test_top_moves(engine, zero_board):
    moves = engine.get_top_moves(zero_board, count=5)

    assert [m.coordinate for m in moves[:3]] == [C(1, 1), C(1, 0), C(0, 1)]
    assert all(m.probability == 0.0 for m in moves[:3])
    assert len(moves) == 5

    with pytest.raises(ValueError):
        engine.get_top_moves(zero_board, count=-1)


def test_has_solvable_moves(engine, zero_board):
    assert engine.has_solvable_moves(zero_board)
    assert not engine.has_solvable_moves(
        BoardSnapshot.from_strings(["...", ".1.", "..."], mine_count=1)
    )


def test_fallback_move_ignores_information_gain(exact_engine):
    board = BoardSnapshot.from_strings(["...", ".1.", "..."], mine_count=1)
    assert exact_engine.get_fallback_move(board) == C(0, 0)


def test_is_valid_move():
    board = BoardSnapshot.from_strings(["1F", ".."], mine_count=1)

    assert HintEngine.is_valid_move(board, C(0, 1))
    assert not HintEngine.is_valid_move(board, C(0, 0))
    assert not HintEngine.is_valid_move(board, C(1, 0))
    assert not HintEngine.is_valid_move(board, C(2, 0))
    assert not HintEngine.is_valid_move(board, C(0, -1))


def test_analyze_cell_risk(engine, zero_board, saturated_board):
    safe = engine.analyze_cell_risk(zero_board, C(1, 1))
    assert safe == {
        "probability": 0.0,
        "reasoning": "Guaranteed safe by constraint analysis",
        "is_guaranteed_safe": True,
        "is_guaranteed_mine": False,
    }

    mine = engine.analyze_cell_risk(saturated_board, (0, 0))
    assert mine["probability"] == 1.0
    assert mine["is_guaranteed_mine"]
    assert mine["reasoning"] == "Guaranteed mine by constraint analysis"

    with pytest.raises(ValueError):
        engine.analyze_cell_risk(zero_board, C(0, 0))


def test_batch_analyze_preserves_order(engine):
    boards = [random_board(seed)[0] for seed in range(6)]

    results = engine.batch_analyze(boards, max_workers=3)

    assert len(results) == len(boards)
    for board, result in zip(boards, results):
        expected = engine.analyze_board(board)
        assert result.probabilities == expected.probabilities
        assert result.recommended_move == expected.recommended_move


def test_timeout_degrades_instead_of_raising(engine, monkeypatch):
    def too_slow(*args, **kwargs):
        raise EnumerationTimeout("too slow")

    monkeypatch.setattr("minesweeper_hints.solver.count_assignments", too_slow)
    board = BoardSnapshot.from_strings(["...", ".1.", "..."], mine_count=1)

    analysis = engine.analyze_board(board)

    assert analysis.degraded
    assert [d.kind for d in analysis.diagnostics] == [TIMEOUT]
    assert set(analysis.probabilities.values()) == {0.5}
    assert analysis.recommended_move is not None


def test_inconsistent_board_is_reported(engine):
    board = BoardSnapshot.from_strings(["1.", "2."], mine_count=2)

    analysis = engine.analyze_board(board)

    assert INCONSISTENT_BOARD in {d.kind for d in analysis.diagnostics}
    assert analysis.to_dict()["degraded"] is True


def test_module_level_helpers_use_default_engine(zero_board):
    analysis = minesweeper_hints.analyze_board(zero_board)

    assert analysis.recommended_move == C(1, 1)
    assert minesweeper_hints.get_best_move(zero_board) == (C(1, 1), 0.9)
    assert minesweeper_hints.get_probabilities(zero_board) == analysis.probabilities
    assert len(minesweeper_hints.get_top_moves(zero_board, 2)) == 2


def test_subset_chain_along_a_column(engine):
    board = BoardSnapshot.from_strings(["1...", "1...", "1...", "1..."], mine_count=3)

    analysis = engine.analyze_board(board)

    assert analysis.guaranteed_safe == [C(1, 1), C(1, 2)]
    assert analysis.guaranteed_mines == [C(1, 0), C(1, 3)]
    assert analysis.recommended_move == C(1, 1)


@pytest.mark.parametrize("seed", range(20))
def test_top_move_matches_recommended_move(engine, seed):
    board, _ = random_board(seed, width=6, height=6, mines_count=6, revealed_count=12)

    analysis = engine.analyze_board(board)
    top = engine.get_top_moves(board, count=1)

    if analysis.guaranteed_safe:
        assert top[0].coordinate == analysis.recommended_move
