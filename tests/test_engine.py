import pytest

from minesweeper_hints import HintEngine, Minesweeper
from minesweeper_hints.models import Coordinate


def test_seed_makes_layout_reproducible():
    first = Minesweeper(9, 9, 10, seed=3)
    second = Minesweeper(9, 9, 10, seed=3)

    first.reveal(4, 4)
    second.reveal(4, 4)

    assert first.mines == second.mines
    assert len(first.mines) == 10


@pytest.mark.parametrize("seed", range(5))
def test_first_click_neighborhood_is_safe(seed):
    game = Minesweeper(9, 9, 10, "safe_neighborhood_rule", seed=seed)

    status, payload = game.reveal(4, 4)

    assert status in (0, 1)
    assert Coordinate(4, 4) not in game.mines
    assert not set(game.neighbors(4, 4)) & game.mines
    assert (4, 4, 0) in payload["revealed_cells"]


@pytest.mark.parametrize("seed", range(5))
def test_first_click_is_safe(seed):
    game = Minesweeper(4, 4, 15, "safe_first_action_rule", seed=seed)

    status, _ = game.reveal(0, 0)

    assert status == 1
    assert game.won


def test_flood_fill_cascades_through_zero_cells():
    game = Minesweeper(3, 3, 1)
    game.set_mines([(2, 2)])

    status, payload = game.reveal(0, 0)

    assert status == 1
    assert len(payload["revealed_cells"]) == 8
    assert game.won and game.game_over


def test_flags_stop_the_cascade():
    game = Minesweeper(3, 3, 1)
    game.set_mines([(2, 2)])
    assert game.toggle_flag(0, 2)

    status, _ = game.reveal(0, 0)

    assert status == 0
    assert not game.revealed[2][0]
    assert game.unrevealed_count == 1

    assert game.reveal(0, 2) == (0, {})
    game.toggle_flag(0, 2)
    status, _ = game.reveal(0, 2)
    assert status == 1


def test_hitting_a_mine_ends_the_game():
    game = Minesweeper(3, 3, 1)
    game.set_mines([(2, 2)])

    status, payload = game.reveal(2, 2)

    assert status == -1
    assert payload["all_mines"] == frozenset({Coordinate(2, 2)})
    assert game.game_over and not game.won
    assert game.reveal(0, 0) == (0, {})
    assert not game.toggle_flag(0, 0)


def test_snapshot_mirrors_game_state():
    game = Minesweeper(4, 3, 2)
    game.set_mines([(3, 0), (3, 2)])
    game.toggle_flag(3, 0)
    game.reveal(0, 0)

    board = game.snapshot()

    assert board.dimensions == (4, 3)
    assert board.mine_count == 2
    assert board.flagged_count == 1
    assert board.revealed_count == sum(map(sum, game.revealed))
    assert board.get_cell(2, 1).adjacent_mines == 2
    assert board.get_cell(2, 1).is_revealed


def test_hints_on_played_game_are_sound():
    engine = HintEngine()
    for seed in range(5):
        game = Minesweeper(9, 9, 10, seed=seed)
        game.reveal(4, 4)

        analysis = engine.analyze_board(game.snapshot())

        assert not set(analysis.guaranteed_safe) & game.mines
        assert set(analysis.guaranteed_mines) <= game.mines


@pytest.mark.parametrize(
    "args",
    [
        (0, 5, 1),
        (5, -1, 1),
        (5, 5, -1),
        (3, 3, 1, "safe_neighborhood_rule"),
        (2, 2, 4, "safe_first_action_rule"),
        (5, 5, 1, "no_such_rule"),
    ],
)
def test_invalid_arguments_are_rejected(args):
    with pytest.raises(ValueError):
        Minesweeper(*args)


def test_reveal_out_of_bounds_raises():
    game = Minesweeper(3, 3, 0)
    with pytest.raises(ValueError):
        game.reveal(3, 0)


def test_mines_are_placed_once():
    game = Minesweeper(5, 5, 3, seed=1)
    game.place_mines(2, 2)
    with pytest.raises(ValueError):
        game.place_mines(0, 0)


@pytest.mark.parametrize("x, y", [(-1, 0), (3, 0), (0, 3), (1, -1)])
def test_toggle_flag_out_of_bounds_raises(x, y):
    game = Minesweeper(3, 3, 0)
    with pytest.raises(ValueError):
        game.toggle_flag(x, y)
