"""Shared fixtures and helpers for the hint engine tests."""

import itertools
import random
from typing import Dict, List, Tuple

import pytest

from minesweeper_hints import BoardSnapshot, EngineConfig, HintEngine
from minesweeper_hints.constraints import extract_constraints, frontier_cells
from minesweeper_hints.models import Coordinate


def brute_force_marginals(board: BoardSnapshot) -> Tuple[int, Dict[Coordinate, int]]:
    """Try all 2^n assignments of the frontier and count the consistent ones."""
    constraints = [c for c in extract_constraints(board) if c.is_valid]
    cells = frontier_cells(constraints)
    total = 0
    counts = dict.fromkeys(cells, 0)

    for bits in itertools.product((False, True), repeat=len(cells)):
        assignment = dict(zip(cells, bits))
        if all(
            sum(assignment[c] for c in k.affected_cells) == k.required_mines
            for k in constraints
        ):
            total += 1
            for cell, is_mine in assignment.items():
                if is_mine:
                    counts[cell] += 1

    return total, counts


def random_board(
    seed: int,
    width: int = 5,
    height: int = 4,
    mines_count: int = 4,
    revealed_count: int = 8,
) -> Tuple[BoardSnapshot, List[Coordinate]]:
    """Random layout with a few safe cells revealed; returns (board, mines)."""
    rng = random.Random(seed)
    coords = [Coordinate(x, y) for y in range(height) for x in range(width)]
    mines = rng.sample(coords, mines_count)
    safe = [c for c in coords if c not in mines]
    revealed = rng.sample(safe, min(revealed_count, len(safe)))
    return BoardSnapshot.from_layout(width, height, mines, revealed=revealed), mines


@pytest.fixture
def engine() -> HintEngine:
    return HintEngine()


@pytest.fixture
def exact_engine() -> HintEngine:
    """Engine without the early-game edge adjustment, for exact comparisons."""
    return HintEngine(EngineConfig(edge_adjustment=False))


@pytest.fixture(params=range(12))
def random_case(request) -> Tuple[BoardSnapshot, List[Coordinate]]:
    return random_board(request.param)
