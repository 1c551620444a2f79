"""Playable Minesweeper engine that hands immutable snapshots to the hint engine."""

import random
from collections import deque
from typing import Deque, Dict, FrozenSet, List, Optional, Set, Tuple

from .board import BoardSnapshot
from .models import Cell, Coordinate
from .utils import get_neighborhoods

MINE_GENERATION_ALGORITHMS = ("safe_first_action_rule", "safe_neighborhood_rule")


class Minesweeper:
    """Minesweeper game engine with first-click safety and flag support."""

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize a Minesweeper game engine.

        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.
            seed: Optional seed making mine placement reproducible.

        Raises:
            ValueError: If dimensions are invalid, the algorithm is unknown or
                the board cannot hold that many mines under the chosen rule.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_generation_algorithm not in MINE_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )

        safe_zone = 1 if mines_generation_algorithm == "safe_first_action_rule" else 9
        if mines_count > width * height - safe_zone:
            raise ValueError(
                f"Cannot place {mines_count} mines on a {width}x{height} board "
                f"under {mines_generation_algorithm}."
            )

        self.width: int = width
        self.height: int = height
        self.mines_count: int = mines_count
        self.mines_generation_algorithm: str = mines_generation_algorithm
        self._rng = random.Random(seed)

        self.mines: Set[Coordinate] = set()
        self.adjacent: List[List[int]] = [[0] * width for _ in range(height)]
        self.revealed: List[List[bool]] = [[False] * width for _ in range(height)]
        self.flagged: List[List[bool]] = [[False] * width for _ in range(height)]

        self.first_move: bool = True
        self.unrevealed_count: int = width * height - mines_count
        self.game_over: bool = False
        self.won: bool = False

        self._neighborhoods: Dict[
            Coordinate, Tuple[Coordinate, ...]
        ] = get_neighborhoods(width, height)

    def neighbors(self, x: int, y: int) -> Tuple[Coordinate, ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[Coordinate(x, y)]

    def place_mines(self, first_x: int, first_y: int) -> None:
        """
        Place mines once, keeping the first click (and, under
        ``safe_neighborhood_rule``, its neighbors) free of mines.

        Raises:
            ValueError: If mines were already placed.
        """
        if self.mines:
            raise ValueError("Mines are already placed.")

        first = Coordinate(first_x, first_y)
        safe: Set[Coordinate] = {first}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(self.neighbors(first_x, first_y))

        eligible = [
            Coordinate(x, y)
            for y in range(self.height)
            for x in range(self.width)
            if Coordinate(x, y) not in safe
        ]
        self.set_mines(self._rng.sample(eligible, self.mines_count))

    def set_mines(self, mines: List[Tuple[int, int]]) -> None:
        """Use a fixed mine layout instead of random placement."""
        self.mines = {Coordinate(x, y) for x, y in mines}
        self.mines_count = len(self.mines)
        self.unrevealed_count = self.width * self.height - self.mines_count
        for y in range(self.height):
            for x in range(self.width):
                self.adjacent[y][x] = sum(
                    1 for n in self.neighbors(x, y) if n in self.mines
                )
        self.first_move = False

    def flood_fill(self, x: int, y: int) -> List[Tuple[int, int, int]]:
        """
        Reveal a connected region starting at (x, y); zero cells cascade.

        Flagged cells stop the cascade.

        Returns:
            Newly revealed cells as (x, y, adjacent_mines).
        """
        frontier: Deque[Coordinate] = deque([Coordinate(x, y)])
        visited: Set[Coordinate] = {Coordinate(x, y)}
        revealed_cells: List[Tuple[int, int, int]] = []

        while frontier:
            cx, cy = frontier.popleft()
            if self.revealed[cy][cx] or self.flagged[cy][cx]:
                continue

            self.revealed[cy][cx] = True
            self.unrevealed_count -= 1
            revealed_cells.append((cx, cy, self.adjacent[cy][cx]))

            if self.adjacent[cy][cx] == 0:
                for n in self.neighbors(cx, cy):
                    if n in visited or self.revealed[n.y][n.x]:
                        continue
                    visited.add(n)
                    frontier.append(n)

        return revealed_cells

    def reveal(self, x: int, y: int) -> Tuple[int, Dict[str, object]]:
        """
        Reveal a single cell and return a status code plus payload.

        Returns:
            Tuple of (status, payload) where status is -1 for a mine hit,
            0 for a non-terminal reveal or no-op, 1 for a win.

            Payload contains ``revealed_cells`` (list of (x, y, count)) for
            status 0/1 and ``all_mines`` (frozenset) for status -1.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError("Cell coordinates are outside the board.")

        if self.game_over or self.revealed[y][x] or self.flagged[y][x]:
            return 0, {}

        if self.first_move:
            self.place_mines(x, y)

        if Coordinate(x, y) in self.mines:
            self.revealed[y][x] = True
            self.game_over = True
            all_mines: FrozenSet[Coordinate] = frozenset(self.mines)
            return -1, {"all_mines": all_mines}

        revealed_cells = self.flood_fill(x, y)

        if self.unrevealed_count == 0:
            self.game_over = True
            self.won = True
            return 1, {"revealed_cells": revealed_cells}

        return 0, {"revealed_cells": revealed_cells}

    def toggle_flag(self, x: int, y: int) -> bool:
        """
        Flag or unflag an unrevealed cell.

        Returns:
            True if the flag state changed.

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError("Cell coordinates are outside the board.")

        if self.game_over or self.revealed[y][x]:
            return False
        self.flagged[y][x] = not self.flagged[y][x]
        return True

    def snapshot(self) -> BoardSnapshot:
        """
        Return an immutable copy of the board for analysis.

        Mine positions of unrevealed cells are included in the cells but the
        hint engine never reads them.
        """
        rows = [
            [
                Cell(
                    coordinates=Coordinate(x, y),
                    has_mine=Coordinate(x, y) in self.mines,
                    is_revealed=self.revealed[y][x],
                    is_flagged=self.flagged[y][x] and not self.revealed[y][x],
                    adjacent_mines=self.adjacent[y][x],
                )
                for x in range(self.width)
            ]
            for y in range(self.height)
        ]
        return BoardSnapshot(rows, self.mines_count)

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string with coordinate labels.

        Args:
            reveal_all: If True, show mines and all underlying counts.
        """

        def cell_str(x: int, y: int) -> str:
            if reveal_all or self.revealed[y][x]:
                return "M" if Coordinate(x, y) in self.mines else str(self.adjacent[y][x])
            return "F" if self.flagged[y][x] else "."

        header_cells = " ".join(f"{x:2d}" for x in range(self.width))
        out = ["   " + header_cells, "   " + "-" * (3 * self.width - 1)]
        for y in range(self.height):
            row_cells = " ".join(f" {cell_str(x, y)}" for x in range(self.width))
            out.append(f"{y:2d} |" + row_cells)
        return "\n".join(out)


def play_cli(game: Minesweeper) -> None:
    """
    Run a terminal UI with hints.

    Commands: ``x y`` reveals, ``f x y`` toggles a flag, ``h`` prints the
    current hint, ``q`` quits.
    """
    from .hints import HintEngine

    engine = HintEngine()
    print("Minesweeper CLI. Commands: 'x y', 'f x y', 'h' (hint), 'q' (quit).\n")
    print(game.format_board())

    while True:
        s = input("\nCommand: ").strip().lower()
        if s in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if s == "h":
            if game.first_move:
                print("Reveal any cell first.")
                continue
            analysis = engine.analyze_board(game.snapshot())
            move = analysis.recommended_move
            print(f"Recommended: {None if move is None else tuple(move)} "
                  f"(confidence {analysis.confidence:.1f})")
            if analysis.guaranteed_safe:
                print(f"Safe: {[tuple(c) for c in analysis.guaranteed_safe]}")
            if analysis.guaranteed_mines:
                print(f"Mines: {[tuple(c) for c in analysis.guaranteed_mines]}")
            continue

        parts = s.replace(",", " ").split()
        flag = bool(parts) and parts[0] == "f"
        if flag:
            parts = parts[1:]
        if len(parts) != 2:
            print("Invalid input. Example: 3 5 or f 3 5")
            continue

        try:
            x, y = int(parts[0]), int(parts[1])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue
        if not (0 <= x < game.width and 0 <= y < game.height):
            print("Coordinates are outside the board.")
            continue

        if flag:
            game.toggle_flag(x, y)
            print(game.format_board())
            continue

        status, _ = game.reveal(x, y)
        print(game.format_board(reveal_all=status != 0))

        if status == -1:
            print("\nYou hit a mine. You lost.")
            return
        if status == 1:
            print("\nYou revealed all safe cells. You won!")
            return
