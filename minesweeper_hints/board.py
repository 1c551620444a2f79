"""Immutable grid snapshot consumed by the hint engine."""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .models import Cell, Coordinate, InvalidBoardError
from .utils import get_neighborhoods


class BoardSnapshot:
    """
    Read-only snapshot of a Minesweeper grid.

    Cell lists are indexed once at construction so that repeated analyses of
    the same snapshot do not rescan the grid. A snapshot is never mutated
    after construction and can be shared between threads.
    """

    def __init__(self, cells: Sequence[Sequence[Cell]], mine_count: int) -> None:
        """
        Build a snapshot from a row-major grid of cells.

        Args:
            cells: ``cells[y][x]`` is the cell at column x, row y.
            mine_count: Total number of mines on the board.

        Raises:
            InvalidBoardError: If the grid is empty, ragged, has a cell whose
                coordinates disagree with its position, carries an impossible
                adjacent-mine count, or ``mine_count`` is negative.
        """
        if not cells or not cells[0]:
            raise InvalidBoardError("Board must have positive width and height.")
        if mine_count < 0:
            raise InvalidBoardError("mine_count must be non-negative.")

        width = len(cells[0])
        rows: List[Tuple[Cell, ...]] = []
        for y, row in enumerate(cells):
            if len(row) != width:
                raise InvalidBoardError(
                    f"Ragged board: row {y} has {len(row)} cells, expected {width}."
                )
            normalized: List[Cell] = []
            for x, cell in enumerate(row):
                if tuple(cell.coordinates) != (x, y):
                    raise InvalidBoardError(
                        f"Cell at ({x}, {y}) reports coordinates {tuple(cell.coordinates)}."
                    )
                if not 0 <= cell.adjacent_mines <= 8:
                    raise InvalidBoardError(
                        f"Cell at ({x}, {y}) has adjacent_mines={cell.adjacent_mines}."
                    )
                # Plain (x, y) tuples are accepted and stored as Coordinate.
                if not isinstance(cell.coordinates, Coordinate):
                    cell = replace(cell, coordinates=Coordinate(x, y))
                normalized.append(cell)
            rows.append(tuple(normalized))

        self.width: int = width
        self.height: int = len(cells)
        self.mine_count: int = mine_count
        self._rows: Tuple[Tuple[Cell, ...], ...] = tuple(rows)
        self._neighborhoods: Dict[
            Coordinate, Tuple[Coordinate, ...]
        ] = get_neighborhoods(self.width, self.height)

        all_cells = [cell for row in self._rows for cell in row]
        self._revealed: Tuple[Cell, ...] = tuple(c for c in all_cells if c.is_revealed)
        self._unrevealed: Tuple[Cell, ...] = tuple(
            c for c in all_cells if not c.is_revealed
        )
        self._flagged: Tuple[Cell, ...] = tuple(
            c for c in all_cells if c.is_flagged and not c.is_revealed
        )
        self._revealed_mine_count: int = sum(1 for c in self._revealed if c.has_mine)

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_layout(
        cls,
        width: int,
        height: int,
        mines: Iterable[Tuple[int, int]],
        revealed: Iterable[Tuple[int, int]] = (),
        flagged: Iterable[Tuple[int, int]] = (),
    ) -> "BoardSnapshot":
        """
        Build a snapshot from known mine positions.

        Adjacent-mine counts are computed from ``mines``. Nothing is cascaded:
        only the listed cells are revealed or flagged.

        Raises:
            InvalidBoardError: On non-positive dimensions or out-of-bounds
                coordinates.
        """
        if width <= 0 or height <= 0:
            raise InvalidBoardError("width and height must be positive.")

        def checked(coords: Iterable[Tuple[int, int]], what: str) -> Set[Coordinate]:
            out: Set[Coordinate] = set()
            for x, y in coords:
                if not (0 <= x < width and 0 <= y < height):
                    raise InvalidBoardError(f"{what} ({x}, {y}) is outside the board.")
                out.add(Coordinate(x, y))
            return out

        mine_set = checked(mines, "Mine")
        revealed_set = checked(revealed, "Revealed cell")
        flagged_set = checked(flagged, "Flagged cell")
        neighborhoods = get_neighborhoods(width, height)

        rows: List[List[Cell]] = []
        for y in range(height):
            row: List[Cell] = []
            for x in range(width):
                coord = Coordinate(x, y)
                is_revealed = coord in revealed_set
                row.append(
                    Cell(
                        coordinates=coord,
                        has_mine=coord in mine_set,
                        is_revealed=is_revealed,
                        is_flagged=coord in flagged_set and not is_revealed,
                        adjacent_mines=sum(
                            1 for n in neighborhoods[coord] if n in mine_set
                        ),
                    )
                )
            rows.append(row)

        return cls(rows, len(mine_set))

    @classmethod
    def from_strings(
        cls, rows: Sequence[str], mine_count: Optional[int] = None
    ) -> "BoardSnapshot":
        """
        Parse a compact text board.

        Symbols: ``.`` unrevealed, ``F`` flagged, ``0``-``8`` revealed number,
        ``*`` revealed mine. Whitespace inside a row is ignored.

        Args:
            rows: One string per board row, top row first.
            mine_count: Total mines on the board. Defaults to the number of
                flagged cells plus revealed mines.

        Raises:
            InvalidBoardError: On unknown symbols or a ragged board.
        """
        grid: List[List[Cell]] = []
        known_mines = 0

        for y, line in enumerate(rows):
            row: List[Cell] = []
            for x, ch in enumerate(line.replace(" ", "")):
                coord = Coordinate(x, y)
                if ch == ".":
                    row.append(Cell(coordinates=coord))
                elif ch == "F":
                    known_mines += 1
                    row.append(Cell(coordinates=coord, is_flagged=True))
                elif ch == "*":
                    known_mines += 1
                    row.append(Cell(coordinates=coord, has_mine=True, is_revealed=True))
                elif ch.isdigit():
                    row.append(
                        Cell(coordinates=coord, is_revealed=True, adjacent_mines=int(ch))
                    )
                else:
                    raise InvalidBoardError(f"Unknown board symbol {ch!r} at ({x}, {y}).")
            grid.append(row)

        return cls(grid, known_mines if mine_count is None else mine_count)

    # -------------------------------------------------------------------------
    # Grid access
    # -------------------------------------------------------------------------

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def revealed_count(self) -> int:
        return len(self._revealed)

    @property
    def flagged_count(self) -> int:
        return len(self._flagged)

    @property
    def revealed_mine_count(self) -> int:
        """Number of revealed cells that hold a mine (only after a loss)."""
        return self._revealed_mine_count

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        """Return the cell at (x, y), or None outside the board."""
        if not self.in_bounds(x, y):
            return None
        return self._rows[y][x]

    def neighbors(self, x: int, y: int) -> Tuple[Coordinate, ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[Coordinate(x, y)]

    def adjacent_cells(self, x: int, y: int) -> Tuple[Cell, ...]:
        return tuple(self._rows[ny][nx] for nx, ny in self.neighbors(x, y))

    def cells(self) -> Tuple[Cell, ...]:
        """All cells in row-major order."""
        return tuple(cell for row in self._rows for cell in row)

    def revealed_cells(self) -> Tuple[Cell, ...]:
        return self._revealed

    def unrevealed_cells(self) -> Tuple[Cell, ...]:
        return self._unrevealed

    def flagged_cells(self) -> Tuple[Cell, ...]:
        return self._flagged

    def candidate_cells(self) -> Tuple[Coordinate, ...]:
        """Unrevealed, unflagged coordinates in row-major order."""
        return tuple(c.coordinates for c in self._unrevealed if not c.is_flagged)

    def format(self) -> str:
        """Render the visible board using the ``from_strings`` symbols."""

        def symbol(cell: Cell) -> str:
            if cell.is_revealed:
                return "*" if cell.has_mine else str(cell.adjacent_mines)
            return "F" if cell.is_flagged else "."

        return "\n".join("".join(symbol(c) for c in row) for row in self._rows)

    def __repr__(self) -> str:
        return (
            f"BoardSnapshot(width={self.width}, height={self.height}, "
            f"mine_count={self.mine_count}, revealed={self.revealed_count}, "
            f"flagged={self.flagged_count})"
        )
