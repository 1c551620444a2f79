"""Analysis facade: one entry point per caller need, all stateless across calls."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .board import BoardSnapshot
from .config import EngineConfig
from .models import Coordinate, HintAnalysis, MoveRecommendation
from .ranking import (
    GUARANTEED_REASONING,
    calculate_confidence,
    move_reasoning,
    rank_moves,
    select_best_move,
)
from .solver import ConstraintSolver, SolverResult

logger = logging.getLogger(__name__)


class HintEngine:
    """
    Hint engine combining constraint extraction, exact solving and ranking.

    An engine holds only its configuration, so one instance can serve many
    threads as long as each call gets its own immutable BoardSnapshot.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.solver = ConstraintSolver(self.config)

    def _deadline(self, started: float) -> Optional[float]:
        if self.config.timeout is None:
            return None
        return started + self.config.timeout

    def _solve(self, board: BoardSnapshot, started: float) -> SolverResult:
        result = self.solver.solve(board, deadline=self._deadline(started))
        for diagnostic in result.diagnostics:
            logger.warning("Degraded analysis (%s): %s", diagnostic.kind, diagnostic.message)
        return result

    # -------------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------------

    def analyze_board(self, board: BoardSnapshot) -> HintAnalysis:
        """
        Run the full analysis of a board.

        Recoverable problems (malformed constraints, inconsistent boards,
        oversized components, timeouts) never raise: they are reported in
        ``HintAnalysis.diagnostics`` and the affected cells receive a uniform
        estimate.

        Args:
            board: Immutable grid snapshot.

        Returns:
            The complete HintAnalysis.
        """
        started = time.monotonic()
        result = self._solve(board, started)

        move = select_best_move(
            board,
            result.guaranteed_safe,
            result.probabilities,
            result.guaranteed_mines,
        )
        confidence = calculate_confidence(
            result.guaranteed_safe, result.guaranteed_mines, result.probabilities
        )

        duration = time.monotonic() - started
        logger.debug(
            "Analysed %r in %.4fs (move=%s, confidence=%.1f).",
            board,
            duration,
            None if move is None else tuple(move.coordinate),
            confidence,
        )

        return HintAnalysis(
            guaranteed_safe=result.guaranteed_safe,
            guaranteed_mines=result.guaranteed_mines,
            probabilities=result.probabilities,
            recommended_move=None if move is None else move.coordinate,
            confidence=confidence,
            diagnostics=result.diagnostics,
            duration=duration,
        )

    def get_best_move(
        self, board: BoardSnapshot
    ) -> Tuple[Optional[Coordinate], float]:
        """
        Return only the recommended move and its confidence.

        Solves the board exactly as ``analyze_board`` does, so both always
        agree, but skips building the HintAnalysis.
        """
        started = time.monotonic()
        result = self._solve(board, started)

        move = select_best_move(
            board,
            result.guaranteed_safe,
            result.probabilities,
            result.guaranteed_mines,
        )
        confidence = calculate_confidence(
            result.guaranteed_safe, result.guaranteed_mines, result.probabilities
        )
        logger.debug("Best move found in %.4fs.", time.monotonic() - started)
        return (None if move is None else move.coordinate), confidence

    def get_probabilities(self, board: BoardSnapshot) -> Dict[Coordinate, float]:
        """Return the complete probability map without ranking any move."""
        return self._solve(board, time.monotonic()).probabilities

    def get_top_moves(
        self, board: BoardSnapshot, count: int = 3
    ) -> List[MoveRecommendation]:
        """
        Return up to ``count`` ranked moves, guaranteed-safe cells first.

        Raises:
            ValueError: If ``count`` is negative.
        """
        if count < 0:
            raise ValueError("count must be non-negative.")
        result = self._solve(board, time.monotonic())
        return rank_moves(
            board,
            result.guaranteed_safe,
            result.probabilities,
            count,
            result.guaranteed_mines,
        )

    def has_solvable_moves(self, board: BoardSnapshot) -> bool:
        """True when at least one cell is provably safe."""
        return bool(self._solve(board, time.monotonic()).guaranteed_safe)

    def get_fallback_move(self, board: BoardSnapshot) -> Optional[Coordinate]:
        """
        Return the lowest-risk cell, ignoring information gain.

        Ties go to the first cell in row-major order; None when no cell is left.
        """
        probabilities = self.get_probabilities(board)
        if not probabilities:
            return None
        return min(probabilities, key=lambda c: probabilities[c])

    @staticmethod
    def is_valid_move(board: BoardSnapshot, coord: Coordinate) -> bool:
        """True when ``coord`` is on the board, unrevealed and unflagged."""
        cell = board.get_cell(coord[0], coord[1])
        return cell is not None and not cell.is_revealed and not cell.is_flagged

    def analyze_cell_risk(
        self, board: BoardSnapshot, coord: Coordinate
    ) -> Dict[str, Any]:
        """
        Explain the risk of a single cell.

        Returns:
            Dict with "probability", "reasoning", "is_guaranteed_safe" and
            "is_guaranteed_mine".

        Raises:
            ValueError: If ``coord`` is not an unrevealed, unflagged cell.
        """
        if not self.is_valid_move(board, coord):
            raise ValueError(f"{tuple(coord)} is not an unrevealed, unflagged cell.")

        coord = Coordinate(*coord)
        result = self._solve(board, time.monotonic())
        is_safe = coord in result.guaranteed_safe
        is_mine = coord in result.guaranteed_mines
        probability = result.probabilities[coord]

        if is_safe:
            reasoning = "Guaranteed safe by constraint analysis"
        elif is_mine:
            reasoning = "Guaranteed mine by constraint analysis"
        else:
            reasoning = move_reasoning(probability)
            if reasoning == GUARANTEED_REASONING:
                reasoning = "No mine in any consistent layout"

        return {
            "probability": probability,
            "reasoning": reasoning,
            "is_guaranteed_safe": is_safe,
            "is_guaranteed_mine": is_mine,
        }

    def batch_analyze(
        self,
        boards: Sequence[BoardSnapshot],
        max_workers: Optional[int] = None,
    ) -> List[HintAnalysis]:
        """
        Analyse several independent boards on a thread pool.

        Results are returned in the order of ``boards``.
        """
        if len(boards) <= 1:
            return [self.analyze_board(b) for b in boards]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(self.analyze_board, boards))


_DEFAULT_ENGINE = HintEngine()


def analyze_board(board: BoardSnapshot) -> HintAnalysis:
    """Analyse a board with the default engine configuration."""
    return _DEFAULT_ENGINE.analyze_board(board)


def get_best_move(board: BoardSnapshot) -> Tuple[Optional[Coordinate], float]:
    return _DEFAULT_ENGINE.get_best_move(board)


def get_probabilities(board: BoardSnapshot) -> Dict[Coordinate, float]:
    return _DEFAULT_ENGINE.get_probabilities(board)


def get_top_moves(board: BoardSnapshot, count: int = 3) -> List[MoveRecommendation]:
    return _DEFAULT_ENGINE.get_top_moves(board, count)
