"""Move selection, priority scoring and confidence for hint analysis."""

from typing import Dict, List, Mapping, Optional, Sequence

from .board import BoardSnapshot
from .models import Coordinate, MoveRecommendation

GUARANTEED_PRIORITY = 1000.0
GUARANTEED_REASONING = "Guaranteed safe move"

SAFETY_WEIGHT = 0.7
INFORMATION_WEIGHT = 0.3

# Probabilities closer than this are treated as equally risky.
PROBABILITY_TOLERANCE = 1e-9


def information_gain(board: BoardSnapshot, coord: Coordinate) -> float:
    """
    Estimate how much new information revealing ``coord`` would produce.

    Unrevealed, unflagged neighbors count 1 each (new constraints become
    possible) and revealed neighbors count 0.5 each (existing constraints get
    tighter).
    """
    unrevealed = 0
    revealed = 0
    for cell in board.adjacent_cells(coord.x, coord.y):
        if cell.is_revealed:
            revealed += 1
        elif not cell.is_flagged:
            unrevealed += 1
    return unrevealed + 0.5 * revealed


def move_priority(probability: float, gain: float) -> float:
    """Combine safety and information gain; safety weighs more."""
    safety_score = (1.0 - probability) * 100.0
    information_score = gain * 10.0
    return SAFETY_WEIGHT * safety_score + INFORMATION_WEIGHT * information_score


def move_reasoning(probability: float) -> str:
    """Human-readable risk band for a mine probability."""
    if probability == 0:
        return GUARANTEED_REASONING
    percent = round(probability * 100)
    if probability < 0.1:
        return f"Very low risk ({percent}% mine probability)"
    if probability < 0.3:
        return f"Low risk ({percent}% mine probability)"
    if probability < 0.5:
        return f"Moderate risk ({percent}% mine probability)"
    if probability < 0.7:
        return f"High risk ({percent}% mine probability)"
    return f"Very high risk ({percent}% mine probability)"


def _best_guaranteed_safe(
    board: BoardSnapshot, safe: Sequence[Coordinate]
) -> Coordinate:
    # Strict comparison keeps the first-encountered cell on ties.
    best = safe[0]
    best_gain = information_gain(board, best)
    for coord in safe[1:]:
        gain = information_gain(board, coord)
        if gain > best_gain:
            best, best_gain = coord, gain
    return best


def _probabilistic_moves(
    board: BoardSnapshot,
    probabilities: Mapping[Coordinate, float],
    exclude: Sequence[Coordinate] = (),
) -> List[MoveRecommendation]:
    excluded = set(exclude)
    moves: List[MoveRecommendation] = []
    for coord, probability in probabilities.items():
        if coord in excluded:
            continue
        moves.append(
            MoveRecommendation(
                coordinate=coord,
                probability=probability,
                priority=move_priority(probability, information_gain(board, coord)),
                reasoning=move_reasoning(probability),
            )
        )
    return moves


def select_best_move(
    board: BoardSnapshot,
    guaranteed_safe: Sequence[Coordinate],
    probabilities: Mapping[Coordinate, float],
    guaranteed_mines: Sequence[Coordinate] = (),
) -> Optional[MoveRecommendation]:
    """
    Pick the single move to recommend.

    Priority order:
    1. A guaranteed-safe cell with the highest information gain.
    2. Otherwise, among the candidates sharing the lowest mine probability,
       the one with the highest ``move_priority``.
    3. None when nothing but guaranteed mines is left to reveal.

    Ties go to the first cell in the order given, so callers passing
    row-major sequences get deterministic results. Guaranteed mines are
    never recommended.
    """
    if guaranteed_safe:
        return MoveRecommendation(
            coordinate=_best_guaranteed_safe(board, guaranteed_safe),
            probability=0.0,
            priority=GUARANTEED_PRIORITY,
            reasoning=GUARANTEED_REASONING,
        )

    moves = _probabilistic_moves(board, probabilities, guaranteed_mines)
    if not moves:
        return None

    lowest = min(m.probability for m in moves)
    best: Optional[MoveRecommendation] = None
    for move in moves:
        if move.probability - lowest > PROBABILITY_TOLERANCE:
            continue
        if best is None or move.priority > best.priority:
            best = move
    return best


def calculate_confidence(
    guaranteed_safe: Sequence[Coordinate],
    guaranteed_mines: Sequence[Coordinate],
    probabilities: Mapping[Coordinate, float],
) -> float:
    """
    Heuristic confidence of an analysis for display purposes.

    0.9 with any guaranteed cell; otherwise 0.7, 0.5 or 0.3 as the spread
    between the lowest and highest probability shrinks; 0.1 with no cells.
    """
    if guaranteed_safe or guaranteed_mines:
        return 0.9
    if not probabilities:
        return 0.1

    values = list(probabilities.values())
    spread = max(values) - min(values)
    if spread > 0.3:
        return 0.7
    if spread > 0.1:
        return 0.5
    return 0.3


def rank_moves(
    board: BoardSnapshot,
    guaranteed_safe: Sequence[Coordinate],
    probabilities: Mapping[Coordinate, float],
    count: int = 3,
    guaranteed_mines: Sequence[Coordinate] = (),
) -> List[MoveRecommendation]:
    """
    Return the ``count`` best moves, guaranteed-safe cells first.

    Guaranteed-safe cells always precede probabilistic candidates. They are
    reordered by descending information gain (ties keep input order), so the
    first entry is the move ``select_best_move`` recommends. The rest follow
    a stable sort by descending priority.

    Raises:
        ValueError: If ``count`` is negative.
    """
    if count < 0:
        raise ValueError("count must be non-negative.")

    gains: Dict[Coordinate, float] = {c: information_gain(board, c) for c in guaranteed_safe}
    guaranteed = [
        MoveRecommendation(
            coordinate=coord,
            probability=0.0,
            priority=GUARANTEED_PRIORITY,
            reasoning=GUARANTEED_REASONING,
        )
        for coord in sorted(guaranteed_safe, key=lambda c: -gains[c])
    ]

    others = _probabilistic_moves(
        board, probabilities, list(guaranteed_safe) + list(guaranteed_mines)
    )
    others.sort(key=lambda m: -m.priority)

    return (guaranteed + others)[:count]
