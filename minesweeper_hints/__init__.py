"""
Minesweeper Hint Engine

Infers, from a partially revealed grid, which cells are provably safe or
mined and assigns every other cell a mine probability:
- Constraint extraction: one linear constraint per revealed numbered cell
- Deductive pass: zero, saturation and subset rules to a fixed point
- Exact pass: enumeration of every independent frontier component
- Ranking: information-gain tie-breaks and a confidence score
"""

from .board import BoardSnapshot
from .config import DIFFICULTY_PRESETS, EngineConfig
from .constraints import extract_constraints, validate_constraints
from .engine import Minesweeper, play_cli
from .hints import (
    HintEngine,
    analyze_board,
    get_best_move,
    get_probabilities,
    get_top_moves,
)
from .models import (
    Cell,
    Constraint,
    Coordinate,
    Diagnostic,
    EnumerationTimeout,
    HintAnalysis,
    InvalidBoardError,
    MoveRecommendation,
)
from .solver import ConstraintSolver, SolverResult, count_assignments
from .analysis import (
    calibration_table,
    format_probability_map,
    run_expert_level_analysis,
    run_hint_many_tests,
    run_hint_single_test,
)

__version__ = "1.0.0"

__all__ = [
    # Data model
    "Cell",
    "Constraint",
    "Coordinate",
    "Diagnostic",
    "HintAnalysis",
    "MoveRecommendation",
    "InvalidBoardError",
    "EnumerationTimeout",
    # Core classes
    "BoardSnapshot",
    "ConstraintSolver",
    "EngineConfig",
    "HintEngine",
    "Minesweeper",
    "SolverResult",
    "DIFFICULTY_PRESETS",
    # Entry points
    "analyze_board",
    "get_best_move",
    "get_probabilities",
    "get_top_moves",
    "extract_constraints",
    "validate_constraints",
    "count_assignments",
    # CLI
    "play_cli",
    # Analysis functions
    "calibration_table",
    "format_probability_map",
    "run_hint_single_test",
    "run_hint_many_tests",
    "run_expert_level_analysis",
]
