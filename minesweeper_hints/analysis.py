"""Analysis and benchmarking tools for the hint engine."""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .board import BoardSnapshot
from .config import DIFFICULTY_PRESETS, EngineConfig
from .engine import Minesweeper
from .hints import HintEngine
from .models import Coordinate


def format_probability_map(
    board: BoardSnapshot,
    probabilities: Mapping[Coordinate, float],
    *,
    show_coords: bool = True,
) -> str:
    """
    Format a probability map as a human-readable grid.

    Revealed cells show their count, flags show ``F``, revealed mines ``*``,
    and every other cell its mine probability as a whole percentage.

    Args:
        board: The analysed board.
        probabilities: Map returned by the hint engine.
        show_coords: If True, include coordinate labels and a header.
    """
    w, h = board.width, board.height

    def cell_str(x: int, y: int) -> str:
        cell = board.get_cell(x, y)
        assert cell is not None
        if cell.is_revealed:
            return "  *" if cell.has_mine else f"  {cell.adjacent_mines}"
        if cell.is_flagged:
            return "  F"
        p = probabilities.get(Coordinate(x, y))
        return "  ?" if p is None else f"{round(p * 100):3d}"

    lines: List[str] = []
    if show_coords:
        lines.append("    " + " ".join(f"{x:3d}" for x in range(w)))
        lines.append("    " + "-" * (4 * w - 1))

    for y in range(h):
        row = " ".join(cell_str(x, y) for x in range(w))
        lines.append(f"{y:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def run_hint_single_test(
    width: int,
    height: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[EngineConfig] = None,
    show_boards: bool = False,
) -> Dict[str, Any]:
    """
    Play one game by always following the engine's recommended move.

    Guaranteed mines are flagged as soon as they are found. Each probabilistic
    move is recorded together with its outcome so that the predictions can be
    checked for calibration.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule.
        seed: Seed for mine placement.
        config: Engine configuration.
        show_boards: If True, print the final board and probability map.

    Returns:
        Dict with "status" (-1 loss, 1 win, 0 unfinished), move counters,
        latency figures and "calibration_samples" as (predicted probability,
        was_mine) pairs.
    """
    game = Minesweeper(width, height, mines_count, mines_generation_algorithm, seed=seed)
    engine = HintEngine(config)

    if mines_generation_algorithm == "safe_first_action_rule":
        first_x, first_y = 0, 0
    else:
        first_x, first_y = width // 2, height // 2

    status, _ = game.reveal(first_x, first_y)
    reveal_moves_count = 1
    guaranteed_moves_count = 0
    guess_count = 0
    flags_placed = 0
    degraded_analyses = 0
    durations: List[float] = []
    calibration_samples: List[Tuple[float, bool]] = []
    analysis = None

    while status == 0:
        analysis = engine.analyze_board(game.snapshot())
        durations.append(analysis.duration)
        if analysis.degraded:
            degraded_analyses += 1

        for mx, my in analysis.guaranteed_mines:
            if not game.flagged[my][mx]:
                game.toggle_flag(mx, my)
                flags_placed += 1

        move = analysis.recommended_move
        if move is None:
            break

        if move in analysis.guaranteed_safe:
            guaranteed_moves_count += 1
        else:
            guess_count += 1
            calibration_samples.append(
                (analysis.probabilities[move], move in game.mines)
            )

        status, _ = game.reveal(move.x, move.y)
        reveal_moves_count += 1

    if show_boards:
        print("Underlying board (mines visible):")
        print(game.format_board(reveal_all=True))
        if analysis is not None:
            print()
            print("Last probability map (percent):")
            print(format_probability_map(game.snapshot(), analysis.probabilities))
        print(f"\nFinished with status {status}.")

    return {
        "status": 1 if game.won else (-1 if game.game_over else 0),
        "reveal_moves_count": reveal_moves_count,
        "guaranteed_moves_count": guaranteed_moves_count,
        "guess_count": guess_count,
        "flags_placed": flags_placed,
        "analyses_count": len(durations),
        "degraded_analyses": degraded_analyses,
        "mean_analysis_seconds": float(np.mean(durations)) if durations else 0.0,
        "max_analysis_seconds": float(np.max(durations)) if durations else 0.0,
        "calibration_samples": calibration_samples,
    }


def run_hint_many_tests(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """
    Play many independent games and aggregate the results.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        runs: Number of games, must be positive.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed; game ``i`` uses ``seed + i``.
        config: Engine configuration.

    Returns:
        Averages of the per-game counters (prefixed with "avg_"), plus
        "win_rate", "guess_failure_rate", "p95_analysis_seconds" and the
        pooled "calibration_samples".

    Raises:
        ValueError: If ``runs`` is not positive.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    numeric_keys = (
        "reveal_moves_count",
        "guaranteed_moves_count",
        "guess_count",
        "flags_placed",
        "analyses_count",
        "degraded_analyses",
        "mean_analysis_seconds",
        "max_analysis_seconds",
    )
    table = np.zeros((runs, len(numeric_keys)))
    statuses = np.zeros(runs, dtype=int)
    samples: List[Tuple[float, bool]] = []

    for i in range(runs):
        result = run_hint_single_test(
            width,
            height,
            mines_count,
            mines_generation_algorithm,
            seed=None if seed is None else seed + i,
            config=config,
        )
        table[i] = [float(result[k]) for k in numeric_keys]
        statuses[i] = result["status"]
        samples.extend(result["calibration_samples"])

    out: Dict[str, Any] = {
        f"avg_{k}": float(v) for k, v in zip(numeric_keys, table.mean(axis=0))
    }
    out["win_rate"] = float(np.mean(statuses == 1))

    total_guesses = table[:, numeric_keys.index("guess_count")].sum()
    failed_guesses = float(np.count_nonzero(statuses == -1))
    out["guess_failure_rate"] = (
        failed_guesses / total_guesses if total_guesses > 0 else 0.0
    )
    out["p95_analysis_seconds"] = float(
        np.percentile(table[:, numeric_keys.index("max_analysis_seconds")], 95)
    )
    out["calibration_samples"] = samples
    return out


def calibration_table(
    samples: Sequence[Tuple[float, bool]], bins: int = 10
) -> List[Dict[str, float]]:
    """
    Compare predicted mine probabilities with observed outcomes.

    Args:
        samples: (predicted probability, was_mine) pairs.
        bins: Number of equal-width probability bins over [0, 1].

    Returns:
        One record per non-empty bin with "low", "high", "count",
        "mean_predicted" and "observed_rate".

    Raises:
        ValueError: If ``bins`` is not positive.
    """
    if bins <= 0:
        raise ValueError("bins must be positive.")
    if not samples:
        return []

    predicted = np.array([p for p, _ in samples], dtype=float)
    observed = np.array([m for _, m in samples], dtype=float)
    edges = np.linspace(0.0, 1.0, bins + 1)
    index = np.clip(np.digitize(predicted, edges[1:-1]), 0, bins - 1)

    rows: List[Dict[str, float]] = []
    for b in range(bins):
        mask = index == b
        count = int(mask.sum())
        if count == 0:
            continue
        rows.append(
            {
                "low": float(edges[b]),
                "high": float(edges[b + 1]),
                "count": float(count),
                "mean_predicted": float(predicted[mask].mean()),
                "observed_rate": float(observed[mask].mean()),
            }
        )
    return rows


def run_expert_level_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    config: Optional[EngineConfig] = None,
    show: bool = True,
) -> Dict[str, Dict[str, Any]]:
    """
    Benchmark the hint engine on the standard difficulty levels and plot summaries.

    Args:
        runs: Number of games per difficulty level.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed for reproducible layouts.
        config: Engine configuration.
        show: If True, display the matplotlib figures.

    Returns:
        Mapping from level name to the statistics of run_hint_many_tests().
    """
    results: Dict[str, Dict[str, Any]] = {}
    for level, (w, h, m) in DIFFICULTY_PRESETS.items():
        results[level] = run_hint_many_tests(
            w, h, m, runs, mines_generation_algorithm, seed=seed, config=config
        )

    level_names = list(DIFFICULTY_PRESETS.keys())
    x = np.arange(len(level_names))
    bar_w = 0.35

    # 1) Win rate by level
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[n]["win_rate"] for n in level_names])  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Win rate when following hints")  # type: ignore[misc]
    plt.tight_layout()

    # 2) Guaranteed versus guessed moves
    plt.figure()  # type: ignore[misc]
    plt.bar(  # type: ignore[misc]
        x - bar_w / 2,
        [results[n]["avg_guaranteed_moves_count"] for n in level_names],
        width=bar_w,
        label="guaranteed",
    )
    plt.bar(  # type: ignore[misc]
        x + bar_w / 2,
        [results[n]["avg_guess_count"] for n in level_names],
        width=bar_w,
        label="guessed",
    )
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average moves per game")  # type: ignore[misc]
    plt.title("Move mix by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 3) Analysis latency
    plt.figure()  # type: ignore[misc]
    plt.bar(  # type: ignore[misc]
        x - bar_w / 2,
        [results[n]["avg_mean_analysis_seconds"] * 1000 for n in level_names],
        width=bar_w,
        label="mean",
    )
    plt.bar(  # type: ignore[misc]
        x + bar_w / 2,
        [results[n]["p95_analysis_seconds"] * 1000 for n in level_names],
        width=bar_w,
        label="p95 of per-game max",
    )
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Milliseconds")  # type: ignore[misc]
    plt.title("Analysis latency")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 4) Calibration over all levels
    pooled = [s for n in level_names for s in results[n]["calibration_samples"]]
    table = calibration_table(pooled)
    if table:
        plt.figure()  # type: ignore[misc]
        plt.plot([0, 1], [0, 1], linestyle="--", color="grey")  # type: ignore[misc]
        plt.plot(  # type: ignore[misc]
            [r["mean_predicted"] for r in table],
            [r["observed_rate"] for r in table],
            marker="o",
        )
        plt.xlabel("Predicted mine probability")  # type: ignore[misc]
        plt.ylabel("Observed mine rate")  # type: ignore[misc]
        plt.title("Calibration of guessed moves")  # type: ignore[misc]
        plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results
