"""
Quickstart example for the Minesweeper Hint Engine.

This script demonstrates basic usage of the engine.
"""

from minesweeper_hints import (
    BoardSnapshot,
    HintEngine,
    Minesweeper,
    format_probability_map,
    run_hint_many_tests,
)


def main():
    print("=" * 60)
    print("Minesweeper Hint Engine - Quickstart Example")
    print("=" * 60)

    engine = HintEngine()

    # Example 1: Analyse a hand-written position
    print("\n1. Analysing a small hand-written board...")
    print("-" * 60)

    board = BoardSnapshot.from_strings(
        [
            "1...",
            "1...",
            "1...",
            "1...",
        ],
        mine_count=3,
    )
    analysis = engine.analyze_board(board)

    print(format_probability_map(board, analysis.probabilities))
    print(f"Guaranteed safe:  {[tuple(c) for c in analysis.guaranteed_safe]}")
    print(f"Guaranteed mines: {[tuple(c) for c in analysis.guaranteed_mines]}")
    print(f"Recommended move: {analysis.recommended_move}")
    print(f"Confidence:       {analysis.confidence}")

    # Example 2: Hints during a real game
    print("\n2. Top moves after the first click of an Intermediate game...")
    print("-" * 60)

    game = Minesweeper(16, 16, 40, "safe_neighborhood_rule", seed=7)
    game.reveal(8, 8)
    for move in engine.get_top_moves(game.snapshot(), 5):
        print(f"({move.coordinate.x:2d}, {move.coordinate.y:2d})  "
              f"priority {move.priority:6.2f}  {move.reasoning}")

    # Example 3: Follow the hints for many games
    print("\n3. Following hints for 20 Beginner games...")
    print("-" * 60)

    results = run_hint_many_tests(
        width=9,
        height=9,
        mines_count=10,
        runs=20,
        seed=0,
    )

    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average guaranteed moves per game: {results['avg_guaranteed_moves_count']:.1f}")
    print(f"Average guesses per game: {results['avg_guess_count']:.1f}")
    print(f"Mean analysis time: {results['avg_mean_analysis_seconds']*1000:.2f} ms")

    print("\n" + "=" * 60)
    print("Done! See README.md for more detailed usage instructions.")
    print("=" * 60)


if __name__ == "__main__":
    main()
