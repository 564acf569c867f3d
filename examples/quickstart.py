"""
Quickstart example for the Minesweeper Deduction Solver.

This script demonstrates basic usage of the solver.
"""

import logging
import random

from minesolver import (
    BoardSize,
    ConventionalSize,
    Minesweeper,
    MinesweeperSolver,
    run_solver_many_tests,
)
from minesolver.analysis import format_move


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    rng = random.Random(7)

    print("=" * 60)
    print("Minesweeper Deduction Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game, printing every move and its reason
    print("\n1. Solving a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    game = Minesweeper(
        ConventionalSize.INTERMEDIATE.size,
        mines_generation_algorithm="safe_neighborhood_rule",
        rng=rng,
    )
    game.start()
    game.reveal((8, 8))

    solver = MinesweeperSolver()
    moves = []
    result = solver.solve_game(game, on_move=lambda move, _state: moves.append(move))

    for i, move in enumerate(moves[:10], start=1):
        print(f"{i:3d}. {format_move(move)}")
    if len(moves) > 10:
        print(f"     ... {len(moves) - 10} more moves")
    print(f"Result: {result.value.upper()}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(game.gamestate.board.format_board(reveal_all=True))

    # Example 3: A board the solver is guaranteed to win
    print("\n3. Generating a board the solver can finish without guessing...")
    print("-" * 60)

    game = Minesweeper(BoardSize(9, 9, 10), "safe_neighborhood_rule", rng=rng)
    game.start(solver)
    game.reveal((4, 4))
    print(f"Result: {solver.solve_game(game).value.upper()}")

    # Example 4: Compare difficulty levels
    print("\n4. Outcomes by difficulty level (20 games each)...")
    print("-" * 60)

    for level in ConventionalSize:
        w, h, m = level.value
        results = run_solver_many_tests(
            width=w,
            height=h,
            mines_count=m,
            runs=20,
            mines_generation_algorithm="safe_neighborhood_rule",
            rng=rng,
        )
        print(
            f"{level.name.title():15s} ({w}x{h}, {m:2d} mines): "
            f"{results['win_rate']*100:5.1f}% won, "
            f"{results['resign_rate']*100:5.1f}% resigned, "
            f"{results['avg_moves_count']:.1f} moves per game"
        )

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
