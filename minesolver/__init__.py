"""
Minesweeper Deduction Solver

A sound Minesweeper solver that only moves when a move is forced:
- Local rules: chord and flag-all on single numbers
- Region propagation: subtraction of "exactly N of these cells" constraints
- Global exhaustion: every hidden cell is safe once no mines remain
- Bounded frontier search: enumeration of every consistent mine layout

The engine masks the board it shows to solvers and can generate boards that
a given solver is known to win.
"""

from .board import Board, BoardSize, BoardSizeError, Cell, CellState, CellType, ConventionalSize
from .engine import (
    ActionResult,
    FixedMinesweeper,
    GameState,
    GameStatus,
    Minesweeper,
    generate_game,
    generate_solvable_game,
    play_cli,
)
from .moves import Action, GameResult, Logic, Move, Operation, Reason
from .regions import RegionConstraint, RegionSet
from .solver import MinesweeperSolver, Solver
from .starts import SafeStart, ZeroStart
from .analysis import (
    format_move,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_level_analysis,
    summarize_logic_mix,
)

__version__ = "1.0.0"

__all__ = [
    # Board
    "Board",
    "BoardSize",
    "BoardSizeError",
    "Cell",
    "CellState",
    "CellType",
    "ConventionalSize",
    # Engine
    "ActionResult",
    "FixedMinesweeper",
    "GameState",
    "GameStatus",
    "Minesweeper",
    "generate_game",
    "generate_solvable_game",
    # Moves
    "Action",
    "GameResult",
    "Logic",
    "Move",
    "Operation",
    "Reason",
    # Solvers
    "RegionConstraint",
    "RegionSet",
    "MinesweeperSolver",
    "Solver",
    "SafeStart",
    "ZeroStart",
    # CLI
    "play_cli",
    # Analysis functions
    "format_move",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
    "summarize_logic_mix",
]
