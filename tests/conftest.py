"""
Shared fixtures.

Boards are drawn as lists of row strings, one character per cell:

    o  revealed safe cell
    .  hidden safe cell
    *  hidden mine
    F  flagged mine
    f  flagged safe cell

Numbers are computed from the mines, so layouts never spell them out.
"""

from typing import List, Optional

import matplotlib

matplotlib.use("Agg")

import pytest

from minesolver.board import Board, BoardSize, Cell, CellState
from minesolver.engine import GameState, GameStatus, generate_numbers
from minesolver.solver import MinesweeperSolver

_STATES = {
    "o": CellState.REVEALED,
    ".": CellState.HIDDEN,
    "*": CellState.HIDDEN,
    "F": CellState.FLAGGED,
    "f": CellState.FLAGGED,
}


def build_truth(
    rows: List[str],
    status: GameStatus = GameStatus.PLAYING,
    remaining_mines: Optional[int] = None,
) -> GameState:
    width, height = len(rows[0]), len(rows)
    mines = sum(row.count("*") + row.count("F") for row in rows)
    board = Board(BoardSize(width, height, mines))

    for y, row in enumerate(rows):
        assert len(row) == width, "ragged layout"
        for x, ch in enumerate(row):
            if ch in "*F":
                board[(x, y)] = Cell.mine(_STATES[ch])
            else:
                board[(x, y)] = Cell.safe(0, _STATES[ch])
    generate_numbers(board)

    if remaining_mines is None:
        flags = sum(row.count("F") + row.count("f") for row in rows)
        remaining_mines = mines - flags
    return GameState(status, board, remaining_mines)


@pytest.fixture
def truth():
    """Factory for ground-truth states drawn from a layout."""
    return build_truth


@pytest.fixture
def view():
    """Factory for the player-visible state of a layout."""

    def _view(rows: List[str], **kwargs) -> GameState:
        return build_truth(rows, **kwargs).hide_mines()

    return _view


@pytest.fixture
def solver() -> MinesweeperSolver:
    return MinesweeperSolver()
