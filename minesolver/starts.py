"""
Start oracles for board generation.

Neither solver ever moves. Used as the validator in ``generate_solvable_game``
they accept a board based only on the position reached by the first click.
"""

from typing import TYPE_CHECKING, Optional

from .engine import GameState, GameStatus
from .moves import GameResult, Move
from .solver import MoveCallback, Solver

if TYPE_CHECKING:
    from .engine import BaseMinesweeper


class SafeStart(Solver):
    """Accept any board on which the first click does not hit a mine."""

    def __repr__(self) -> str:
        return "SafeStart()"

    def solve(self, state: GameState) -> Optional[Move]:
        return None

    def solve_game(
        self,
        game: "BaseMinesweeper",
        on_move: Optional[MoveCallback] = None,
        max_moves: Optional[int] = None,
    ) -> GameResult:
        status = game.gamestate.status
        if status in (GameStatus.PLAYING, GameStatus.WON):
            return GameResult.WON
        if status == GameStatus.LOST:
            return GameResult.LOST
        return GameResult.RESIGNED


class ZeroStart(Solver):
    """Accept only boards on which the first click opens a zero."""

    def __repr__(self) -> str:
        return "ZeroStart()"

    def solve(self, state: GameState) -> Optional[Move]:
        return None

    def solve_game(
        self,
        game: "BaseMinesweeper",
        on_move: Optional[MoveCallback] = None,
        max_moves: Optional[int] = None,
    ) -> GameResult:
        state = game.gamestate
        if state.status == GameStatus.PLAYING:
            opened_zero = any(
                cell.is_revealed and cell.is_safe and cell.number == 0
                for cell in state.board
            )
            return GameResult.WON if opened_zero else GameResult.LOST
        if state.status == GameStatus.WON:
            return GameResult.WON
        if state.status == GameStatus.LOST:
            return GameResult.LOST
        return GameResult.RESIGNED
