"""Minesweeper game engine with fairness masking and solver-validated board generation."""

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Deque, List, NamedTuple, Optional, Set

from .board import Board, BoardSize, Cell, CellState, CellType
from .moves import Action, GameResult, Operation
from .utils import Point

if TYPE_CHECKING:
    from .solver import Solver

logger = logging.getLogger(__name__)

MINES_GENERATION_ALGORITHMS = (
    "uniform",
    "safe_first_action_rule",
    "safe_neighborhood_rule",
)


class GameStatus(Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    NEVER_STARTED = "never_started"


@dataclass
class GameState:
    """
    A game snapshot: status, board and the signed count of unflagged mines.

    ``remaining_mines`` is total mines minus flagged cells and goes negative
    when the player over-flags.
    """
    status: GameStatus
    board: Board
    remaining_mines: int

    def copy(self) -> "GameState":
        return GameState(self.status, self.board.copy(), self.remaining_mines)

    def hide_mines(self) -> "GameState":
        """Return the player-visible view of this state."""
        return GameState(self.status, self.board.hide_mines(), self.remaining_mines)


class ActionResult(NamedTuple):
    """Outcome of one engine interaction; ``state`` is unchanged on failure."""
    success: bool
    state: GameState


def validate_generation_algorithm(mines_generation_algorithm: str) -> None:
    if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
        raise ValueError(
            "mines_generation_algorithm must be one of "
            + ", ".join(f'"{name}"' for name in MINES_GENERATION_ALGORITHMS)
            + "."
        )


def generate_numbers(board: Board) -> None:
    """Populate every safe cell with its adjacent mine count, keeping its state."""
    for point in board.points():
        cell = board[point]
        if cell.cell_type == CellType.UNKNOWN:
            raise RuntimeError(f"Cannot number a board with an unknown cell at {point}.")
        if cell.is_mine:
            continue
        count = sum(1 for n in board.neighbours(point) if board[n].is_mine)
        board[point] = Cell.safe(count, cell.state)


def generate_game(
    size: BoardSize,
    *,
    safe_point: Optional[Point] = None,
    mines_generation_algorithm: str = "uniform",
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Place mines on a fresh board and return its ground-truth state.

    Args:
        size: Board dimensions and mine count.
        safe_point: The first click; required by the safe_* algorithms.
        mines_generation_algorithm: "uniform" (mines anywhere),
            "safe_first_action_rule" (the first click is safe) or
            "safe_neighborhood_rule" (the first click and its neighbours are safe).
        rng: Random source, for reproducible boards.

    Raises:
        ValueError: If the algorithm is unknown or the mines cannot be placed.
    """
    validate_generation_algorithm(mines_generation_algorithm)
    rng = rng if rng is not None else random.Random()

    safe: Set[Point] = set()
    if mines_generation_algorithm != "uniform":
        if safe_point is None:
            raise ValueError(
                f"{mines_generation_algorithm} needs the first click to place mines."
            )
        safe.add(safe_point)
        if mines_generation_algorithm == "safe_neighborhood_rule":
            safe.update(size.neighbours(safe_point))

    eligible: List[Point] = [p for p in size.points() if p not in safe]
    if size.mines > len(eligible):
        raise ValueError(
            f"Cannot place enough safe cells to satisfy {mines_generation_algorithm}."
        )

    board = Board(size)
    for point in rng.sample(eligible, size.mines):
        board[point] = Cell.mine()
    generate_numbers(board)

    return GameState(GameStatus.PLAYING, board, size.mines)


class BaseMinesweeper:
    """
    Rule enforcement over a ground-truth state.

    Every interaction returns an ``ActionResult``. While the game is in
    progress ``gamestate`` is the masked player-visible state; once it has
    ended the full ground truth is shown.
    """

    def __init__(
        self,
        state: GameState,
        on_win: Optional[Callable[[], None]] = None,
        on_lose: Optional[Callable[[], None]] = None,
    ) -> None:
        self._state: GameState = state
        self._player_state: GameState = state.hide_mines()
        self.on_win = on_win
        self.on_lose = on_lose
        self.logger = logging.getLogger(__name__)

    @property
    def gamestate(self) -> GameState:
        if self._state.status in (GameStatus.WON, GameStatus.LOST):
            return self._state
        return self._player_state

    @property
    def size(self) -> BoardSize:
        return self._state.board.size

    def _commit(self) -> GameState:
        self._player_state = self._state.hide_mines()
        return self.gamestate

    def _can_interact(self, point: Point) -> bool:
        return (
            self._state.status == GameStatus.PLAYING
            and self._state.board.size.contains(point)
        )

    def _fail(self) -> ActionResult:
        return ActionResult(False, self.gamestate)

    def _reveal_cell(self, point: Point) -> bool:
        """Reveal one cell of the ground truth; returns False if it was a mine."""
        board = self._state.board
        cell = board[point]
        if not cell.is_hidden:
            return True

        if cell.is_mine:
            board[point] = cell.with_state(CellState.REVEALED)
            return False
        if not cell.is_safe:
            raise RuntimeError(f"Ground-truth board holds an unknown cell at {point}.")

        if cell.number == 0:
            self._flood_fill(point)
        else:
            board[point] = cell.with_state(CellState.REVEALED)
        return True

    def _flood_fill(self, start: Point) -> None:
        """Reveal the connected zero region around ``start`` and its numbered rim."""
        board = self._state.board
        frontier: Deque[Point] = deque([start])
        visited: Set[Point] = {start}

        while frontier:
            point = frontier.popleft()
            cell = board[point]
            if not cell.is_hidden or not cell.is_safe:
                continue

            board[point] = cell.with_state(CellState.REVEALED)

            if cell.number == 0:
                for n in board.neighbours(point):
                    if n not in visited:
                        visited.add(n)
                        frontier.append(n)

    def _settle(self, success: bool) -> ActionResult:
        if not success:
            self._state.status = GameStatus.LOST
            self.logger.debug("game lost")
            if self.on_lose is not None:
                self.on_lose()
        elif self._state.board.has_won():
            self._state.status = GameStatus.WON
            self.logger.debug("game won")
            if self.on_win is not None:
                self.on_win()
        return ActionResult(True, self._commit())

    def reveal(self, point: Point) -> ActionResult:
        if not self._can_interact(point):
            return self._fail()
        return self._settle(self._reveal_cell(point))

    def clear_around(self, point: Point) -> ActionResult:
        """Chord: reveal every unflagged neighbour of a satisfied number."""
        if not self._can_interact(point):
            return self._fail()

        board = self._state.board
        cell = board[point]
        if not (cell.is_revealed and cell.is_safe):
            return self._fail()
        if board.count_flags(point) != cell.number:
            return self._fail()

        success = True
        for n in board.neighbours(point):
            success &= self._reveal_cell(n)
        return self._settle(success)

    def set_flagged(self, point: Point, flagged: bool) -> ActionResult:
        if not self._can_interact(point):
            return self._fail()

        board = self._state.board
        cell = board[point]
        if cell.is_revealed:
            return self._fail()

        if flagged != cell.is_flagged:
            self._state.remaining_mines += -1 if flagged else 1
        board[point] = cell.with_state(
            CellState.FLAGGED if flagged else CellState.HIDDEN
        )
        return ActionResult(True, self._commit())

    def toggle_flag(self, point: Point) -> ActionResult:
        if not self._can_interact(point):
            return self._fail()
        return self.set_flagged(point, not self._state.board[point].is_flagged)

    def left_click(self, point: Point) -> ActionResult:
        if not self._can_interact(point):
            return self._fail()

        cell = self._state.board[point]
        if cell.is_revealed and cell.is_safe:
            return self.clear_around(point)
        if cell.is_hidden:
            return self.reveal(point)
        return self._fail()

    def right_click(self, point: Point) -> ActionResult:
        return self.toggle_flag(point)

    def apply(self, action: Action) -> ActionResult:
        """Map a solver action onto the matching interaction."""
        if action.operation == Operation.REVEAL:
            return self.reveal(action.point)
        if action.operation == Operation.CHORD:
            return self.clear_around(action.point)
        return self.toggle_flag(action.point)


class FixedMinesweeper(BaseMinesweeper):
    """Engine over a pre-generated ground-truth state."""

    def __init__(
        self,
        state: GameState,
        on_win: Optional[Callable[[], None]] = None,
        on_lose: Optional[Callable[[], None]] = None,
    ) -> None:
        if any(cell.cell_type == CellType.UNKNOWN for cell in state.board):
            raise ValueError("FixedMinesweeper needs a ground-truth state, not a masked one.")
        self._initial = state.copy()
        super().__init__(state.copy(), on_win, on_lose)

    def reset(self) -> GameState:
        """Restore the state the engine was created with."""
        self._state = self._initial.copy()
        return self._commit()


class Minesweeper(BaseMinesweeper):
    """
    Engine that generates its board on the first reveal.

    Passing a solver to ``start`` makes the first reveal generate a board that
    the solver is known to win from that click.
    """

    def __init__(
        self,
        size: BoardSize,
        mines_generation_algorithm: str = "uniform",
        on_win: Optional[Callable[[], None]] = None,
        on_lose: Optional[Callable[[], None]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        validate_generation_algorithm(mines_generation_algorithm)
        if (
            mines_generation_algorithm == "safe_neighborhood_rule"
            and size.mines > size.cell_count - 9
        ):
            raise ValueError(
                "Cannot place enough safe cells to satisfy safe_neighborhood_rule."
            )

        super().__init__(
            GameState(GameStatus.NEVER_STARTED, Board(size), 0), on_win, on_lose
        )
        self.mines_generation_algorithm = mines_generation_algorithm
        self.rng = rng if rng is not None else random.Random()
        self.solver: Optional["Solver"] = None
        self.first_move = True
        self._generated: Optional[GameState] = None

    def start(self, solver: Optional["Solver"] = None) -> GameState:
        """Begin a new game; the board is generated on the first reveal."""
        size = self._state.board.size
        self._state = GameState(GameStatus.PLAYING, Board(size), size.mines)
        self.solver = solver
        self.first_move = True
        self._generated = None
        return self._commit()

    def reset(self) -> GameState:
        """Replay the current board from the start, keeping the mine positions."""
        if self._generated is None:
            return self.start(self.solver)
        self._state = self._generated.copy()
        return self._commit()

    def reveal(self, point: Point) -> ActionResult:
        if not self._can_interact(point):
            return self._fail()

        if self.first_move:
            self.first_move = False
            size = self._state.board.size
            if self.solver is not None:
                generated = generate_solvable_game(
                    size,
                    self.solver,
                    point,
                    mines_generation_algorithm=self.mines_generation_algorithm,
                    rng=self.rng,
                )
            else:
                generated = generate_game(
                    size,
                    safe_point=point,
                    mines_generation_algorithm=self.mines_generation_algorithm,
                    rng=self.rng,
                )
            self._generated = generated.copy()
            self._state = generated

        return super().reveal(point)

    def set_flagged(self, point: Point, flagged: bool) -> ActionResult:
        if self.first_move:
            return self._fail()
        return super().set_flagged(point, flagged)


def generate_solvable_game(
    size: BoardSize,
    solver: "Solver",
    point: Point,
    *,
    mines_generation_algorithm: str = "uniform",
    rng: Optional[random.Random] = None,
    max_attempts: Optional[int] = None,
) -> GameState:
    """
    Generate boards until ``solver`` wins one from a first click at ``point``.

    Each candidate is played to completion on a throwaway ``FixedMinesweeper``;
    the returned ground truth is untouched by that run.

    Raises:
        RuntimeError: If ``max_attempts`` boards were tried without a win.
    """
    rng = rng if rng is not None else random.Random()
    attempts = 0

    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        state = generate_game(
            size,
            safe_point=point,
            mines_generation_algorithm=mines_generation_algorithm,
            rng=rng,
        )

        game = FixedMinesweeper(state)
        if not game.reveal(point).success:
            raise RuntimeError(f"First click at {point} was rejected by the engine.")

        if solver.solve_game(game) == GameResult.WON:
            logger.debug(
                "board solvable by %r found after %d attempt(s)", solver, attempts
            )
            return state

    raise RuntimeError(
        f"No board solvable by {solver!r} found in {max_attempts} attempts."
    )


def play_cli(game: BaseMinesweeper, solver: Optional["Solver"] = None) -> None:
    """
    Run a simple terminal UI for playing Minesweeper.

    Commands take 0-based coordinates: ``r x y`` reveals, ``c x y`` chords,
    ``f x y`` toggles a flag. With a solver, ``h`` prints a hint and ``a``
    lets the solver play until it finishes or gets stuck.
    """
    if isinstance(game, Minesweeper) and game.gamestate.status == GameStatus.NEVER_STARTED:
        game.start()

    print("Minesweeper CLI. Commands: r x y, c x y, f x y, h (hint), a (auto), q (quit).\n")
    print(game.gamestate.board.format_board())

    handlers = {"r": game.reveal, "c": game.clear_around, "f": game.toggle_flag}

    while game.gamestate.status == GameStatus.PLAYING:
        parts = input("\nCommand: ").strip().lower().replace(",", " ").split()
        if not parts:
            continue

        command = parts[0]
        if command in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if command in {"h", "a"}:
            if solver is None:
                print("No solver available.")
                continue
            if command == "h":
                move = solver.solve(game.gamestate)
                print("No forced move." if move is None else f"Hint: {move}")
                continue
            result = solver.solve_game(
                game, on_move=lambda move, _state: print(move)
            )
            print(f"\nSolver finished: {result.value}.")
        elif command in handlers and len(parts) == 3:
            try:
                point = (int(parts[1]), int(parts[2]))
            except ValueError:
                print("Invalid input. Coordinates must be integers.")
                continue
            if not handlers[command](point).success:
                print("That move is not allowed.")
        else:
            print("Invalid input. Example: r 3 5")
            continue

        print()
        print(game.gamestate.board.format_board())

    status = game.gamestate.status
    if status == GameStatus.WON:
        print("\nYou revealed all safe cells. You won!")
    elif status == GameStatus.LOST:
        print("\nYou hit a mine. You lost.")
    print("\nFull board:")
    print(game.gamestate.board.format_board(reveal_all=True))
