"""Minesweeper solver using local counting rules, region propagation and bounded search."""

import itertools
import logging
from collections import Counter, defaultdict
from typing import (
    TYPE_CHECKING,
    Callable,
    DefaultDict,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
)

from .board import CellState
from .engine import GameState, GameStatus
from .moves import Action, GameResult, Logic, Move, Operation, Reason
from .regions import RegionConstraint, RegionSet
from .utils import Point, sort_points

if TYPE_CHECKING:
    from .engine import BaseMinesweeper

logger = logging.getLogger(__name__)

# Frontier size at which the exhaustive search is no longer attempted.
BRUTE_FORCE_LIMIT = 30

MoveCallback = Callable[[Move, GameState], None]


def result_for_status(status: GameStatus) -> GameResult:
    """Map the status of a finished (or abandoned) game onto a GameResult."""
    if status == GameStatus.WON:
        return GameResult.WON
    if status == GameStatus.LOST:
        return GameResult.LOST
    if status == GameStatus.PLAYING:
        return GameResult.RESIGNED
    raise ValueError(f"No game result for status {status.value!r}.")


class Solver:
    """
    Base class for solvers.

    ``solve`` proposes at most one move for a player-visible state and never
    mutates it. ``solve_game`` drives an engine with those moves until the
    game ends or the solver has nothing left to offer.
    """

    def solve(self, state: GameState) -> Optional[Move]:
        raise NotImplementedError

    def solve_game(
        self,
        game: "BaseMinesweeper",
        on_move: Optional[MoveCallback] = None,
        max_moves: Optional[int] = None,
    ) -> GameResult:
        """
        Play ``game`` until it is won, lost, or the solver gets stuck.

        Args:
            game: Engine exposing ``gamestate`` and ``apply(action)``.
            on_move: Called with each move and the state it was computed from,
                before the move is applied.
            max_moves: Upper bound on applied moves; defaults to three times
                the number of cells.

        Returns:
            WON or LOST once the game has ended, RESIGNED otherwise.

        Raises:
            ValueError: If the game has not been started.
        """
        state = game.gamestate
        if state.status == GameStatus.NEVER_STARTED:
            raise ValueError("Cannot solve a game that has not been started.")

        if max_moves is None:
            max_moves = 3 * state.board.size.cell_count

        moves = 0
        while state.status == GameStatus.PLAYING:
            if moves >= max_moves:
                logger.warning("%r gave up after %d moves", self, moves)
                break

            move = self.solve(state)
            if move is None:
                break
            if on_move is not None:
                on_move(move, state)

            before = state
            for action in move.ordered_actions():
                state = game.apply(action).state
            moves += 1

            if state == before:
                logger.warning("%r proposed a move that changed nothing: %s", self, move)
                break

        return result_for_status(state.status)


class _Hypothesis:
    """
    One partial mine/safe labelling of the frontier.

    ``marks`` maps decided points to True (mine) or False (safe). Safe marks
    only mean "decided within this hypothesis", not "known to be safe".
    """

    __slots__ = ("marks", "remaining_mines")

    def __init__(self, marks: Dict[Point, bool], remaining_mines: int) -> None:
        self.marks = marks
        self.remaining_mines = remaining_mines

    def branch(self) -> "_Hypothesis":
        return _Hypothesis(dict(self.marks), self.remaining_mines)


def find_frontier(state: GameState) -> Tuple[List[Point], List[Point]]:
    """
    Return the undetermined frontier of a player-visible state.

    Returns:
        Tuple of (empties, adjacents): hidden points next to a revealed
        non-zero number, and those numbered points, both in row-major order.
    """
    board = state.board
    empties: Dict[Point, None] = {}
    adjacents: Dict[Point, None] = {}

    for point in board.points():
        if not board[point].is_hidden:
            continue
        for n in board.neighbours(point):
            if board[n].is_numbered:
                empties[point] = None
                adjacents[n] = None

    return list(empties), sort_points(adjacents)


def enumerate_hypotheses(
    state: GameState, adjacents: List[Point]
) -> Iterator[_Hypothesis]:
    """
    Yield every labelling of the frontier consistent with the numbers and budget.

    Walks ``adjacents`` in order; at each number it picks every combination
    of its still-undecided hidden neighbours that brings its flag count to
    its number, marking the rest safe, and prunes combinations that exceed
    the remaining mine budget.
    """
    if not adjacents:
        return iter(())
    root = _Hypothesis({}, state.remaining_mines)
    return _extend(state, adjacents, 0, root)


def _extend(
    state: GameState,
    adjacents: List[Point],
    index: int,
    hypothesis: _Hypothesis,
) -> Iterator[_Hypothesis]:
    if index == len(adjacents):
        yield hypothesis
        return

    board = state.board
    current = adjacents[index]
    cell = board[current]
    if not cell.is_numbered:
        raise RuntimeError(f"Expected a revealed number at {current}.")

    flags = 0
    empties: List[Point] = []
    for n in board.neighbours(current):
        mark = hypothesis.marks.get(n)
        if board[n].is_flagged or mark is True:
            flags += 1
        elif board[n].is_hidden and mark is None:
            empties.append(n)

    mines_to_flag = cell.number - flags
    if (
        mines_to_flag < 0
        or mines_to_flag > hypothesis.remaining_mines
        or mines_to_flag > len(empties)
    ):
        return

    if not empties:
        yield from _extend(state, adjacents, index + 1, hypothesis)
        return

    # mines_to_flag == 0 yields the single empty combination: every empty is marked safe.
    for mines in itertools.combinations(empties, mines_to_flag):
        branch = hypothesis.branch()
        for n in empties:
            branch.marks[n] = n in mines
        branch.remaining_mines -= mines_to_flag
        yield from _extend(state, adjacents, index + 1, branch)


class MinesweeperSolver(Solver):
    """
    Sound deduction solver: it only moves when a move is forced.

    ``solve`` tries four stages in order and returns the first move found:

    1. Local rules on each revealed number (chord, flag all, over-flagged).
    2. Region propagation: subtracting contained and overlapping
       "exactly N of these cells" constraints until a fixed point.
    3. Zero mines remaining: every hidden cell is safe.
    4. Bounded frontier search: enumerate every consistent mine layout of a
       frontier smaller than ``brute_force_limit`` and act on the cells that
       agree across all of them.
    """

    def __init__(self, brute_force_limit: int = BRUTE_FORCE_LIMIT) -> None:
        """
        Args:
            brute_force_limit: Frontier size from which the exhaustive search
                is skipped; larger values find more moves at exponential cost.
        """
        if brute_force_limit <= 0:
            raise ValueError("brute_force_limit must be positive.")
        self.brute_force_limit = brute_force_limit
        self.logger = logging.getLogger(__name__)

    def __repr__(self) -> str:
        return f"MinesweeperSolver(brute_force_limit={self.brute_force_limit})"

    def solve(self, state: GameState) -> Optional[Move]:
        if state.status != GameStatus.PLAYING:
            return None

        for stage in (
            self.local_rules,
            self.propagate,
            self.exhaust_remaining,
            self.search_frontier,
        ):
            move = stage(state)
            if move is not None:
                self.logger.debug("%s: %s", stage.__name__, move)
                return move

        return None

    # -------------------------------------------------------------------------
    # Local rules
    # -------------------------------------------------------------------------

    def local_rules(self, state: GameState) -> Optional[Move]:
        board = state.board

        for point in board.points():
            cell = board[point]
            if not (cell.is_revealed and cell.is_safe):
                continue

            flagged: List[Point] = []
            hidden: List[Point] = []
            for n in board.neighbours(point):
                if board[n].is_flagged:
                    flagged.append(n)
                elif board[n].is_hidden:
                    hidden.append(n)
            candidates = flagged + hidden

            if cell.number == len(flagged) and hidden:
                return Move.single(
                    Action(point, Operation.CHORD),
                    Reason(Logic.CHORD, frozenset(flagged)),
                )
            if cell.number == len(candidates):
                if hidden:
                    return Move.of(
                        hidden, Operation.FLAG, Logic.FLAG_CHORD, frozenset(candidates)
                    )
            elif cell.number < len(flagged):
                # Flag toggles: the engine clears these flags.
                return Move.of(
                    flagged, Operation.FLAG, Logic.OVERFLAGGED, frozenset(candidates)
                )

        return None

    # -------------------------------------------------------------------------
    # Region propagation
    # -------------------------------------------------------------------------

    def build_regions(self, state: GameState) -> RegionSet:
        """One constraint per revealed number that still needs mines among hidden cells."""
        board = state.board
        regions = RegionSet()

        for point in board.points():
            cell = board[point]
            if not (cell.is_revealed and cell.is_safe):
                continue

            required = cell.number - board.count_flags(point)
            if required <= 0:
                continue

            hidden = [n for n in board.neighbours(point) if board[n].is_hidden]
            if not hidden:
                continue

            regions.add(RegionConstraint.of(required, hidden))

        return regions

    def propagate(self, state: GameState) -> Optional[Move]:
        return self.deduce(self.build_regions(state))

    def deduce(self, regions: RegionSet) -> Optional[Move]:
        """
        Derive smaller constraints until one resolves or nothing new appears.

        For every pair where A contains B, A - B is a constraint on its own:
        it resolves to all-safe or all-mine, or it is added for the next pass.
        For merely
        overlapping pairs, A - B is only a lower bound on the mines outside B,
        so it can only force mines.
        """
        changed = True
        passes = 0
        while changed:
            passes += 1
            order = list(regions)

            by_point: DefaultDict[Point, List[int]] = defaultdict(list)
            for i, constraint in enumerate(order):
                for p in constraint.candidates:
                    by_point[p].append(i)

            staged: Dict[RegionConstraint, None] = {}
            for a in order:
                touching = [
                    order[j]
                    for j in sorted({j for p in a.candidates for j in by_point[p]})
                ]

                for b in touching:
                    if not a.contains(b):
                        continue
                    rest = a - b
                    if not rest.candidates:
                        continue
                    if rest.all_safe:
                        return Move.of(
                            sort_points(rest.candidates),
                            Operation.REVEAL,
                            Logic.REGION_DEDUCTION_REVEAL,
                            b.candidates,
                        )
                    if rest.all_mines:
                        return Move.of(
                            sort_points(rest.candidates),
                            Operation.FLAG,
                            Logic.REGION_DEDUCTION_FLAG,
                            b.candidates,
                        )
                    staged[rest] = None

                for b in touching:
                    rest = a - b
                    if rest.candidates and rest.all_mines:
                        return Move.of(
                            sort_points(rest.candidates),
                            Operation.FLAG,
                            Logic.REGION_DEDUCTION_FLAG,
                            b.candidates,
                        )

            changed = False
            for constraint in staged:
                if regions.add(constraint):
                    changed = True

        self.logger.debug(
            "propagation reached a fixed point: %d constraints after %d passes",
            len(regions),
            passes,
        )
        return None

    # -------------------------------------------------------------------------
    # Global exhaustion
    # -------------------------------------------------------------------------

    def exhaust_remaining(self, state: GameState) -> Optional[Move]:
        if state.remaining_mines != 0:
            return None

        hidden = state.board.find(state=CellState.HIDDEN)
        if not hidden:
            return None
        return Move.of(hidden, Operation.REVEAL, Logic.ZERO_MINES_REMAINING)

    # -------------------------------------------------------------------------
    # Bounded frontier search
    # -------------------------------------------------------------------------

    def search_frontier(self, state: GameState) -> Optional[Move]:
        empties, adjacents = find_frontier(state)
        if not empties:
            return None
        if len(empties) >= self.brute_force_limit:
            self.logger.debug(
                "frontier of %d cells is over the search limit", len(empties)
            )
            return None

        hypotheses = list(enumerate_hypotheses(state, adjacents))
        self.logger.debug(
            "%d consistent layouts over a frontier of %d cells",
            len(hypotheses),
            len(empties),
        )
        if not hypotheses:
            return None

        mine_counts: Counter = Counter()
        for hypothesis in hypotheses:
            mine_counts.update(p for p, mine in hypothesis.marks.items() if mine)

        actions: List[Action] = []
        for point in empties:
            if mine_counts[point] == 0:
                actions.append(Action(point, Operation.REVEAL))
            elif mine_counts[point] == len(hypotheses):
                actions.append(Action(point, Operation.FLAG))

        if actions:
            return Move.multi(actions, Reason(Logic.BRUTE_FORCE, frozenset(empties)))

        if all(h.remaining_mines == 0 for h in hypotheses):
            board = state.board
            safe = [
                p
                for p in board.points()
                if board[p].is_hidden and mine_counts[p] == 0
            ]
            if safe:
                return Move.of(
                    safe,
                    Operation.REVEAL,
                    Logic.BRUTE_FORCE_EXHAUSTION,
                    frozenset(empties),
                )

        return None
