"""Analysis and benchmarking tools for the Minesweeper solver."""

import logging
import random
from collections import Counter
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .board import BoardSize, CellState, ConventionalSize
from .engine import GameState, Minesweeper
from .moves import GameResult, Logic, Move
from .solver import MinesweeperSolver, Solver
from .utils import Point

logger = logging.getLogger(__name__)

UNEXPLAINED = "unexplained"

LOGIC_NAMES: List[str] = [logic.name.lower() for logic in Logic]


def format_move(move: Move) -> str:
    """
    Describe a move on one line: its actions, the rule and the cited cells.

    Example: ``flag (2, 0) <- the surrounding cells force the cells to be a
    mine [(0, 0), (1, 0)]``
    """
    actions = ", ".join(str(a) for a in move.ordered_actions())
    if move.reason is None:
        return actions
    return f"{actions} <- {move.reason}"


def logic_key(move: Move) -> str:
    """Stable lowercase name of the rule behind a move."""
    return move.logic.name.lower() if move.logic is not None else UNEXPLAINED


def default_first_click(
    width: int, height: int, mines_generation_algorithm: str
) -> Point:
    """Corner click for first-action safety, centre click otherwise."""
    if mines_generation_algorithm == "safe_first_action_rule":
        return 0, 0
    return width // 2, height // 2


def count_revealed_safe(state: GameState) -> int:
    return sum(1 for cell in state.board if cell.is_revealed and cell.is_safe)


def run_solver_single_test(
    width: int,
    height: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    solver: Optional[Solver] = None,
    first_click: Optional[Point] = None,
    solvable: bool = False,
    rng: Optional[random.Random] = None,
    show_boards: bool = False,
) -> Dict[str, object]:
    """
    Play one game with a solver on a freshly generated board.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule ("uniform",
            "safe_first_action_rule" or "safe_neighborhood_rule").
        solver: Solver to play with; a default MinesweeperSolver otherwise.
        first_click: Point of the opening reveal; see default_first_click.
        solvable: If True, generate a board the solver is known to win.
        rng: Random source for board generation.
        show_boards: If True, print the final board and the result.

    Returns:
        Dict with keys:
        - result: GameResult
        - moves_count, actions_count
        - revealed_cells_count, flags_count (at the end of the game)
        - logic_counts: moves per rule name
        - moves_sequence: (x, y, operation) for every action, first click included
    """
    size = BoardSize(width, height, mines_count)
    solver = solver if solver is not None else MinesweeperSolver()
    if first_click is None:
        first_click = default_first_click(width, height, mines_generation_algorithm)

    game = Minesweeper(size, mines_generation_algorithm, rng=rng)
    game.start(solver if solvable else None)

    logic_counts: Counter = Counter()
    moves_sequence: List[Tuple[int, int, str]] = [(*first_click, "reveal")]
    actions_count = 0

    def record(move: Move, _state: GameState) -> None:
        nonlocal actions_count
        logic_counts[logic_key(move)] += 1
        actions_count += len(move.actions)
        for action in move.ordered_actions():
            x, y = action.point
            moves_sequence.append((x, y, action.operation.value))

    game.reveal(first_click)
    result = solver.solve_game(game, on_move=record)
    state = game.gamestate

    if show_boards:
        print(f"Generation mode: {mines_generation_algorithm}")
        print(state.board.format_board(reveal_all=True))
        print()
        print(f"Finished with result {result.value} after {sum(logic_counts.values())} moves.")

    return {
        "result": result,
        "moves_count": sum(logic_counts.values()),
        "actions_count": actions_count,
        "revealed_cells_count": count_revealed_safe(state),
        "flags_count": len(state.board.find(state=CellState.FLAGGED)),
        "logic_counts": dict(logic_counts),
        "moves_sequence": moves_sequence,
    }


def run_solver_many_tests(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    solver: Optional[Solver] = None,
    solvable: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, float]:
    """
    Run many independent games and aggregate their outcomes.

    Returns:
        - win_rate, loss_rate, resign_rate
        - avg_/std_ of moves_count, actions_count, revealed_cells_count, flags_count
        - avg_<logic>_moves for every rule, plus avg_unexplained_moves when a
          solver emitted moves without a reason
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    solver = solver if solver is not None else MinesweeperSolver()
    outcomes: Counter = Counter()
    metrics: Dict[str, List[float]] = {
        "moves_count": [],
        "actions_count": [],
        "revealed_cells_count": [],
        "flags_count": [],
    }
    per_run_logic: List[Dict[str, int]] = []

    for _ in range(runs):
        payload = run_solver_single_test(
            width,
            height,
            mines_count,
            mines_generation_algorithm,
            solver=solver,
            solvable=solvable,
            rng=rng,
        )
        outcomes[payload["result"]] += 1
        for key, values in metrics.items():
            values.append(float(payload[key]))  # type: ignore[arg-type]
        per_run_logic.append(payload["logic_counts"])  # type: ignore[arg-type]

    out: Dict[str, float] = {
        "win_rate": outcomes[GameResult.WON] / runs,
        "loss_rate": outcomes[GameResult.LOST] / runs,
        "resign_rate": outcomes[GameResult.RESIGNED] / runs,
    }

    for key, values in metrics.items():
        arr = np.asarray(values)
        out[f"avg_{key}"] = float(arr.mean())
        out[f"std_{key}"] = float(arr.std())

    names = list(LOGIC_NAMES)
    if any(UNEXPLAINED in counts for counts in per_run_logic):
        names.append(UNEXPLAINED)
    logic_matrix = np.array(
        [[counts.get(name, 0) for name in names] for counts in per_run_logic],
        dtype=float,
    )
    for name, mean in zip(names, logic_matrix.mean(axis=0)):
        out[f"avg_{name}_moves"] = float(mean)

    logger.info(
        "%dx%d with %d mines over %d runs: won %.1f%%, lost %.1f%%, resigned %.1f%%",
        width,
        height,
        mines_count,
        runs,
        out["win_rate"] * 100,
        out["loss_rate"] * 100,
        out["resign_rate"] * 100,
    )
    return out


def run_solver_level_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    levels: Optional[Dict[str, Tuple[int, int, int]]] = None,
    solver: Optional[Solver] = None,
    rng: Optional[random.Random] = None,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests per difficulty level and plot summaries.

    Args:
        runs: Number of independent games per level.
        mines_generation_algorithm: Mine placement rule.
        levels: Mapping of level name to (width, height, mines); defaults to
            the conventional beginner, intermediate and expert sizes.
        solver: Solver to benchmark; a default MinesweeperSolver otherwise.
        rng: Random source for board generation.
        show: If False, build the figures and close them without displaying.

    Returns:
        Mapping from level name to the statistics of run_solver_many_tests().
    """
    if levels is None:
        levels = {level.name.lower(): level.value for level in ConventionalSize}

    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in levels.items():
        results[level] = run_solver_many_tests(
            w, h, m, runs, mines_generation_algorithm, solver=solver, rng=rng
        )

    level_names = list(levels.keys())
    x = np.arange(len(level_names))

    # 1) Outcome rates, stacked
    won = np.array([results[n]["win_rate"] for n in level_names])
    lost = np.array([results[n]["loss_rate"] for n in level_names])
    resigned = np.array([results[n]["resign_rate"] for n in level_names])

    plt.figure()
    plt.bar(x, won, label="won")
    plt.bar(x, lost, bottom=won, label="lost")
    plt.bar(x, resigned, bottom=won + lost, label="resigned")
    plt.xticks(x, level_names)
    plt.ylabel("Fraction of games")
    plt.ylim(0.0, 1.0)
    plt.title("Outcomes by difficulty level")
    plt.legend()
    plt.tight_layout()
    _finish_figure(show)

    # 2) Moves by rule
    bar_w = 0.8 / len(LOGIC_NAMES)
    plt.figure()
    for i, name in enumerate(LOGIC_NAMES):
        heights = [results[n][f"avg_{name}_moves"] for n in level_names]
        plt.bar(x + (i - len(LOGIC_NAMES) / 2) * bar_w, heights, width=bar_w, label=name)
    plt.xticks(x, level_names)
    plt.ylabel("Average moves per game")
    plt.title("Moves by deduction rule")
    plt.legend(fontsize="small")
    plt.tight_layout()
    _finish_figure(show)

    return results


def _finish_figure(show: bool) -> None:
    if show:
        plt.show()
    else:
        plt.close()


def summarize_logic_mix(
    results_a: Dict[str, Dict[str, float]],
    results_b: Optional[Dict[str, Dict[str, float]]] = None,
    *,
    level: str = "expert",
) -> Dict[str, float]:
    """
    Share of moves produced by each rule for one level.

    Args:
        results_a: Dict[level_name -> metrics_dict]
        results_b: Optional second dict with the same structure (combined by simple mean).
        level: Which level to summarize.

    Returns:
        ``<logic>_frac`` for every rule, plus win_rate and resign_rate.
    """

    def get(m: Dict[str, float], k: str) -> float:
        if k not in m:
            raise KeyError(f"Missing key {k!r} in metrics for level {level!r}.")
        return float(m[k])

    if level not in results_a:
        raise KeyError(f"Level {level!r} not found in results_a.")
    m = results_a[level]

    if results_b is not None:
        if level not in results_b:
            raise KeyError(f"Level {level!r} not found in results_b.")
        m_b = results_b[level]
        m = {
            k: (float(m.get(k, 0.0)) + float(m_b.get(k, 0.0))) / 2.0
            for k in set(m) | set(m_b)
        }

    total = get(m, "avg_moves_count")
    if total == 0.0:
        raise ZeroDivisionError("avg_moves_count is 0; cannot compute fractions.")

    out = {f"{name}_frac": get(m, f"avg_{name}_moves") / total for name in LOGIC_NAMES}
    out["win_rate"] = get(m, "win_rate")
    out["resign_rate"] = get(m, "resign_rate")
    return out
