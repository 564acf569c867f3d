import logging

import pytest

from minesolver.board import BoardSize
from minesolver.engine import FixedMinesweeper, GameStatus, Minesweeper
from minesolver.moves import Action, GameResult, Logic, Move, Operation
from minesolver.solver import MinesweeperSolver, Solver, result_for_status
from minesolver.starts import SafeStart, ZeroStart


class _Scripted(Solver):
    """Always proposes the same move."""

    def __init__(self, move):
        self.move = move

    def __repr__(self):
        return "_Scripted()"

    def solve(self, state):
        return self.move


class TestSolveGame:
    def test_plays_to_a_win_and_reports_each_move(self, truth, solver):
        game = FixedMinesweeper(truth([".*.", "ooo"]))
        seen = []

        result = solver.solve_game(game, on_move=lambda move, state: seen.append((move, state)))

        assert result == GameResult.WON
        assert [move.logic for move, _ in seen] == [
            Logic.REGION_DEDUCTION_REVEAL,
            Logic.FLAG_CHORD,
            Logic.CHORD,
        ]
        # Each move is reported with the state it was computed from
        assert seen[0][1].board[(2, 0)].is_hidden
        assert seen[1][1].board[(2, 0)].is_revealed

    def test_resigns_when_stuck(self, truth):
        game = FixedMinesweeper(truth(["oo*.", "oo.."]))
        result = MinesweeperSolver(brute_force_limit=1).solve_game(game)

        assert result == GameResult.RESIGNED
        assert game.gamestate.status == GameStatus.PLAYING

    def test_stops_on_a_move_that_changes_nothing(self, truth, caplog):
        game = FixedMinesweeper(truth(["oo*.", "oo.."]))
        moves = []
        scripted = _Scripted(Move.single(Action((0, 0), Operation.REVEAL)))

        with caplog.at_level(logging.WARNING, logger="minesolver.solver"):
            result = scripted.solve_game(game, on_move=lambda move, _: moves.append(move))

        assert result == GameResult.RESIGNED
        assert len(moves) == 1
        assert "changed nothing" in caplog.text

    def test_move_cap(self, truth, caplog):
        game = FixedMinesweeper(truth(["oo*.", "oo.."]))
        moves = []
        scripted = _Scripted(Move.single(Action((3, 0), Operation.FLAG)))

        with caplog.at_level(logging.WARNING, logger="minesolver.solver"):
            result = scripted.solve_game(
                game, on_move=lambda move, _: moves.append(move), max_moves=5
            )

        assert result == GameResult.RESIGNED
        assert len(moves) == 5
        assert "gave up after 5 moves" in caplog.text

    def test_finished_game_is_reported_without_moving(self, truth, solver):
        game = FixedMinesweeper(truth([".*.", "ooo"]))
        game.reveal((1, 0))

        assert solver.solve_game(game, on_move=pytest.fail) == GameResult.LOST

    def test_unstarted_game_is_an_error(self, solver):
        with pytest.raises(ValueError):
            solver.solve_game(Minesweeper(BoardSize(3, 3, 1)))

    def test_result_for_status(self):
        assert result_for_status(GameStatus.WON) == GameResult.WON
        assert result_for_status(GameStatus.LOST) == GameResult.LOST
        assert result_for_status(GameStatus.PLAYING) == GameResult.RESIGNED
        with pytest.raises(ValueError):
            result_for_status(GameStatus.NEVER_STARTED)

    def test_base_solver_has_no_strategy(self, view):
        with pytest.raises(NotImplementedError):
            Solver().solve(view(["o*", ".."]))


class TestStarts:
    def test_safe_start(self, truth):
        game = FixedMinesweeper(truth(["o*.", "o.."]))
        assert SafeStart().solve(game.gamestate) is None
        assert SafeStart().solve_game(game) == GameResult.WON

        game.reveal((1, 0))
        assert SafeStart().solve_game(game) == GameResult.LOST

    def test_zero_start(self, truth):
        assert ZeroStart().solve_game(FixedMinesweeper(truth(["o*.", "o.."]))) == GameResult.LOST
        assert ZeroStart().solve_game(FixedMinesweeper(truth(["o*.", "o..", "oo."]))) == GameResult.WON

    def test_starts_resign_before_the_game_begins(self):
        game = Minesweeper(BoardSize(3, 3, 1))
        assert SafeStart().solve_game(game) == GameResult.RESIGNED
        assert ZeroStart().solve_game(game) == GameResult.RESIGNED
