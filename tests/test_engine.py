import random

import pytest

from minesolver.board import Board, BoardSize, Cell, CellState, CellType, ConventionalSize
from minesolver.engine import (
    FixedMinesweeper,
    GameStatus,
    Minesweeper,
    generate_game,
    generate_numbers,
    generate_solvable_game,
)
from minesolver.moves import Action, GameResult, Operation
from minesolver.solver import MinesweeperSolver, Solver
from minesolver.starts import SafeStart


class TestReveal:
    def test_flood_fill_reveals_zero_region_and_wins(self, truth):
        wins = []
        game = FixedMinesweeper(truth(["....", "....", "...*"]), on_win=lambda: wins.append(1))

        result = game.reveal((0, 0))

        assert result.success
        assert result.state.status == GameStatus.WON
        assert wins == [1]
        assert result.state.board[(2, 1)] == Cell.safe(1, CellState.REVEALED)

    def test_flood_fill_stops_at_flags(self, truth):
        game = FixedMinesweeper(truth(["f...", "....", "...*"]))

        state = game.reveal((3, 0)).state

        assert state.status == GameStatus.PLAYING
        assert state.board[(0, 0)].is_flagged
        assert state.board[(1, 0)].is_revealed

    def test_revealing_a_mine_loses(self, truth):
        losses = []
        game = FixedMinesweeper(truth(["o*", ".."]), on_lose=lambda: losses.append(1))

        state = game.reveal((1, 0)).state

        assert state.status == GameStatus.LOST
        assert losses == [1]
        # Ground truth is shown once the game is over
        assert state.board[(1, 0)] == Cell.mine(CellState.REVEALED)
        assert state.board[(0, 1)].cell_type == CellType.SAFE

    def test_reveal_on_revealed_cell_is_a_no_op(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        before = game.gamestate

        result = game.reveal((0, 0))

        assert result.success
        assert result.state == before

    def test_out_of_bounds_fails(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        before = game.gamestate

        result = game.reveal((5, 0))

        assert not result.success
        assert result.state == before

    def test_no_interaction_after_game_over(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        game.reveal((1, 0))

        assert not game.reveal((0, 1)).success
        assert not game.toggle_flag((0, 1)).success


class TestPlayerView:
    def test_gamestate_is_masked_while_playing(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        board = game.gamestate.board

        assert board[(0, 0)] == Cell.safe(1, CellState.REVEALED)
        for point in [(1, 0), (0, 1), (1, 1)]:
            assert board[point].cell_type == CellType.UNKNOWN

    def test_layouts_differing_in_hidden_mines_look_the_same(self, truth):
        first = FixedMinesweeper(truth(["oo*.", "oo.."]))
        second = FixedMinesweeper(truth(["oo..", "oo*."]))
        assert first.gamestate == second.gamestate


class TestFlags:
    def test_flagging_adjusts_remaining_mines(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))

        assert game.set_flagged((1, 0), True).state.remaining_mines == 0
        assert game.set_flagged((1, 0), True).state.remaining_mines == 0
        assert game.toggle_flag((0, 1)).state.remaining_mines == -1
        assert game.toggle_flag((0, 1)).state.remaining_mines == 0
        assert game.gamestate.board[(1, 0)].is_flagged

    def test_cannot_flag_revealed_cell(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        assert not game.set_flagged((0, 0), True).success

    def test_right_click_toggles(self, truth):
        game = FixedMinesweeper(truth(["o*", ".."]))
        assert game.right_click((1, 0)).state.board[(1, 0)].is_flagged
        assert game.right_click((1, 0)).state.board[(1, 0)].is_hidden


class TestChord:
    def test_chord_reveals_unflagged_neighbours(self, truth):
        game = FixedMinesweeper(truth(["oF.", "o.."]))

        state = game.clear_around((0, 0)).state

        assert state.board[(1, 1)] == Cell.safe(1, CellState.REVEALED)
        assert state.status == GameStatus.PLAYING

    def test_chord_needs_matching_flags(self, truth):
        game = FixedMinesweeper(truth(["o*.", "o.."]))
        assert not game.clear_around((0, 0)).success

    def test_chord_needs_revealed_number(self, truth):
        game = FixedMinesweeper(truth(["oF.", "o.."]))
        assert not game.clear_around((2, 0)).success

    def test_chord_with_wrong_flag_loses(self, truth):
        game = FixedMinesweeper(truth(["of", "o*"]))
        assert game.clear_around((0, 0)).state.status == GameStatus.LOST

    def test_left_click_chords_revealed_and_reveals_hidden(self, truth):
        game = FixedMinesweeper(truth(["oF.", "o.."]))

        assert game.left_click((0, 0)).state.board[(1, 1)].is_revealed
        assert game.left_click((2, 0)).state.board[(2, 0)].is_revealed
        assert not game.left_click((1, 0)).success

    def test_apply_maps_operations(self, truth):
        game = FixedMinesweeper(truth(["o*.", "o.."]))

        assert game.apply(Action((1, 0), Operation.FLAG)).state.board[(1, 0)].is_flagged
        assert game.apply(Action((0, 0), Operation.CHORD)).state.board[(1, 1)].is_revealed
        assert game.apply(Action((2, 0), Operation.REVEAL)).state.board[(2, 0)].is_revealed


class TestFixedMinesweeper:
    def test_rejects_masked_state(self, view):
        with pytest.raises(ValueError):
            FixedMinesweeper(view(["o*", ".."]))

    def test_reset_restores_initial_state(self, truth):
        state = truth(["o*", ".."])
        game = FixedMinesweeper(state)
        game.reveal((1, 0))

        assert game.reset() == state.hide_mines()
        assert game.gamestate.status == GameStatus.PLAYING
        # The caller's state is never mutated
        assert state.board[(1, 0)].is_hidden


class TestGeneration:
    @pytest.mark.parametrize(
        "algorithm", ["uniform", "safe_first_action_rule", "safe_neighborhood_rule"]
    )
    def test_generated_board_has_mines_and_numbers(self, algorithm):
        size = ConventionalSize.BEGINNER.size
        state = generate_game(
            size,
            safe_point=(4, 4),
            mines_generation_algorithm=algorithm,
            rng=random.Random(5),
        )
        board = state.board

        assert state.status == GameStatus.PLAYING
        assert state.remaining_mines == size.mines
        assert len(board.find(cell_type=CellType.MINE)) == size.mines
        for point in board.points():
            cell = board[point]
            assert cell.is_hidden
            if cell.is_safe:
                assert cell.number == sum(1 for n in board.neighbours(point) if board[n].is_mine)

    def test_safe_rules_keep_first_click_clear(self):
        size = BoardSize(4, 4, 7)
        for seed in range(20):
            board = generate_game(
                size,
                safe_point=(1, 1),
                mines_generation_algorithm="safe_neighborhood_rule",
                rng=random.Random(seed),
            ).board
            assert board[(1, 1)].number == 0
            assert all(board[n].is_safe for n in board.neighbours((1, 1)))

    def test_safe_rules_need_a_click(self):
        with pytest.raises(ValueError):
            generate_game(BoardSize(3, 3, 1), mines_generation_algorithm="safe_first_action_rule")

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            generate_game(BoardSize(3, 3, 1), mines_generation_algorithm="lucky")

    def test_not_enough_room_for_neighbourhood_rule(self):
        with pytest.raises(ValueError):
            generate_game(
                BoardSize(3, 3, 1),
                safe_point=(1, 1),
                mines_generation_algorithm="safe_neighborhood_rule",
            )

    def test_same_seed_same_board(self):
        size = ConventionalSize.BEGINNER.size
        first = generate_game(size, rng=random.Random(11))
        second = generate_game(size, rng=random.Random(11))
        assert first == second

    def test_numbering_an_unknown_cell_is_an_error(self):
        board = Board(BoardSize(2, 2, 1))
        board[(0, 0)] = Cell.unknown()
        with pytest.raises(RuntimeError):
            generate_numbers(board)


class _NeverWins(Solver):
    def solve_game(self, game, on_move=None, max_moves=None):
        return GameResult.RESIGNED


class TestSolvableGeneration:
    def test_returns_untouched_ground_truth(self):
        state = generate_solvable_game(
            BoardSize(3, 3, 1), SafeStart(), (0, 0), rng=random.Random(2)
        )
        assert state.board[(0, 0)].is_safe
        assert all(cell.is_hidden for cell in state.board)

    def test_solver_wins_the_generated_board(self):
        solver = MinesweeperSolver()
        state = generate_solvable_game(
            ConventionalSize.BEGINNER.size,
            solver,
            (4, 4),
            mines_generation_algorithm="safe_neighborhood_rule",
            rng=random.Random(3),
        )

        game = FixedMinesweeper(state)
        game.reveal((4, 4))
        assert solver.solve_game(game) == GameResult.WON

    def test_gives_up_after_max_attempts(self):
        with pytest.raises(RuntimeError, match="in 5 attempts"):
            generate_solvable_game(
                BoardSize(3, 3, 1), _NeverWins(), (0, 0), max_attempts=5
            )


class TestMinesweeper:
    def test_never_started_until_start(self):
        game = Minesweeper(BoardSize(3, 3, 1))
        assert game.gamestate.status == GameStatus.NEVER_STARTED
        assert not game.reveal((0, 0)).success

    def test_rejects_crowded_neighbourhood_rule(self):
        with pytest.raises(ValueError):
            Minesweeper(BoardSize(3, 3, 1), "safe_neighborhood_rule")

    def test_rejects_unknown_algorithm(self):
        with pytest.raises(ValueError):
            Minesweeper(BoardSize(3, 3, 1), "lucky")

    def test_board_generated_on_first_reveal(self):
        game = Minesweeper(
            ConventionalSize.BEGINNER.size, "safe_neighborhood_rule", rng=random.Random(8)
        )
        game.start()

        assert not game.toggle_flag((0, 0)).success
        state = game.reveal((4, 4)).state

        assert state.status in (GameStatus.PLAYING, GameStatus.WON)
        assert state.board[(4, 4)] == Cell.safe(0, CellState.REVEALED)
        hidden = state.board.find(state=CellState.HIDDEN)
        if state.status == GameStatus.PLAYING:
            assert game.toggle_flag(hidden[0]).success

    def test_start_with_solver_generates_a_winnable_board(self):
        solver = MinesweeperSolver()
        game = Minesweeper(
            ConventionalSize.BEGINNER.size, "safe_neighborhood_rule", rng=random.Random(4)
        )
        game.start(solver)
        game.reveal((0, 0))

        assert solver.solve_game(game) == GameResult.WON

    def test_reset_replays_the_same_board(self):
        game = Minesweeper(BoardSize(5, 5, 3), "safe_first_action_rule", rng=random.Random(1))
        game.start()
        first = game.reveal((0, 0)).state

        game.reset()
        assert game.gamestate.status == GameStatus.PLAYING
        assert all(cell.is_hidden for cell in game.gamestate.board)
        assert game.reveal((0, 0)).state == first
