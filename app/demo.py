"""
Minesweeper Deduction Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Any, AbstractSet, Dict, List, Optional, Tuple

from minesolver import (
    ConventionalSize,
    GameResult,
    GameState,
    GameStatus,
    Minesweeper,
    MinesweeperSolver,
    Move,
    BoardSize,
)
from minesolver.analysis import default_first_click, format_move, logic_key
from minesolver.engine import MINES_GENERATION_ALGORITHMS


COLORS = {
    "0": "#cccccc",
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def cell_style(width: int) -> Tuple[int, str]:
    """Scale cell size based on board width."""
    if width >= 30:
        return 14, "10px"
    if width >= 25:
        return 16, "11px"
    if width >= 16:
        return 20, "13px"
    return 26, "15px"


def render_board_html(
    state: GameState,
    highlight: AbstractSet[Tuple[int, int]] = frozenset(),
) -> str:
    """Render a game state as an HTML table, outlining the highlighted points."""
    board = state.board
    cell_size, font_size = cell_style(board.width)

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for y in range(board.height):
        html += "<tr>"
        for x in range(board.width):
            cell = board[(x, y)]

            if cell.is_flagged:
                text = "F"
                bg = "#ffa500"
                text_color = "#ffffff"
            elif cell.is_revealed and cell.is_mine:
                text = "M"  # Hit mine (caused loss)
                bg = "#ff0000"
                text_color = "#ffffff"
            elif cell.is_revealed:
                text = str(cell.number)
                bg = "#f0f0f0" if cell.number == 0 else "#ffffff"
                text_color = COLORS.get(text, "#000000")
            elif cell.is_mine:
                text = "M"  # Mine shown once the game is over
                bg = "#ffcccc"
                text_color = "#ff0000"
            else:
                text = "."
                bg = "#c0c0c0"
                text_color = "#666666"

            border = "3px solid #ff0000" if (x, y) in highlight else "1px solid #999"
            display = text if text != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def new_game(size: BoardSize, algorithm: str, solvable: bool, solver: MinesweeperSolver) -> None:
    game = Minesweeper(size, mines_generation_algorithm=algorithm)
    game.start(solver if solvable else None)
    st.session_state.game = game
    st.session_state.solver = solver
    st.session_state.result = None
    st.session_state.steps = []
    st.session_state.replay_mode = False
    st.session_state.current_step = 0


def open_board(game: Minesweeper) -> None:
    """Make the first click if nobody has yet."""
    if game.first_move:
        size = game.size
        game.reveal(default_first_click(size.width, size.height, game.mines_generation_algorithm))


def record_step(move: Move, state: GameState) -> None:
    st.session_state.steps.append({"move": move, "state": state})


def main():
    st.set_page_config(
        page_title="Minesweeper Deduction Solver",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minesweeper Deduction Solver")
    st.markdown("""
    A solver that only moves when the board forces it, and says why.
    """)

    # Sidebar configuration
    st.sidebar.header("Game Configuration")

    presets: Dict[str, Optional[ConventionalSize]] = {
        f"{level.name.title()} ({level.value[0]}x{level.value[1]}, {level.value[2]})": level
        for level in ConventionalSize
    }
    presets["Custom"] = None
    preset = st.sidebar.selectbox("Difficulty Preset", list(presets))

    level = presets[preset]
    if level is not None:
        size = level.size
    else:
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 9
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))
        size = BoardSize(width, height, mines)

    algorithm = st.sidebar.selectbox(
        "Mine Generation",
        list(MINES_GENERATION_ALGORITHMS),
        index=2,
        help="uniform: Mines anywhere, the first click may lose. "
             "safe_first_action_rule: Only first click is safe. "
             "safe_neighborhood_rule: First click + neighbors are safe.",
    )

    brute_force_limit = st.sidebar.slider(
        "Frontier Search Limit",
        1,
        40,
        30,
        help="Frontiers of this many hidden cells or more are not searched exhaustively.",
    )

    solvable = st.sidebar.checkbox(
        "Only solvable boards",
        value=False,
        help="Generate boards the solver is known to win from the first click.",
    )

    # Initialize session state
    if "game" not in st.session_state:
        st.session_state.game = None
        st.session_state.prev_settings = None

    # Auto-generate new game when board settings change
    current_settings = (size, algorithm, brute_force_limit, solvable)
    if st.session_state.prev_settings != current_settings:
        new_game(size, algorithm, solvable, MinesweeperSolver(brute_force_limit))
        st.session_state.prev_settings = current_settings

    game: Minesweeper = st.session_state.game
    solver: MinesweeperSolver = st.session_state.solver

    # For large boards, use vertical layout (stats below board)
    use_vertical_layout = size.width >= 30

    col2 = None
    if use_vertical_layout:
        board_container = st.container()
    else:
        col1, col2 = st.columns([3, 1] if size.width >= 16 else [2, 1])
        board_container = col1

    with board_container:
        st.subheader("Game Board")

        btn_col1, btn_col2, btn_col3 = st.columns(3)

        with btn_col1:
            if st.button("New Board", type="primary"):
                new_game(size, algorithm, solvable, solver)
                st.rerun()

        with btn_col2:
            if st.button("Step", disabled=st.session_state.result is not None):
                open_board(game)
                state = game.gamestate
                move = solver.solve(state)
                if state.status != GameStatus.PLAYING:
                    st.session_state.result = GameResult[state.status.name]
                elif move is None:
                    st.session_state.result = GameResult.RESIGNED
                else:
                    record_step(move, state)
                    for action in move.ordered_actions():
                        game.apply(action)
                    status = game.gamestate.status
                    if status != GameStatus.PLAYING:
                        st.session_state.result = GameResult[status.name]
                st.rerun()

        with btn_col3:
            if st.button("Solve", disabled=st.session_state.result is not None):
                open_board(game)
                st.session_state.result = solver.solve_game(game, on_move=record_step)
                st.session_state.current_step = max(len(st.session_state.steps) - 1, 0)
                st.rerun()

        steps: List[Dict[str, Any]] = st.session_state.steps
        result: Optional[GameResult] = st.session_state.result

        # Replay controls
        if steps:
            st.markdown("---")
            st.session_state.replay_mode = st.checkbox(
                "Step-by-Step Replay Mode",
                value=st.session_state.replay_mode,
                key="replay_toggle",
            )

            if st.session_state.replay_mode:
                total_steps = len(steps)

                nav_col1, nav_col2, nav_col3, nav_col4 = st.columns([1, 1, 1, 2])
                with nav_col1:
                    if st.button("⏮ First"):
                        st.session_state.current_step = 0
                        st.rerun()
                with nav_col2:
                    if st.button("◀ Prev") and st.session_state.current_step > 0:
                        st.session_state.current_step -= 1
                        st.rerun()
                with nav_col3:
                    if st.button("Next ▶") and st.session_state.current_step < total_steps - 1:
                        st.session_state.current_step += 1
                        st.rerun()
                with nav_col4:
                    if st.button("Last ⏭"):
                        st.session_state.current_step = total_steps - 1
                        st.rerun()

                if total_steps > 1:
                    step_display = st.slider(
                        "Step",
                        1,
                        total_steps,
                        st.session_state.current_step + 1,
                        key="step_slider",
                    )
                    st.session_state.current_step = step_display - 1

                move = steps[st.session_state.current_step]["move"]
                st.info(
                    f"**Step {st.session_state.current_step + 1}/{total_steps}**: "
                    f"{format_move(move)}"
                )

        # Display board
        if st.session_state.replay_mode and steps:
            step = steps[st.session_state.current_step]
            highlight = set(step["move"].points())
            html = render_board_html(step["state"], highlight)
        else:
            last_move = steps[-1]["move"] if steps else None
            highlight = set(last_move.points()) if last_move is not None and result is None else set()
            html = render_board_html(game.gamestate, highlight)

        st.markdown(html, unsafe_allow_html=True)

        if not st.session_state.replay_mode:
            if result == GameResult.WON:
                st.success("Solved! All safe cells revealed.")
            elif result == GameResult.LOST:
                st.error("Game Over! Hit a mine.")
            elif result == GameResult.RESIGNED:
                st.warning("No forced move left. The solver resigns rather than guess.")
            elif steps:
                st.info(f"Last move: {format_move(steps[-1]['move'])}")

        st.markdown("""
        <div style="font-size: 12px; margin-top: 10px;">
        <b>Legend:</b>
        <span style="background: #c0c0c0; color: #666666; padding: 2px 6px; margin: 0 4px; font-weight: bold;">.</span> Unrevealed
        <span style="background: #f0f0f0; padding: 2px 6px; margin: 0 4px;">&nbsp;</span> Empty (0)
        <span style="color: #0000ff; font-weight: bold; margin: 0 4px;">1-8</span> Adjacent mines
        <span style="background: #ffa500; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">F</span> Flagged
        <span style="background: #ffcccc; color: #ff0000; padding: 2px 6px; margin: 0 4px; font-weight: bold;">M</span> Mine (revealed at end)
        <span style="background: #ff0000; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">M</span> Hit mine (caused loss)
        </div>
        """, unsafe_allow_html=True)

    if use_vertical_layout:
        stats_container = st.container()
    else:
        assert col2 is not None
        stats_container = col2

    with stats_container:
        st.subheader("Solver Statistics")

        if steps:
            state = game.gamestate
            st.metric("Result", result.value.title() if result is not None else "In progress")
            st.metric("Moves", len(steps))
            st.metric("Cells Revealed", sum(1 for c in state.board if c.is_revealed and c.is_safe))
            st.metric("Mines Remaining", state.remaining_mines)

            st.markdown("---")
            st.markdown("**Moves by Rule**")
            counts: Dict[str, int] = {}
            for step in steps:
                key = logic_key(step["move"])
                counts[key] = counts.get(key, 0) + 1
            for name, count in sorted(counts.items(), key=lambda kv: -kv[1]):
                st.text(f"{name}: {count}")
        else:
            st.info("Step or solve the board to see statistics.")

        if not use_vertical_layout:
            st.markdown("---")
            st.subheader("Algorithm Info")
            st.markdown("""
            **Deduction Stages:**
            1. **Local rules**: chord, flag all, clear over-flags
            2. **Regions**: subtract "N mines among these cells" constraints
            3. **Zero remaining**: reveal everything once no mines are left
            4. **Frontier search**: enumerate every consistent mine layout
            """)


if __name__ == "__main__":
    main()
