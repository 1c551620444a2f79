"""
Minesweeper Hint Engine - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Optional

from minesweeper_hints import DIFFICULTY_PRESETS, EngineConfig, HintAnalysis, HintEngine, Minesweeper
from minesweeper_hints.models import Coordinate

NUMBER_COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def probability_color(p: float) -> str:
    """Green for safe, through yellow, to red for likely mines."""
    red = int(255 * min(1.0, 2 * p))
    green = int(255 * min(1.0, 2 * (1 - p)))
    return f"rgb({red}, {green}, 80)"


def render_board_html(
    game: Minesweeper,
    analysis: Optional[HintAnalysis] = None,
    show_probabilities: bool = True,
    show_mines: bool = False,
) -> str:
    """Render the board, optionally overlaid with the hint analysis."""
    # Scale cell size based on board width
    if game.width >= 30:
        cell_size, font_size = 18, "9px"
    elif game.width >= 16:
        cell_size, font_size = 24, "11px"
    else:
        cell_size, font_size = 32, "13px"

    safe = set(analysis.guaranteed_safe) if analysis else set()
    mines = set(analysis.guaranteed_mines) if analysis else set()
    recommended = analysis.recommended_move if analysis else None

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for y in range(game.height):
        html += "<tr>"
        for x in range(game.width):
            coord = Coordinate(x, y)
            text_color = "#333333"

            if game.revealed[y][x]:
                if coord in game.mines:
                    display, bg, text_color = "M", "#ff0000", "#ffffff"
                else:
                    count = game.adjacent[y][x]
                    display = str(count) if count else " "
                    bg = "#f0f0f0"
                    text_color = NUMBER_COLORS.get(display, "#000000")
            elif game.flagged[y][x]:
                display, bg, text_color = "F", "#ffa500", "#ffffff"
            elif show_mines and coord in game.mines:
                display, bg, text_color = "M", "#ffcccc", "#ff0000"
            elif coord in safe:
                display, bg = "S", "#7fdc7f"
            elif coord in mines:
                display, bg = "!", "#ff8080"
            elif analysis and show_probabilities and coord in analysis.probabilities:
                p = analysis.probabilities[coord]
                display, bg = f"{round(p * 100)}", probability_color(p)
            else:
                display, bg = ".", "#c0c0c0"

            border = "3px solid #0000ff" if coord == recommended else "1px solid #999"
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


def new_game(width: int, height: int, mines: int, algorithm: str) -> None:
    st.session_state.game = Minesweeper(width, height, mines, algorithm)
    st.session_state.status = None
    st.session_state.analysis = None


def main():
    st.set_page_config(page_title="Minesweeper Hint Engine", page_icon="💣", layout="wide")
    st.title("Minesweeper Hint Engine")
    st.markdown("Reveal and flag cells, then ask for a hint to see guaranteed "
                "moves and the mine probability of every unrevealed cell.")

    st.sidebar.header("Game Configuration")
    preset = st.sidebar.selectbox(
        "Difficulty", list(DIFFICULTY_PRESETS.keys()) + ["custom"], index=0
    )
    if preset == "custom":
        width = st.sidebar.slider("Width", 5, 30, 16)
        height = st.sidebar.slider("Height", 5, 30, 16)
        max_mines = width * height - 9
        mines = st.sidebar.slider("Mines", 1, max_mines, min(40, max_mines))
    else:
        width, height, mines = DIFFICULTY_PRESETS[preset]

    algorithm = st.sidebar.selectbox(
        "Mine placement", ["safe_neighborhood_rule", "safe_first_action_rule"]
    )

    st.sidebar.header("Engine")
    max_component = st.sidebar.slider("Max component size", 5, 30, 20)
    timeout = st.sidebar.slider("Timeout (s)", 0.5, 10.0, 5.0, step=0.5)
    edge_adjustment = st.sidebar.checkbox("Early-game edge adjustment", value=True)
    show_probabilities = st.sidebar.checkbox("Show probabilities", value=True)

    engine = HintEngine(
        EngineConfig(
            max_component_size=max_component,
            timeout=timeout,
            edge_adjustment=edge_adjustment,
        )
    )

    settings = (width, height, mines, algorithm)
    if st.session_state.get("settings") != settings:
        st.session_state.settings = settings
        new_game(*settings)

    game: Minesweeper = st.session_state.game

    board_col, info_col = st.columns([3, 1])

    with board_col:
        btn1, btn2, btn3 = st.columns(3)
        with btn1:
            if st.button("New Game", type="primary"):
                new_game(*settings)
                st.rerun()
        with btn2:
            if st.button("Hint") and not game.first_move:
                st.session_state.analysis = engine.analyze_board(game.snapshot())
        with btn3:
            analysis = st.session_state.analysis
            if (
                st.button("Follow Hint")
                and analysis is not None
                and analysis.recommended_move is not None
                and st.session_state.status is None
            ):
                for mx, my in analysis.guaranteed_mines:
                    if not game.flagged[my][mx]:
                        game.toggle_flag(mx, my)
                move = analysis.recommended_move
                status, _ = game.reveal(move.x, move.y)
                st.session_state.status = None if status == 0 else status
                st.session_state.analysis = engine.analyze_board(game.snapshot())
                st.rerun()

        with st.form("move"):
            c1, c2, c3 = st.columns(3)
            x = c1.number_input("x", 0, game.width - 1, game.width // 2)
            y = c2.number_input("y", 0, game.height - 1, game.height // 2)
            action = c3.radio("Action", ["Reveal", "Flag"], horizontal=True)
            if st.form_submit_button("Apply") and st.session_state.status is None:
                if action == "Reveal":
                    status, _ = game.reveal(int(x), int(y))
                    st.session_state.status = None if status == 0 else status
                else:
                    game.toggle_flag(int(x), int(y))
                st.session_state.analysis = None
                st.rerun()

        html = render_board_html(
            game,
            st.session_state.analysis,
            show_probabilities=show_probabilities,
            show_mines=st.session_state.status is not None,
        )
        st.markdown(html, unsafe_allow_html=True)

        if st.session_state.status == 1:
            st.success("All safe cells revealed. You won!")
        elif st.session_state.status == -1:
            st.error("Game Over! Hit a mine.")

        st.markdown("""
        <div style="font-size: 12px; margin-top: 10px;">
        <b>Legend:</b>
        <span style="background: #7fdc7f; padding: 2px 6px; margin: 0 4px; font-weight: bold;">S</span> Guaranteed safe
        <span style="background: #ff8080; padding: 2px 6px; margin: 0 4px; font-weight: bold;">!</span> Guaranteed mine
        <span style="border: 3px solid #0000ff; padding: 0 4px; margin: 0 4px;">&nbsp;</span> Recommended move
        <span style="background: #ffa500; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">F</span> Flag
        Numbers on unrevealed cells are mine probabilities in percent.
        </div>
        """, unsafe_allow_html=True)

    with info_col:
        st.subheader("Hint")
        analysis = st.session_state.analysis
        if analysis is None:
            st.info("Reveal a cell, then press 'Hint'.")
            return

        move = analysis.recommended_move
        st.metric("Recommended", "none" if move is None else f"({move.x}, {move.y})")
        st.metric("Confidence", f"{analysis.confidence:.0%}")
        st.metric("Guaranteed safe", len(analysis.guaranteed_safe))
        st.metric("Guaranteed mines", len(analysis.guaranteed_mines))
        st.text(f"Analysis time: {analysis.duration * 1000:.1f} ms")

        if analysis.degraded:
            st.warning("Degraded analysis:\n\n" + "\n\n".join(
                f"- {d.kind}: {d.message}" for d in analysis.diagnostics
            ))

        st.markdown("---")
        st.markdown("**Top moves**")
        for m in engine.get_top_moves(game.snapshot(), 5):
            st.text(f"({m.coordinate.x}, {m.coordinate.y}) {m.priority:6.1f}  {m.reasoning}")


if __name__ == "__main__":
    main()
