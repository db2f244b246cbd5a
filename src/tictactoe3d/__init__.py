"""tictactoe3d package exposing the 3D game rules, the minimax AI, and the web service."""

from .ai import MinimaxAI, evaluate_board, find_best_move
from .game import (
    Board,
    GameOutcome,
    GameState,
    Position,
    WinningLine,
    check_for_win,
    create_empty_board,
    evaluate_outcome,
    get_all_win_lines,
    get_available_moves,
    is_board_full,
    is_valid_move,
    place_marker,
)

__all__ = [
    "Board",
    "GameOutcome",
    "GameState",
    "MinimaxAI",
    "Position",
    "WinningLine",
    "check_for_win",
    "create_empty_board",
    "evaluate_board",
    "evaluate_outcome",
    "find_best_move",
    "get_all_win_lines",
    "get_available_moves",
    "is_board_full",
    "is_valid_move",
    "place_marker",
]
