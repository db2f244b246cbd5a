"""Unit tests for the 3D tic-tac-toe rules."""

import pytest

from tictactoe3d.game import (
    Board,
    CellOccupiedError,
    GameState,
    OutOfRangeError,
    Position,
    check_for_win,
    create_empty_board,
    evaluate_outcome,
    get_all_win_lines,
    get_available_moves,
    is_board_full,
    is_valid_move,
    place_marker,
)


def _play(board, moves):
    for player, position in moves:
        board = place_marker(board, Position(*position), player)
    return board


def _drawn_qubic_board():
    # 4x4x4 fill where every line mixes both players
    layers = []
    for z in range(4):
        layer = []
        for y in range(4):
            row = []
            for x in range(4):
                bit = (x % 2 + y // 2 + (1 if z == 0 else 0)) % 2
                row.append(1 + bit)
            layer.append(row)
        layers.append(layer)
    return Board.from_layers(layers)


def test_empty_board_has_every_cell_available():
    board = create_empty_board()
    moves = get_available_moves(board)
    assert len(moves) == 27
    assert moves[0] == Position(0, 0, 0)
    assert moves[1] == Position(1, 0, 0)
    assert moves[3] == Position(0, 1, 0)
    assert moves[9] == Position(0, 0, 1)
    assert moves[-1] == Position(2, 2, 2)
    assert not is_board_full(board)


def test_win_line_enumeration():
    lines = get_all_win_lines()
    assert len(lines) == 49
    assert all(len(line) == 3 for line in lines)
    assert len({frozenset(line) for line in lines}) == 49
    assert get_all_win_lines() is lines
    assert lines[0] == (Position(0, 0, 0), Position(1, 0, 0), Position(2, 0, 0))
    assert lines[-1] == (Position(0, 2, 2), Position(1, 1, 1), Position(2, 0, 0))


def test_win_lines_for_larger_cube():
    lines = get_all_win_lines(4)
    # 3*N^2 axis lines + 6*N plane diagonals + 4 space diagonals
    assert len(lines) == 3 * 16 + 6 * 4 + 4
    assert all(len(line) == 4 for line in lines)


def test_is_valid_move_handles_bounds_without_raising():
    board = create_empty_board()
    assert is_valid_move(board, Position(2, 2, 2))
    assert not is_valid_move(board, Position(3, 0, 0))
    assert not is_valid_move(board, Position(0, -1, 0))
    assert not is_valid_move(board, Position(0, 0, 7))

    board = place_marker(board, Position(1, 1, 1), 1)
    assert not is_valid_move(board, Position(1, 1, 1))


def test_place_marker_returns_new_board():
    empty = create_empty_board()
    board = place_marker(empty, Position(2, 1, 0), 2)

    assert board.cell(Position(2, 1, 0)) == 2
    assert all(cell is None for cell in empty.cells)
    assert board.to_layers()[0][1][2] == 2


def test_place_marker_rejects_occupied_and_off_board_cells():
    board = place_marker(create_empty_board(), Position(0, 0, 0), 1)
    with pytest.raises(CellOccupiedError):
        place_marker(board, Position(0, 0, 0), 2)
    with pytest.raises(OutOfRangeError):
        place_marker(board, Position(0, 3, 0), 2)
    with pytest.raises(ValueError):
        place_marker(board, Position(1, 0, 0), 3)
    # Failed placements leave the original untouched
    assert board.cells.count(None) == 26


def test_space_diagonal_win():
    board = _play(
        create_empty_board(),
        [(1, (0, 0, 0)), (2, (0, 1, 0)), (1, (1, 1, 1)), (2, (0, 2, 0))],
    )
    assert check_for_win(board) is None
    assert evaluate_outcome(board).state is GameState.ONGOING

    board = place_marker(board, Position(2, 2, 2), 1)
    win = check_for_win(board)
    assert win is not None
    assert win.player == 1
    assert win.positions == (Position(0, 0, 0), Position(1, 1, 1), Position(2, 2, 2))

    outcome = evaluate_outcome(board)
    assert outcome.state is GameState.WON
    assert outcome.winner == 1
    assert outcome.winning_line == win


def test_multiple_lines_report_first_in_enumeration_order():
    empty = [[0, 0, 0], [0, 0, 0], [0, 0, 0]]
    board = Board.from_layers(
        [
            [[0, 0, 0], [1, 1, 1], [0, 0, 0]],
            [[2, 2, 2], [0, 0, 0], [0, 0, 0]],
            empty,
        ]
    )
    win = check_for_win(board)
    assert win.player == 2
    assert win.positions == (Position(0, 0, 1), Position(1, 0, 1), Position(2, 0, 1))


def test_full_board_without_line_is_draw():
    board = _drawn_qubic_board()
    assert is_board_full(board)
    assert check_for_win(board) is None
    outcome = evaluate_outcome(board)
    assert outcome.state is GameState.DRAW
    assert outcome.winner is None


def test_full_board_with_line_is_won_not_draw():
    # A full 3x3x3 cube always contains a completed line
    board = Board(cells=tuple(1 if i % 2 == 0 else 2 for i in range(27)))
    assert is_board_full(board)
    outcome = evaluate_outcome(board)
    assert outcome.state is GameState.WON


def test_read_operations_are_repeatable():
    board = _play(create_empty_board(), [(1, (0, 0, 0)), (1, (1, 0, 0)), (1, (2, 0, 0))])
    assert check_for_win(board) == check_for_win(board)
    assert is_board_full(board) == is_board_full(board)


def test_board_rejects_malformed_cells():
    with pytest.raises(ValueError):
        Board(cells=(None,) * 26)
    with pytest.raises(ValueError):
        Board(cells=(5,) + (None,) * 26)
    with pytest.raises(ValueError):
        Board.from_layers([[[0, 0], [0, 0]], [[0, 0], [0, 0]]])
