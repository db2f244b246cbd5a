"""Core rules for 3D tic-tac-toe: board, win lines, move legality and outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence, Tuple

Player = int  # 1 or 2

PLAYER_ONE: Player = 1
PLAYER_TWO: Player = 2
PLAYERS: Tuple[Player, Player] = (PLAYER_ONE, PLAYER_TWO)

DEFAULT_SIZE = 3
MIN_SIZE = 3
MAX_SIZE = 8


def opponent_of(player: Player) -> Player:
    return PLAYER_TWO if player == PLAYER_ONE else PLAYER_ONE


# ---------- Errors ----------


class InvalidMoveError(ValueError):
    """Raised when a marker is placed where the rules do not allow it."""


class OutOfRangeError(InvalidMoveError):
    pass


class CellOccupiedError(InvalidMoveError):
    pass


# ---------- Positions & lines ----------


class Position(NamedTuple):
    x: int
    y: int
    z: int


WinLine = Tuple[Position, ...]


def get_all_win_lines(size: int = DEFAULT_SIZE) -> Tuple[WinLine, ...]:
    """
    Every straight line of ``size`` cells through a ``size``-cube, in a fixed order:
    axis lines (x, then y, then z), planar diagonals (XY, XZ, YZ) and finally
    the four space diagonals. 49 lines for the classic 3x3x3 cube.
    """
    return _win_lines(size)


@lru_cache(maxsize=None)
def _win_lines(size: int) -> Tuple[WinLine, ...]:
    n = size
    span = range(n)
    last = n - 1
    lines: List[WinLine] = []

    # Axis-aligned rows
    for y in span:
        for z in span:
            lines.append(tuple(Position(i, y, z) for i in span))
    for x in span:
        for z in span:
            lines.append(tuple(Position(x, i, z) for i in span))
    for x in span:
        for y in span:
            lines.append(tuple(Position(x, y, i) for i in span))

    # Diagonals inside each plane slice
    for z in span:
        lines.append(tuple(Position(i, i, z) for i in span))
        lines.append(tuple(Position(i, last - i, z) for i in span))
    for y in span:
        lines.append(tuple(Position(i, y, i) for i in span))
        lines.append(tuple(Position(i, y, last - i) for i in span))
    for x in span:
        lines.append(tuple(Position(x, i, i) for i in span))
        lines.append(tuple(Position(x, i, last - i) for i in span))

    # Corner to corner through the center
    lines.append(tuple(Position(i, i, i) for i in span))
    lines.append(tuple(Position(i, i, last - i) for i in span))
    lines.append(tuple(Position(i, last - i, i) for i in span))
    lines.append(tuple(Position(i, last - i, last - i) for i in span))

    return tuple(lines)


@lru_cache(maxsize=None)
def line_indices(size: int) -> Tuple[Tuple[int, ...], ...]:
    """Win lines as flat cell indices, for scanning ``Board.cells`` directly."""
    return tuple(
        tuple(flat_index(size, p) for p in line) for line in get_all_win_lines(size)
    )


def flat_index(size: int, position: Position) -> int:
    x, y, z = position
    return (z * size + y) * size + x


def _position_at(size: int, index: int) -> Position:
    rest, x = divmod(index, size)
    z, y = divmod(rest, size)
    return Position(x, y, z)


# ---------- Board ----------


@dataclass(frozen=True)
class Board:
    # Flat z-major cells: None for empty, otherwise the owning player
    cells: Tuple[Optional[Player], ...]
    size: int = DEFAULT_SIZE

    def __post_init__(self) -> None:
        if not MIN_SIZE <= self.size <= MAX_SIZE:
            raise ValueError(
                f"Unsupported board size {self.size}; expected {MIN_SIZE}..{MAX_SIZE}"
            )
        if len(self.cells) != self.size**3:
            raise ValueError(
                f"A size {self.size} board needs {self.size ** 3} cells, "
                f"got {len(self.cells)}"
            )
        for value in self.cells:
            if value is not None and value not in PLAYERS:
                raise ValueError(f"Unknown cell value {value!r}")

    @classmethod
    def empty(cls, size: int = DEFAULT_SIZE) -> "Board":
        return cls(cells=(None,) * size**3, size=size)

    @classmethod
    def from_layers(
        cls, layers: Sequence[Sequence[Sequence[Optional[Player]]]]
    ) -> "Board":
        """Build a board from nested ``layers[z][y][x]`` (0 is accepted as empty)."""
        size = len(layers)
        cells: List[Optional[Player]] = []
        for z, layer in enumerate(layers):
            if len(layer) != size:
                raise ValueError(f"Layer {z} has {len(layer)} rows, expected {size}")
            for y, row in enumerate(layer):
                if len(row) != size:
                    raise ValueError(
                        f"Row {y} of layer {z} has {len(row)} cells, expected {size}"
                    )
                cells.extend(None if value in (None, 0) else value for value in row)
        return cls(cells=tuple(cells), size=size)

    def to_layers(self) -> List[List[List[Optional[Player]]]]:
        n = self.size
        return [
            [list(self.cells[(z * n + y) * n : (z * n + y + 1) * n]) for y in range(n)]
            for z in range(n)
        ]

    def in_bounds(self, position: Position) -> bool:
        return all(0 <= c < self.size for c in position)

    def cell(self, position: Position) -> Optional[Player]:
        if not self.in_bounds(position):
            raise OutOfRangeError(f"Position {tuple(position)} is off the board")
        return self.cells[flat_index(self.size, position)]


# ---------- Outcomes ----------


@dataclass(frozen=True)
class WinningLine:
    positions: WinLine
    player: Player


class GameState(str, Enum):
    ONGOING = "ongoing"
    WON = "won"
    DRAW = "draw"


@dataclass(frozen=True)
class GameOutcome:
    state: GameState
    winning_line: Optional[WinningLine] = None

    @property
    def winner(self) -> Optional[Player]:
        return self.winning_line.player if self.winning_line else None

    @property
    def is_over(self) -> bool:
        return self.state is not GameState.ONGOING


# ---------- Rules ----------


def create_empty_board(size: int = DEFAULT_SIZE) -> Board:
    return Board.empty(size)


def is_valid_move(board: Board, position: Position) -> bool:
    """True when ``position`` is on the board and its cell is empty."""
    if not board.in_bounds(position):
        return False
    return board.cells[flat_index(board.size, position)] is None


def place_marker(board: Board, position: Position, player: Player) -> Board:
    """Return a copy of ``board`` with ``player`` placed at ``position``.

    Raises ``OutOfRangeError`` or ``CellOccupiedError`` instead of overwriting.
    """
    if player not in PLAYERS:
        raise ValueError(f"Unknown player {player!r}")
    if not board.in_bounds(position):
        raise OutOfRangeError(f"Position {tuple(position)} is off the board")
    idx = flat_index(board.size, position)
    if board.cells[idx] is not None:
        raise CellOccupiedError(f"Cell {tuple(position)} is already occupied")
    cells = list(board.cells)
    cells[idx] = player
    return Board(cells=tuple(cells), size=board.size)


def check_for_win(board: Board) -> Optional[WinningLine]:
    """First fully owned line in enumeration order, or None."""
    cells = board.cells
    for line, indices in zip(get_all_win_lines(board.size), line_indices(board.size)):
        first = cells[indices[0]]
        if first is not None and all(cells[i] == first for i in indices[1:]):
            return WinningLine(positions=line, player=first)
    return None


def is_board_full(board: Board) -> bool:
    return all(c is not None for c in board.cells)


def get_available_moves(board: Board) -> List[Position]:
    """Empty cells scanned z-outer, y-middle, x-inner."""
    return [
        _position_at(board.size, i) for i, c in enumerate(board.cells) if c is None
    ]


def evaluate_outcome(board: Board) -> GameOutcome:
    win = check_for_win(board)
    if win is not None:
        return GameOutcome(state=GameState.WON, winning_line=win)
    if is_board_full(board):
        return GameOutcome(state=GameState.DRAW)
    return GameOutcome(state=GameState.ONGOING)
