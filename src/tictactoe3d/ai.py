"""Depth-limited minimax AI with alpha-beta pruning and a difficulty/randomness blend."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence, Tuple
import logging
import math
import random

from .game import (
    PLAYERS,
    Board,
    Player,
    Position,
    flat_index,
    get_available_moves,
    line_indices,
    opponent_of,
)

logger = logging.getLogger(__name__)

# Canonical difficulty scale is 1..50 (the settings slider range)
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 50
DEPTH_DIVISOR = 10
DEPTH_CAP = 4

WIN_SCORE = 1000
THREAT_SCORE = 10
POTENTIAL_SCORE = 1

Cells = List[Optional[Player]]


class DifficultyParameters(NamedTuple):
    max_depth: int
    random_chance: float


def difficulty_parameters(level: int) -> DifficultyParameters:
    """Map a difficulty level to (search depth, probability of a random move).

    Level 1 plays at random 98% of the time with a one-ply search otherwise;
    level 50 and above always searches ``DEPTH_CAP`` plies.
    """
    if level < MIN_DIFFICULTY:
        raise ValueError(f"Difficulty must be at least {MIN_DIFFICULTY}, got {level}")
    max_depth = min(DEPTH_CAP, level // DEPTH_DIVISOR + 1)
    random_chance = max(0.0, 1 - level / MAX_DIFFICULTY)
    return DifficultyParameters(max_depth=max_depth, random_chance=random_chance)


@lru_cache(maxsize=None)
def _lines_through(size: int) -> Tuple[Tuple[Tuple[int, ...], ...], ...]:
    # Per cell index: the win lines containing that cell
    by_cell: List[List[Tuple[int, ...]]] = [[] for _ in range(size**3)]
    for line in line_indices(size):
        for idx in line:
            by_cell[idx].append(line)
    return tuple(tuple(lines) for lines in by_cell)


def _score_lines(
    cells: Sequence[Optional[Player]], lines: Sequence[Tuple[int, ...]], me: Player
) -> int:
    score = 0
    for line in lines:
        mine = theirs = 0
        for idx in line:
            v = cells[idx]
            if v == me:
                mine += 1
            elif v is not None:
                theirs += 1
        empty = len(line) - mine - theirs

        if mine == len(line) - 1 and empty == 1:
            score += THREAT_SCORE
        elif mine and not theirs and empty >= 2:
            score += POTENTIAL_SCORE

        if theirs == len(line) - 1 and empty == 1:
            score -= THREAT_SCORE
        elif theirs and not mine and empty >= 2:
            score -= POTENTIAL_SCORE
    return score


def evaluate_board(board: Board, ai_player: Player) -> int:
    """
    Static positional score from ``ai_player``'s point of view.

    Every win line one move from completion is worth 10 to its owner, every
    line with a single marker and room to grow is worth 1; the opponent's
    lines count the same amounts against.
    """
    return _score_lines(board.cells, line_indices(board.size), ai_player)


@dataclass
class MinimaxAI:
    """AI player that searches with alpha-beta, blended with random play.

    - MinimaxAI(player=2, difficulty=50)
    - choose(board) -> Position, or None when the board is full
    """

    player: Player
    difficulty: int = MAX_DIFFICULTY
    rng: Optional[random.Random] = field(default=None, repr=False)
    nodes_searched: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.player not in PLAYERS:
            raise ValueError(f"Unknown player {self.player!r}")
        difficulty_parameters(self.difficulty)

    # ---- public API ----

    def choose(self, board: Board) -> Optional[Position]:
        params = difficulty_parameters(self.difficulty)
        rng = self.rng if self.rng is not None else random
        moves = get_available_moves(board)

        if rng.random() < params.random_chance:
            if not moves:
                return None
            move = rng.choice(moves)
            logger.debug(
                "Random move %s for player %s (chance %.2f)",
                tuple(move),
                self.player,
                params.random_chance,
            )
            return move

        if not moves:
            return None
        if len(moves) == 1:
            return moves[0]

        self.nodes_searched = 0
        cells: Cells = list(board.cells)
        depth = params.max_depth - 1
        best_score = -math.inf
        best_move: Optional[Position] = None

        for move in moves:
            idx = flat_index(board.size, move)
            cells[idx] = self.player
            # Running best is a lower bound for the remaining siblings
            score = self._minimax(
                cells, board.size, idx, depth, False, best_score, math.inf
            )
            cells[idx] = None
            if score > best_score:
                best_score, best_move = score, move

        logger.debug(
            "Player %s picked %s (score %s, depth %d, %d nodes)",
            self.player,
            tuple(best_move) if best_move else None,
            best_score,
            params.max_depth,
            self.nodes_searched,
        )
        return best_move

    # ---- core search ----

    def _minimax(
        self,
        cells: Cells,
        size: int,
        last: int,
        depth: int,
        maximizing: bool,
        alpha: float,
        beta: float,
    ) -> float:
        """Score ``cells`` right after a marker landed on index ``last``.

        ``cells`` is a scratch list; every speculative placement is undone
        before returning.
        """
        self.nodes_searched += 1

        # Only lines through the newest marker can have just been completed
        winner = _completed_by(cells, _lines_through(size)[last])
        if winner is not None:
            if winner == self.player:
                return WIN_SCORE + depth
            return -(WIN_SCORE + depth)

        if depth == 0:
            return _score_lines(cells, line_indices(size), self.player)

        empties = [i for i, c in enumerate(cells) if c is None]
        if not empties:
            return 0

        if maximizing:
            value = -math.inf
            for idx in empties:
                cells[idx] = self.player
                value = max(
                    value,
                    self._minimax(cells, size, idx, depth - 1, False, alpha, beta),
                )
                cells[idx] = None
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return value

        opp = opponent_of(self.player)
        value = math.inf
        for idx in empties:
            cells[idx] = opp
            value = min(
                value, self._minimax(cells, size, idx, depth - 1, True, alpha, beta)
            )
            cells[idx] = None
            beta = min(beta, value)
            if beta <= alpha:
                break
        return value


def _completed_by(
    cells: Sequence[Optional[Player]], lines: Sequence[Tuple[int, ...]]
) -> Optional[Player]:
    for line in lines:
        first = cells[line[0]]
        if first is not None and all(cells[i] == first for i in line[1:]):
            return first
    return None


def find_best_move(
    board: Board,
    ai_player: Player,
    difficulty_level: int,
    rng: Optional[random.Random] = None,
) -> Optional[Position]:
    """Pick a move for ``ai_player``; None only when no cell is empty."""
    return MinimaxAI(player=ai_player, difficulty=difficulty_level, rng=rng).choose(
        board
    )
