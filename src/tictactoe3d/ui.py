"""FastAPI service that hosts 3D tic-tac-toe games for a browser front end."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import MAX_DIFFICULTY, MIN_DIFFICULTY, MinimaxAI
from .config import load_settings
from .game import (
    PLAYER_ONE,
    PLAYER_TWO,
    Board,
    GameOutcome,
    InvalidMoveError,
    Player,
    Position,
    create_empty_board,
    evaluate_outcome,
    get_available_moves,
    opponent_of,
    place_marker,
)

logger = logging.getLogger(__name__)

Opponent = Literal["ai", "human"]


@dataclass
class GameSession:
    """Container for one game: its board, whose turn it is and the AI opponent."""

    opponent: Opponent
    difficulty: int
    ai: Optional[MinimaxAI]
    board: Board = field(default_factory=create_empty_board)
    current_player: Player = PLAYER_ONE
    move_log: List[Dict[str, int]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def outcome(self) -> GameOutcome:
        return evaluate_outcome(self.board)

    def is_ai_turn(self) -> bool:
        return (
            self.ai is not None
            and self.current_player == self.ai.player
            and not self.outcome.is_over
        )

    def record(self, player: Player, position: Position) -> None:
        self.board = place_marker(self.board, position, player)
        self.move_log.append(
            {"player": player, "x": position.x, "y": position.y, "z": position.z}
        )
        self.current_player = opponent_of(player)

    def reset(self) -> None:
        self.board = create_empty_board()
        self.current_player = PLAYER_ONE
        self.move_log.clear()


SESSIONS: Dict[str, GameSession] = {}
SETTINGS = load_settings()
app = FastAPI(title="tictactoe3d", description="3x3x3 tic-tac-toe with an AI opponent")

# Seconds the AI waits before answering (min, max)
AI_THINK_DELAY: Tuple[float, float] = (0.4, 0.9)


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    opponent: Opponent = "ai"
    difficulty: Optional[int] = Field(
        default=None,
        description=f"AI strength from {MIN_DIFFICULTY} to {MAX_DIFFICULTY}",
    )
    ai_player: int = Field(default=PLAYER_TWO, alias="aiPlayer")

    @field_validator("difficulty")
    @classmethod
    def ensure_supported_difficulty(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and not MIN_DIFFICULTY <= value <= MAX_DIFFICULTY:
            raise ValueError(
                f"Unsupported difficulty {value}. "
                f"Choose a level from {MIN_DIFFICULTY} to {MAX_DIFFICULTY}."
            )
        return value

    @field_validator("ai_player")
    @classmethod
    def ensure_known_player(cls, value: int) -> int:
        if value not in (PLAYER_ONE, PLAYER_TWO):
            raise ValueError("aiPlayer must be 1 or 2")
        return value


class MoveRequest(BaseModel):
    """Request payload for placing a marker on an existing game."""

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    z: int = Field(ge=0)


def _create_session(request: NewGameRequest) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    difficulty = (
        request.difficulty
        if request.difficulty is not None
        else SETTINGS.default_difficulty
    )
    ai = (
        MinimaxAI(player=request.ai_player, difficulty=difficulty)
        if request.opponent == "ai"
        else None
    )
    session = GameSession(opponent=request.opponent, difficulty=difficulty, ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created game %s (opponent=%s, difficulty=%d)",
        session_id,
        request.opponent,
        difficulty,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if not session.is_ai_turn():
                return
            move = session.ai.choose(session.board)
            if move is None:
                return
            session.record(session.ai.player, move)
            logger.info("Game %s: AI played %s", game_id, tuple(move))
        finally:
            session.ai_pending = False


def _schedule_ai_if_needed(
    game_id: str,
    session: GameSession,
    background_tasks: BackgroundTasks,
) -> None:
    # Caller holds session.lock
    if session.is_ai_turn():
        session.ai_pending = True
        background_tasks.add_task(_run_ai_turn, game_id)


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        outcome = session.outcome
        winning_line = None
        if outcome.winning_line is not None:
            winning_line = [
                {"x": p.x, "y": p.y, "z": p.z}
                for p in outcome.winning_line.positions
            ]

        state: Dict[str, object] = {
            "id": game_id,
            "size": board.size,
            "board": [
                [[c or 0 for c in row] for row in layer] for layer in board.to_layers()
            ],
            "currentPlayer": session.current_player,
            "state": outcome.state.value,
            "winner": outcome.winner,
            "winningLine": winning_line,
            "opponent": session.opponent,
            "aiPlayer": session.ai.player if session.ai else None,
            "difficulty": session.difficulty,
            "availableMoves": (
                []
                if outcome.is_over
                else [{"x": p.x, "y": p.y, "z": p.z} for p in get_available_moves(board)]
            ),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    position: Position,
    background_tasks: BackgroundTasks,
) -> None:
    with session.lock:
        if session.outcome.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if session.is_ai_turn():
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        player = session.current_player
        try:
            session.record(player, position)
        except InvalidMoveError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        logger.info("Game %s: player %d played %s", game_id, player, tuple(position))
        _schedule_ai_if_needed(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request)
    with session.lock:
        _schedule_ai_if_needed(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(
        game_id,
        session,
        Position(request.x, request.y, request.z),
        background_tasks,
    )
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str, background_tasks: BackgroundTasks) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.reset()
        logger.info("Game %s restarted", game_id)
        _schedule_ai_if_needed(game_id, session, background_tasks)
    return _serialize_session(game_id, session)
