"""
FastAPI web application for the chess engine.

Two kinds of endpoints:

- POST /api/move is stateless: the client sends a FEN and a depth, the engine
  answers with its move. Nothing is kept between requests.
- /api/games/... hold whole games in memory so the browser UI can highlight
  legal moves, play moves (including the promotion round trip), ask the AI
  to move, and take moves back with full history, captures and draw
  detection. A game is either player-vs-player ("pvp") or against the AI
  ("ai"), in which case the AI's color is fixed when the game is created.

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like search.
- The engine is not thread-safe per game, so each game carries its own lock
  and every operation on it runs under that lock. The table of games has a
  separate lock held only to add, find or remove an entry, so a long search
  in one game never stalls requests for another.
- Games live only as long as the process (or until deleted); there is no
  persistence.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Literal

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator

from chesscore.board import Color, GameState, PieceKind, Square, new_game
from chesscore.constants import DEFAULT_DEPTH, MAX_DEPTH
from chesscore.execute import IllegalMoveError, MoveResult, apply_move, undo_move
from chesscore.movegen import is_in_check, legal_moves
from chesscore.notation import (
    move_to_uci,
    parse_square,
    square_name,
    state_from_fen,
    state_to_fen,
)
from chesscore.search import SearchResult, search
from chesscore.status import check_game_end

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="Chess Engine", version="1.0.0")


@dataclass
class GameSession:
    """
    One in-memory game.

    Attributes:
        state:    The game itself.
        mode:     "pvp" or "ai".
        ai_color: The color the AI plays; None in pvp mode.
        lock:     Serializes every operation on this game.
    """

    state: GameState
    mode: str = "pvp"
    ai_color: Color | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)


_GAMES: dict[str, GameSession] = {}
_GAMES_LOCK = threading.Lock()


def _clamp_depth(v: int) -> int:
    return max(1, min(v, MAX_DEPTH))


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class MoveRequest(BaseModel):
    """
    Stateless engine request.

    Fields:
        fen:   Full FEN string of the position to search.
        depth: Search depth in plies, clamped to [1, MAX_DEPTH] so a client
               cannot start a search that runs for minutes.
    """

    fen: str
    depth: int = DEFAULT_DEPTH

    @field_validator("depth")
    @classmethod
    def clamp_depth(cls, v: int) -> int:
        return _clamp_depth(v)


class MoveResponse(BaseModel):
    """
    Engine answer to a stateless request.

    Fields:
        move:  Best move in UCI notation (e.g. "e2e4", "e7e8q").
        fen:   Position after the move.
        score: Evaluation in centipawns from the engine's side.
        depth: Depth searched.
        nodes: Positions visited.
    """

    move: str
    fen: str
    score: int
    depth: int
    nodes: int


class PieceView(BaseModel):
    type: str
    color: str


class SquareView(BaseModel):
    position: str = Field(..., description="Algebraic coordinate, e.g. 'e2'.")
    piece: PieceView


class GameEndView(BaseModel):
    kind: str
    winner: str | None = None


class NewGameRequest(BaseModel):
    """
    Options for a new game.

    Fields:
        mode:     "pvp" for two players at one board, "ai" to play the engine.
        ai_color: The color the AI plays in ai mode. When the AI is White it
                  makes the opening move before the game is returned.
        depth:    Search depth for that opening move, clamped like any other.
    """

    mode: Literal["ai", "pvp"] = "pvp"
    ai_color: Literal["white", "black"] = "black"
    depth: int = DEFAULT_DEPTH

    @field_validator("depth")
    @classmethod
    def clamp_depth(cls, v: int) -> int:
        return _clamp_depth(v)


class GameView(BaseModel):
    """Everything the UI renders for one game."""

    id: str
    mode: str
    ai_color: str | None = None
    fen: str
    side_to_move: str
    board: list[SquareView] = Field(..., description="Occupied squares only.")
    history: list[str] = Field(..., description="Move notation in play order.")
    captured: dict[str, list[str]] = Field(..., description="Captured kinds keyed by their color.")
    castling_rights: dict[str, bool]
    fifty_move_counter: int
    in_check: bool
    result: GameEndView | None = None


class LegalMoveView(BaseModel):
    to: str
    is_capture: bool
    is_promotion: bool
    is_en_passant: bool
    is_castling: bool


class LegalMovesResponse(BaseModel):
    square: str
    moves: list[LegalMoveView]


class PlayRequest(BaseModel):
    """A move submitted by the player. promotion is required on the second call of a promotion."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from", description="From square, e.g. 'e2'.")
    to: str = Field(..., description="To square, e.g. 'e4'.")
    promotion: Literal["queen", "rook", "bishop", "knight"] | None = None


class PlayResponse(BaseModel):
    is_capture: bool
    is_promotion_pending: bool
    notation: str | None = None
    game: GameView


class AiMoveRequest(BaseModel):
    depth: int = DEFAULT_DEPTH

    @field_validator("depth")
    @classmethod
    def clamp_depth(cls, v: int) -> int:
        return _clamp_depth(v)


class AiMoveResponse(BaseModel):
    move: str
    notation: str
    score: int
    depth: int
    nodes: int
    game: GameView


class UndoResponse(BaseModel):
    undone: bool
    plies: int = Field(..., description="Half-moves taken back: two in ai mode when the AI had replied.")
    game: GameView


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _game_view(game_id: str, session: GameSession) -> GameView:
    state = session.state
    end = check_game_end(state)
    rights = state.castling_rights
    return GameView(
        id=game_id,
        mode=session.mode,
        ai_color=None if session.ai_color is None else session.ai_color.value,
        fen=state_to_fen(state),
        side_to_move=state.side_to_move.value,
        board=[
            SquareView(
                position=square_name(square),
                piece=PieceView(type=piece.kind.value, color=piece.color.value),
            )
            for square, piece in state.board.pieces()
        ],
        history=[record.notation for record in state.move_history],
        captured={
            color.value: [kind.value for kind in kinds]
            for color, kinds in state.captured_pieces.items()
        },
        castling_rights={
            "white_kingside": rights.white_kingside,
            "white_queenside": rights.white_queenside,
            "black_kingside": rights.black_kingside,
            "black_queenside": rights.black_queenside,
        },
        fifty_move_counter=state.fifty_move_counter,
        in_check=is_in_check(state, state.side_to_move),
        result=None if end is None else GameEndView(
            kind=end.kind.value,
            winner=None if end.winner is None else end.winner.value,
        ),
    )


def _get_game(game_id: str) -> GameSession:
    with _GAMES_LOCK:
        session = _GAMES.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown game: {game_id}")
    return session


def _parse_square(name: str) -> Square:
    try:
        return parse_square(name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid square: {name!r}") from exc


def _play_ai_move(session: GameSession, depth: int) -> tuple[SearchResult, MoveResult]:
    """Search for the AI and play its move. The caller holds session.lock."""
    state = session.state
    result = search(state, session.ai_color, depth)
    if result.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")
    move = result.move
    played = apply_move(state, move.from_square, move.to_square, move.promotion)
    return result, played


# ---------------------------------------------------------------------------
# Stateless engine route
# ---------------------------------------------------------------------------


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's move for the given position.

    Raises:
        HTTPException 400: Malformed FEN or game already over.
        HTTPException 500: Engine returned no move.
    """
    try:
        state = state_from_fen(request.fen)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc

    end = check_game_end(state)
    if end is not None:
        raise HTTPException(status_code=400, detail=f"Game is already over: {end.kind.value}")

    try:
        result = search(state, state.side_to_move, request.depth)
    except Exception as exc:
        _log.exception("Engine search failed for FEN=%s", request.fen)
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    if result.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")

    _log.info(
        "Move=%s score=%d depth=%d nodes=%d fen=%s",
        move_to_uci(result.move),
        result.score,
        result.depth,
        result.nodes,
        request.fen[:40],
    )

    move = result.move
    apply_move(state, move.from_square, move.to_square, move.promotion)
    return MoveResponse(
        move=move_to_uci(move),
        fen=state_to_fen(state),
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
    )


# ---------------------------------------------------------------------------
# In-memory game routes
# ---------------------------------------------------------------------------


@app.post("/api/games", response_model=GameView, status_code=201)
def create_game(payload: NewGameRequest | None = None) -> GameView:
    """
    Start a new game from the standard position.

    In ai mode with the AI playing White, the AI's first move is already
    on the board when the game is returned.
    """
    options = payload if payload is not None else NewGameRequest()
    session = GameSession(state=new_game(), mode=options.mode)
    if options.mode == "ai":
        session.ai_color = Color(options.ai_color)
        if session.ai_color is Color.WHITE:
            _play_ai_move(session, options.depth)

    game_id = uuid.uuid4().hex
    with _GAMES_LOCK:
        _GAMES[game_id] = session
    _log.info(
        "Created game %s mode=%s ai=%s",
        game_id,
        options.mode,
        session.ai_color.value if session.ai_color else "-",
    )
    with session.lock:
        return _game_view(game_id, session)


@app.get("/api/games/{game_id}", response_model=GameView)
def get_game(game_id: str) -> GameView:
    session = _get_game(game_id)
    with session.lock:
        return _game_view(game_id, session)


@app.delete("/api/games/{game_id}", status_code=204)
def delete_game(game_id: str) -> Response:
    """Forget a game. Raises HTTPException 404 for an unknown id."""
    with _GAMES_LOCK:
        session = _GAMES.pop(game_id, None)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown game: {game_id}")
    _log.info("Deleted game %s", game_id)
    return Response(status_code=204)


@app.get("/api/games/{game_id}/moves/{square}", response_model=LegalMovesResponse)
def get_legal_moves(game_id: str, square: str) -> LegalMovesResponse:
    """Legal destinations for the piece on square, for move highlighting."""
    origin = _parse_square(square)
    session = _get_game(game_id)
    with session.lock:
        moves = legal_moves(session.state, origin)
    return LegalMovesResponse(
        square=square_name(origin),
        moves=[
            LegalMoveView(
                to=square_name(m.to_square),
                is_capture=m.is_capture,
                is_promotion=m.is_promotion,
                is_en_passant=m.is_en_passant,
                is_castling=m.is_castling,
            )
            for m in moves
        ],
    )


@app.post("/api/games/{game_id}/moves", response_model=PlayResponse)
def play_move(game_id: str, payload: PlayRequest) -> PlayResponse:
    """
    Play the player's move.

    A promotion submitted without a piece comes back with
    is_promotion_pending and is not played; submit it again with one.

    Raises:
        HTTPException 400: Illegal move, bad square, finished game, or (in
            ai mode) a move submitted while it is the AI's turn.
        HTTPException 404: Unknown game.
    """
    from_square = _parse_square(payload.from_)
    to_square = _parse_square(payload.to)
    promotion = PieceKind(payload.promotion) if payload.promotion else None

    session = _get_game(game_id)
    with session.lock:
        state = session.state
        if check_game_end(state) is not None:
            raise HTTPException(status_code=400, detail="Game is already over")
        if session.mode == "ai" and state.side_to_move is session.ai_color:
            raise HTTPException(status_code=400, detail="It is the AI's turn")
        try:
            result = apply_move(state, from_square, to_square, promotion)
        except IllegalMoveError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        view = _game_view(game_id, session)

    return PlayResponse(
        is_capture=result.is_capture,
        is_promotion_pending=result.is_promotion_pending,
        notation=result.record.notation if result.record else None,
        game=view,
    )


@app.post("/api/games/{game_id}/ai-move", response_model=AiMoveResponse)
def ai_move(game_id: str, payload: AiMoveRequest | None = None) -> AiMoveResponse:
    """
    Let the engine play its move in an ai-mode game.

    Only this game is locked while the engine searches.

    Raises:
        HTTPException 400: pvp game, not the AI's turn, or game already over.
        HTTPException 404: Unknown game.
    """
    depth = payload.depth if payload is not None else DEFAULT_DEPTH
    session = _get_game(game_id)
    with session.lock:
        state = session.state
        if session.mode != "ai":
            raise HTTPException(status_code=400, detail="Game has no AI player")
        if check_game_end(state) is not None:
            raise HTTPException(status_code=400, detail="Game is already over")
        if state.side_to_move is not session.ai_color:
            raise HTTPException(status_code=400, detail="It is not the AI's turn")

        result, played = _play_ai_move(session, depth)
        view = _game_view(game_id, session)

    _log.info(
        "Game=%s move=%s score=%d depth=%d nodes=%d",
        game_id,
        move_to_uci(result.move),
        result.score,
        result.depth,
        result.nodes,
    )
    return AiMoveResponse(
        move=move_to_uci(result.move),
        notation=played.record.notation,
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
        game=view,
    )


@app.post("/api/games/{game_id}/undo", response_model=UndoResponse)
def undo(game_id: str) -> UndoResponse:
    """
    Take back the last move.

    In pvp mode that is one half-move. In ai mode the player gets their turn
    back: when the AI has already replied, both the reply and the player's
    move are taken back. undone is false when there is nothing to undo.
    """
    session = _get_game(game_id)
    with session.lock:
        state = session.state
        plies = 0
        if undo_move(state):
            plies += 1
            if session.mode == "ai" and state.side_to_move is session.ai_color and undo_move(state):
                plies += 1
        view = _game_view(game_id, session)
    return UndoResponse(undone=plies > 0, plies=plies, game=view)
