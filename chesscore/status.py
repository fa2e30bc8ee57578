"""
Terminal-state detection: check, checkmate, stalemate, and draw rules.

check_game_end() is what the UI calls after every move. It tests the side
to move in a fixed order (checkmate, stalemate, fifty-move rule,
threefold repetition) and reports the first condition that holds.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from chesscore.board import Color, GameState
from chesscore.constants import FIFTY_MOVE_LIMIT, REPETITION_LIMIT
from chesscore.movegen import has_legal_move, is_in_check


class GameEndKind(enum.Enum):
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    FIFTY_MOVE = "fifty_move"
    REPETITION = "repetition"


@dataclass(frozen=True)
class GameEnd:
    """How the game ended. winner is set only for checkmate."""

    kind: GameEndKind
    winner: Color | None = None


def is_checkmate(state: GameState, color: Color) -> bool:
    return is_in_check(state, color) and not has_legal_move(state, color)


def is_stalemate(state: GameState, color: Color) -> bool:
    return not is_in_check(state, color) and not has_legal_move(state, color)


def is_fifty_move_draw(state: GameState) -> bool:
    return state.fifty_move_counter >= FIFTY_MOVE_LIMIT


def is_threefold_repetition(state: GameState) -> bool:
    """The latest position has occurred at least three times."""
    if not state.repetition_history:
        return False
    latest = state.repetition_history[-1]
    return state.repetition_history.count(latest) >= REPETITION_LIMIT


def check_game_end(state: GameState) -> GameEnd | None:
    color = state.side_to_move
    in_check = is_in_check(state, color)
    if not has_legal_move(state, color):
        if in_check:
            return GameEnd(GameEndKind.CHECKMATE, winner=color.opponent)
        return GameEnd(GameEndKind.STALEMATE)
    if is_fifty_move_draw(state):
        return GameEnd(GameEndKind.FIFTY_MOVE)
    if is_threefold_repetition(state):
        return GameEnd(GameEndKind.REPETITION)
    return None
