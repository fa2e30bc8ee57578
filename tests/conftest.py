import pytest

from chesscore.board import GameState
from chesscore.execute import apply_move
from chesscore.notation import parse_uci_move


def _play(state: GameState, *moves: str) -> GameState:
    """Apply UCI moves in order through the validating entry point."""
    for text in moves:
        from_square, to_square, promotion = parse_uci_move(text)
        apply_move(state, from_square, to_square, promotion)
    return state


@pytest.fixture
def play():
    return _play
