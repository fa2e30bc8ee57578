import pytest

from chesscore.board import Color, PieceKind, new_game
from chesscore.constants import DRAW_SCORE, MATE_SCORE
from chesscore.evaluate import evaluate
from chesscore.execute import make_move, undo_move
from chesscore.movegen import all_legal_moves, is_in_check
from chesscore.notation import move_to_uci, state_from_fen, state_to_fen
from chesscore.search import best_move, search

FOOLS_MATE_TO_PLAY = "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq g3 0 2"
FOOLS_MATE_DONE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
BACK_RANK = "6k1/5ppp/8/8/8/8/5PPP/3R2K1 w - - 0 1"
PROMOTION = "8/P6k/8/8/8/8/8/K7 w - - 0 1"
STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"

ITALIAN = "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"

COMPARISON_POSITIONS = [
    (ITALIAN, 2),
    ("8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1", 3),
    (BACK_RANK, 3),
]


def _plain_minimax(state, depth, ai_color, counter):
    """Reference search without pruning, same leaf and terminal scoring."""
    counter[0] += 1
    if depth == 0:
        return evaluate(state.board, ai_color)
    mover = state.side_to_move
    moves = all_legal_moves(state, mover)
    maximizing = mover is ai_color
    if not moves:
        if is_in_check(state, mover):
            return -MATE_SCORE if maximizing else MATE_SCORE
        return DRAW_SCORE
    scores = []
    for move in moves:
        make_move(state, move.from_square, move.to_square,
                  PieceKind.QUEEN if move.is_promotion else None)
        scores.append(_plain_minimax(state, depth - 1, ai_color, counter))
        undo_move(state)
    return max(scores) if maximizing else min(scores)


def _plain_root(state, depth, ai_color):
    counter = [0]
    maximizing = state.side_to_move is ai_color
    best = None
    for move in all_legal_moves(state, state.side_to_move):
        make_move(state, move.from_square, move.to_square,
                  PieceKind.QUEEN if move.is_promotion else None)
        score = _plain_minimax(state, depth - 1, ai_color, counter)
        undo_move(state)
        if best is None or (score > best[1] if maximizing else score < best[1]):
            best = (move, score)
    return best[0], best[1], counter[0]


def test_finds_mate_in_one():
    result = search(state_from_fen(FOOLS_MATE_TO_PLAY), Color.BLACK, depth=2)
    assert move_to_uci(result.move) == "d8h4"
    assert result.score == MATE_SCORE
    assert result.depth == 2
    assert result.nodes > 0


def test_back_rank_mate():
    result = search(state_from_fen(BACK_RANK), Color.WHITE, depth=2)
    assert move_to_uci(result.move) == "d1d8"
    assert result.score == MATE_SCORE


def test_mated_side_has_no_move():
    state = state_from_fen(FOOLS_MATE_DONE)
    result = search(state, Color.WHITE, depth=2)
    assert result.move is None
    assert result.score == -MATE_SCORE
    assert search(state, Color.BLACK, depth=2).score == MATE_SCORE


def test_stalemated_side_has_no_move():
    result = search(state_from_fen(STALEMATE), Color.BLACK, depth=3)
    assert result.move is None
    assert result.score == DRAW_SCORE


def test_promotion_is_returned_as_queen():
    move = best_move(state_from_fen(PROMOTION), Color.WHITE, depth=1)
    assert move.is_promotion
    assert move.promotion is PieceKind.QUEEN
    assert move_to_uci(move) == "a7a8q"


def test_depth_below_one_searches_one_ply():
    result = search(new_game(), Color.WHITE, depth=0)
    assert result.depth == 1
    assert result.move is not None
    assert result.nodes == 20


def test_search_leaves_the_game_untouched(play):
    state = play(new_game(), "e2e4", "e7e5")
    fen = state_to_fen(state)
    history = list(state.move_history)
    repetitions = list(state.repetition_history)

    search(state, Color.WHITE, depth=2)

    assert state_to_fen(state) == fen
    assert state.move_history == history
    assert state.repetition_history == repetitions


def test_search_is_deterministic():
    state = state_from_fen(ITALIAN)
    first = search(state, Color.WHITE, depth=2)
    second = search(state, Color.WHITE, depth=2)
    assert first == second


@pytest.mark.parametrize("ai_color", [Color.WHITE, Color.BLACK])
@pytest.mark.parametrize("fen, depth", COMPARISON_POSITIONS)
def test_alpha_beta_agrees_with_plain_minimax(fen, depth, ai_color):
    state = state_from_fen(fen)
    result = search(state, ai_color, depth)
    move, score, plain_nodes = _plain_root(state.clone(), depth, ai_color)

    assert result.score == score
    assert result.move.from_square == move.from_square
    assert result.move.to_square == move.to_square
    assert result.nodes <= plain_nodes
