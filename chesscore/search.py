"""
Search entry point: fixed-depth minimax with alpha-beta pruning.

The AI opponent calls best_move() once per turn. The search is deliberately
plain: full-width to a fixed depth, moves tried in generation order, a
static evaluation at the leaves. There is no iterative deepening, no
transposition table and no quiescence search, so a given position, depth and
AI color always produce the same move.

Minimax rather than negamax: the evaluation is taken from the AI's
perspective throughout, nodes where the AI is to move maximize, and nodes
where its opponent is to move minimize. This keeps scores comparable between
plies without sign flipping and lets the AI play either color.

The search works on a clone of the caller's state and walks it with
make_move()/undo_move() (make, recurse, unmake). One clone per search is
enough because undo_move() restores every field exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from chesscore.board import Color, GameState, PieceKind
from chesscore.constants import DEFAULT_DEPTH, DRAW_SCORE, MATE_SCORE, SEARCH_INFINITY
from chesscore.evaluate import evaluate
from chesscore.execute import make_move, undo_move
from chesscore.movegen import Move, all_legal_moves, is_in_check

_log = logging.getLogger(__name__)


@dataclass
class SearchState:
    """
    Per-search bookkeeping.

    Attributes:
        ai_color:   The color whose advantage is maximized.
        node_count: Positions visited, including leaves. Reported by the
                    front ends and used to compare pruned vs unpruned work.
    """

    ai_color: Color
    node_count: int = 0


@dataclass(frozen=True)
class SearchResult:
    """
    Result of a root search.

    Attributes:
        move:  Chosen move, or None when the side to move has no legal move.
        score: Value of the chosen line from the AI's perspective.
        depth: Depth searched, in plies.
        nodes: Positions visited.
    """

    move: Move | None
    score: int
    depth: int
    nodes: int


def _play(state: GameState, move: Move) -> None:
    """Make a move inside the tree; pawns reaching the last rank become queens."""
    promotion = PieceKind.QUEEN if move.is_promotion else None
    make_move(state, move.from_square, move.to_square, promotion)


def minimax(
    state: GameState,
    depth: int,
    alpha: int,
    beta: int,
    search: SearchState,
) -> int:
    """
    Minimax value of state with alpha-beta pruning.

    Args:
        state:  Current position. Modified in place via make/undo and always
                restored on return.
        depth:  Remaining plies. At 0 the static evaluation is returned.
        alpha:  Best value the maximizing side can already guarantee.
        beta:   Best value the minimizing side can already guarantee.
        search: Shared bookkeeping (AI color, node counter).

    Returns:
        Score from search.ai_color's perspective. A side with no legal moves
        scores MATE_SCORE against itself when in check, DRAW_SCORE otherwise.
    """
    search.node_count += 1

    if depth == 0:
        return evaluate(state.board, search.ai_color)

    mover = state.side_to_move
    maximizing = mover is search.ai_color
    moves = all_legal_moves(state, mover)

    if not moves:
        if is_in_check(state, mover):
            return -MATE_SCORE if maximizing else MATE_SCORE
        return DRAW_SCORE

    if maximizing:
        value = -SEARCH_INFINITY
        for move in moves:
            _play(state, move)
            score = minimax(state, depth - 1, alpha, beta, search)
            undo_move(state)
            value = max(value, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
        return value

    value = SEARCH_INFINITY
    for move in moves:
        _play(state, move)
        score = minimax(state, depth - 1, alpha, beta, search)
        undo_move(state)
        value = min(value, score)
        beta = min(beta, score)
        if beta <= alpha:
            break
    return value


def search(state: GameState, ai_color: Color, depth: int = DEFAULT_DEPTH) -> SearchResult:
    """
    Search the position and return the chosen move with its score.

    The root belongs to the side to move. When that is ai_color the root
    maximizes; otherwise it minimizes, i.e. picks the reply that is worst
    for the AI. Ties go to the move generated first.

    Args:
        state:    The game. Not modified.
        ai_color: Perspective of the evaluation.
        depth:    Plies to search; values below 1 are treated as 1.

    Returns:
        SearchResult. move is None (score DRAW_SCORE or the mate score) when
        the side to move has no legal moves.
    """
    depth = max(1, depth)
    work = state.clone()
    tracker = SearchState(ai_color=ai_color)
    mover = work.side_to_move
    maximizing = mover is ai_color

    moves = all_legal_moves(work, mover)
    if not moves:
        score = minimax(work, depth, -SEARCH_INFINITY, SEARCH_INFINITY, tracker)
        return SearchResult(move=None, score=score, depth=depth, nodes=tracker.node_count)

    alpha, beta = -SEARCH_INFINITY, SEARCH_INFINITY
    best_move: Move | None = None
    best_score = 0
    for move in moves:
        _play(work, move)
        score = minimax(work, depth - 1, alpha, beta, tracker)
        undo_move(work)
        if best_move is None or (score > best_score if maximizing else score < best_score):
            best_move, best_score = move, score
        if maximizing:
            alpha = max(alpha, best_score)
        else:
            beta = min(beta, best_score)

    if best_move is not None and best_move.is_promotion:
        best_move = replace(best_move, promotion=PieceKind.QUEEN)

    _log.debug(
        "search depth=%d ai=%s move=%s score=%d nodes=%d",
        depth,
        ai_color.value,
        best_move,
        best_score,
        tracker.node_count,
    )
    return SearchResult(move=best_move, score=best_score, depth=depth, nodes=tracker.node_count)


def best_move(state: GameState, ai_color: Color, depth: int = DEFAULT_DEPTH) -> Move | None:
    """The move search() chooses, or None when there is nothing to play."""
    return search(state, ai_color, depth).move


def perft(state: GameState, depth: int) -> int:
    """
    Count leaf positions of the legal move tree to the given depth.

    A move-generator correctness check: the counts for well-known positions
    are published. Promotions count once per destination square, since the
    generator reports them once. state is restored before returning.
    """
    if depth <= 0:
        return 1
    moves = all_legal_moves(state, state.side_to_move)
    if depth == 1:
        return len(moves)
    total = 0
    for move in moves:
        _play(state, move)
        total += perft(state, depth - 1)
        undo_move(state)
    return total
