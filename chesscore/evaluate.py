"""
Static evaluation: material plus piece-square tables.

The search needs one number per position to compare lines. This module sums,
over every piece on the board, its centipawn value plus a positional bonus
from a fixed 64-entry table for its kind. Knights gain for central squares,
pawns for advancing, kings for staying tucked in behind their pawns.

Scores are signed from an explicit perspective: positive means the
perspective color is ahead. The default perspective is Black, the color the
AI plays unless the user picks Black for themselves.
"""

from chesscore.board import Board, Color
from chesscore.constants import PIECE_VALUES, PST


def evaluate(board: Board, perspective: Color = Color.BLACK) -> int:
    """
    Centipawn score of board from perspective's point of view.

    Table lookup: the tables are written as White sees the board (index 0
    = a8). White pieces use row * 8 + col directly; Black pieces use the
    rank-mirrored (7 - row) * 8 + col, so both colors read the same table
    relative to their own back rank.

    Args:
        board:       Position to score. Not modified.
        perspective: Color whose advantage counts as positive.

    Returns:
        Black's total minus White's total, negated when perspective is White.

    Example:
        >>> from chesscore.board import Board
        >>> evaluate(Board.initial())  # symmetric start scores level
        0
    """
    score = 0
    for (row, col), piece in board.pieces():
        table = PST[piece.kind]
        if piece.color is Color.WHITE:
            score -= PIECE_VALUES[piece.kind] + table[row * 8 + col]
        else:
            score += PIECE_VALUES[piece.kind] + table[(7 - row) * 8 + col]
    return score if perspective is Color.BLACK else -score
