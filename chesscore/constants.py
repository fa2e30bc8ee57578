"""
Engine constants: piece values, piece-square tables, and search parameters.

All numeric constants used throughout the engine are defined here so that the
rules, evaluation and search modules never introduce magic numbers of their
own. Front ends (UCI, web) read their defaults from this module too.

Piece values follow the standard centipawn convention (1 pawn = 100 cp).
"""

from chesscore.board import PieceKind

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900
KING_VALUE: int = 20_000  # Counted like any other piece; both kings are always present

PIECE_VALUES: dict[PieceKind, int] = {
    PieceKind.PAWN:   PAWN_VALUE,
    PieceKind.KNIGHT: KNIGHT_VALUE,
    PieceKind.BISHOP: BISHOP_VALUE,
    PieceKind.ROOK:   ROOK_VALUE,
    PieceKind.QUEEN:  QUEEN_VALUE,
    PieceKind.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Piece-square tables
# ---------------------------------------------------------------------------
# 64 entries each, laid out as White sees the board: index 0 = a8,
# index 63 = h1. White pieces read index row * 8 + col directly (row 0 is
# rank 8 in our board convention); Black pieces read the rank-mirrored index
# (7 - row) * 8 + col.

PAWN_TABLE: tuple[int, ...] = (
      0,   0,   0,   0,   0,   0,   0,   0,
     50,  50,  50,  50,  50,  50,  50,  50,
     10,  10,  20,  30,  30,  20,  10,  10,
      5,   5,  10,  25,  25,  10,   5,   5,
      0,   0,   0,  20,  20,   0,   0,   0,
      5,  -5, -10,   0,   0, -10,  -5,   5,
      5,  10,  10, -20, -20,  10,  10,   5,
      0,   0,   0,   0,   0,   0,   0,   0,
)

KNIGHT_TABLE: tuple[int, ...] = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,   5,  15,  20,  20,  15,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  10,  15,  15,  10,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

BISHOP_TABLE: tuple[int, ...] = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,   5,   0,   0,   0,   0,   5, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

ROOK_TABLE: tuple[int, ...] = (
      0,   0,   0,   0,   0,   0,   0,   0,
      5,  10,  10,  10,  10,  10,  10,   5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
      0,   0,   0,   5,   5,   0,   0,   0,
)

QUEEN_TABLE: tuple[int, ...] = (
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
      0,   0,   5,   5,   5,   5,   0,  -5,
    -10,   5,   5,   5,   5,   5,   0, -10,
    -10,   0,   5,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
)

KING_TABLE: tuple[int, ...] = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
     20,  20,   0,   0,   0,   0,  20,  20,
     20,  30,  10,   0,   0,  10,  30,  20,
)

PST: dict[PieceKind, tuple[int, ...]] = {
    PieceKind.PAWN:   PAWN_TABLE,
    PieceKind.KNIGHT: KNIGHT_TABLE,
    PieceKind.BISHOP: BISHOP_TABLE,
    PieceKind.ROOK:   ROOK_TABLE,
    PieceKind.QUEEN:  QUEEN_TABLE,
    PieceKind.KING:   KING_TABLE,
}

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------
# Integers only, so they compare cleanly inside alpha-beta.

MATE_SCORE: int = 100_000       # Side to move has no legal moves and is in check
DRAW_SCORE: int = 0             # Stalemate
SEARCH_INFINITY: int = 1_000_000  # Initial alpha/beta window; larger than any score

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# DEFAULT_DEPTH is the depth the AI opponent plays at. MAX_DEPTH is the upper
# clamp applied by the front ends: full-width search in pure Python grows by
# a factor of ~30 per ply, and depth 4 is the deepest that still answers
# within a few seconds.

DEFAULT_DEPTH: int = 3
MAX_DEPTH: int = 4

# ---------------------------------------------------------------------------
# Draw rules
# ---------------------------------------------------------------------------

FIFTY_MOVE_LIMIT: int = 100  # half-moves without a capture or pawn move
REPETITION_LIMIT: int = 3
