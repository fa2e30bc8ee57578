"""
Move generation: pseudo-legal rules per piece kind, plus legality filtering.

A pseudo-legal move obeys the piece's movement rule but may leave the mover's
own king in check. legal_moves() generates pseudo-legal moves for one square
and, by default, drops every move that would leave the king attacked. The
check is done by simulating the move on the board in place and restoring
it afterwards, so no GameState is copied per candidate.

Generation order is deterministic (kind-specific direction/offset order, then
castling kingside before queenside). The search enumerates moves in this
order, which makes its tie-breaks reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator

from chesscore.board import (
    Board,
    Color,
    GameState,
    Piece,
    PieceKind,
    Square,
    in_bounds,
)

ROOK_DIRECTIONS: tuple[tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
BISHOP_DIRECTIONS: tuple[tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
QUEEN_DIRECTIONS: tuple[tuple[int, int], ...] = ROOK_DIRECTIONS + BISHOP_DIRECTIONS
KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1),
)
KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1),
)

KING_HOME_COL = 4
KINGSIDE_ROOK_COL = 7
QUEENSIDE_ROOK_COL = 0


@dataclass(frozen=True)
class Move:
    """
    A candidate move as produced by the generator.

    promotion is left None by the generator: choosing the promotion piece is
    up to the caller. The search fills it in on the moves it returns.
    """

    from_square: Square
    to_square: Square
    is_capture: bool = False
    is_promotion: bool = False
    is_en_passant: bool = False
    is_castling: bool = False
    promotion: PieceKind | None = None


# ---------------------------------------------------------------------------
# Per-kind pseudo-legal rules
# ---------------------------------------------------------------------------


def _pawn_moves(state: GameState, square: Square, color: Color) -> list[Move]:
    board = state.board
    row, col = square
    step = color.pawn_direction
    start_row = 6 if color is Color.WHITE else 1
    last_row = 0 if color is Color.WHITE else 7
    moves: list[Move] = []

    ahead = row + step
    if in_bounds(ahead, col) and board.piece_at(ahead, col) is None:
        moves.append(Move(square, (ahead, col), is_promotion=ahead == last_row))
        double = row + 2 * step
        if row == start_row and board.piece_at(double, col) is None:
            moves.append(Move(square, (double, col)))

    for dc in (-1, 1):
        target_col = col + dc
        if not in_bounds(ahead, target_col):
            continue
        target = board.piece_at(ahead, target_col)
        if target is not None and target.color is not color:
            moves.append(
                Move(square, (ahead, target_col), is_capture=True, is_promotion=ahead == last_row)
            )
        elif target is None and state.en_passant_target == (ahead, target_col):
            # The pawn that just double-stepped sits beside us, on our row.
            victim = board.piece_at(row, target_col)
            if victim is not None and victim.color is not color and victim.kind is PieceKind.PAWN:
                moves.append(
                    Move(square, (ahead, target_col), is_capture=True, is_en_passant=True)
                )
    return moves


def _sliding_moves(
    board: Board,
    square: Square,
    color: Color,
    directions: tuple[tuple[int, int], ...],
) -> list[Move]:
    row, col = square
    moves: list[Move] = []
    for dr, dc in directions:
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            piece = board.squares[r][c]
            if piece is None:
                moves.append(Move(square, (r, c)))
            else:
                if piece.color is not color:
                    moves.append(Move(square, (r, c), is_capture=True))
                break
            r += dr
            c += dc
    return moves


def _step_moves(
    board: Board,
    square: Square,
    color: Color,
    offsets: tuple[tuple[int, int], ...],
) -> list[Move]:
    row, col = square
    moves: list[Move] = []
    for dr, dc in offsets:
        r, c = row + dr, col + dc
        if not in_bounds(r, c):
            continue
        piece = board.squares[r][c]
        if piece is None:
            moves.append(Move(square, (r, c)))
        elif piece.color is not color:
            moves.append(Move(square, (r, c), is_capture=True))
    return moves


def _can_castle(board: Board, color: Color, rook_col: int) -> bool:
    """
    Castling geometry and safety for one side.

    The squares between king and rook must be empty, and the king must not
    be attacked on its home square, the square it crosses, or the square it
    lands on. Each square is tested with the king actually standing there.
    """
    row = color.home_row
    king = board.piece_at(row, KING_HOME_COL)
    rook = board.piece_at(row, rook_col)
    if king != Piece(color, PieceKind.KING) or rook != Piece(color, PieceKind.ROOK):
        return False

    low, high = sorted((KING_HOME_COL, rook_col))
    if any(board.squares[row][c] is not None for c in range(low + 1, high)):
        return False

    direction = 1 if rook_col > KING_HOME_COL else -1
    board[(row, KING_HOME_COL)] = None
    try:
        for c in (KING_HOME_COL, KING_HOME_COL + direction, KING_HOME_COL + 2 * direction):
            original = board.squares[row][c]
            board[(row, c)] = king
            attacked = is_square_attacked(board, (row, c), color.opponent)
            board[(row, c)] = original
            if attacked:
                return False
    finally:
        board[(row, KING_HOME_COL)] = king
    return True


def _king_moves(state: GameState, square: Square, color: Color, with_castling: bool) -> list[Move]:
    board = state.board
    moves = _step_moves(board, square, color, KING_OFFSETS)
    if not with_castling or square != (color.home_row, KING_HOME_COL):
        return moves
    rights = state.castling_rights
    if rights.kingside(color) and _can_castle(board, color, KINGSIDE_ROOK_COL):
        moves.append(Move(square, (square[0], KING_HOME_COL + 2), is_castling=True))
    if rights.queenside(color) and _can_castle(board, color, QUEENSIDE_ROOK_COL):
        moves.append(Move(square, (square[0], KING_HOME_COL - 2), is_castling=True))
    return moves


MoveRule = Callable[[GameState, Square, Color, bool], list[Move]]

MOVE_RULES: dict[PieceKind, MoveRule] = {
    PieceKind.PAWN: lambda state, sq, color, _: _pawn_moves(state, sq, color),
    PieceKind.KNIGHT: lambda state, sq, color, _: _step_moves(state.board, sq, color, KNIGHT_OFFSETS),
    PieceKind.BISHOP: lambda state, sq, color, _: _sliding_moves(state.board, sq, color, BISHOP_DIRECTIONS),
    PieceKind.ROOK: lambda state, sq, color, _: _sliding_moves(state.board, sq, color, ROOK_DIRECTIONS),
    PieceKind.QUEEN: lambda state, sq, color, _: _sliding_moves(state.board, sq, color, QUEEN_DIRECTIONS),
    PieceKind.KING: _king_moves,
}


# ---------------------------------------------------------------------------
# Attack detection
# ---------------------------------------------------------------------------


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """
    True if any piece of by_color attacks square.

    Walks outward from the target square instead of generating every
    opposing move: a square is attacked by a knight exactly when a knight
    stands a knight's jump away, and so on for each kind. The answer is the
    same as asking whether any opposing pseudo-legal move (without castling)
    lands on the square.
    """
    row, col = square

    # Pawns attack diagonally forward, so look one row "behind" the square
    # from the attacker's point of view.
    pawn_row = row - by_color.pawn_direction
    for dc in (-1, 1):
        piece = board.piece_at(pawn_row, col + dc)
        if piece is not None and piece.color is by_color and piece.kind is PieceKind.PAWN:
            return True

    for dr, dc in KNIGHT_OFFSETS:
        piece = board.piece_at(row + dr, col + dc)
        if piece is not None and piece.color is by_color and piece.kind is PieceKind.KNIGHT:
            return True

    for dr, dc in KING_OFFSETS:
        piece = board.piece_at(row + dr, col + dc)
        if piece is not None and piece.color is by_color and piece.kind is PieceKind.KING:
            return True

    for directions, kinds in (
        (ROOK_DIRECTIONS, (PieceKind.ROOK, PieceKind.QUEEN)),
        (BISHOP_DIRECTIONS, (PieceKind.BISHOP, PieceKind.QUEEN)),
    ):
        for dr, dc in directions:
            r, c = row + dr, col + dc
            while in_bounds(r, c):
                piece = board.squares[r][c]
                if piece is not None:
                    if piece.color is by_color and piece.kind in kinds:
                        return True
                    break
                r += dr
                c += dc
    return False


def find_king(board: Board, color: Color) -> Square | None:
    for square, piece in board.pieces(color):
        if piece.kind is PieceKind.KING:
            return square
    return None


def is_in_check(state: GameState, color: Color) -> bool:
    """True iff color's king is attacked. A board without that king is never in check."""
    king = find_king(state.board, color)
    if king is None:
        return False
    return is_square_attacked(state.board, king, color.opponent)


# ---------------------------------------------------------------------------
# Legal moves
# ---------------------------------------------------------------------------


def _leaves_king_safe(board: Board, move: Move, color: Color) -> bool:
    """Play move on the board, test the mover's king, and put everything back."""
    (fr, fc), (tr, tc) = move.from_square, move.to_square
    piece = board.squares[fr][fc]
    captured = board.squares[tr][tc]
    victim_square = (fr, tc) if move.is_en_passant else None
    victim = board.squares[fr][tc] if victim_square else None

    board.squares[tr][tc] = piece
    board.squares[fr][fc] = None
    if victim_square:
        board.squares[fr][tc] = None
    try:
        if piece is not None and piece.kind is PieceKind.KING:
            king = (tr, tc)
        else:
            king = find_king(board, color)
        return king is None or not is_square_attacked(board, king, color.opponent)
    finally:
        board.squares[fr][fc] = piece
        board.squares[tr][tc] = captured
        if victim_square:
            board.squares[fr][tc] = victim


def legal_moves(state: GameState, square: Square, check_king_safety: bool = True) -> list[Move]:
    """
    Moves for the piece on square.

    Args:
        state:             The game. Not modified (the board is touched only
                           transiently while testing king safety).
        square:            (row, col) of the piece to move.
        check_king_safety: When False, return pseudo-legal moves without
                           castling and without the king-safety filter.

    Returns:
        Moves in generation order; [] for an empty or off-board square.
        The side to move is not consulted, so the UI can also preview the
        opponent's moves.
    """
    piece = state.board[square]
    if piece is None:
        return []
    color = piece.color
    candidates = MOVE_RULES[piece.kind](state, square, color, check_king_safety)
    if not check_king_safety:
        return candidates
    return [m for m in candidates if _leaves_king_safe(state.board, m, color)]


def iter_legal_moves(state: GameState, color: Color) -> Iterator[Move]:
    """Lazily yield every legal move of color in board-scan order."""
    for square, _ in list(state.board.pieces(color)):
        yield from legal_moves(state, square)


def all_legal_moves(state: GameState, color: Color) -> list[Move]:
    return list(iter_legal_moves(state, color))


def has_legal_move(state: GameState, color: Color) -> bool:
    return any(True for _ in iter_legal_moves(state, color))
