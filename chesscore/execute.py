"""
Move execution and undo.

make_move() is the raw executor: it trusts that the move came from
legal_moves() and performs all the bookkeeping (en passant, castling rook,
castling rights, fifty-move counter, captures, history, repetition keys).
undo_move() is its exact inverse, driven by the MoveRecord that make_move()
appended.

apply_move() is the checked entry point for callers outside the engine: it
re-validates the move against legal_moves(), and handles the two-step
promotion flow (ask for the piece, then play the move).
"""

from __future__ import annotations

from dataclasses import dataclass

from chesscore.board import (
    PROMOTION_KINDS,
    Color,
    GameState,
    MoveRecord,
    Piece,
    PieceKind,
    Square,
    in_bounds,
)
from chesscore.movegen import (
    KINGSIDE_ROOK_COL,
    QUEENSIDE_ROOK_COL,
    legal_moves,
)
from chesscore.notation import square_name


class IllegalMoveError(ValueError):
    """Raised when a proposed move is illegal for the current state."""


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of apply_move().

    Attributes:
        is_capture:           The move captures (including en passant).
        is_promotion_pending: The move is a promotion and no piece was
                              chosen. Nothing was played; call again with
                              a promotion kind.
        record:               The history entry, or None while pending.
    """

    is_capture: bool
    is_promotion_pending: bool = False
    record: MoveRecord | None = None


def _notation(
    piece: Piece,
    from_square: Square,
    to_square: Square,
    is_capture: bool,
    castling: bool,
    promotion: PieceKind | None,
) -> str:
    if castling:
        return "O-O" if to_square[1] > from_square[1] else "O-O-O"
    text = ""
    if piece.kind is PieceKind.PAWN:
        if is_capture:
            text += square_name(from_square)[0]
    else:
        text += piece.kind.letter.upper()
    if is_capture:
        text += "x"
    text += square_name(to_square)
    if promotion is not None:
        text += "=" + promotion.letter.upper()
    return text


def _revoke_rook_right(state: GameState, piece: Piece, square: Square) -> None:
    """Clear the castling right tied to a rook standing on its home corner."""
    if piece.kind is not PieceKind.ROOK or square[0] != piece.color.home_row:
        return
    if square[1] == KINGSIDE_ROOK_COL:
        state.castling_rights.clear(piece.color, kingside=True)
    elif square[1] == QUEENSIDE_ROOK_COL:
        state.castling_rights.clear(piece.color, kingside=False)


def make_move(
    state: GameState,
    from_square: Square,
    to_square: Square,
    promotion: PieceKind | None = None,
) -> MoveRecord:
    """
    Play a move on state without validating it.

    Args:
        state:       Game to mutate.
        from_square: Origin; must hold a piece.
        to_square:   Destination, as returned by legal_moves().
        promotion:   Kind chosen by the caller when a pawn reaches the last
                     rank. The executor never picks one itself; without it
                     the pawn simply stays a pawn.

    Returns:
        The MoveRecord appended to state.move_history.
    """
    board = state.board
    piece = board[from_square]
    if piece is None:
        raise IllegalMoveError(f"no piece on {square_name(from_square)}")
    color = piece.color
    target = board[to_square]

    prior_rights = state.castling_rights.copy()
    prior_ep = state.en_passant_target
    prior_counter = state.fifty_move_counter
    prior_fullmove = state.fullmove_number

    en_passant = (
        piece.kind is PieceKind.PAWN
        and target is None
        and prior_ep is not None
        and to_square == prior_ep
    )
    captured = target
    if en_passant:
        victim_square = (from_square[0], to_square[1])
        captured = board[victim_square]
        board[victim_square] = None

    if captured is not None:
        state.captured_pieces[captured.color].append(captured.kind)
        _revoke_rook_right(state, captured, to_square)

    if captured is not None or piece.kind is PieceKind.PAWN:
        state.fifty_move_counter = 0
    else:
        state.fifty_move_counter += 1

    board[to_square] = piece if promotion is None else Piece(color, promotion)
    board[from_square] = None

    castling = piece.kind is PieceKind.KING and abs(to_square[1] - from_square[1]) == 2
    if castling:
        row = from_square[0]
        kingside = to_square[1] > from_square[1]
        rook_from = (row, KINGSIDE_ROOK_COL if kingside else QUEENSIDE_ROOK_COL)
        rook_to = (row, to_square[1] - 1 if kingside else to_square[1] + 1)
        board[rook_to] = board[rook_from]
        board[rook_from] = None

    if piece.kind is PieceKind.KING:
        state.castling_rights.clear_all(color)
    else:
        _revoke_rook_right(state, piece, from_square)

    if piece.kind is PieceKind.PAWN and abs(to_square[0] - from_square[0]) == 2:
        state.en_passant_target = ((from_square[0] + to_square[0]) // 2, from_square[1])
    else:
        state.en_passant_target = None

    record = MoveRecord(
        from_square=from_square,
        to_square=to_square,
        piece=piece,
        captured=captured,
        en_passant=en_passant,
        castling=castling,
        promotion=promotion,
        notation=_notation(piece, from_square, to_square, captured is not None, castling, promotion),
        prior_castling_rights=prior_rights,
        prior_en_passant_target=prior_ep,
        prior_fifty_move_counter=prior_counter,
        prior_fullmove_number=prior_fullmove,
    )
    state.move_history.append(record)

    if color is Color.BLACK:
        state.fullmove_number += 1
    state.side_to_move = state.side_to_move.opponent
    state.repetition_history.append(state.position_key())
    return record


def undo_move(state: GameState) -> bool:
    """
    Take back the most recent move.

    Returns:
        False if there is no history (state untouched), True otherwise.
    """
    if not state.move_history:
        return False
    record = state.move_history.pop()
    board = state.board
    frm, to = record.from_square, record.to_square

    board[frm] = record.piece
    if record.en_passant:
        board[to] = None
        board[(frm[0], to[1])] = record.captured
    else:
        board[to] = record.captured
    if record.captured is not None:
        state.captured_pieces[record.captured.color].pop()

    if record.castling:
        row = frm[0]
        kingside = to[1] > frm[1]
        rook_home = (row, KINGSIDE_ROOK_COL if kingside else QUEENSIDE_ROOK_COL)
        rook_now = (row, to[1] - 1 if kingside else to[1] + 1)
        board[rook_home] = board[rook_now]
        board[rook_now] = None

    state.castling_rights = record.prior_castling_rights.copy()
    state.en_passant_target = record.prior_en_passant_target
    state.fifty_move_counter = record.prior_fifty_move_counter
    state.fullmove_number = record.prior_fullmove_number
    state.side_to_move = state.side_to_move.opponent
    if state.repetition_history:
        state.repetition_history.pop()
    return True


def apply_move(
    state: GameState,
    from_square: Square,
    to_square: Square,
    promotion: PieceKind | None = None,
) -> MoveResult:
    """
    Validate and play a move for the side to move.

    Raises:
        IllegalMoveError: The origin is empty or holds the wrong color, the
            destination is not a legal target, or the promotion kind is not
            allowed for this move.
    """
    if not (in_bounds(*from_square) and in_bounds(*to_square)):
        raise IllegalMoveError("square is off the board")
    piece = state.board[from_square]
    if piece is None:
        raise IllegalMoveError(f"no piece on {square_name(from_square)}")
    if piece.color is not state.side_to_move:
        raise IllegalMoveError(f"it is {state.side_to_move.value}'s turn")

    move = next((m for m in legal_moves(state, from_square) if m.to_square == to_square), None)
    if move is None:
        raise IllegalMoveError(
            f"{square_name(from_square)}{square_name(to_square)} is not a legal move"
        )

    if promotion is not None:
        if not move.is_promotion:
            raise IllegalMoveError("promotion is only allowed when a pawn reaches the last rank")
        if promotion not in PROMOTION_KINDS:
            raise IllegalMoveError(f"cannot promote to {promotion.value}")
    elif move.is_promotion:
        return MoveResult(is_capture=move.is_capture, is_promotion_pending=True)

    record = make_move(state, from_square, to_square, promotion)
    return MoveResult(is_capture=record.is_capture, record=record)
