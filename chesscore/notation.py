"""
Text formats at the engine boundary: square names, FEN, and UCI moves.

Parsing and printing are delegated to python-chess, which already validates
FEN and UCI strings thoroughly. This module only translates between its
a1=0 square numbering and our (row, col) tuples, where row 0 is rank 8.

All parse errors surface as ValueError (python-chess raises ValueError
subclasses), which front ends turn into protocol errors.
"""

from __future__ import annotations

import chess

from chesscore.board import (
    Board,
    CastlingRights,
    Color,
    GameState,
    Piece,
    PieceKind,
    Square,
)
from chesscore.movegen import Move

_TO_CHESS_TYPE: dict[PieceKind, int] = {
    PieceKind.PAWN: chess.PAWN,
    PieceKind.KNIGHT: chess.KNIGHT,
    PieceKind.BISHOP: chess.BISHOP,
    PieceKind.ROOK: chess.ROOK,
    PieceKind.QUEEN: chess.QUEEN,
    PieceKind.KING: chess.KING,
}
_FROM_CHESS_TYPE: dict[int, PieceKind] = {v: k for k, v in _TO_CHESS_TYPE.items()}


def to_chess_square(square: Square) -> int:
    row, col = square
    return chess.square(col, 7 - row)


def from_chess_square(sq: int) -> Square:
    return (7 - chess.square_rank(sq), chess.square_file(sq))


def square_name(square: Square) -> str:
    """(6, 4) -> 'e2'."""
    return chess.square_name(to_chess_square(square))


def parse_square(name: str) -> Square:
    """'e2' -> (6, 4). Raises ValueError for anything else."""
    return from_chess_square(chess.parse_square(name.strip().lower()))


def state_from_fen(fen: str) -> GameState:
    """
    Build a GameState from a FEN string.

    History, captures and repetition records start empty: a FEN describes a
    position, not how the game got there. Castling rights python-chess
    considers impossible (no rook on the corner) are dropped.

    Raises:
        ValueError: Malformed FEN, or a position that cannot arise in a game
            (missing king, pawn on a back rank, side not to move in check).
    """
    board = chess.Board(fen)
    errors = board.status() & ~chess.STATUS_BAD_CASTLING_RIGHTS
    if errors:
        raise ValueError(f"impossible position ({errors!r}): {fen}")
    grid = Board()
    for sq, piece in board.piece_map().items():
        color = Color.WHITE if piece.color == chess.WHITE else Color.BLACK
        grid[from_chess_square(sq)] = Piece(color, _FROM_CHESS_TYPE[piece.piece_type])

    clean = board.clean_castling_rights()
    rights = CastlingRights(
        white_kingside=bool(clean & chess.BB_H1),
        white_queenside=bool(clean & chess.BB_A1),
        black_kingside=bool(clean & chess.BB_H8),
        black_queenside=bool(clean & chess.BB_A8),
    )
    return GameState(
        board=grid,
        side_to_move=Color.WHITE if board.turn == chess.WHITE else Color.BLACK,
        castling_rights=rights,
        en_passant_target=None if board.ep_square is None else from_chess_square(board.ep_square),
        fifty_move_counter=board.halfmove_clock,
        fullmove_number=board.fullmove_number,
    )


def to_chess_board(state: GameState) -> chess.Board:
    """A python-chess Board with the same position (history is not carried over)."""
    board = chess.Board(None)
    for square, piece in state.board.pieces():
        board.set_piece_at(
            to_chess_square(square),
            chess.Piece(_TO_CHESS_TYPE[piece.kind], piece.color is Color.WHITE),
        )
    board.turn = state.side_to_move is Color.WHITE

    rights = state.castling_rights
    castling = ""
    if rights.white_kingside:
        castling += "K"
    if rights.white_queenside:
        castling += "Q"
    if rights.black_kingside:
        castling += "k"
    if rights.black_queenside:
        castling += "q"
    board.set_castling_fen(castling or "-")

    if state.en_passant_target is not None:
        board.ep_square = to_chess_square(state.en_passant_target)
    board.halfmove_clock = state.fifty_move_counter
    board.fullmove_number = state.fullmove_number
    return board


def state_to_fen(state: GameState) -> str:
    return to_chess_board(state).fen(en_passant="fen")


def move_to_uci(move: Move) -> str:
    """Move -> 'e7e8q' style text."""
    promotion = _TO_CHESS_TYPE[move.promotion] if move.promotion else None
    return chess.Move(
        to_chess_square(move.from_square),
        to_chess_square(move.to_square),
        promotion=promotion,
    ).uci()


def parse_uci_move(text: str) -> tuple[Square, Square, PieceKind | None]:
    """'e7e8q' -> ((1, 4), (0, 4), QUEEN). Raises ValueError on malformed text."""
    move = chess.Move.from_uci(text.strip())
    if not move:
        raise ValueError(f"null move is not playable: {text!r}")
    promotion = _FROM_CHESS_TYPE[move.promotion] if move.promotion else None
    return from_chess_square(move.from_square), from_chess_square(move.to_square), promotion
