from chesscore.board import Board, Color, Piece, PieceKind
from chesscore.constants import KNIGHT_VALUE, PAWN_TABLE, PAWN_VALUE
from chesscore.evaluate import evaluate
from chesscore.notation import parse_square, state_from_fen


def test_start_position_is_level():
    board = Board.initial()
    assert evaluate(board) == 0
    assert evaluate(board, Color.WHITE) == 0


def test_material_deficit_shows_in_both_perspectives():
    board = Board.initial()
    board[parse_square("e2")] = None
    black_view = evaluate(board, Color.BLACK)
    assert black_view == PAWN_VALUE + PAWN_TABLE[6 * 8 + 4]
    assert evaluate(board, Color.WHITE) == -black_view


def test_piece_square_bonus_is_exact():
    kings_only = state_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1").board
    assert evaluate(kings_only) == 0

    with_knight = kings_only.copy()
    with_knight[parse_square("d4")] = Piece(Color.WHITE, PieceKind.KNIGHT)
    assert evaluate(with_knight) == -(KNIGHT_VALUE + 20)
    assert evaluate(with_knight, Color.WHITE) == KNIGHT_VALUE + 20


def test_tables_mirror_between_colors():
    white = state_from_fen("4k3/8/8/8/8/2N5/8/4K3 w - - 0 1").board
    black = state_from_fen("4k3/8/2n5/8/8/8/8/4K3 w - - 0 1").board
    assert evaluate(white, Color.WHITE) == evaluate(black, Color.BLACK)


def test_centralised_knight_scores_higher():
    rim = state_from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1").board
    centre = state_from_fen("4k3/8/8/8/3N4/8/8/4K3 w - - 0 1").board
    assert evaluate(centre, Color.WHITE) > evaluate(rim, Color.WHITE)
