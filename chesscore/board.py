"""
Board and piece model: the plain data every other engine module works on.

Coordinates are (row, col) tuples. Row 0 is rank 8 (Black's back rank) and
row 7 is rank 1; col 0 is the a-file. This matches how the board is drawn
on screen, top to bottom, so the UI can index it directly.

Nothing in this module knows the rules of chess. Move generation lives in
movegen, move execution in execute; this module only holds the state they
read and mutate, plus a structural clone used by the search.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator

Square = tuple[int, int]


class Color(enum.Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def pawn_direction(self) -> int:
        """Row step of a forward pawn move (White moves toward row 0)."""
        return -1 if self is Color.WHITE else 1

    @property
    def home_row(self) -> int:
        return 7 if self is Color.WHITE else 0


class PieceKind(enum.Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @property
    def letter(self) -> str:
        return _KIND_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> PieceKind:
        return _LETTER_KINDS[letter.lower()]


_KIND_LETTERS: dict[PieceKind, str] = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
_LETTER_KINDS: dict[str, PieceKind] = {v: k for k, v in _KIND_LETTERS.items()}

# Kinds a pawn may promote to, in the order a UI offers them.
PROMOTION_KINDS: tuple[PieceKind, ...] = (
    PieceKind.QUEEN,
    PieceKind.ROOK,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
)

BACK_RANK: tuple[PieceKind, ...] = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)


@dataclass(frozen=True)
class Piece:
    """A chess piece. Immutable, so boards can share instances freely."""

    color: Color
    kind: PieceKind

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        letter = self.kind.letter
        return letter.upper() if self.color is Color.WHITE else letter


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8


class Board:
    """
    8x8 grid of optional pieces.

    Reads are total: piece_at() returns None for any coordinates off the
    board instead of raising, so move generators can probe neighbours
    without bounds-checking first.
    """

    __slots__ = ("squares",)

    def __init__(self, squares: list[list[Piece | None]] | None = None) -> None:
        if squares is None:
            squares = [[None] * 8 for _ in range(8)]
        self.squares = squares

    @classmethod
    def initial(cls) -> Board:
        """The standard starting position."""
        board = cls()
        for col, kind in enumerate(BACK_RANK):
            board.squares[0][col] = Piece(Color.BLACK, kind)
            board.squares[1][col] = Piece(Color.BLACK, PieceKind.PAWN)
            board.squares[6][col] = Piece(Color.WHITE, PieceKind.PAWN)
            board.squares[7][col] = Piece(Color.WHITE, kind)
        return board

    def piece_at(self, row: int, col: int) -> Piece | None:
        if not in_bounds(row, col):
            return None
        return self.squares[row][col]

    def __getitem__(self, square: Square) -> Piece | None:
        return self.piece_at(square[0], square[1])

    def __setitem__(self, square: Square, piece: Piece | None) -> None:
        row, col = square
        self.squares[row][col] = piece

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.squares == other.squares

    def __repr__(self) -> str:
        return f"Board({self.placement()!r})"

    def copy(self) -> Board:
        return Board([list(row) for row in self.squares])

    def pieces(self, color: Color | None = None) -> Iterator[tuple[Square, Piece]]:
        """Yield (square, piece) in scan order: row 0..7, then col 0..7."""
        for row in range(8):
            for col in range(8):
                piece = self.squares[row][col]
                if piece is not None and (color is None or piece.color is color):
                    yield (row, col), piece

    def placement(self) -> str:
        """Piece placement in FEN layout, rank 8 first."""
        rows = []
        for row in self.squares:
            text = ""
            empty = 0
            for piece in row:
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    text += str(empty)
                    empty = 0
                text += piece.symbol
            if empty:
                text += str(empty)
            rows.append(text)
        return "/".join(rows)


@dataclass
class CastlingRights:
    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    def kingside(self, color: Color) -> bool:
        return self.white_kingside if color is Color.WHITE else self.black_kingside

    def queenside(self, color: Color) -> bool:
        return self.white_queenside if color is Color.WHITE else self.black_queenside

    def clear(self, color: Color, kingside: bool) -> None:
        """Permanently revoke one right."""
        if color is Color.WHITE:
            if kingside:
                self.white_kingside = False
            else:
                self.white_queenside = False
        elif kingside:
            self.black_kingside = False
        else:
            self.black_queenside = False

    def clear_all(self, color: Color) -> None:
        self.clear(color, kingside=True)
        self.clear(color, kingside=False)

    def copy(self) -> CastlingRights:
        return CastlingRights(
            self.white_kingside,
            self.white_queenside,
            self.black_kingside,
            self.black_queenside,
        )


@dataclass(frozen=True)
class MoveRecord:
    """
    One entry of the move history, holding everything undo_move() needs.

    Attributes:
        from_square / to_square: Where the piece came from and went to.
        piece:        The moving piece as it was before the move. For a
                      promotion this is still the pawn.
        captured:     The captured piece, or None. For en passant this is
                      the pawn removed from behind to_square.
        en_passant:   True if the capture was en passant.
        castling:     True if this was a king move of two columns.
        promotion:    The kind the pawn became, or None.
        notation:     Short algebraic text for the move list.
        prior_castling_rights / prior_en_passant_target /
        prior_fifty_move_counter / prior_fullmove_number:
                      Snapshot of the derived state before the move, so undo
                      restores it exactly rather than recomputing it.
    """

    from_square: Square
    to_square: Square
    piece: Piece
    captured: Piece | None
    en_passant: bool
    castling: bool
    promotion: PieceKind | None
    notation: str
    prior_castling_rights: CastlingRights
    prior_en_passant_target: Square | None
    prior_fifty_move_counter: int
    prior_fullmove_number: int

    @property
    def is_capture(self) -> bool:
        return self.captured is not None


def _empty_captures() -> dict[Color, list[PieceKind]]:
    return {Color.WHITE: [], Color.BLACK: []}


@dataclass
class GameState:
    """
    The mutable aggregate driving a game.

    Engine functions take a GameState explicitly and never hold one of
    their own. The UI reads history, captures and counters straight from
    these fields.

    captured_pieces is keyed by the color of the piece that was captured,
    in capture order.
    """

    board: Board = field(default_factory=Board.initial)
    side_to_move: Color = Color.WHITE
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    en_passant_target: Square | None = None
    captured_pieces: dict[Color, list[PieceKind]] = field(default_factory=_empty_captures)
    move_history: list[MoveRecord] = field(default_factory=list)
    fifty_move_counter: int = 0
    repetition_history: list[str] = field(default_factory=list)
    fullmove_number: int = 1

    def clone(self) -> GameState:
        """Structural copy of every field; the clone shares no mutable state."""
        return GameState(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling_rights=self.castling_rights.copy(),
            en_passant_target=self.en_passant_target,
            captured_pieces={
                color: list(kinds) for color, kinds in self.captured_pieces.items()
            },
            move_history=list(self.move_history),
            fifty_move_counter=self.fifty_move_counter,
            repetition_history=list(self.repetition_history),
            fullmove_number=self.fullmove_number,
        )

    def position_key(self) -> str:
        """Repetition key: piece placement plus the side to move."""
        return f"{self.board.placement()} {self.side_to_move.value[0]}"


def new_game() -> GameState:
    """A fresh game: standard position, White to move, all rights intact."""
    return GameState()
