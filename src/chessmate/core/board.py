"""Board: piece placement on the 64 squares."""

from __future__ import annotations

from collections.abc import Iterator

from chessmate.core.enums import Color, PieceType
from chessmate.core.piece import Piece
from chessmate.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def iter_bits(bitboard: int) -> Iterator[Square]:
    """Yield the set squares of *bitboard*, lowest first."""
    while bitboard:
        lsb = bitboard & -bitboard
        yield lsb.bit_length() - 1
        bitboard ^= lsb


class Board:
    """Mutable mailbox board kept in sync with per-piece bitboards.

    Writes go through ``__setitem__`` so the bitboards and the king cache
    never drift from the mailbox.
    """

    __slots__ = ("_squares", "_bitboards", "_occupancy", "_kings")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # [color][piece_type - 1]
        self._bitboards: list[list[int]] = [[0] * 6, [0] * 6]
        self._occupancy: list[int] = [0, 0]
        self._kings: list[Square | None] = [None, None]

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old = self._squares[sq]
        if old == piece:
            return

        mask = 1 << sq
        if old is not None:
            c = int(old.color)
            self._bitboards[c][old.piece_type - 1] &= ~mask
            self._occupancy[c] &= ~mask
            if old.piece_type == PieceType.KING and self._kings[c] == sq:
                self._kings[c] = None

        self._squares[sq] = piece
        if piece is None:
            return

        c = int(piece.color)
        self._bitboards[c][piece.piece_type - 1] |= mask
        self._occupancy[c] |= mask
        if piece.piece_type == PieceType.KING:
            self._kings[c] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    # -- Queries ------------------------------------------------------------

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        return self._bitboards[int(color)][piece_type - 1]

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        return list(iter_bits(self.pieces_bitboard(color, piece_type)))

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return bool(self.pieces_bitboard(color, piece_type))

    def count(self, color: Color, piece_type: PieceType) -> int:
        return self.pieces_bitboard(color, piece_type).bit_count()

    def occupancy(self, color: Color) -> int:
        """Bitboard of every square holding a *color* piece."""
        return self._occupancy[int(color)]

    def occupied(self) -> Iterator[tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square."""
        squares = self._squares
        for sq in iter_bits(self._occupancy[0] | self._occupancy[1]):
            piece = squares[sq]
            assert piece is not None
            yield sq, piece

    def king_square(self, color: Color) -> Square:
        sq = self._kings[int(color)]
        if sq is None:
            raise ValueError(f"No {color} king on board")
        return sq

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        b = Board()
        b._squares = self._squares.copy()
        b._bitboards = [row.copy() for row in self._bitboards]
        b._occupancy = self._occupancy.copy()
        b._kings = self._kings.copy()
        return b

    @classmethod
    def initial(cls) -> Board:
        """Standard starting arrangement."""
        b = cls()
        for file, kind in enumerate(_BACK_RANK):
            b[make_square(file, 0)] = Piece(Color.WHITE, kind)
            b[make_square(file, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            b[make_square(file, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            b[make_square(file, 7)] = Piece(Color.BLACK, kind)
        return b

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            cells = (str(self[make_square(f, rank)] or ".") for f in range(8))
            rows.append(f"{rank + 1} {' '.join(cells)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
