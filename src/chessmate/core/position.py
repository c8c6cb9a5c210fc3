"""Position: board plus side to move, castling, en passant and move counters.

Two ways to advance a position:

* :func:`chessmate.core.move_generator.apply_move` copies the position and
  returns a new one. Use it for single, validated steps.
* :meth:`Position.make_move` / :meth:`Position.unmake_move` mutate in place
  and are exact inverses. This pair allocates nothing but a small undo
  record and is what the search calls thousands of times per decision.
"""

from __future__ import annotations

from dataclasses import dataclass

from chessmate.core.board import Board
from chessmate.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chessmate.core.move import Move
from chessmate.core.piece import Piece
from chessmate.core.types import Square, file_of, make_square, rank_of
from chessmate.core.zobrist import (
    castling_key,
    en_passant_key,
    piece_key,
    side_to_move_key,
)


@dataclass(slots=True)
class _Undo:
    """Everything ``make_move`` destroys and ``unmake_move`` must restore."""

    castling: CastlingRights
    en_passant: Square | None
    halfmove_clock: int
    captured: Piece | None
    key: int


# Rook corner -> castling right lost when that square is vacated or captured on.
_ROOK_CORNERS: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}
_KING_RIGHTS: dict[Color, CastlingRights] = {
    Color.WHITE: CastlingRights.WHITE_BOTH,
    Color.BLACK: CastlingRights.BLACK_BOTH,
}


class Position:
    """Full chess position.

    Equality compares placement, side to move, castling rights and the
    en-passant target; move counters are ignored. :attr:`key` is a Zobrist
    key over the same fields.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "_key",
        "_undo",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self._key = self._compute_key()
        self._undo: list[_Undo] = []

    @classmethod
    def initial(cls) -> Position:
        return cls()

    @classmethod
    def parse(cls, text: str) -> Position:
        """Build a position from FEN; raises ``MalformedPosition``."""
        from chessmate.core.notation.fen import position_from_fen

        return position_from_fen(text)

    def serialize(self) -> str:
        from chessmate.core.notation.fen import position_to_fen

        return position_to_fen(self)

    # -- Make / unmake ------------------------------------------------------

    def make_move(self, move: Move) -> None:
        """Apply *move* in place. The move must come from this position."""
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        capture_sq = move.to_sq
        if move.flag == MoveFlag.EN_PASSANT:
            capture_sq = make_square(file_of(move.to_sq), rank_of(move.from_sq))
        captured = board[capture_sq]

        self._undo.append(
            _Undo(
                castling=self.castling,
                en_passant=self.en_passant,
                halfmove_clock=self.halfmove_clock,
                captured=captured,
                key=self._key,
            )
        )

        key = self._key ^ piece_key(piece, move.from_sq)
        board[move.from_sq] = None
        if captured is not None:
            key ^= piece_key(captured, capture_sq)
            board[capture_sq] = None

        placed = piece
        if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
            placed = Piece(piece.color, move.promotion)
        board[move.to_sq] = placed
        key ^= piece_key(placed, move.to_sq)

        if move.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE):
            rook_from, rook_to = _rook_squares(move)
            rook = board[rook_from]
            assert rook is not None
            board[rook_from] = None
            board[rook_to] = rook
            key ^= piece_key(rook, rook_from) ^ piece_key(rook, rook_to)

        if self.en_passant is not None:
            key ^= en_passant_key(self.en_passant)
        self.en_passant = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            self.en_passant = (move.from_sq + move.to_sq) // 2
            key ^= en_passant_key(self.en_passant)

        castling = self.castling
        if piece.piece_type == PieceType.KING:
            castling &= ~_KING_RIGHTS[piece.color]
        for sq in (move.from_sq, move.to_sq):
            right = _ROOK_CORNERS.get(sq)
            if right is not None:
                castling &= ~right
        if castling != self.castling:
            key ^= castling_key(self.castling) ^ castling_key(castling)
            self.castling = castling

        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if self.side_to_move == Color.BLACK:
            self.fullmove_number += 1

        self.side_to_move = self.side_to_move.opposite
        self._key = key ^ side_to_move_key()

    def unmake_move(self, move: Move) -> None:
        """Undo the most recent :meth:`make_move`, which must have been *move*."""
        undo = self._undo.pop()
        board = self.board

        self.side_to_move = self.side_to_move.opposite
        if self.side_to_move == Color.BLACK:
            self.fullmove_number -= 1

        piece = board[move.to_sq]
        assert piece is not None
        if move.flag == MoveFlag.PROMOTION:
            piece = Piece(piece.color, PieceType.PAWN)

        board[move.from_sq] = piece
        if move.flag == MoveFlag.EN_PASSANT:
            board[move.to_sq] = None
            board[make_square(file_of(move.to_sq), rank_of(move.from_sq))] = undo.captured
        else:
            board[move.to_sq] = undo.captured

        if move.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE):
            rook_from, rook_to = _rook_squares(move)
            board[rook_from] = board[rook_to]
            board[rook_to] = None

        self.castling = undo.castling
        self.en_passant = undo.en_passant
        self.halfmove_clock = undo.halfmove_clock
        self._key = undo.key

    # -- Identity -----------------------------------------------------------

    @property
    def key(self) -> int:
        """Zobrist key of placement, side to move, castling and en passant."""
        return self._key

    @property
    def ply_depth(self) -> int:
        """Number of moves currently made on this instance and not undone."""
        return len(self._undo)

    def copy(self) -> Position:
        """Independent copy without the undo stack."""
        pos = Position.__new__(Position)
        pos.board = self.board.copy()
        pos.side_to_move = self.side_to_move
        pos.castling = self.castling
        pos.en_passant = self.en_passant
        pos.halfmove_clock = self.halfmove_clock
        pos.fullmove_number = self.fullmove_number
        pos._key = self._key
        pos._undo = []
        return pos

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self._key == other._key
            and self.side_to_move == other.side_to_move
            and self.castling == other.castling
            and self.en_passant == other.en_passant
            and self.board == other.board
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Position({self.serialize()!r})"

    def _compute_key(self) -> int:
        key = castling_key(self.castling)
        if self.side_to_move == Color.BLACK:
            key ^= side_to_move_key()
        if self.en_passant is not None:
            key ^= en_passant_key(self.en_passant)
        for sq, piece in self.board.occupied():
            key ^= piece_key(piece, sq)
        return key


def _rook_squares(move: Move) -> tuple[Square, Square]:
    rank = rank_of(move.from_sq)
    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        return make_square(7, rank), make_square(5, rank)
    return make_square(0, rank), make_square(3, rank)
