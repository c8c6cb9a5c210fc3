"""Enumerations shared by the rules, engine and session layers."""

from __future__ import annotations

from enum import IntEnum, IntFlag, auto


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opposite(self) -> Color:
        return Color(1 - self.value)

    def __str__(self) -> str:
        return self.name.lower()


class PieceType(IntEnum):
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class MoveFlag(IntEnum):
    """How a move has to be applied beyond lifting and dropping a piece."""

    NORMAL = 0
    DOUBLE_PAWN = 1
    EN_PASSANT = 2
    CASTLE_KINGSIDE = 3
    CASTLE_QUEENSIDE = 4
    PROMOTION = 5


class CastlingRights(IntFlag):
    NONE = 0
    WHITE_KINGSIDE = auto()
    WHITE_QUEENSIDE = auto()
    BLACK_KINGSIDE = auto()
    BLACK_QUEENSIDE = auto()

    WHITE_BOTH = WHITE_KINGSIDE | WHITE_QUEENSIDE
    BLACK_BOTH = BLACK_KINGSIDE | BLACK_QUEENSIDE
    ALL = WHITE_BOTH | BLACK_BOTH


class Termination(IntEnum):
    """Why a game is (or is not) over."""

    ONGOING = 0
    CHECKMATE = auto()
    STALEMATE = auto()
    INSUFFICIENT_MATERIAL = auto()
    THREEFOLD_REPETITION = auto()
    FIFTY_MOVES = auto()
    TIMEOUT = auto()
    ABANDONED = auto()

    @property
    def is_draw(self) -> bool:
        return self in (
            Termination.STALEMATE,
            Termination.INSUFFICIENT_MATERIAL,
            Termination.THREEFOLD_REPETITION,
            Termination.FIFTY_MOVES,
        )
