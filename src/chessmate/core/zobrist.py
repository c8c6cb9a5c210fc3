"""Zobrist keys identifying positions for repetition detection."""

from __future__ import annotations

from typing import Final

from chessmate.core.enums import CastlingRights
from chessmate.core.piece import Piece
from chessmate.core.types import Square

_SEED: Final = 0x3C6EF372FE94F82B
_MASK_64: Final = (1 << 64) - 1


def _splitmix64(state: int) -> int:
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _key(index: int) -> int:
    return _splitmix64(_SEED + index)


# [color][piece_type - 1][square]
_PIECE_KEYS: Final = tuple(
    tuple(tuple(_key(c * 384 + k * 64 + sq) for sq in range(64)) for k in range(6))
    for c in range(2)
)
_BLACK_TO_MOVE: Final = _key(768)
_CASTLING_KEYS: Final = tuple(_key(769 + i) for i in range(16))
_EN_PASSANT_KEYS: Final = tuple(_key(785 + sq) for sq in range(64))


def piece_key(piece: Piece, sq: Square) -> int:
    return _PIECE_KEYS[int(piece.color)][piece.piece_type - 1][sq]


def side_to_move_key() -> int:
    """Toggled in whenever Black is to move."""
    return _BLACK_TO_MOVE


def castling_key(castling: CastlingRights) -> int:
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(sq: Square) -> int:
    return _EN_PASSANT_KEYS[sq]
