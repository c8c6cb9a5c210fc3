"""Notation package: FEN and SAN parsing and serialization."""

from chessmate.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from chessmate.core.notation.san import move_to_san, parse_san

__all__ = [
    "STARTING_FEN",
    "position_from_fen",
    "position_to_fen",
    "move_to_san",
    "parse_san",
]
