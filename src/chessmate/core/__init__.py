"""Core domain layer: pure chess rules with zero external dependencies.

Quick start::

    from chessmate.core import Position, legal_moves, apply_move

    pos = Position.initial()
    for move in legal_moves(pos):
        print(move, apply_move(pos, move).serialize())
"""

from chessmate.core.board import Board
from chessmate.core.enums import CastlingRights, Color, MoveFlag, PieceType, Termination
from chessmate.core.errors import ChessError, IllegalMove, MalformedPosition, SessionNotActive
from chessmate.core.history import PositionHistory
from chessmate.core.move import Move
from chessmate.core.move_generator import (
    MoveGenerator,
    apply_move,
    find_move,
    legal_moves,
    revert_move,
)
from chessmate.core.notation import (
    STARTING_FEN,
    move_to_san,
    parse_san,
    position_from_fen,
    position_to_fen,
)
from chessmate.core.piece import Piece
from chessmate.core.position import Position
from chessmate.core.rules import ONGOING, Outcome, Rules
from chessmate.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "MoveFlag",
    "PieceType",
    "Termination",
    # Errors
    "ChessError",
    "IllegalMove",
    "MalformedPosition",
    "SessionNotActive",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "Outcome",
    "ONGOING",
    "Piece",
    "Position",
    "PositionHistory",
    "Rules",
    # Move application
    "apply_move",
    "find_move",
    "legal_moves",
    "revert_move",
    # Notation
    "STARTING_FEN",
    "move_to_san",
    "parse_san",
    "position_from_fen",
    "position_to_fen",
]
