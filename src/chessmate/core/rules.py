"""Terminal-state detection: checkmate, stalemate and draws."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chessmate.core.enums import Color, PieceType, Termination
from chessmate.core.move_generator import MoveGenerator
from chessmate.core.types import square_color

if TYPE_CHECKING:
    from chessmate.core.history import PositionHistory
    from chessmate.core.position import Position

_MINORS = (PieceType.KNIGHT, PieceType.BISHOP)
_MAJORS_AND_PAWNS = (PieceType.PAWN, PieceType.ROOK, PieceType.QUEEN)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Classification of a position or finished game.

    ``loser`` is set for checkmate and timeout only.
    """

    termination: Termination
    loser: Color | None = None

    @property
    def is_terminal(self) -> bool:
        return self.termination != Termination.ONGOING

    @property
    def is_draw(self) -> bool:
        return self.termination.is_draw

    @property
    def winner(self) -> Color | None:
        return None if self.loser is None else self.loser.opposite


ONGOING = Outcome(Termination.ONGOING)


class Rules:
    """Static rule checks over a :class:`Position`."""

    @staticmethod
    def classify(
        position: Position,
        history: PositionHistory | None = None,
        *,
        fifty_move_rule: bool = False,
    ) -> Outcome:
        """Classify *position* as ongoing or as one of the terminal states.

        *history* must already contain *position* itself when repetition is
        to be detected. The fifty-move rule is off unless asked for.
        """
        gen = MoveGenerator(position)
        if not gen.has_legal_move():
            if gen.is_in_check(position.side_to_move):
                return Outcome(Termination.CHECKMATE, position.side_to_move)
            return Outcome(Termination.STALEMATE)

        if Rules.is_insufficient_material(position):
            return Outcome(Termination.INSUFFICIENT_MATERIAL)
        if history is not None and Rules.is_threefold_repetition(position, history):
            return Outcome(Termination.THREEFOLD_REPETITION)
        if fifty_move_rule and Rules.is_fifty_move_rule(position):
            return Outcome(Termination.FIFTY_MOVES)
        return ONGOING

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return MoveGenerator(position).is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check(position.side_to_move) and not gen.has_legal_move()

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return not gen.is_in_check(position.side_to_move) and not gen.has_legal_move()

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K v K, K+minor v K, and K+B v K+B with same-coloured bishops."""
        board = position.board
        for color in Color:
            for kind in _MAJORS_AND_PAWNS:
                if board.has_piece(color, kind):
                    return False

        minors = {
            color: [
                (kind, sq) for kind in _MINORS for sq in board.pieces(color, kind)
            ]
            for color in Color
        }
        white, black = minors[Color.WHITE], minors[Color.BLACK]
        if len(white) + len(black) <= 1:
            return True
        if len(white) == 1 and len(black) == 1:
            (w_kind, w_sq), (b_kind, b_sq) = white[0], black[0]
            return (
                w_kind == b_kind == PieceType.BISHOP
                and square_color(w_sq) == square_color(b_sq)
            )
        return False

    @staticmethod
    def is_threefold_repetition(position: Position, history: PositionHistory) -> bool:
        return history.count(position) >= 3

    @staticmethod
    def is_fifty_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= 100
