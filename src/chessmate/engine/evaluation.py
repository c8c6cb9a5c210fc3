"""Static evaluation: material balance with terminal overrides."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from chessmate.core.enums import Color, PieceType, Termination
from chessmate.core.rules import Rules

if TYPE_CHECKING:
    from chessmate.core.history import PositionHistory
    from chessmate.core.position import Position

MATE_SCORE = 1000

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}


class IEvaluator(Protocol):
    """Protocol for position scorers used by the search."""

    def score(
        self,
        position: Position,
        perspective: Color,
        history: PositionHistory | None = None,
    ) -> int: ...


class MaterialEvaluator(IEvaluator):
    """Scores a position by material, seen from *perspective*.

    A checkmate overrides material with ``±MATE_SCORE`` and any drawn
    terminal state scores 0. Repetition is only recognised when *history* is
    supplied and already contains *position*.
    """

    __slots__ = ("_fifty_move_rule",)

    def __init__(self, *, fifty_move_rule: bool = False) -> None:
        self._fifty_move_rule = fifty_move_rule

    def score(
        self,
        position: Position,
        perspective: Color,
        history: PositionHistory | None = None,
    ) -> int:
        outcome = Rules.classify(
            position, history, fifty_move_rule=self._fifty_move_rule
        )
        if outcome.termination == Termination.CHECKMATE:
            return -MATE_SCORE if outcome.loser == perspective else MATE_SCORE
        if outcome.is_draw:
            return 0
        return self.material(position, perspective)

    @staticmethod
    def material(position: Position, perspective: Color) -> int:
        """Own material minus the opponent's."""
        total = 0
        for _, piece in position.board.occupied():
            value = PIECE_VALUES[piece.piece_type]
            total += value if piece.color == perspective else -value
        return total
