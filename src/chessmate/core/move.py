"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass

from chessmate.core.enums import MoveFlag, PieceType
from chessmate.core.piece import piece_type_letter
from chessmate.core.types import Square, square_name


@dataclass(frozen=True, slots=True)
class Move:
    """A move as produced by the generator.

    ``flag`` and ``is_capture`` are filled in at generation time and are what
    make/unmake rely on, so a move only makes sense against the position it
    was generated from.
    """

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None
    is_capture: bool = False

    def __str__(self) -> str:
        text = square_name(self.from_sq) + square_name(self.to_sq)
        if self.promotion is not None:
            text += piece_type_letter(self.promotion)
        return text

    @property
    def uci(self) -> str:
        """Long algebraic form, e.g. ``e7e8q``."""
        return str(self)

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)
