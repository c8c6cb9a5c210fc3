"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chessmate.core.enums import Color, PieceType

_KIND_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_LETTER_KINDS: dict[str, PieceType] = {v: k for k, v in _KIND_LETTERS.items()}


def piece_type_from_letter(letter: str) -> PieceType:
    """Case-insensitive piece kind lookup, e.g. ``'Q'`` or ``'q'`` -> QUEEN."""
    try:
        return _LETTER_KINDS[letter.lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"Invalid piece letter: {letter!r}") from None


def piece_type_letter(piece_type: PieceType) -> str:
    """Lowercase letter for a piece kind."""
    return _KIND_LETTERS[piece_type]


@dataclass(frozen=True, slots=True)
class Piece:
    """A coloured piece; FEN letter case carries the colour."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        letter = _KIND_LETTERS[self.piece_type]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """``'N'`` -> white knight, ``'n'`` -> black knight."""
        if len(char) != 1 or char.lower() not in _LETTER_KINDS:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, _LETTER_KINDS[char.lower()])
