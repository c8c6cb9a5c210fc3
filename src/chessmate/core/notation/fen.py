"""FEN parsing and serialization."""

from __future__ import annotations

from chessmate.core.board import Board
from chessmate.core.enums import CastlingRights, Color, PieceType
from chessmate.core.errors import MalformedPosition
from chessmate.core.move_generator import MoveGenerator
from chessmate.core.piece import Piece
from chessmate.core.position import Position
from chessmate.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_LETTERS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)
_SIDES = {"w": Color.WHITE, "b": Color.BLACK}


def position_from_fen(fen: str) -> Position:
    """Parse FEN into a :class:`Position`.

    The halfmove clock and fullmove number may be omitted and default to
    ``0`` and ``1``.

    Raises:
        MalformedPosition: the text violates a structural invariant.
    """
    parts = fen.split()
    if not 4 <= len(parts) <= 6:
        raise MalformedPosition(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]
    board = _parse_placement(placement, fen)

    side = _SIDES.get(side_part)
    if side is None:
        raise MalformedPosition(f"Invalid FEN side-to-move field: {side_part!r}")

    castling = _parse_castling(castling_part)
    ep = _parse_en_passant(ep_part, side, board)

    halfmove = _parse_counter(parts, 4, default=0, minimum=0, name="halfmove clock")
    fullmove = _parse_counter(parts, 5, default=1, minimum=1, name="fullmove number")

    position = Position(board, side, castling, ep, halfmove, fullmove)
    if MoveGenerator(position).is_in_check(side.opposite):
        raise MalformedPosition(
            f"Invalid FEN: {side.opposite!s} king is in check "
            f"with {side!s} to move: {fen!r}"
        )
    return position


def position_to_fen(pos: Position) -> str:
    """Serialize a :class:`Position` to FEN."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        row = ""
        empty = 0
        for file in range(8):
            piece = pos.board[make_square(file, rank)]
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)

    side = "w" if pos.side_to_move == Color.WHITE else "b"
    castling = "".join(ch for ch, right in _CASTLING_LETTERS if pos.castling & right)
    ep = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return (
        f"{'/'.join(rows)} {side} {castling or '-'} {ep} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )


# -- Field parsers -------------------------------------------------------------


def _parse_placement(placement: str, fen: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise MalformedPosition(f"Invalid FEN board (must contain 8 ranks): {fen!r}")

    board = Board()
    for rank_idx, rank_text in enumerate(ranks):
        rank = 7 - rank_idx
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not 1 <= step <= 8:
                    raise MalformedPosition(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += step
            else:
                if file >= 8:
                    raise MalformedPosition(f"Invalid FEN rank width: {fen!r}")
                try:
                    piece = Piece.from_char(ch)
                except ValueError as exc:
                    raise MalformedPosition(f"{exc}: {fen!r}") from exc
                if piece.piece_type == PieceType.PAWN and rank in (0, 7):
                    raise MalformedPosition(f"Pawn on back rank: {fen!r}")
                board[make_square(file, rank)] = piece
                file += 1
            if file > 8:
                raise MalformedPosition(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise MalformedPosition(f"Invalid FEN rank width: {fen!r}")

    for color in Color:
        kings = board.count(color, PieceType.KING)
        if kings != 1:
            raise MalformedPosition(
                f"FEN must have exactly one {color!s} king, found {kings}: {fen!r}"
            )
    return board


def _parse_castling(text: str) -> CastlingRights:
    if text == "-":
        return CastlingRights.NONE
    rights = dict(_CASTLING_LETTERS)
    castling = CastlingRights.NONE
    for ch in text:
        right = rights.get(ch)
        if right is None or castling & right:
            raise MalformedPosition(f"Invalid FEN castling field: {text!r}")
        castling |= right
    return castling


def _parse_en_passant(text: str, side: Color, board: Board) -> Square | None:
    if text == "-":
        return None
    try:
        ep = parse_square(text)
    except ValueError as exc:
        raise MalformedPosition(f"Invalid FEN en-passant square: {text!r}") from exc
    expected_rank = 5 if side == Color.WHITE else 2
    if rank_of(ep) != expected_rank:
        raise MalformedPosition(
            f"Invalid FEN en-passant square for side-to-move: {text!r}"
        )

    # The pawn that just advanced two squares stands in front of the target.
    step = -8 if side == Color.WHITE else 8
    pushed = board[ep + step]
    if (
        pushed != Piece(side.opposite, PieceType.PAWN)
        or board[ep] is not None
        or board[ep - step] is not None
    ):
        raise MalformedPosition(
            f"Invalid FEN en-passant square without a double-pushed pawn: {text!r}"
        )
    return ep


def _parse_counter(
    parts: list[str],
    index: int,
    *,
    default: int,
    minimum: int,
    name: str,
) -> int:
    if len(parts) <= index:
        return default
    try:
        value = int(parts[index])
    except ValueError as exc:
        raise MalformedPosition(f"Invalid FEN {name}: {parts[index]!r}") from exc
    if value < minimum:
        raise MalformedPosition(f"Invalid FEN {name}: {parts[index]!r}")
    return value
