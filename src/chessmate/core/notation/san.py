"""SAN (Standard Algebraic Notation) conversion and parsing."""

from __future__ import annotations

from chessmate.core.enums import MoveFlag, PieceType
from chessmate.core.errors import IllegalMove
from chessmate.core.move import Move
from chessmate.core.move_generator import MoveGenerator
from chessmate.core.position import Position
from chessmate.core.types import file_of, parse_square, rank_of, square_name

_SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECE_REV: dict[str, PieceType] = {v: k for k, v in _SAN_PIECE.items()}


def move_to_san(position: Position, move: Move) -> str:
    """SAN of a legal *move*, given the *position* before it is played."""
    board = position.board
    piece = board[move.from_sq]
    if piece is None:
        raise IllegalMove(f"No piece on {square_name(move.from_sq)}")

    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        san = "O-O"
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        san = "O-O-O"
    elif piece.piece_type == PieceType.PAWN:
        san = chr(ord("a") + file_of(move.from_sq)) + "x" if move.is_capture else ""
        san += square_name(move.to_sq)
        if move.promotion is not None:
            san += "=" + _SAN_PIECE[move.promotion]
    else:
        san = _SAN_PIECE[piece.piece_type] + _disambiguation(position, move)
        if move.is_capture:
            san += "x"
        san += square_name(move.to_sq)

    position.make_move(move)
    try:
        gen = MoveGenerator(position)
        if gen.is_in_check(position.side_to_move):
            san += "+" if gen.has_legal_move() else "#"
    finally:
        position.unmake_move(move)
    return san


def parse_san(position: Position, san: str) -> Move:
    """Resolve *san* to a legal move of *position*.

    Raises:
        IllegalMove: no legal move or more than one matches.
    """
    legal = MoveGenerator(position).generate_legal_moves()
    clean = san.strip().rstrip("+#!?")

    if clean in ("O-O", "0-0", "O-O-O", "0-0-0"):
        flag = MoveFlag.CASTLE_KINGSIDE if len(clean) == 3 else MoveFlag.CASTLE_QUEENSIDE
        for m in legal:
            if m.flag == flag:
                return m
        raise IllegalMove(f"Illegal move: {san}")

    promotion: PieceType | None = None
    if len(clean) >= 2 and clean[-2] == "=":
        promotion = _SAN_PIECE_REV.get(clean[-1])
        if promotion is None:
            raise IllegalMove(f"Invalid promotion piece: {san}")
        clean = clean[:-2]

    try:
        to_sq = parse_square(clean[-2:])
    except ValueError as exc:
        raise IllegalMove(f"Invalid move text: {san}") from exc
    clean = clean[:-2].removesuffix("x")

    piece_type = PieceType.PAWN
    if clean and clean[0] in _SAN_PIECE_REV:
        piece_type = _SAN_PIECE_REV[clean[0]]
        clean = clean[1:]

    from_file: int | None = None
    from_rank: int | None = None
    for ch in clean:
        if ch in "abcdefgh":
            from_file = ord(ch) - ord("a")
        elif ch in "12345678":
            from_rank = int(ch) - 1
        else:
            raise IllegalMove(f"Invalid move text: {san}")

    candidates: list[Move] = []
    for m in legal:
        p = position.board[m.from_sq]
        if p is None or p.piece_type != piece_type or m.to_sq != to_sq:
            continue
        if m.promotion != (promotion or (PieceType.QUEEN if m.promotion else None)):
            continue
        if from_file is not None and file_of(m.from_sq) != from_file:
            continue
        if from_rank is not None and rank_of(m.from_sq) != from_rank:
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise IllegalMove(f"Illegal move: {san}")
    raise IllegalMove(f"Ambiguous move: {san} ({', '.join(map(str, candidates))})")


def _disambiguation(position: Position, move: Move) -> str:
    board = position.board
    piece = board[move.from_sq]
    assert piece is not None
    rivals = [
        m.from_sq
        for m in MoveGenerator(position).generate_legal_moves()
        if m.to_sq == move.to_sq
        and m.from_sq != move.from_sq
        and board[m.from_sq] == piece
    ]
    if not rivals:
        return ""
    if all(file_of(sq) != file_of(move.from_sq) for sq in rivals):
        return chr(ord("a") + file_of(move.from_sq))
    if all(rank_of(sq) != rank_of(move.from_sq) for sq in rivals):
        return str(rank_of(move.from_sq) + 1)
    return square_name(move.from_sq)
