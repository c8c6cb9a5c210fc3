"""Move generation, legality filtering and attack detection."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from chessmate.core.board import iter_bits
from chessmate.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chessmate.core.errors import IllegalMove
from chessmate.core.move import Move
from chessmate.core.types import Square, make_square, square_name

if TYPE_CHECKING:
    from chessmate.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

# Per colour: (push direction, start rank, last rank before promotion).
_PAWN_GEOMETRY: dict[Color, tuple[int, int, int]] = {
    Color.WHITE: (8, 1, 6),
    Color.BLACK: (-8, 6, 1),
}

# Per colour: (kingside right, queenside right, back-rank offset).
_CASTLING_GEOMETRY: dict[Color, tuple[CastlingRights, CastlingRights, int]] = {
    Color.WHITE: (CastlingRights.WHITE_KINGSIDE, CastlingRights.WHITE_QUEENSIDE, 0),
    Color.BLACK: (CastlingRights.BLACK_KINGSIDE, CastlingRights.BLACK_QUEENSIDE, 56),
}


# -- Precomputed tables ------------------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    table: list[tuple[Square, ...]] = []
    for sq in range(64):
        f, r = sq & 7, sq >> 3
        table.append(
            tuple(
                make_square(f + df, r + dr)
                for df, dr in offsets
                if 0 <= f + df < 8 and 0 <= r + dr < 8
            )
        )
    return tuple(table)


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    table: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        rays: list[tuple[Square, ...]] = []
        for df, dr in directions:
            f, r = (sq & 7) + df, (sq >> 3) + dr
            ray: list[Square] = []
            while 0 <= f < 8 and 0 <= r < 8:
                ray.append(make_square(f, r))
                f += df
                r += dr
            rays.append(tuple(ray))
        table.append(tuple(rays))
    return tuple(table)


def _to_mask(targets: tuple[tuple[Square, ...], ...]) -> tuple[int, ...]:
    return tuple(sum(1 << t for t in row) for row in targets)


def _build_pawn_attackers(color: Color) -> tuple[int, ...]:
    """Mask of squares from which a *color* pawn attacks each square."""
    back = -1 if color == Color.WHITE else 1
    masks: list[int] = []
    for sq in range(64):
        f, r = sq & 7, sq >> 3
        mask = 0
        if 0 <= r + back < 8:
            for df in (-1, 1):
                if 0 <= f + df < 8:
                    mask |= 1 << make_square(f + df, r + back)
        masks.append(mask)
    return tuple(masks)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_MASKS = _to_mask(_KNIGHT_TARGETS)
_KING_MASKS = _to_mask(_KING_TARGETS)
_PAWN_ATTACKERS = (_build_pawn_attackers(Color.WHITE), _build_pawn_attackers(Color.BLACK))
_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = tuple(b + r for b, r in zip(_BISHOP_RAYS, _ROOK_RAYS))

_SLIDER_RAYS = {
    PieceType.BISHOP: _BISHOP_RAYS,
    PieceType.ROOK: _ROOK_RAYS,
    PieceType.QUEEN: _QUEEN_RAYS,
}


class MoveGenerator:
    """Generates moves for one :class:`Position`.

    Legality filtering makes and unmakes each candidate on the position, so
    the position must not be touched by anyone else while a call is running.
    It is always restored before the call returns.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move, in generation order."""
        return list(self._iter_legal())

    def has_legal_move(self) -> bool:
        """Whether the side to move has at least one legal move."""
        for _ in self._iter_legal():
            return True
        return False

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """Moves obeying piece movement rules; may leave the own king attacked."""
        moves: list[Move] = []
        color = self._pos.side_to_move
        board = self._board

        for sq in iter_bits(board.pieces_bitboard(color, PieceType.PAWN)):
            self._gen_pawn(sq, color, moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KNIGHT)):
            self._gen_steps(sq, color, _KNIGHT_TARGETS[sq], moves)
        for kind in (PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN):
            rays = _SLIDER_RAYS[kind]
            for sq in iter_bits(board.pieces_bitboard(color, kind)):
                self._gen_sliding(sq, color, rays[sq], moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KING)):
            self._gen_steps(sq, color, _KING_TARGETS[sq], moves)
            self._gen_castling(sq, color, moves)
        return moves

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked?"""
        return self.is_square_attacked(self._board.king_square(color), color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?"""
        board = self._board

        if board.pieces_bitboard(by_color, PieceType.PAWN) & _PAWN_ATTACKERS[by_color][sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_MASKS[sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KING) & _KING_MASKS[sq]:
            return True

        queens = board.pieces_bitboard(by_color, PieceType.QUEEN)
        if queens or board.pieces_bitboard(by_color, PieceType.BISHOP):
            if self._ray_hits(_BISHOP_RAYS[sq], by_color, PieceType.BISHOP):
                return True
        if queens or board.pieces_bitboard(by_color, PieceType.ROOK):
            if self._ray_hits(_ROOK_RAYS[sq], by_color, PieceType.ROOK):
                return True
        return False

    # -- Internals ----------------------------------------------------------

    def _iter_legal(self) -> Iterator[Move]:
        pos = self._pos
        mover = pos.side_to_move
        for move in self.generate_pseudo_legal_moves():
            pos.make_move(move)
            safe = not self.is_in_check(mover)
            pos.unmake_move(move)
            if safe:
                yield move

    def _ray_hits(
        self,
        rays: tuple[tuple[Square, ...], ...],
        by_color: Color,
        slider: PieceType,
    ) -> bool:
        board = self._board
        for ray in rays:
            for sq in ray:
                piece = board[sq]
                if piece is None:
                    continue
                if piece.color == by_color and piece.piece_type in (slider, PieceType.QUEEN):
                    return True
                break
        return False

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        step, start_rank, pre_promo_rank = _PAWN_GEOMETRY[color]
        rank = sq >> 3
        file = sq & 7
        promotes = rank == pre_promo_rank

        one = sq + step
        if board.is_empty(one):
            if promotes:
                for kind in PROMOTION_TYPES:
                    moves.append(Move(sq, one, MoveFlag.PROMOTION, kind))
            else:
                moves.append(Move(sq, one))
                two = one + step
                if rank == start_rank and board.is_empty(two):
                    moves.append(Move(sq, two, MoveFlag.DOUBLE_PAWN))

        for df in (-1, 1):
            if not 0 <= file + df < 8:
                continue
            target_sq = one + df
            target = board[target_sq]
            if target is not None and target.color != color:
                if promotes:
                    for kind in PROMOTION_TYPES:
                        moves.append(
                            Move(sq, target_sq, MoveFlag.PROMOTION, kind, is_capture=True)
                        )
                else:
                    moves.append(Move(sq, target_sq, is_capture=True))
            elif target is None and target_sq == self._pos.en_passant:
                moves.append(Move(sq, target_sq, MoveFlag.EN_PASSANT, is_capture=True))

    def _gen_steps(
        self,
        sq: Square,
        color: Color,
        targets: tuple[Square, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq))
            elif target.color != color:
                moves.append(Move(sq, to_sq, is_capture=True))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq, is_capture=True))
                break

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        kingside, queenside, base = _CASTLING_GEOMETRY[color]
        rights = self._pos.castling
        if not rights & (kingside | queenside):
            return
        # Rights imply an unmoved king and rook, but a hand-written FEN may lie.
        if king_sq != base + 4 or self.is_in_check(color):
            return

        board = self._board
        opponent = color.opposite
        rook = PieceType.ROOK

        if rights & kingside:
            corner = board[base + 7]
            if (
                corner is not None
                and corner.color == color
                and corner.piece_type == rook
                and board.is_empty(base + 5)
                and board.is_empty(base + 6)
                and not self.is_square_attacked(base + 5, opponent)
                and not self.is_square_attacked(base + 6, opponent)
            ):
                moves.append(Move(king_sq, base + 6, MoveFlag.CASTLE_KINGSIDE))

        if rights & queenside:
            corner = board[base]
            if (
                corner is not None
                and corner.color == color
                and corner.piece_type == rook
                and board.is_empty(base + 1)
                and board.is_empty(base + 2)
                and board.is_empty(base + 3)
                and not self.is_square_attacked(base + 2, opponent)
                and not self.is_square_attacked(base + 3, opponent)
            ):
                moves.append(Move(king_sq, base + 2, MoveFlag.CASTLE_QUEENSIDE))


# -- Functional facade ---------------------------------------------------------


def legal_moves(position: Position) -> list[Move]:
    """Fresh list of legal moves for *position*."""
    return MoveGenerator(position).generate_legal_moves()


def apply_move(position: Position, move: Move) -> Position:
    """Return a new position with *move* played; *position* is left untouched.

    Raises:
        IllegalMove: *move* is not legal in *position*.
    """
    if move not in legal_moves(position):
        raise IllegalMove(f"Illegal move {move} in {position.serialize()}")
    successor = position.copy()
    successor.make_move(move)
    return successor


def revert_move(position: Position, move: Move) -> None:
    """In-place inverse of ``position.make_move(move)``."""
    position.unmake_move(move)


def find_move(
    position: Position,
    from_sq: Square,
    to_sq: Square,
    promotion: PieceType | None = None,
) -> Move:
    """Resolve an origin/destination pair to the generated legal move.

    A promotion without an explicit piece resolves to a queen. A promotion
    piece given for a move that does not promote is ignored.

    Raises:
        IllegalMove: no legal move matches.
    """
    promote_to = promotion or PieceType.QUEEN
    for move in legal_moves(position):
        if move.from_sq != from_sq or move.to_sq != to_sq:
            continue
        if move.promotion is None or move.promotion == promote_to:
            return move
    raise IllegalMove(
        f"Illegal move {square_name(from_sq)}{square_name(to_sq)} "
        f"for {position.side_to_move} in {position.serialize()}"
    )
