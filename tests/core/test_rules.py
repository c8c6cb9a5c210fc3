"""Tests for Rules: checkmate, stalemate and draw detection."""

from chessmate.core.enums import Color, Termination
from chessmate.core.history import PositionHistory
from chessmate.core.move_generator import find_move
from chessmate.core.notation import STARTING_FEN, position_from_fen
from chessmate.core.position import Position
from chessmate.core.rules import ONGOING, Outcome, Rules
from chessmate.core.types import parse_square

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
STALEMATE = "8/8/8/8/8/kq6/8/K7 w - - 0 1"


def _play(pos: Position, history: PositionHistory | None, *moves: str) -> None:
    for text in moves:
        pos.make_move(find_move(pos, parse_square(text[:2]), parse_square(text[2:4])))
        if history is not None:
            history.push(pos)


class TestCheck:
    def test_starting_not_in_check(self) -> None:
        assert not Rules.is_in_check(position_from_fen(STARTING_FEN))

    def test_starting_position_is_ongoing(self) -> None:
        outcome = Rules.classify(position_from_fen(STARTING_FEN))
        assert outcome == ONGOING
        assert not outcome.is_terminal

    def test_fools_mate_in_check(self) -> None:
        assert Rules.is_in_check(position_from_fen(FOOLS_MATE))


class TestCheckmate:
    def test_fools_mate_by_moves(self) -> None:
        pos = Position.initial()
        _play(pos, None, "f2f3", "e7e5", "g2g4", "d8h4")
        assert Rules.is_checkmate(pos)
        outcome = Rules.classify(pos)
        assert outcome == Outcome(Termination.CHECKMATE, Color.WHITE)
        assert outcome.winner == Color.BLACK
        assert outcome.is_terminal
        assert not outcome.is_draw

    def test_fools_mate_from_fen(self) -> None:
        pos = position_from_fen(FOOLS_MATE)
        assert Rules.classify(pos).loser == Color.WHITE

    def test_back_rank_mate(self) -> None:
        pos = position_from_fen("R2k4/8/3K4/8/8/8/8/8 b - - 0 1")
        assert Rules.classify(pos) == Outcome(Termination.CHECKMATE, Color.BLACK)

    def test_not_checkmate_when_can_escape(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
        assert Rules.is_in_check(pos)
        assert not Rules.is_checkmate(pos)
        assert Rules.classify(pos) == ONGOING


class TestStalemate:
    def test_cornered_king(self) -> None:
        pos = position_from_fen(STALEMATE)
        assert Rules.is_stalemate(pos)
        outcome = Rules.classify(pos)
        assert outcome.termination == Termination.STALEMATE
        assert outcome.loser is None
        assert outcome.is_draw

    def test_queen_stalemate(self) -> None:
        pos = position_from_fen("7k/8/5KQ1/8/8/8/8/8 b - - 0 1")
        assert Rules.classify(pos).termination == Termination.STALEMATE

    def test_not_stalemate_when_has_moves(self) -> None:
        pos = position_from_fen("7k/8/5K2/8/8/8/8/8 b - - 0 1")
        assert not Rules.is_stalemate(pos)

    def test_stalemate_takes_precedence_over_material(self) -> None:
        # King and knight against king is also insufficient material.
        pos = position_from_fen("7k/5K2/5N2/8/8/8/8/8 b - - 0 1")
        assert Rules.classify(pos).termination == Termination.STALEMATE


class TestInsufficientMaterial:
    def test_k_vs_k(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/8/8 w - - 0 1")
        assert Rules.is_insufficient_material(pos)
        assert Rules.classify(pos).termination == Termination.INSUFFICIENT_MATERIAL

    def test_k_bishop_vs_k(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/3B4/8 w - - 0 1")
        assert Rules.is_insufficient_material(pos)

    def test_k_knight_vs_k(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/3N4/8 w - - 0 1")
        assert Rules.is_insufficient_material(pos)

    def test_same_coloured_bishops(self) -> None:
        # c1 and h6 are both dark squares.
        pos = position_from_fen("8/8/4k2b/8/8/4K3/8/2B5 w - - 0 1")
        assert Rules.is_insufficient_material(pos)

    def test_opposite_coloured_bishops_sufficient(self) -> None:
        pos = position_from_fen("8/8/4k1b1/8/8/4K3/8/2B5 w - - 0 1")
        assert not Rules.is_insufficient_material(pos)

    def test_two_knights_sufficient(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/3NN3/8 w - - 0 1")
        assert not Rules.is_insufficient_material(pos)

    def test_k_rook_vs_k_sufficient(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/3R4/8 w - - 0 1")
        assert not Rules.is_insufficient_material(pos)

    def test_kp_vs_k_sufficient(self) -> None:
        pos = position_from_fen("8/8/4k3/8/4P3/4K3/8/8 w - - 0 1")
        assert not Rules.is_insufficient_material(pos)


class TestRepetition:
    SHUFFLE = ("g1f3", "g8f6", "f3g1", "f6g8")

    def _fresh(self) -> tuple[Position, PositionHistory]:
        pos = Position.initial()
        history = PositionHistory()
        history.push(pos)
        return pos, history

    def test_threefold_detected_with_current_instance(self) -> None:
        pos, history = self._fresh()
        _play(pos, history, *self.SHUFFLE, *self.SHUFFLE)
        assert history.count(pos) == 3
        assert Rules.is_threefold_repetition(pos, history)
        assert Rules.classify(pos, history).termination == Termination.THREEFOLD_REPETITION

    def test_twice_is_not_enough(self) -> None:
        pos, history = self._fresh()
        _play(pos, history, *self.SHUFFLE)
        assert history.count(pos) == 2
        assert Rules.classify(pos, history) == ONGOING

    def test_without_history_no_repetition(self) -> None:
        pos, history = self._fresh()
        _play(pos, history, *self.SHUFFLE, *self.SHUFFLE)
        assert Rules.classify(pos) == ONGOING

    def test_different_en_passant_target_does_not_repeat(self) -> None:
        pos = position_from_fen("4k3/8/8/8/4P3/8/8/4K3 b - e3 0 1")
        history = PositionHistory()
        history.push(pos)
        _play(pos, history, "e8d8", "e1d1", "d8e8", "d1e1")
        _play(pos, history, "e8d8", "e1d1", "d8e8", "d1e1")
        # The first instance carried an en-passant target; only two match.
        assert history.count(pos) == 2
        assert not Rules.is_threefold_repetition(pos, history)


class TestFiftyMoveRule:
    FEN = "4k3/8/8/8/8/8/4K2R/7r w - - 100 51"

    def test_not_triggered_at_start(self) -> None:
        assert not Rules.is_fifty_move_rule(position_from_fen(STARTING_FEN))

    def test_triggered_at_100_halfmoves(self) -> None:
        assert Rules.is_fifty_move_rule(position_from_fen(self.FEN))

    def test_off_by_default(self) -> None:
        assert Rules.classify(position_from_fen(self.FEN)) == ONGOING

    def test_opt_in(self) -> None:
        outcome = Rules.classify(position_from_fen(self.FEN), fifty_move_rule=True)
        assert outcome.termination == Termination.FIFTY_MOVES
        assert outcome.is_draw
