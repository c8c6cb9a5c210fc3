"""Tests for the material evaluator."""

from chessmate.core.enums import Color
from chessmate.core.history import PositionHistory
from chessmate.core.notation import STARTING_FEN, position_from_fen
from chessmate.core.position import Position
from chessmate.engine.evaluation import MATE_SCORE, PIECE_VALUES, MaterialEvaluator

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


class TestMaterial:
    def test_piece_values(self) -> None:
        assert sorted(PIECE_VALUES.values()) == [0, 1, 3, 3, 5, 9]

    def test_start_is_balanced(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        evaluator = MaterialEvaluator()
        assert evaluator.score(pos, Color.WHITE) == 0
        assert evaluator.score(pos, Color.BLACK) == 0

    def test_perspective_sign(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")
        evaluator = MaterialEvaluator()
        assert evaluator.score(pos, Color.WHITE) == 9
        assert evaluator.score(pos, Color.BLACK) == -9

    def test_mixed_material(self) -> None:
        # White: R + 2P = 7; black: B + N + 2P = 8.
        pos = position_from_fen("4k3/pp6/2bn4/8/8/8/PP6/R3K3 w - - 0 1")
        assert MaterialEvaluator.material(pos, Color.WHITE) == -1
        assert MaterialEvaluator.material(pos, Color.BLACK) == 1


class TestTerminalOverrides:
    def test_checkmate_scores_for_the_winner(self) -> None:
        pos = position_from_fen(FOOLS_MATE)
        evaluator = MaterialEvaluator()
        assert evaluator.score(pos, Color.WHITE) == -MATE_SCORE
        assert evaluator.score(pos, Color.BLACK) == MATE_SCORE

    def test_stalemate_scores_zero_despite_material(self) -> None:
        pos = position_from_fen("8/8/8/8/8/kq6/8/K7 w - - 0 1")
        assert MaterialEvaluator().score(pos, Color.BLACK) == 0

    def test_insufficient_material_scores_zero(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/3NK3 w - - 0 1")
        assert MaterialEvaluator().score(pos, Color.WHITE) == 0

    def test_repetition_needs_history(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")
        history = PositionHistory()
        for _ in range(3):
            history.push(pos)
        evaluator = MaterialEvaluator()
        assert evaluator.score(pos, Color.WHITE) == 9
        assert evaluator.score(pos, Color.WHITE, history) == 0

    def test_fifty_move_rule_is_opt_in(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4K2R/8 w - - 100 51")
        assert MaterialEvaluator().score(pos, Color.WHITE) == 5
        assert MaterialEvaluator(fifty_move_rule=True).score(pos, Color.WHITE) == 0

    def test_does_not_modify_position(self) -> None:
        pos = Position.initial()
        MaterialEvaluator().score(pos, Color.WHITE)
        assert pos == Position.initial()
        assert pos.ply_depth == 0
