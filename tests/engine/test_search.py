"""Tests for the fixed-depth minimax engine."""

import pytest

from chessmate.core.enums import Color
from chessmate.core.history import PositionHistory
from chessmate.core.move import Move
from chessmate.core.move_generator import apply_move, find_move, legal_moves
from chessmate.core.notation import STARTING_FEN, position_from_fen
from chessmate.core.position import Position
from chessmate.core.rules import Rules
from chessmate.core.types import parse_square
from chessmate.engine import MinimaxSearchEngine, SearchLimits
from chessmate.engine.evaluation import MATE_SCORE, IEvaluator, MaterialEvaluator
from chessmate.engine.search import SEARCH_WINDOW

FREE_QUEEN = "4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1"
BACK_RANK = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
ITALIAN = "r1bqk1nr/pppp1ppp/2n5/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"


def plain_minimax(
    position: Position,
    depth: int,
    maximizing: bool,
    color: Color,
    evaluator: IEvaluator,
) -> tuple[int, Move | None]:
    """Unpruned reference search with the same tie rule."""
    if depth == 0 or Rules.classify(position).is_terminal:
        return evaluator.score(position, color), None
    best_move: Move | None = None
    best = -SEARCH_WINDOW if maximizing else SEARCH_WINDOW
    for move in legal_moves(position):
        score, _ = plain_minimax(
            apply_move(position, move), depth - 1, not maximizing, color, evaluator
        )
        if (maximizing and score > best) or (not maximizing and score < best):
            best, best_move = score, move
    return best, best_move


class TestMinimaxSearchEngine:
    def test_returns_legal_move_from_start(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        result = MinimaxSearchEngine().search(pos, SearchLimits())

        assert result.best_move in legal_moves(pos)
        assert result.depth == 2
        assert result.nodes > 20

    def test_default_depth_is_two(self) -> None:
        assert SearchLimits().depth == 2

    def test_takes_free_queen_at_depth_one(self) -> None:
        pos = position_from_fen(FREE_QUEEN)
        result = MinimaxSearchEngine().best_move(pos, 1, Color.WHITE)
        assert result.best_move == find_move(pos, parse_square("e4"), parse_square("d5"))
        assert result.score == 1

    def test_minimizing_side_also_takes_queen(self) -> None:
        # Scores from black's point of view: white to move minimizes them.
        pos = position_from_fen(FREE_QUEEN)
        result = MinimaxSearchEngine().best_move(pos, 1, Color.BLACK)
        assert result.best_move is not None
        assert result.best_move.to_sq == parse_square("d5")
        assert result.score == -1

    def test_finds_mate_in_one(self) -> None:
        pos = position_from_fen(BACK_RANK)
        result = MinimaxSearchEngine().search(pos, SearchLimits(depth=2))
        assert result.best_move is not None
        assert result.score == MATE_SCORE

        pos.make_move(result.best_move)
        assert Rules.is_checkmate(pos)

    def test_first_best_move_wins_ties(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        result = MinimaxSearchEngine().best_move(pos, 1, Color.WHITE)
        assert result.best_move == legal_moves(pos)[0]
        assert result.score == 0

    @pytest.mark.parametrize("fen", [STARTING_FEN, FREE_QUEEN, ITALIAN])
    def test_alpha_beta_matches_plain_minimax(self, fen: str) -> None:
        pos = position_from_fen(fen)
        evaluator = MaterialEvaluator()
        expected_score, expected_move = plain_minimax(
            pos, 2, True, pos.side_to_move, evaluator
        )

        result = MinimaxSearchEngine(evaluator).best_move(pos, 2, pos.side_to_move)
        assert result.score == expected_score
        assert result.best_move == expected_move

    def test_pruning_visits_fewer_nodes(self) -> None:
        pos = position_from_fen(ITALIAN)
        result = MinimaxSearchEngine().best_move(pos, 2, Color.WHITE)
        moves = legal_moves(pos)
        full_tree = 1 + len(moves) + sum(
            len(legal_moves(apply_move(pos, m))) for m in moves
        )
        assert result.nodes < full_tree


class TestRootEdgeCases:
    def test_checkmated_root_has_no_move(self) -> None:
        pos = position_from_fen(FOOLS_MATE)
        result = MinimaxSearchEngine().search(pos, SearchLimits(depth=2))
        assert result.best_move is None
        assert result.score == -MATE_SCORE
        assert result.depth == 0

    def test_stalemated_root_has_no_move(self) -> None:
        pos = position_from_fen("8/8/8/8/8/kq6/8/K7 w - - 0 1")
        result = MinimaxSearchEngine().search(pos, SearchLimits(depth=2))
        assert result.best_move is None
        assert result.score == 0

    def test_depth_zero_returns_static_score(self) -> None:
        pos = position_from_fen(FREE_QUEEN)
        result = MinimaxSearchEngine().best_move(pos, 0, Color.WHITE)
        assert result.best_move is None
        assert result.score == -8

    def test_search_rejects_non_positive_depth(self) -> None:
        with pytest.raises(ValueError, match="depth"):
            MinimaxSearchEngine().search(Position.initial(), SearchLimits(depth=0))


class TestStateAndHistory:
    def test_position_and_history_restored(self) -> None:
        pos = position_from_fen(ITALIAN)
        history = PositionHistory()
        history.push(pos)
        fen_before = pos.serialize()

        MinimaxSearchEngine().search(pos, SearchLimits(depth=2), history=history)

        assert pos.serialize() == fen_before
        assert pos.ply_depth == 0
        assert len(history) == 1
        assert history.count(pos) == 1

    def test_repetition_in_tree_scores_as_draw(self) -> None:
        # Black is a queen down; stepping to d8 repeats a position a third time.
        pos = position_from_fen("4k3/8/8/8/8/8/8/Q3K3 b - - 0 1")
        repeat = find_move(pos, parse_square("e8"), parse_square("d8"))
        history = PositionHistory()
        history.push(pos)
        seen = apply_move(pos, repeat)
        history.push(seen)
        history.push(seen)

        result = MinimaxSearchEngine().best_move(pos, 1, Color.BLACK, history)
        assert result.best_move == repeat
        assert result.score == 0

        without = MinimaxSearchEngine().best_move(pos, 1, Color.BLACK)
        assert without.score == -9

    def test_full_bounded_history_keeps_repetitions(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/Q3K3 b - - 0 1")
        repeat = find_move(pos, parse_square("e8"), parse_square("d8"))
        seen = apply_move(pos, repeat)
        history = PositionHistory(max_length=3)
        history.push(seen)
        history.push(seen)
        history.push(pos)

        result = MinimaxSearchEngine().best_move(pos, 1, Color.BLACK, history)

        assert result.best_move == repeat
        assert result.score == 0
        assert len(history) == 3
        assert history.count(seen) == 2


class TestCancellation:
    def test_cancel_before_first_move(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        result = MinimaxSearchEngine().search(
            pos, SearchLimits(depth=2), is_cancelled=lambda: True
        )
        assert result.best_move is None
        assert result.nodes == 1
        assert pos == Position.initial()

    def test_cancel_midway_keeps_best_so_far(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        polls = 0

        def cancel_after_a_few() -> bool:
            nonlocal polls
            polls += 1
            return polls > 30

        result = MinimaxSearchEngine().search(
            pos, SearchLimits(depth=2), is_cancelled=cancel_after_a_few
        )
        assert result.best_move in legal_moves(pos)
        assert pos.serialize() == STARTING_FEN
