"""Fixed-depth minimax search with alpha-beta pruning."""

from __future__ import annotations

import logging

from chessmate.core.enums import Color
from chessmate.core.history import PositionHistory
from chessmate.core.move import Move
from chessmate.core.move_generator import MoveGenerator
from chessmate.core.position import Position
from chessmate.core.rules import Rules
from chessmate.engine.evaluation import IEvaluator, MaterialEvaluator
from chessmate.engine.search import (
    SEARCH_WINDOW,
    CancelCheck,
    IEngine,
    SearchLimits,
    SearchResult,
)

_LOGGER = logging.getLogger(__name__)


def _never_cancelled() -> bool:
    return False


class MinimaxSearchEngine(IEngine):
    """Plain minimax over the full legal move list, pruned with alpha-beta.

    Scores are always taken from the maximizing colour's point of view. On
    equal scores the earlier move in generation order wins, so results are
    reproducible for a given position and depth.

    The caller's position is walked with ``make_move``/``unmake_move`` and
    left as it was found. The history is copied once per search, so the
    caller's instance is never touched.
    """

    __slots__ = (
        "_evaluator",
        "_fifty_move_rule",
        "_cancel_check",
        "_maximizing_color",
        "_history",
        "_nodes",
    )

    def __init__(
        self,
        evaluator: IEvaluator | None = None,
        *,
        fifty_move_rule: bool = False,
    ) -> None:
        self._evaluator: IEvaluator = evaluator or MaterialEvaluator(
            fifty_move_rule=fifty_move_rule
        )
        self._fifty_move_rule = fifty_move_rule
        self._cancel_check: CancelCheck = _never_cancelled
        self._maximizing_color = Color.WHITE
        self._history: PositionHistory | None = None
        self._nodes = 0

    @property
    def evaluator(self) -> IEvaluator:
        return self._evaluator

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
        history: PositionHistory | None = None,
    ) -> SearchResult:
        if limits.depth <= 0:
            raise ValueError("Search depth must be >= 1")
        return self.best_move(
            position,
            limits.depth,
            position.side_to_move,
            history,
            is_cancelled=is_cancelled,
        )

    def best_move(
        self,
        position: Position,
        depth: int,
        maximizing_color: Color,
        history: PositionHistory | None = None,
        *,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        """Search *depth* plies and pick a move for the side to move.

        The side to move is the maximizing side when it equals
        *maximizing_color*, otherwise it minimizes.
        """
        if depth < 0:
            raise ValueError("Search depth must be >= 0")

        self._nodes = 0
        self._cancel_check = is_cancelled or _never_cancelled
        self._maximizing_color = maximizing_color
        self._history = history.copy(unbounded=True) if history is not None else None

        try:
            score, move = self._minimax(
                position,
                depth,
                -SEARCH_WINDOW,
                SEARCH_WINDOW,
                position.side_to_move == maximizing_color,
            )
        finally:
            self._history = None
            self._cancel_check = _never_cancelled

        completed = depth if move is not None else 0
        _LOGGER.debug(
            "minimax depth=%d nodes=%d score=%d best=%s",
            depth,
            self._nodes,
            score,
            move,
        )
        return SearchResult(move, score, completed, self._nodes)

    # -- Internals -------------------------------------------------------------

    def _minimax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> tuple[int, Move | None]:
        self._nodes += 1
        if depth == 0:
            return self._evaluate(position), None

        outcome = Rules.classify(
            position, self._history, fifty_move_rule=self._fifty_move_rule
        )
        if outcome.is_terminal:
            return self._evaluate(position), None

        best_move: Move | None = None
        best_score = -SEARCH_WINDOW if maximizing else SEARCH_WINDOW

        for move in MoveGenerator(position).generate_legal_moves():
            if self._cancel_check():
                break

            self._play(position, move)
            try:
                score, _ = self._minimax(
                    position, depth - 1, alpha, beta, not maximizing
                )
            finally:
                self._take_back(position, move)

            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)
            if alpha >= beta:
                break

        return best_score, best_move

    def _evaluate(self, position: Position) -> int:
        return self._evaluator.score(position, self._maximizing_color, self._history)

    def _play(self, position: Position, move: Move) -> None:
        position.make_move(move)
        if self._history is not None:
            self._history.push(position)

    def _take_back(self, position: Position, move: Move) -> None:
        if self._history is not None:
            self._history.pop()
        position.unmake_move(move)
