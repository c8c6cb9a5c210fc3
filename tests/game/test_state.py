"""Tests for session phases and outcome labels."""

import pytest

from chessmate.core.enums import Color, Termination
from chessmate.core.rules import ONGOING, Outcome
from chessmate.game.state import SessionPhase, outcome_label


class TestOutcomeLabel:
    def test_ongoing_has_no_label(self) -> None:
        assert outcome_label(ONGOING, Color.WHITE) == ""

    def test_checkmate_from_human_side(self) -> None:
        assert outcome_label(
            Outcome(Termination.CHECKMATE, Color.WHITE), Color.WHITE
        ) == "Checkmate! You lose."
        assert outcome_label(
            Outcome(Termination.CHECKMATE, Color.BLACK), Color.WHITE
        ) == "Checkmate! You win!"

    def test_timeout(self) -> None:
        assert outcome_label(
            Outcome(Termination.TIMEOUT, Color.WHITE), Color.WHITE
        ) == "Time out! You lose."

    @pytest.mark.parametrize(
        ("termination", "label"),
        [
            (Termination.STALEMATE, "Stalemate!"),
            (Termination.INSUFFICIENT_MATERIAL, "Draw by insufficient material!"),
            (Termination.THREEFOLD_REPETITION, "Draw by repetition!"),
            (Termination.FIFTY_MOVES, "Draw by fifty-move rule!"),
            (Termination.ABANDONED, "Game abandoned."),
        ],
    )
    def test_result_without_loser(self, termination: Termination, label: str) -> None:
        assert outcome_label(Outcome(termination), Color.BLACK) == label


def test_phase_order() -> None:
    assert SessionPhase.NOT_STARTED < SessionPhase.IN_PROGRESS < SessionPhase.FINISHED
