"""Session phases, move records and outcome labels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from chessmate.core.enums import Termination

if TYPE_CHECKING:
    from chessmate.core.enums import Color
    from chessmate.core.move import Move
    from chessmate.core.rules import Outcome


class SessionPhase(IntEnum):
    """Finite-state-machine states for a game session."""

    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    FINISHED = auto()


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single entry in the move list."""

    move: Move
    san: str
    color: Color
    fen_after: str


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of a session for presentation layers."""

    fen: str
    phase: SessionPhase
    outcome: Outcome
    label: str
    remaining: int
    last_move: MoveRecord | None


_DRAW_LABELS: dict[Termination, str] = {
    Termination.STALEMATE: "Stalemate!",
    Termination.INSUFFICIENT_MATERIAL: "Draw by insufficient material!",
    Termination.THREEFOLD_REPETITION: "Draw by repetition!",
    Termination.FIFTY_MOVES: "Draw by fifty-move rule!",
}


def outcome_label(outcome: Outcome, human_color: Color) -> str:
    """Human-facing result text, from the human player's point of view.

    Returns an empty string while the game is ongoing.
    """
    termination = outcome.termination
    if termination == Termination.ONGOING:
        return ""
    if termination == Termination.CHECKMATE:
        if outcome.loser == human_color:
            return "Checkmate! You lose."
        return "Checkmate! You win!"
    if termination == Termination.TIMEOUT:
        if outcome.loser == human_color:
            return "Time out! You lose."
        return "Time out! You win!"
    if termination == Termination.ABANDONED:
        return "Game abandoned."
    return _DRAW_LABELS[termination]
