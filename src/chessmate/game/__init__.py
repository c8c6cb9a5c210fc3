"""Game management layer: session state machine, countdown clock, Qt host.

Quick start::

    from chessmate.game import GameSession

    session = GameSession()
    session.start()
    session.apply_human_move("e2", "e4")  # engine answers immediately
    print(session.snapshot().fen)
"""

from chessmate.game.clock import CountdownClock
from chessmate.game.session import GameEvents, GameSession
from chessmate.game.state import MoveRecord, SessionPhase, SessionSnapshot, outcome_label

__all__ = [
    "CountdownClock",
    "GameEvents",
    "GameSession",
    "MoveRecord",
    "SessionPhase",
    "SessionSnapshot",
    "outcome_label",
]
