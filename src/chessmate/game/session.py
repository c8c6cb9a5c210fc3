"""GameSession: one human against the engine, on a shared countdown.

Coordinates: Position, PositionHistory, Rules, CountdownClock, engine.
Emits events via simple callbacks so hosts and tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from chessmate.config import SessionConfig
from chessmate.core.enums import Color, PieceType, Termination
from chessmate.core.errors import IllegalMove, SessionNotActive
from chessmate.core.history import PositionHistory
from chessmate.core.move import Move
from chessmate.core.move_generator import find_move, legal_moves
from chessmate.core.notation import STARTING_FEN, move_to_san
from chessmate.core.piece import piece_type_from_letter
from chessmate.core.position import Position
from chessmate.core.rules import ONGOING, Outcome, Rules
from chessmate.core.types import Square, coerce_square
from chessmate.engine.minimax import MinimaxSearchEngine
from chessmate.engine.search import IEngine, SearchResult
from chessmate.game.clock import CountdownClock
from chessmate.game.state import MoveRecord, SessionPhase, SessionSnapshot, outcome_label

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord], None]
GameOverCallback = Callable[[Outcome], None]
PhaseCallback = Callable[[SessionPhase], None]
ClockTickCallback = Callable[[int], None]  # remaining


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_clock_tick: list[ClockTickCallback] = field(default_factory=list)


# ── Session ──────────────────────────────────────────────────────────────────


class GameSession:
    """Owns the authoritative position, history, clock and phase of a game.

    The human submits moves by origin and destination; the engine replies
    either synchronously (``apply_human_move(..., reply=True)``) or through
    :meth:`compute_engine_reply` and :meth:`submit_engine_move` when the
    search runs elsewhere. An engine move is only applied while the session
    is still in progress, so a reply that arrives after a timeout is
    discarded.

    Thread-safety: all methods must be called from a single thread.
    """

    __slots__ = (
        "_config",
        "_engine",
        "_position",
        "_history",
        "_clock",
        "_phase",
        "_outcome",
        "_moves",
        "events",
    )

    def __init__(
        self,
        config: SessionConfig | None = None,
        engine: IEngine | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._config.validate()
        self._engine: IEngine = engine or MinimaxSearchEngine(
            fifty_move_rule=self._config.fifty_move_rule
        )
        self._position = Position.initial()
        self._history = PositionHistory(self._config.history_limit)
        self._clock = CountdownClock(self._config.clock_budget)
        self._phase = SessionPhase.NOT_STARTED
        self._outcome = ONGOING
        self._moves: list[MoveRecord] = []
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def position(self) -> Position:
        """The live position. Callers must treat it as read-only."""
        return self._position

    @property
    def history(self) -> PositionHistory:
        return self._history

    @property
    def remaining(self) -> int:
        return self._clock.remaining

    @property
    def moves(self) -> tuple[MoveRecord, ...]:
        return tuple(self._moves)

    @property
    def is_in_progress(self) -> bool:
        return self._phase == SessionPhase.IN_PROGRESS

    @property
    def is_engine_turn(self) -> bool:
        return self._position.side_to_move == self._config.engine_color

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self, fen: str | None = None, *, reply: bool = True) -> None:
        """Reset everything and begin a new game.

        If the engine has the first move and *reply* is true, it moves
        before this call returns.
        """
        self._position = Position.parse(fen or STARTING_FEN)
        self._history = PositionHistory(self._config.history_limit)
        self._history.push(self._position)
        self._clock.reset(self._config.clock_budget)
        self._moves.clear()
        self._outcome = ONGOING
        self._set_phase(SessionPhase.IN_PROGRESS)
        _LOGGER.info(
            "Session started: human=%s depth=%d budget=%d",
            self._config.human_color,
            self._config.search_depth,
            self._config.clock_budget,
        )

        outcome = self._classify()
        if outcome.is_terminal:
            self._finish(outcome)
            return
        if reply and self.is_engine_turn:
            self._play_engine_reply()

    def abandon(self) -> None:
        """End the game without a result. No-op unless in progress."""
        if self.is_in_progress:
            self._finish(Outcome(Termination.ABANDONED))

    # ── Moves ────────────────────────────────────────────────────────────

    def apply_human_move(
        self,
        origin: Square | str,
        destination: Square | str,
        promotion: PieceType | str | None = None,
        *,
        reply: bool = True,
    ) -> MoveRecord:
        """Play the human's move and, when *reply* is true, the engine's answer.

        A pawn reaching the last rank promotes to a queen unless *promotion*
        says otherwise.

        Raises:
            SessionNotActive: the session is not in progress.
            IllegalMove: it is not the human's turn or the move is illegal.
        """
        self._require_in_progress()
        if self.is_engine_turn:
            raise IllegalMove(f"Not the human player's turn ({self._position.side_to_move})")

        try:
            from_sq = coerce_square(origin)
            to_sq = coerce_square(destination)
            promote_to = (
                piece_type_from_letter(promotion)
                if isinstance(promotion, str)
                else promotion
            )
        except ValueError as exc:
            raise IllegalMove(str(exc)) from exc

        move = find_move(self._position, from_sq, to_sq, promote_to)
        record = self._play(move)

        if reply and self.is_in_progress:
            self._play_engine_reply()
        return record

    def compute_engine_reply(self) -> SearchResult:
        """Run the engine on private copies of the position and history.

        Raises:
            SessionNotActive: the session is not in progress.
            IllegalMove: it is not the engine's turn.
        """
        self._require_in_progress()
        if not self.is_engine_turn:
            raise IllegalMove(f"Not the engine's turn ({self._position.side_to_move})")
        return self._engine.search(
            self._position.copy(),
            self._config.search_limits(),
            history=self._history.copy(),
        )

    def submit_engine_move(self, move: Move, *, expected_key: int | None = None) -> bool:
        """Apply an engine move computed earlier; ``False`` if it no longer fits.

        The move is rejected when the session has left ``IN_PROGRESS``, when
        it is not the engine's turn, when the position changed since the
        search started (*expected_key*) or when the move is not legal.
        """
        if not self.is_in_progress:
            _LOGGER.debug("Engine move %s dropped: session %s", move, self._phase.name)
            return False
        if not self.is_engine_turn:
            _LOGGER.warning("Engine move %s dropped: not the engine's turn", move)
            return False
        if expected_key is not None and expected_key != self._position.key:
            _LOGGER.warning("Engine move %s dropped: position changed", move)
            return False
        if move not in legal_moves(self._position):
            _LOGGER.warning("Engine move %s dropped: illegal in %s", move, self._position)
            return False
        self._play(move)
        return True

    # ── Clock ────────────────────────────────────────────────────────────

    def tick(self, elapsed_units: int = 1) -> int:
        """Advance the shared countdown and return what is left.

        Running out finishes the game as a timeout lost by the human. Ticks
        outside ``IN_PROGRESS`` change nothing.
        """
        if elapsed_units < 0:
            raise ValueError(f"Cannot tick a negative amount: {elapsed_units}")
        if not self.is_in_progress:
            return self._clock.remaining

        remaining = self._clock.tick(elapsed_units)
        _LOGGER.debug("Clock tick: -%d -> %d", elapsed_units, remaining)
        self._emit_clock_tick(remaining)
        if self._clock.is_expired:
            self._finish(Outcome(Termination.TIMEOUT, self._config.human_color))
        return remaining

    # ── Outbound ─────────────────────────────────────────────────────────

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            fen=self._position.serialize(),
            phase=self._phase,
            outcome=self._outcome,
            label=outcome_label(self._outcome, self._config.human_color),
            remaining=self._clock.remaining,
            last_move=self._moves[-1] if self._moves else None,
        )

    # ── Internal helpers ─────────────────────────────────────────────────

    def _require_in_progress(self) -> None:
        if not self.is_in_progress:
            raise SessionNotActive(f"Session is {self._phase.name}, not IN_PROGRESS")

    def _play_engine_reply(self) -> None:
        key = self._position.key
        result = self.compute_engine_reply()
        if result.best_move is None:
            _LOGGER.warning("Engine returned no move in %s", self._position)
            return
        self.submit_engine_move(result.best_move, expected_key=key)

    def _play(self, move: Move) -> MoveRecord:
        color: Color = self._position.side_to_move
        san = move_to_san(self._position, move)
        self._position.make_move(move)
        self._history.push(self._position)

        record = MoveRecord(
            move=move,
            san=san,
            color=color,
            fen_after=self._position.serialize(),
        )
        self._moves.append(record)
        self._emit_move(record)

        outcome = self._classify()
        if outcome.is_terminal:
            self._finish(outcome)
        return record

    def _classify(self) -> Outcome:
        return Rules.classify(
            self._position,
            self._history,
            fifty_move_rule=self._config.fifty_move_rule,
        )

    def _finish(self, outcome: Outcome) -> None:
        self._outcome = outcome
        self._set_phase(SessionPhase.FINISHED)
        _LOGGER.info(
            "Session finished: %s (%s)",
            outcome.termination.name,
            outcome_label(outcome, self._config.human_color),
        )
        self._emit_game_over(outcome)

    def _set_phase(self, phase: SessionPhase) -> None:
        self._phase = phase
        self._emit_phase(phase)

    def _emit_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record)

    def _emit_game_over(self, outcome: Outcome) -> None:
        for cb in self.events.on_game_over:
            cb(outcome)

    def _emit_phase(self, phase: SessionPhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_clock_tick(self, remaining: int) -> None:
        for cb in self.events.on_clock_tick:
            cb(remaining)
