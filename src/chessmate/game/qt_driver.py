"""Qt host for a GameSession: clock ticks and off-thread engine replies."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from chessmate.core.enums import PieceType
from chessmate.core.history import PositionHistory
from chessmate.core.move import Move
from chessmate.core.position import Position
from chessmate.core.rules import Outcome
from chessmate.core.types import Square
from chessmate.engine.minimax import MinimaxSearchEngine
from chessmate.engine.qt_bridge import EngineWorker
from chessmate.engine.search import IEngine
from chessmate.game.session import GameSession
from chessmate.game.state import MoveRecord

_LOGGER = logging.getLogger(__name__)


class EngineRequestSignal(Protocol):
    """Minimal signal interface used by :class:`SessionDriver`."""

    def connect(self, slot: Callable[..., object]) -> object: ...

    def emit(self, position_obj: object, history_obj: object, request_id: int) -> object: ...


class _EngineCommandBus(QObject):
    """Signal bridge for queuing search requests into the worker thread."""

    move_requested = pyqtSignal(object, object, int)


class SessionDriver:
    """Runs a :class:`GameSession` under a Qt event loop.

    A repeating timer ticks the session clock. After each human move the
    engine reply is dispatched, following a short cosmetic delay, to an
    :class:`EngineWorker` living in its own thread. Results carry a request
    id; anything but the latest request is dropped, and the session itself
    refuses moves once the game is over.
    """

    __slots__ = (
        "__weakref__",
        "_session",
        "_engine_request",
        "_command_bus",
        "_tick_timer",
        "_dispatch_timer",
        "_engine_thread",
        "_engine_worker",
        "_engine_request_id",
        "_pending_engine_request",
        "_pending_engine_position",
        "_pending_engine_history",
        "_pending_engine_key",
        "_is_shutting_down",
        "_is_started",
    )

    def __init__(
        self,
        session: GameSession,
        *,
        engine: IEngine | None = None,
        engine_request: EngineRequestSignal | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._session = session
        config = session.config

        self._command_bus = _EngineCommandBus(parent)
        self._engine_request: EngineRequestSignal = (
            engine_request
            if engine_request is not None
            else self._command_bus.move_requested
        )

        self._tick_timer = QTimer(parent)
        self._tick_timer.setInterval(config.tick_interval_ms)
        self._tick_timer.timeout.connect(self._on_tick)

        self._dispatch_timer = QTimer(parent)
        self._dispatch_timer.setSingleShot(True)
        self._dispatch_timer.timeout.connect(self._emit_pending_request)

        self._engine_thread = QThread(parent)
        self._engine_worker = EngineWorker(
            engine or MinimaxSearchEngine(fifty_move_rule=config.fifty_move_rule),
            depth=config.search_depth,
        )
        self._engine_request_id = 0
        self._pending_engine_request: int | None = None
        self._pending_engine_position: Position | None = None
        self._pending_engine_history: PositionHistory | None = None
        self._pending_engine_key: int | None = None
        self._is_shutting_down = False
        self._is_started = False

        session.events.on_game_over.append(self._on_game_over)

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def is_engine_pending(self) -> bool:
        return self._pending_engine_request is not None

    def setup(self) -> None:
        """Start the engine worker in a dedicated thread and connect callbacks."""
        if self._is_started:
            return
        self._is_shutting_down = False
        self._engine_worker.moveToThread(self._engine_thread)
        self._engine_request.connect(self._engine_worker.request_move)
        self._engine_worker.best_move_ready.connect(self._on_engine_best_move)
        self._engine_worker.search_cancelled.connect(self._on_engine_cancelled)
        self._engine_worker.search_no_move.connect(self._on_engine_no_move)
        self._engine_worker.search_error.connect(self._on_engine_error)
        self._engine_thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        """Stop timers, cancel any search and shut down the worker thread."""
        self._tick_timer.stop()
        if not self._is_started:
            return
        self._is_shutting_down = True
        self.cancel_engine_search()
        self._engine_thread.quit()
        self._engine_thread.wait(2000)
        self._is_started = False

    # ── Commands ─────────────────────────────────────────────────────────

    def start_game(self, fen: str | None = None) -> None:
        """Start a new game, the clock timer and, if due, the engine."""
        self.cancel_engine_search()
        self._session.start(fen, reply=False)
        if not self._session.is_in_progress:
            return
        self._tick_timer.start()
        if self._session.is_engine_turn:
            self.request_engine_move()

    def human_move(
        self,
        origin: Square | str,
        destination: Square | str,
        promotion: PieceType | str | None = None,
    ) -> MoveRecord:
        """Forward a human move; errors from the session propagate unchanged."""
        record = self._session.apply_human_move(
            origin, destination, promotion, reply=False
        )
        if self._session.is_in_progress and self._session.is_engine_turn:
            self.request_engine_move()
        return record

    def request_engine_move(self) -> None:
        """Queue an engine search for the current position."""
        if self._is_shutting_down:
            return
        self.cancel_engine_search()

        self._engine_request_id += 1
        self._pending_engine_request = self._engine_request_id
        self._pending_engine_position = self._session.position.copy()
        self._pending_engine_history = self._session.history.copy()
        self._pending_engine_key = self._session.position.key
        self._dispatch_timer.start(self._session.config.reply_delay_ms)

    def cancel_engine_search(self) -> None:
        """Cancel any pending or active engine request.

        The worker's stop flag is set from this thread. A queued slot call
        would only run once the worker's busy search had already finished.
        """
        self._dispatch_timer.stop()
        self._clear_pending_request()
        self._engine_worker.cancel()

    # ── Slots ────────────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        self._session.tick(1)

    def _on_game_over(self, _outcome: Outcome) -> None:
        self._tick_timer.stop()
        self.cancel_engine_search()

    def _emit_pending_request(self) -> None:
        if self._is_shutting_down:
            return
        request_id = self._pending_engine_request
        position = self._pending_engine_position
        if request_id is None or position is None:
            return
        self._engine_request.emit(position, self._pending_engine_history, request_id)

    def _on_engine_best_move(
        self,
        request_id: int,
        move_obj: object,
        score: int,
        depth: int,
        nodes: int,
    ) -> None:
        if self._is_shutting_down:
            return
        if request_id != self._pending_engine_request:
            _LOGGER.warning("Dropping stale engine result for request %d", request_id)
            return
        if not isinstance(move_obj, Move):
            return

        expected_key = self._pending_engine_key
        self._clear_pending_request()
        _LOGGER.debug(
            "Engine reply %s (score=%d depth=%d nodes=%d)", move_obj, score, depth, nodes
        )
        if not self._session.submit_engine_move(move_obj, expected_key=expected_key):
            _LOGGER.warning("Engine move %s was not applied", move_obj)

    def _on_engine_cancelled(self, request_id: int) -> None:
        if request_id == self._pending_engine_request:
            self._clear_pending_request()

    def _on_engine_no_move(
        self,
        request_id: int,
        _score: int,
        _depth: int,
        _nodes: int,
    ) -> None:
        self._handle_engine_failure(request_id, "Engine produced no move")

    def _on_engine_error(self, request_id: int, message: str) -> None:
        self._handle_engine_failure(request_id, message)

    def _handle_engine_failure(self, request_id: int, message: str) -> None:
        if self._is_shutting_down:
            return
        if request_id != self._pending_engine_request:
            return
        self._clear_pending_request()
        _LOGGER.warning("Engine request %d failed: %s", request_id, message)

    def _clear_pending_request(self) -> None:
        self._pending_engine_request = None
        self._pending_engine_position = None
        self._pending_engine_history = None
        self._pending_engine_key = None
