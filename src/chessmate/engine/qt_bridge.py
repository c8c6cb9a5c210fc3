"""Qt worker that runs the minimax search off the GUI thread."""

from __future__ import annotations

import logging
import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chessmate.core.history import PositionHistory
from chessmate.core.position import Position
from chessmate.engine.minimax import MinimaxSearchEngine
from chessmate.engine.search import IEngine, SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)


class EngineWorker(QObject):
    """Computes engine replies for a host living in another thread.

    Every request carries an id which is echoed in exactly one of the
    outcome signals, so the host can tell a late answer from a current one.
    The position and history handed to :meth:`request_move` must be private
    copies; the search walks them in place.
    """

    # request_id, move, score, depth, nodes
    best_move_ready = pyqtSignal(int, object, int, int, int)
    # request_id
    search_cancelled = pyqtSignal(int)
    # request_id, score, depth, nodes
    search_no_move = pyqtSignal(int, int, int, int)
    # request_id, message
    search_error = pyqtSignal(int, str)

    __slots__ = ("_stop", "_engine", "_limits")

    def __init__(self, engine: IEngine | None = None, *, depth: int = 2) -> None:
        super().__init__()
        self._engine: IEngine = engine or MinimaxSearchEngine()
        self._limits = SearchLimits(depth=depth)
        self._stop = threading.Event()

    @property
    def depth(self) -> int:
        return self._limits.depth

    @pyqtSlot(object, object, int)
    def request_move(
        self,
        position_obj: object,
        history_obj: object,
        request_id: int,
    ) -> None:
        """Search *position_obj* and report through one of the signals."""
        if not isinstance(position_obj, Position):
            self.search_error.emit(request_id, "Engine received invalid position")
            return
        history = history_obj if isinstance(history_obj, PositionHistory) else None

        self._stop.clear()
        _LOGGER.debug("Search %d started at depth %d", request_id, self._limits.depth)
        try:
            result = self._engine.search(
                position_obj,
                self._limits,
                is_cancelled=self._stop.is_set,
                history=history,
            )
        except Exception as exc:
            _LOGGER.warning("Engine search %d failed: %s", request_id, exc)
            self.search_error.emit(request_id, str(exc))
            return
        self._report(request_id, result)

    def _report(self, request_id: int, result: SearchResult) -> None:
        if self._stop.is_set():
            self.search_cancelled.emit(request_id)
        elif result.best_move is None:
            self.search_no_move.emit(request_id, result.score, result.depth, result.nodes)
        else:
            self.best_move_ready.emit(
                request_id, result.best_move, result.score, result.depth, result.nodes
            )

    @pyqtSlot()
    def cancel(self) -> None:
        """Ask the running search, if any, to stop at its next node."""
        self._stop.set()

    @pyqtSlot(int)
    def set_depth(self, depth: int) -> None:
        """Change the search depth; applies from the next request."""
        if depth < 1:
            raise ValueError(f"Search depth must be >= 1, got {depth}")
        self._limits = SearchLimits(depth=depth)
