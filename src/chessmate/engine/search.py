"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chessmate.core.history import PositionHistory
    from chessmate.core.move import Move
    from chessmate.core.position import Position

CancelCheck = Callable[[], bool]

# Root alpha-beta window.
SEARCH_WINDOW = 10_000


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation."""

    depth: int = 2


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``best_move`` is ``None`` when the root has no legal move or the search
    was asked for depth 0.
    """

    best_move: Move | None
    score: int
    depth: int
    nodes: int


class IEngine(Protocol):
    """Protocol for chess engines used by the game layer."""

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
        history: PositionHistory | None = None,
    ) -> SearchResult: ...
