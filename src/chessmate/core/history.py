"""Position history used for repetition detection."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chessmate.core.position import Position


class PositionHistory:
    """Ordered record of the positions that occurred in one game.

    Only repetition keys are stored, with an occurrence counter, so
    ``count`` is O(1). The game session owns one instance and pushes every
    position it reaches, the current one included. The search walks an
    unbounded copy of it.

    Args:
        max_length: Optional bound. When exceeded, the oldest entry is
            forgotten.
    """

    __slots__ = ("_keys", "_counts", "_max_length")

    def __init__(self, max_length: int | None = None) -> None:
        if max_length is not None and max_length < 1:
            raise ValueError("max_length must be >= 1")
        self._keys: deque[int] = deque()
        self._counts: dict[int, int] = {}
        self._max_length = max_length

    def push(self, position: Position) -> None:
        key = position.key
        self._keys.append(key)
        self._counts[key] = self._counts.get(key, 0) + 1
        if self._max_length is not None and len(self._keys) > self._max_length:
            self._forget(self._keys.popleft())

    def pop(self) -> None:
        """Forget the most recent entry."""
        self._forget(self._keys.pop())

    def count(self, position: Position) -> int:
        """How many times *position* occurs in the history."""
        return self._counts.get(position.key, 0)

    def clear(self) -> None:
        self._keys.clear()
        self._counts.clear()

    def copy(self, *, unbounded: bool = False) -> PositionHistory:
        """Independent copy; *unbounded* drops the length limit.

        A bounded history forgets its oldest key on ``push`` and ``pop`` does
        not bring it back, so tree walks that push and pop need an unbounded
        copy to keep the counts intact.
        """
        clone = PositionHistory(None if unbounded else self._max_length)
        clone._keys = self._keys.copy()
        clone._counts = self._counts.copy()
        return clone

    @property
    def max_length(self) -> int | None:
        return self._max_length

    def __len__(self) -> int:
        return len(self._keys)

    def _forget(self, key: int) -> None:
        remaining = self._counts[key] - 1
        if remaining:
            self._counts[key] = remaining
        else:
            del self._counts[key]
