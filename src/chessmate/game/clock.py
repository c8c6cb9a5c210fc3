"""Shared countdown clock driven by explicit ticks."""

from __future__ import annotations


class CountdownClock:
    """A single countdown shared by both players.

    The clock never reads wall time. It only moves when :meth:`tick` is
    called, so its state is a pure function of the ticks received.
    """

    __slots__ = ("_budget", "_remaining")

    def __init__(self, budget: int) -> None:
        if budget < 0:
            raise ValueError(f"Clock budget must be >= 0, got {budget}")
        self._budget = budget
        self._remaining = budget

    def tick(self, units: int = 1) -> int:
        """Consume *units* and return the remaining budget (never below 0)."""
        if units < 0:
            raise ValueError(f"Cannot tick a negative amount: {units}")
        self._remaining = max(0, self._remaining - units)
        return self._remaining

    def reset(self, budget: int | None = None) -> None:
        if budget is not None:
            if budget < 0:
                raise ValueError(f"Clock budget must be >= 0, got {budget}")
            self._budget = budget
        self._remaining = self._budget

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_expired(self) -> bool:
        return self._remaining <= 0

    def __repr__(self) -> str:
        return f"CountdownClock({self._remaining}/{self._budget})"
