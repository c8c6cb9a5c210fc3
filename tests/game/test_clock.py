"""Tests for the shared countdown clock."""

import pytest

from chessmate.game.clock import CountdownClock


class TestCountdownClock:
    def test_starts_full(self) -> None:
        clock = CountdownClock(600)
        assert clock.remaining == 600
        assert clock.budget == 600
        assert not clock.is_expired

    def test_tick_decrements(self) -> None:
        clock = CountdownClock(10)
        assert clock.tick() == 9
        assert clock.tick(4) == 5
        assert clock.remaining == 5

    def test_zero_tick_is_noop(self) -> None:
        clock = CountdownClock(10)
        assert clock.tick(0) == 10

    def test_never_goes_negative(self) -> None:
        clock = CountdownClock(3)
        assert clock.tick(5) == 0
        assert clock.is_expired
        assert clock.tick() == 0

    def test_negative_tick_rejected(self) -> None:
        clock = CountdownClock(10)
        with pytest.raises(ValueError, match="negative"):
            clock.tick(-1)
        assert clock.remaining == 10

    def test_reset_restores_budget(self) -> None:
        clock = CountdownClock(10)
        clock.tick(7)
        clock.reset()
        assert clock.remaining == 10

    def test_reset_with_new_budget(self) -> None:
        clock = CountdownClock(10)
        clock.reset(30)
        assert clock.remaining == 30
        assert clock.budget == 30

    def test_negative_budget_rejected(self) -> None:
        with pytest.raises(ValueError):
            CountdownClock(-5)

    def test_same_ticks_same_state(self) -> None:
        a, b = CountdownClock(100), CountdownClock(100)
        for units in (1, 3, 0, 7):
            a.tick(units)
            b.tick(units)
        assert a.remaining == b.remaining == 89
