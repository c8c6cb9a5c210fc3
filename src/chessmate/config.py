"""Session configuration."""

from __future__ import annotations

from dataclasses import dataclass

from chessmate.core.enums import Color
from chessmate.engine.search import SearchLimits


@dataclass
class SessionConfig:
    """All tunable settings of a game session."""

    # Players
    human_color: Color = Color.WHITE

    # Engine
    search_depth: int = 2

    # Clock: one shared countdown, in ticks (seconds by default)
    clock_budget: int = 600
    tick_interval_ms: int = 1000

    # Cosmetic pause before the engine reply is dispatched
    reply_delay_ms: int = 300

    # Rules
    fifty_move_rule: bool = False
    history_limit: int | None = None

    @property
    def engine_color(self) -> Color:
        return self.human_color.opposite

    def search_limits(self) -> SearchLimits:
        return SearchLimits(depth=self.search_depth)

    def validate(self) -> None:
        """Raise ``ValueError`` on settings the session cannot run with."""
        if self.search_depth < 1:
            raise ValueError(f"search_depth must be >= 1, got {self.search_depth}")
        if self.clock_budget < 1:
            raise ValueError(f"clock_budget must be >= 1, got {self.clock_budget}")
        if self.tick_interval_ms < 1:
            raise ValueError(
                f"tick_interval_ms must be >= 1, got {self.tick_interval_ms}"
            )
        if self.reply_delay_ms < 0:
            raise ValueError(f"reply_delay_ms must be >= 0, got {self.reply_delay_ms}")
        if self.history_limit is not None and self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1, got {self.history_limit}")
