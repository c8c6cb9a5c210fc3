"""Chess engine package: evaluation, minimax search and Qt worker bridge."""

from chessmate.engine.evaluation import (
    MATE_SCORE,
    PIECE_VALUES,
    IEvaluator,
    MaterialEvaluator,
)
from chessmate.engine.minimax import MinimaxSearchEngine
from chessmate.engine.search import (
    SEARCH_WINDOW,
    CancelCheck,
    IEngine,
    SearchLimits,
    SearchResult,
)

__all__ = [
    "MATE_SCORE",
    "PIECE_VALUES",
    "SEARCH_WINDOW",
    "CancelCheck",
    "IEngine",
    "IEvaluator",
    "MaterialEvaluator",
    "MinimaxSearchEngine",
    "SearchLimits",
    "SearchResult",
]
