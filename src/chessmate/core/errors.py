"""Exception taxonomy for the rules authority and the game session.

All errors are local and recoverable: callers reject the input and re-prompt,
or treat the call as a no-op.
"""

from __future__ import annotations


class ChessError(Exception):
    """Base class for every error raised by chessmate."""


class MalformedPosition(ChessError, ValueError):
    """Serialized position text violates a structural invariant."""


class IllegalMove(ChessError, ValueError):
    """Requested move is not among the legal moves of the current position."""


class SessionNotActive(ChessError, RuntimeError):
    """A mutating session call arrived before start or after the game ended."""
