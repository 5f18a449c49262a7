"""Typed failures raised by the analytics core.

Callers tell a throttled query apart from a failed fetch and from an empty
result by exception type alone; logging never carries that signal.
"""

from __future__ import annotations


class ChatInsightsError(RuntimeError):
    """Base exception for chat-insights failures."""


class ThrottledError(ChatInsightsError):
    """Raised when the rate limiter rejects an operation.

    Attributes:
        key: The ``"<subject>:<operation>"`` key that was rejected.
        retry_after: Seconds until the oldest admission leaves the window.
    """

    def __init__(self, key: str, retry_after: float = 0.0) -> None:
        super().__init__(f"Rate limit exceeded for {key!r}")
        self.key = key
        self.retry_after = max(0.0, retry_after)


class CollaboratorError(ChatInsightsError):
    """Raised when the row store cannot serve a query.

    The original exception is chained as ``__cause__``; the core never retries.
    """


class MalformedRowError(ChatInsightsError):
    """Raised for a row that fails timestamp or shape validation.

    Handled inside the core: the row is skipped and counted, the batch goes on.
    """

    def __init__(
        self,
        reason: str,
        *,
        row_id: int | None = None,
        session_id: str | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.row_id = row_id
        self.session_id = session_id


class SessionNotFoundError(ChatInsightsError):
    """Raised when a session has no valid rows to reconstruct."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id!r} not found")
        self.session_id = session_id


__all__ = [
    "ChatInsightsError",
    "ThrottledError",
    "CollaboratorError",
    "MalformedRowError",
    "SessionNotFoundError",
]
