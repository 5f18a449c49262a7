# src/chat_insights/services/__init__.py
"""Analytics core: rate limiting, session reconstruction and aggregation.

``AnalyticsService`` lives in :mod:`chat_insights.services.analytics`; it is not
re-exported here because it depends on the repositories package, which in turn
imports the session types below.
"""

from .aggregation import AggregationEngine, Period
from .rate_limit import SlidingWindowRateLimiter, rate_limit_key
from .sessions import Message, RawTurn, Session, SessionReconstructor

__all__ = [
    "AggregationEngine",
    "Message",
    "Period",
    "RawTurn",
    "Session",
    "SessionReconstructor",
    "SlidingWindowRateLimiter",
    "rate_limit_key",
]
