"""Shared API dependencies for the analytics endpoints."""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from chat_insights.core.clock import LocalClock
from chat_insights.core.settings import settings
from chat_insights.db.session import get_db
from chat_insights.repositories.chat_history_repo import ChatHistoryRepository, ContactRepository
from chat_insights.services.analytics import AnalyticsService
from chat_insights.services.rate_limit import SlidingWindowRateLimiter

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """Return the process-wide limiter created at startup."""
    return request.app.state.rate_limiter


def get_clock(request: Request) -> LocalClock:
    """Return the fixed-timezone clock created at startup."""
    return request.app.state.clock


RateLimiterDep = Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)]
ClockDep = Annotated[LocalClock, Depends(get_clock)]


def get_analytics_service(
    db: SessionDep,
    limiter: RateLimiterDep,
    clock: ClockDep,
) -> AnalyticsService:
    """Build a request-scoped analytics service over the shared limiter.

    Args:
        db: Database session backing the row store
        limiter: Shared rate limiter
        clock: Shared clock adapter

    Returns:
        AnalyticsService bound to this request's session
    """
    return AnalyticsService(
        ChatHistoryRepository(db),
        limiter,
        clock,
        contacts=ContactRepository(db),
        recent_limit=settings.recent_conversations_limit,
        country_code=settings.phone_country_code,
        unknown_label=settings.unknown_prefix_label,
    )


def get_subject(
    x_client_id: Annotated[str | None, Header(max_length=128)] = None,
) -> str | None:
    """Return the caller-supplied rate-limit subject, if any."""
    if x_client_id is None:
        return None
    return x_client_id.strip() or None


AnalyticsDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
SubjectDep = Annotated[str | None, Depends(get_subject)]
