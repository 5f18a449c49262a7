"""Dashboard-facing analytics over the chat-turn log.

:class:`AnalyticsService` is the single entry point for read operations. Each
call is admitted by the shared rate limiter, pulls rows from the row store
once and derives everything else in memory. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from chat_insights.core.clock import LocalClock
from chat_insights.core.errors import ChatInsightsError, CollaboratorError, SessionNotFoundError
from chat_insights.repositories.chat_history_repo import ChatHistoryStore, ContactDirectory
from chat_insights.services.aggregation import (
    DEFAULT_PERIOD,
    AggregationEngine,
    DailyPoint,
    HourlyPoint,
    Period,
    PrefixCount,
    SummaryStats,
    TurnWindow,
)
from chat_insights.services.rate_limit import SlidingWindowRateLimiter, rate_limit_key
from chat_insights.services.sessions import RawTurn, Session, SessionReconstructor, most_recent

logger = logging.getLogger(__name__)

CONVERSATIONS_SUBJECT = "conversations"
DASHBOARD_SUBJECT = "dashboard"
CONTACTS_SUBJECT = "contacts"


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    """Everything the dashboard renders for one period."""

    period: Period
    stats: SummaryStats
    recent_conversations: list[Session]
    daily: list[DailyPoint]
    hourly: list[HourlyPoint]
    prefixes: list[PrefixCount]
    skipped_rows: int = 0


class AnalyticsService:
    """Rate-limited read operations composed from the analytics core.

    Args:
        store: Row store collaborator.
        limiter: Process-wide limiter shared by every read path.
        clock: Fixed-timezone clock used for periods and buckets.
        contacts: Optional client directory for name lookups.
        recent_limit: How many sessions the dashboard summary includes.
        country_code: Leading digits stripped before the area code.
        unknown_label: Prefix bucket for unmatched session ids.
    """

    def __init__(
        self,
        store: ChatHistoryStore,
        limiter: SlidingWindowRateLimiter,
        clock: LocalClock,
        *,
        contacts: ContactDirectory | None = None,
        recent_limit: int = 10,
        country_code: str = "55",
        unknown_label: str = "unknown",
    ) -> None:
        self._store = store
        self._limiter = limiter
        self._contacts = contacts
        self.clock = clock
        self.recent_limit = recent_limit
        self.reconstructor = SessionReconstructor()
        self.engine = AggregationEngine(
            clock,
            country_code=country_code,
            unknown_label=unknown_label,
        )

    # --- conversations --------------------------------------------------------------
    def list_conversations(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = CONVERSATIONS_SUBJECT,
    ) -> list[Session]:
        """Return every session active in ``period``, most recent first."""
        self._admit(subject, "list")
        window = self._window(period)
        sessions = most_recent(self.reconstructor.reconstruct(turn for _, turn in window.turns).values())
        logger.info(
            "Conversations fetched (period=%s, sessions=%d, skipped=%d)",
            Period.coerce(period).value,
            len(sessions),
            window.skipped,
        )
        return sessions

    def get_conversation(self, session_id: str, *, subject: str = CONVERSATIONS_SUBJECT) -> Session:
        """Return the full history of ``session_id`` regardless of period.

        Raises:
            SessionNotFoundError: If the session has no valid rows.
        """
        self._admit(subject, "get")
        session = self.reconstructor.reconstruct_one(session_id, self._fetch(session_id=session_id))
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    # --- dashboard views ------------------------------------------------------------
    def dashboard_stats(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = DASHBOARD_SUBJECT,
    ) -> SummaryStats:
        self._admit(subject, "stats")
        return self.engine.summary(self._window(period))

    def daily_volume(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = DASHBOARD_SUBJECT,
    ) -> list[DailyPoint]:
        self._admit(subject, "daily")
        return self.engine.daily(self._window(period))

    def hourly_volume(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = DASHBOARD_SUBJECT,
    ) -> list[HourlyPoint]:
        self._admit(subject, "hourly")
        return self.engine.hourly(self._window(period))

    def prefix_distribution(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = DASHBOARD_SUBJECT,
    ) -> list[PrefixCount]:
        self._admit(subject, "prefixes")
        return self.engine.prefixes(self._window(period))

    def dashboard(
        self,
        period: Period | str = DEFAULT_PERIOD,
        *,
        subject: str = DASHBOARD_SUBJECT,
    ) -> DashboardSummary:
        """Return stats, recent sessions and every series from a single fetch."""
        self._admit(subject, "summary")
        resolved = Period.coerce(period)
        start, end = self.engine.bounds(resolved)
        rows = self._fetch(start=start, end=end)

        window = self.engine.window(rows, start, end)
        sessions = self.reconstructor.reconstruct(turn for _, turn in window.turns)
        summary = DashboardSummary(
            period=resolved,
            stats=self.engine.summary(window),
            recent_conversations=most_recent(sessions.values(), self.recent_limit),
            daily=self.engine.daily(window),
            hourly=self.engine.hourly(window),
            prefixes=self.engine.prefixes(window),
            skipped_rows=window.skipped,
        )
        logger.debug(
            "Dashboard computed (period=%s, rows=%d, sessions=%d)",
            resolved.value,
            len(window),
            len(sessions),
        )
        return summary

    # --- contacts -------------------------------------------------------------------
    def contact_name(self, phone: str, *, subject: str = CONTACTS_SUBJECT) -> str | None:
        """Return the directory name for ``phone``; None when unknown."""
        self._admit(subject, "get_name")
        if self._contacts is None:
            return None
        try:
            return self._contacts.find_name_by_phone(phone)
        except ChatInsightsError:
            raise
        except Exception as exc:
            raise CollaboratorError("Contact directory lookup failed") from exc

    # --- helpers --------------------------------------------------------------------
    def _admit(self, subject: str, operation: str) -> None:
        self._limiter.enforce(rate_limit_key(subject, operation))

    def _window(self, period: Period | str) -> TurnWindow:
        start, end = self.engine.bounds(period)
        return self.engine.window(self._fetch(start=start, end=end), start, end)

    def _fetch(
        self,
        *,
        session_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RawTurn]:
        try:
            return list(self._store.query_rows(session_id=session_id, start=start, end=end))
        except ChatInsightsError:
            raise
        except Exception as exc:
            logger.error("Row store query failed", exc_info=True)
            raise CollaboratorError("Row store query failed") from exc


__all__ = [
    "AnalyticsService",
    "CONTACTS_SUBJECT",
    "CONVERSATIONS_SUBJECT",
    "DASHBOARD_SUBJECT",
    "DashboardSummary",
]
