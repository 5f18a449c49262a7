"""Time-bucketed analytics over the chat-turn log.

All views are computed over one :class:`TurnWindow`: the rows of a batch that
carry a valid timestamp inside ``[start, end]``. Day and hour buckets use the
injected :class:`~chat_insights.core.clock.LocalClock`, so results do not depend
on the zone the process runs in.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from chat_insights.core.clock import LocalClock
from chat_insights.services.sessions import RawTurn, partition_turns

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


class Period(str, Enum):
    """Trailing analysis periods offered to the dashboard."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"

    @property
    def days(self) -> int:
        return 30 if self is Period.LAST_30_DAYS else 7

    @classmethod
    def coerce(cls, value: Period | str | None) -> Period:
        """Return ``value`` as a Period, falling back to seven days."""
        if isinstance(value, Period):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.debug("Unknown period %r, using %s", value, DEFAULT_PERIOD.value)
            return DEFAULT_PERIOD


DEFAULT_PERIOD = Period.LAST_7_DAYS


@dataclass(frozen=True, slots=True)
class DailyPoint:
    date: str
    count: int


@dataclass(frozen=True, slots=True)
class HourlyPoint:
    hour: str
    count: int


@dataclass(frozen=True, slots=True)
class PrefixCount:
    prefix: str
    count: int


@dataclass(frozen=True, slots=True)
class SummaryStats:
    """Headline numbers for a period.

    ``total_conversations`` counts rows, not sessions; the dashboard has always
    labelled the row count that way.
    """

    total_conversations: int
    unique_sessions: int
    last_conversation_time: datetime


@dataclass(slots=True)
class TurnWindow:
    """Validated rows that fall inside ``[start, end]``, in source order."""

    start: datetime
    end: datetime
    turns: list[tuple[datetime, RawTurn]] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.turns)


@dataclass(frozen=True, slots=True)
class Aggregates:
    """Every derived view for one window."""

    stats: SummaryStats
    daily: list[DailyPoint]
    hourly: list[HourlyPoint]
    prefixes: list[PrefixCount]
    skipped: int = 0


def period_bounds(period: Period | str | None, clock: LocalClock) -> tuple[datetime, datetime]:
    """Return ``(start, now)`` for ``period`` in the clock's zone."""
    resolved = Period.coerce(period)
    end = clock.now()
    return end - timedelta(days=resolved.days), end


class AggregationEngine:
    """Computes daily, hourly, prefix and summary views from chat turns.

    Args:
        clock: Adapter that fixes "now" and the civil timezone.
        country_code: Digits a session id must start with before the area code.
        unknown_label: Bucket for session ids that do not match the pattern.
    """

    def __init__(
        self,
        clock: LocalClock,
        *,
        country_code: str = "55",
        unknown_label: str = "unknown",
    ) -> None:
        self.clock = clock
        self.unknown_label = unknown_label
        self._prefix_pattern = re.compile(rf"^{re.escape(country_code)}(\d{{2}})", re.ASCII)

    def bounds(self, period: Period | str | None = DEFAULT_PERIOD) -> tuple[datetime, datetime]:
        return period_bounds(period, self.clock)

    def extract_prefix(self, session_id: str) -> str:
        """Return the two-digit area code in ``session_id`` or the unknown label."""
        match = self._prefix_pattern.match(session_id)
        return match.group(1) if match else self.unknown_label

    def window(self, rows: Iterable[RawTurn], start: datetime, end: datetime) -> TurnWindow:
        """Validate ``rows`` once and keep those timestamped inside ``[start, end]``."""
        valid, skipped = partition_turns(rows)
        window = TurnWindow(start=start, end=end, skipped=skipped)
        window.turns = [(instant, turn) for instant, turn in valid if start <= instant <= end]
        return window

    def daily(self, window: TurnWindow) -> list[DailyPoint]:
        """Return one point per civil date in the window, zero-filled, ascending."""
        counts = dict.fromkeys(self.clock.iter_dates(window.start, window.end), 0)
        for instant, _ in window.turns:
            key = self.clock.date_key(instant)
            counts[key] = counts.get(key, 0) + 1
        return [DailyPoint(date=day, count=count) for day, count in sorted(counts.items())]

    def hourly(self, window: TurnWindow) -> list[HourlyPoint]:
        """Return 24 points, ``"00"`` through ``"23"``, zero-filled."""
        counts = [0] * HOURS_PER_DAY
        for instant, _ in window.turns:
            counts[self.clock.hour_of(instant)] += 1
        return [HourlyPoint(hour=f"{hour:02d}", count=count) for hour, count in enumerate(counts)]

    def prefixes(self, window: TurnWindow) -> list[PrefixCount]:
        """Return unique session counts per prefix, largest first.

        Ties keep the order in which each prefix first appeared.
        """
        clients: dict[str, set[str]] = {}
        for _, turn in window.turns:
            clients.setdefault(self.extract_prefix(turn.session_id), set()).add(turn.session_id)
        ranked = sorted(clients.items(), key=lambda item: len(item[1]), reverse=True)
        return [PrefixCount(prefix=prefix, count=len(ids)) for prefix, ids in ranked]

    def summary(self, window: TurnWindow) -> SummaryStats:
        """Return row count, distinct sessions and latest timestamp in the window."""
        if window.turns:
            latest = self.clock.localize(max(instant for instant, _ in window.turns))
        else:
            latest = self.clock.localize(window.end)
        return SummaryStats(
            total_conversations=len(window.turns),
            unique_sessions=len({turn.session_id for _, turn in window.turns}),
            last_conversation_time=latest,
        )

    def aggregate(self, rows: Iterable[RawTurn], start: datetime, end: datetime) -> Aggregates:
        """Compute every view over the same window of ``rows``."""
        window = self.window(rows, start, end)
        return Aggregates(
            stats=self.summary(window),
            daily=self.daily(window),
            hourly=self.hourly(window),
            prefixes=self.prefixes(window),
            skipped=window.skipped,
        )


__all__ = [
    "Aggregates",
    "AggregationEngine",
    "DEFAULT_PERIOD",
    "DailyPoint",
    "HourlyPoint",
    "Period",
    "PrefixCount",
    "SummaryStats",
    "TurnWindow",
    "period_bounds",
]
