"""Clock adapter bound to one fixed civil timezone.

Every day and hour bucket is computed against the configured offset, never
against the zone of the host process. The adapter is constructed once at the
composition root and injected wherever "now" or a local calendar field is
needed; tests pass a frozen ``now_fn``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import date, datetime, timedelta, timezone

from chat_insights.db.time import coerce_instant, utcnow

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class LocalClock:
    """Converts instants to and from a fixed-offset civil timezone."""

    def __init__(
        self,
        utc_offset_minutes: int = -180,
        name: str = "America/Sao_Paulo",
        now_fn: Callable[[], datetime] = utcnow,
    ) -> None:
        self.name = name
        self.tz = timezone(timedelta(minutes=utc_offset_minutes), name)
        self._now_fn = now_fn

    def now(self) -> datetime:
        """Return the current instant expressed in the target zone."""
        return self.localize(self._now_fn())

    def localize(self, instant: datetime) -> datetime:
        """Return ``instant`` converted to the target zone.

        Naive datetimes are read as UTC.

        Raises:
            ValueError: If ``instant`` cannot be expressed in the target zone.
        """
        try:
            return coerce_instant(instant).astimezone(self.tz)
        except OverflowError as exc:
            raise ValueError(f"{instant!r} is out of range for {self.name}") from exc

    def date_key(self, instant: datetime) -> str:
        """Return the civil date (``YYYY-MM-DD``) of a validated instant."""
        return self.localize(instant).strftime(DATE_FORMAT)

    def hour_of(self, instant: datetime) -> int:
        """Return the civil hour (0-23) of a validated instant."""
        return self.localize(instant).hour

    def to_local_date(self, value: object) -> str:
        """Return the civil date of ``value`` or ``""`` if it cannot be parsed.

        Dashboard tiles call this with whatever the row store handed back, so an
        unparsable value yields the empty-string sentinel instead of raising.
        """
        try:
            return self.date_key(coerce_instant(value))
        except ValueError:
            logger.debug("Unparsable instant %r formatted as empty date", value)
            return ""

    def to_local_hour(self, value: object) -> int:
        """Return the civil hour of ``value`` or ``0`` if it cannot be parsed."""
        try:
            return self.hour_of(coerce_instant(value))
        except ValueError:
            logger.debug("Unparsable instant %r mapped to hour 0", value)
            return 0

    def iter_dates(self, start: datetime, end: datetime) -> Iterator[str]:
        """Yield every civil date from ``start`` to ``end`` inclusive, ascending."""
        current: date = self.localize(start).date()
        last: date = self.localize(end).date()
        while current <= last:
            yield current.strftime(DATE_FORMAT)
            current += timedelta(days=1)

    def __repr__(self) -> str:
        return f"LocalClock(name={self.name!r}, tz={self.tz!r})"
