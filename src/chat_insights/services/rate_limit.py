"""Sliding-window rate limiting for read operations.

Every read path composes a ``"<subject>:<operation>"`` key and asks the limiter
for admission before touching the row store. Admissions are counted over a
continuously moving trailing window, so two bursts on either side of a window
boundary can never add up to more than the quota.

State is process local: one limiter is created at startup, held by the app and
passed to the analytics service. All ledgers sit behind a single lock.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from threading import Lock

from chat_insights.core.errors import ThrottledError

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 60.0


def rate_limit_key(subject: str, operation: str) -> str:
    """Return the limiter key for ``operation`` performed by ``subject``."""
    return f"{subject}:{operation}"


class SlidingWindowRateLimiter:
    """Per-key ledger of admission timestamps pruned to a rolling window.

    Args:
        max_requests: Admissions allowed per key inside one window. ``0`` rejects
            everything.
        window_seconds: Length of the trailing window.
        sweep_interval_seconds: Minimum spacing between global sweeps that drop
            keys whose whole ledger has expired. Defaults to the window length.
        time_fn: Source of "now" when a call does not pass one explicitly.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        sweep_interval_seconds: float | None = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 0:
            raise ValueError("max_requests must be non-negative")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = float(window_seconds)
        self.sweep_interval_seconds = (
            self.window_seconds if sweep_interval_seconds is None else float(sweep_interval_seconds)
        )
        self._time_fn = time_fn
        self._ledgers: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None
        self._lock = Lock()

    def admit(self, key: str, now: float | None = None) -> bool:
        """Record an admission for ``key`` and return True, or return False.

        A rejected call is not recorded, so a throttled caller does not push its
        own recovery further away.
        """
        with self._lock:
            admitted, _ = self._admit_locked(key, self._resolve_now(now))
        return admitted

    def enforce(self, key: str, now: float | None = None) -> None:
        """Admit ``key`` or raise :class:`ThrottledError`."""
        with self._lock:
            admitted, retry_after = self._admit_locked(key, self._resolve_now(now))
        if not admitted:
            logger.warning("Rate limit exceeded for %s (retry after %.3fs)", key, retry_after)
            raise ThrottledError(key, retry_after)

    def remaining(self, key: str, now: float | None = None) -> int:
        """Return how many more admissions ``key`` would get right now."""
        with self._lock:
            current = self._resolve_now(now)
            ledger = self._ledgers.get(key)
            if ledger is not None:
                self._prune(ledger, current)
            used = len(ledger) if ledger else 0
        return max(0, self.max_requests - used)

    def retry_after(self, key: str, now: float | None = None) -> float:
        """Return seconds until ``key`` can be admitted again (0 if it can now)."""
        with self._lock:
            current = self._resolve_now(now)
            ledger = self._ledgers.get(key)
            if ledger is not None:
                self._prune(ledger, current)
            return self._retry_after_locked(ledger, current)

    def sweep(self, now: float | None = None) -> int:
        """Drop keys whose entire ledger has expired; return how many were dropped."""
        with self._lock:
            return self._sweep_locked(self._resolve_now(now))

    def reset(self) -> None:
        """Forget every ledger."""
        with self._lock:
            self._ledgers.clear()
            self._last_sweep = None

    def __len__(self) -> int:
        """Return the number of tracked keys."""
        with self._lock:
            return len(self._ledgers)

    # --- internals (caller holds the lock) ------------------------------------------
    def _resolve_now(self, now: float | None) -> float:
        return self._time_fn() if now is None else float(now)

    def _admit_locked(self, key: str, now: float) -> tuple[bool, float]:
        self._maybe_sweep_locked(now)
        ledger = self._ledgers.get(key)
        if ledger is None:
            ledger = deque()
        else:
            self._prune(ledger, now)

        if len(ledger) >= self.max_requests:
            retry_after = self._retry_after_locked(ledger, now)
            if not ledger:
                self._ledgers.pop(key, None)
            return False, retry_after

        # Ledgers stay non-decreasing even if a caller's clock steps backwards.
        if ledger and now < ledger[-1]:
            now = ledger[-1]
        ledger.append(now)
        self._ledgers[key] = ledger
        return True, 0.0

    def _prune(self, ledger: deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while ledger and ledger[0] <= cutoff:
            ledger.popleft()

    def _retry_after_locked(self, ledger: deque[float] | None, now: float) -> float:
        used = len(ledger) if ledger else 0
        if used < self.max_requests:
            return 0.0
        if self.max_requests == 0 or not ledger:
            return self.window_seconds
        # The slot frees up once the entry that keeps us at quota expires.
        blocking = ledger[used - self.max_requests]
        return max(0.0, blocking + self.window_seconds - now)

    def _maybe_sweep_locked(self, now: float) -> None:
        if self._last_sweep is None or now - self._last_sweep >= self.sweep_interval_seconds:
            self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        dropped = 0
        for key in list(self._ledgers):
            ledger = self._ledgers[key]
            self._prune(ledger, now)
            if not ledger:
                del self._ledgers[key]
                dropped += 1
        self._last_sweep = now
        if dropped:
            logger.debug("Rate limiter sweep dropped %d idle keys", dropped)
        return dropped


__all__ = [
    "DEFAULT_MAX_REQUESTS",
    "DEFAULT_WINDOW_SECONDS",
    "SlidingWindowRateLimiter",
    "rate_limit_key",
]
