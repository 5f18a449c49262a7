"""Session reconstruction from the flat chat-turn log.

The row store holds one row per inbound or outbound message. This module
groups those rows by session id, orders each group by timestamp and maps every
row to a role-attributed message. Sessions are request-scoped read models:
they are rebuilt from rows on every query and never persisted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from chat_insights.core.errors import MalformedRowError
from chat_insights.db.time import coerce_instant

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]

HUMAN_KIND = "human"


@dataclass(frozen=True, slots=True)
class RawTurn:
    """One row of the chat-turn log exactly as the row store delivered it."""

    session_id: str
    created_at: object
    payload: Mapping[str, Any] | None
    row_id: int | None = None

    @property
    def kind(self) -> str | None:
        """Return the producer-side message type (``human``, ``ai``, ...)."""
        if not isinstance(self.payload, Mapping):
            return None
        kind = self.payload.get("type", self.payload.get("kind"))
        return kind if isinstance(kind, str) else None

    @property
    def text(self) -> str:
        """Return the message body, or an empty string when absent."""
        if not isinstance(self.payload, Mapping):
            return ""
        text = self.payload.get("content", self.payload.get("text"))
        return text if isinstance(text, str) else ""


@dataclass(frozen=True, slots=True)
class Message:
    """A chat message with its role resolved for display."""

    role: Role
    content: str


@dataclass(frozen=True, slots=True)
class Session:
    """Ordered conversation for one session id.

    ``messages`` and ``all_timestamps`` are parallel and ascending by time;
    ``last_message``/``last_message_time`` describe the chronologically final
    entry.
    """

    id: str
    messages: tuple[Message, ...]
    all_timestamps: tuple[datetime, ...]
    last_message: Message
    last_message_time: datetime

    def __len__(self) -> int:
        return len(self.messages)


@dataclass(slots=True)
class Reconstruction:
    """Sessions built from a row batch plus the number of rows skipped."""

    sessions: dict[str, Session] = field(default_factory=dict)
    skipped: int = 0


def role_for_kind(kind: str | None) -> Role:
    """Map a producer message type to a display role."""
    return "user" if kind == HUMAN_KIND else "assistant"


def validate_turn(turn: RawTurn) -> datetime:
    """Return the turn's timestamp as an aware UTC datetime.

    Raises:
        MalformedRowError: If the session id, payload or timestamp is unusable.
    """
    if not isinstance(turn.session_id, str) or not turn.session_id:
        raise MalformedRowError("missing session id", row_id=turn.row_id)
    if turn.payload is not None and not isinstance(turn.payload, Mapping):
        raise MalformedRowError(
            "payload is not an object",
            row_id=turn.row_id,
            session_id=turn.session_id,
        )
    try:
        return coerce_instant(turn.created_at)
    except ValueError as exc:
        raise MalformedRowError(
            f"invalid created_at: {exc}",
            row_id=turn.row_id,
            session_id=turn.session_id,
        ) from exc


def partition_turns(rows: Iterable[RawTurn]) -> tuple[list[tuple[datetime, RawTurn]], int]:
    """Split rows into ``(timestamp, turn)`` pairs and a count of malformed rows.

    Source order is preserved among the valid rows. Malformed rows are logged
    and counted, never raised.
    """
    valid: list[tuple[datetime, RawTurn]] = []
    skipped = 0
    for turn in rows:
        try:
            instant = validate_turn(turn)
        except MalformedRowError as exc:
            skipped += 1
            logger.warning(
                "Skipping malformed row id=%s session=%s: %s",
                exc.row_id,
                exc.session_id,
                exc.reason,
            )
            continue
        valid.append((instant, turn))
    return valid, skipped


def _build_session(session_id: str, entries: list[tuple[datetime, RawTurn]]) -> Session:
    # sorted() is stable: equal timestamps keep source order.
    ordered = sorted(entries, key=lambda entry: entry[0])
    messages = tuple(Message(role=role_for_kind(turn.kind), content=turn.text) for _, turn in ordered)
    timestamps = tuple(instant for instant, _ in ordered)
    return Session(
        id=session_id,
        messages=messages,
        all_timestamps=timestamps,
        last_message=messages[-1],
        last_message_time=timestamps[-1],
    )


class SessionReconstructor:
    """Groups chat turns into sessions ordered by timestamp."""

    def build(self, rows: Iterable[RawTurn]) -> Reconstruction:
        """Reconstruct every session in ``rows`` and report skipped rows.

        Groups appear in order of first appearance in ``rows``. The final message
        of each session is decided by timestamp, so input delivered newest first
        produces the same sessions as input delivered oldest first.
        """
        valid, skipped = partition_turns(rows)
        groups: dict[str, list[tuple[datetime, RawTurn]]] = {}
        for instant, turn in valid:
            groups.setdefault(turn.session_id, []).append((instant, turn))

        result = Reconstruction(skipped=skipped)
        for session_id, entries in groups.items():
            result.sessions[session_id] = _build_session(session_id, entries)
        if skipped:
            logger.debug(
                "Reconstructed %d sessions, skipped %d malformed rows",
                len(result.sessions),
                skipped,
            )
        return result

    def reconstruct(self, rows: Iterable[RawTurn]) -> dict[str, Session]:
        """Return a mapping of session id to :class:`Session`."""
        return self.build(rows).sessions

    def reconstruct_one(self, session_id: str, rows: Iterable[RawTurn]) -> Session | None:
        """Reconstruct ``session_id`` from ``rows``.

        Rows for other sessions are ignored. Returns None when no valid row
        belongs to the session.
        """
        relevant = (turn for turn in rows if turn.session_id == session_id)
        return self.build(relevant).sessions.get(session_id)


def most_recent(sessions: Iterable[Session], limit: int | None = None) -> list[Session]:
    """Return sessions ordered newest first by last message time."""
    ordered = sorted(sessions, key=lambda session: session.last_message_time, reverse=True)
    if limit is None:
        return ordered
    return ordered[: max(0, limit)]


__all__ = [
    "Message",
    "RawTurn",
    "Reconstruction",
    "Role",
    "Session",
    "SessionReconstructor",
    "most_recent",
    "partition_turns",
    "role_for_kind",
    "validate_turn",
]
