"""Data access helpers for the chat-turn log and the client directory."""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat_insights.core.errors import CollaboratorError
from chat_insights.models import ChatHistory, ClientContact
from chat_insights.services.sessions import RawTurn

__all__ = ["ChatHistoryRepository", "ChatHistoryStore", "ContactDirectory", "ContactRepository"]

logger = logging.getLogger(__name__)


class ChatHistoryStore(Protocol):
    """Row store the analytics core reads from."""

    def query_rows(
        self,
        *,
        session_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RawTurn]:
        """Return rows for one session (time filter ignored) or for a time range.

        Raises:
            CollaboratorError: If the store cannot answer.
        """
        ...


class ContactDirectory(Protocol):
    """Lookup of client names by phone number."""

    def find_name_by_phone(self, phone: str) -> str | None:
        ...


def _to_utc(value: datetime) -> datetime:
    # Stored timestamps are UTC; SQLite compares them as text without offsets.
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC)


def _to_turn(row: ChatHistory) -> RawTurn:
    return RawTurn(
        session_id=row.session_id,
        created_at=row.created_at,
        payload=row.message,
        row_id=row.id,
    )


class ChatHistoryRepository:
    """Thin wrapper around database access for chat history rows."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def query_rows(
        self,
        *,
        session_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[RawTurn]:
        """Return chat turns as :class:`RawTurn` values.

        With ``session_id`` every row of that session is returned oldest first and
        the time filter is ignored; rows lacking a timestamp are included so the
        caller can account for them. Otherwise rows stamped inside
        ``[start, end]`` are returned newest first.

        Raises:
            CollaboratorError: If the query fails.
        """
        if session_id is not None:
            stmt = (
                select(ChatHistory)
                .where(ChatHistory.session_id == session_id)
                .order_by(ChatHistory.created_at.asc(), ChatHistory.id.asc())
            )
        else:
            stmt = select(ChatHistory).where(ChatHistory.created_at.is_not(None))
            if start is not None:
                stmt = stmt.where(ChatHistory.created_at >= _to_utc(start))
            if end is not None:
                stmt = stmt.where(ChatHistory.created_at <= _to_utc(end))
            stmt = stmt.order_by(ChatHistory.created_at.desc(), ChatHistory.id.desc())

        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Chat history query failed (session_id=%s)", session_id, exc_info=True)
            raise CollaboratorError("Failed to fetch chat history") from exc
        return [_to_turn(row) for row in rows]

    def add_turn(
        self,
        *,
        session_id: str,
        kind: str,
        content: str,
        created_at: datetime | None,
    ) -> ChatHistory:
        """Insert a chat turn and return the persisted ORM instance.

        Production rows come from the messaging workflow; this exists for seeding
        and tests.
        """
        row = ChatHistory(
            session_id=session_id,
            message={"type": kind, "content": content},
            created_at=_to_utc(created_at) if created_at is not None else None,
        )
        self.session.add(row)
        self.session.flush()
        return row


class ContactRepository:
    """Reads client names from the directory table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_name_by_phone(self, phone: str) -> str | None:
        """Return the client's name for ``phone`` or None when unknown.

        Raises:
            CollaboratorError: If the query fails.
        """
        stmt = select(ClientContact.nome).where(ClientContact.telefone == phone).limit(1)
        try:
            name = self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Contact lookup failed for %s", phone, exc_info=True)
            raise CollaboratorError("Failed to fetch contact") from exc
        return name or None
