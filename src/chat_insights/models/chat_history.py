# src/chat_insights/models/chat_history.py
"""SQLAlchemy model for the append-only chat-turn log."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from chat_insights.db.session import Base


class ChatHistory(Base):
    """One inbound or outbound chat message.

    Rows are written by the messaging workflow and only read here. The JSON
    ``message`` column holds ``{"type": "human" | "ai" | ..., "content": str}``.
    """

    __tablename__ = "n8n_chat_histories"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    # Phone-number style identifier: country code, area code, subscriber number.
    session_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    message: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # Nullable because the producer does not always stamp rows.
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
