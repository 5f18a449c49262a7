# src/chat_insights/schemas/conversation.py
"""Conversation-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from chat_insights.services.sessions import Session


class MessageOut(BaseModel):
    """A single chat message with its display role."""

    role: Literal["user", "assistant"]
    content: str

    model_config = ConfigDict(from_attributes=True)


class ConversationOut(BaseModel):
    """Schema for a reconstructed conversation returned by the API."""

    session_id: str = Field(..., description="Session identifier (client phone number)")
    messages: list[MessageOut]
    last_message: MessageOut
    last_message_time: datetime
    created_at_list: list[datetime] = Field(
        default_factory=list,
        description="Timestamps parallel to messages, ascending",
    )


def to_conversation_out(session: Session) -> ConversationOut:
    """Convert a reconstructed Session to an API schema."""
    return ConversationOut(
        session_id=session.id,
        messages=[MessageOut.model_validate(message) for message in session.messages],
        last_message=MessageOut.model_validate(session.last_message),
        last_message_time=session.last_message_time,
        created_at_list=list(session.all_timestamps),
    )
