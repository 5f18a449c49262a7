# src/chat_insights/api/v1/endpoints/conversations.py
"""Conversation endpoints for the Chat Insights API."""

from __future__ import annotations

from fastapi import APIRouter, Path, Query

from chat_insights.schemas.conversation import ConversationOut, to_conversation_out
from chat_insights.services.aggregation import DEFAULT_PERIOD, Period
from chat_insights.services.analytics import CONVERSATIONS_SUBJECT

from ..dependencies import AnalyticsDep, SubjectDep

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("/", response_model=list[ConversationOut])
async def list_conversations(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    period: Period = Query(DEFAULT_PERIOD),
) -> list[ConversationOut]:
    """Return every conversation active in the period, most recent first."""
    sessions = analytics.list_conversations(period, subject=subject or CONVERSATIONS_SUBJECT)
    return [to_conversation_out(session) for session in sessions]


@router.get("/{session_id}", response_model=ConversationOut)
async def get_conversation(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    session_id: str = Path(..., min_length=1),
) -> ConversationOut:
    """Return the full history of one conversation."""
    session = analytics.get_conversation(session_id, subject=subject or CONVERSATIONS_SUBJECT)
    return to_conversation_out(session)
