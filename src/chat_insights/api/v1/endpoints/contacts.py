# src/chat_insights/api/v1/endpoints/contacts.py
"""Client directory endpoints for the Chat Insights API."""

from __future__ import annotations

from fastapi import APIRouter, Path

from chat_insights.schemas.contact import ContactNameOut
from chat_insights.services.analytics import CONTACTS_SUBJECT

from ..dependencies import AnalyticsDep, SubjectDep

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.get("/{phone}", response_model=ContactNameOut)
async def get_contact_name(
    analytics: AnalyticsDep,
    subject: SubjectDep,
    phone: str = Path(..., min_length=1, max_length=32),
) -> ContactNameOut:
    """Return the client name registered for a phone number, if any."""
    name = analytics.contact_name(phone, subject=subject or CONTACTS_SUBJECT)
    return ContactNameOut(phone=phone, name=name)
