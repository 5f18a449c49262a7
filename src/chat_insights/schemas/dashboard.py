# src/chat_insights/schemas/dashboard.py
"""Dashboard-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chat_insights.schemas.conversation import ConversationOut, to_conversation_out
from chat_insights.services.analytics import DashboardSummary


class DashboardStatsOut(BaseModel):
    """Headline numbers for a period.

    ``total_conversations`` is the number of chat rows in the period.
    """

    total_conversations: int = Field(..., ge=0)
    unique_sessions: int = Field(..., ge=0)
    last_conversation_time: datetime

    model_config = ConfigDict(from_attributes=True)


class DailyVolumeOut(BaseModel):
    date: str = Field(..., description="Civil date, YYYY-MM-DD")
    count: int = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class HourlyVolumeOut(BaseModel):
    hour: str = Field(..., description="Civil hour, 00-23")
    count: int = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)


class PrefixCountOut(BaseModel):
    prefix: str = Field(..., description="Area code, or the unknown label")
    count: int = Field(..., ge=0, description="Distinct sessions")

    model_config = ConfigDict(from_attributes=True)


class DashboardOut(BaseModel):
    """Full dashboard payload for one period."""

    period: str
    stats: DashboardStatsOut
    recent_conversations: list[ConversationOut]
    daily: list[DailyVolumeOut]
    hourly: list[HourlyVolumeOut]
    prefixes: list[PrefixCountOut]
    skipped_rows: int = Field(0, ge=0)


def to_dashboard_out(summary: DashboardSummary) -> DashboardOut:
    """Convert a DashboardSummary to an API schema."""
    return DashboardOut(
        period=summary.period.value,
        stats=DashboardStatsOut.model_validate(summary.stats),
        recent_conversations=[to_conversation_out(s) for s in summary.recent_conversations],
        daily=[DailyVolumeOut.model_validate(point) for point in summary.daily],
        hourly=[HourlyVolumeOut.model_validate(point) for point in summary.hourly],
        prefixes=[PrefixCountOut.model_validate(point) for point in summary.prefixes],
        skipped_rows=summary.skipped_rows,
    )
