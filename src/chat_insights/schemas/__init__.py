# src/chat_insights/schemas/__init__.py
"""
Pydantic schemas for API response models.

These schemas define the structure of API data for serialization.
"""

from .contact import ContactNameOut
from .conversation import ConversationOut, MessageOut, to_conversation_out
from .dashboard import (
    DailyVolumeOut,
    DashboardOut,
    DashboardStatsOut,
    HourlyVolumeOut,
    PrefixCountOut,
    to_dashboard_out,
)

__all__ = [
    "ContactNameOut",
    "ConversationOut", "MessageOut", "to_conversation_out",
    "DailyVolumeOut", "DashboardOut", "DashboardStatsOut",
    "HourlyVolumeOut", "PrefixCountOut", "to_dashboard_out",
]
