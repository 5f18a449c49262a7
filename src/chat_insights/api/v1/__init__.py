# src/chat_insights/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import contacts_router, conversations_router, dashboard_router

__all__ = [
    "contacts_router",
    "conversations_router",
    "dashboard_router",
]
