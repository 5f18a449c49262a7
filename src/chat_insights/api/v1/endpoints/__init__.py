"""API endpoint modules for version 1."""

from .contacts import router as contacts_router
from .conversations import router as conversations_router
from .dashboard import router as dashboard_router

__all__ = [
    "contacts_router",
    "conversations_router",
    "dashboard_router",
]
