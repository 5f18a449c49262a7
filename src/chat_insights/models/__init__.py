# src/chat_insights/models/__init__.py
"""SQLAlchemy models for the Chat Insights row store."""

from .chat_history import ChatHistory
from .contact import ClientContact

__all__ = [
    "ChatHistory",
    "ClientContact",
]
