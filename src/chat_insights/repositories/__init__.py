"""Row store access for chat history and client contacts."""

from .chat_history_repo import (
    ChatHistoryRepository,
    ChatHistoryStore,
    ContactDirectory,
    ContactRepository,
)

__all__ = [
    "ChatHistoryRepository",
    "ChatHistoryStore",
    "ContactDirectory",
    "ContactRepository",
]
