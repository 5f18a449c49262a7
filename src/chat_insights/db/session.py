"""Engine and session factory for the chat history row store.

The service only reads: rows are written by the messaging workflow into the
same database. One engine is created at import time from settings, and each
request gets its own short-lived session through :func:`get_db`.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from chat_insights.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the chat history and client directory tables."""


# Models register themselves on Base.metadata; Alembic and tests rely on it.
import chat_insights.models  # noqa: E402,F401


def _connect_args(url: str) -> dict[str, Any]:
    # Sessions are opened in the request threadpool and used on the event loop.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.effective_database_url,
    connect_args=_connect_args(settings.effective_database_url),
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session and always close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
