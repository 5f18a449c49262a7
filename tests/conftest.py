# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from chat_insights.api.v1.dependencies import get_clock, get_rate_limiter
from chat_insights.core.clock import LocalClock
from chat_insights.db.session import Base
from chat_insights.db.session import get_db as app_get_session
from chat_insights.main import app as fastapi_app
from chat_insights.models import ChatHistory, ClientContact
from chat_insights.repositories import ChatHistoryRepository
from chat_insights.services.rate_limit import SlidingWindowRateLimiter
from tests.factories import FROZEN_NOW

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> LocalClock:
    """Sao Paulo clock frozen at FROZEN_NOW."""
    return LocalClock(-180, "America/Sao_Paulo", now_fn=lambda: FROZEN_NOW)


@pytest.fixture()
def limiter() -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(max_requests=100, window_seconds=60.0)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    clock: LocalClock,
    limiter: SlidingWindowRateLimiter,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_clock, None)
        app.dependency_overrides.pop(get_rate_limiter, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def add_history(db_session: Session) -> Callable[..., ChatHistory]:
    """Insert a chat_history row through the repository and return it."""
    repo = ChatHistoryRepository(db_session)

    def _add(
        session_id: str,
        created_at: datetime | None,
        kind: str = "human",
        content: str = "oi",
    ) -> ChatHistory:
        row = repo.add_turn(
            session_id=session_id,
            kind=kind,
            content=content,
            created_at=created_at,
        )
        db_session.commit()
        return row

    return _add


@pytest.fixture()
def add_contact(db_session: Session) -> Callable[[str, str | None], ClientContact]:
    def _add(telefone: str, nome: str | None) -> ClientContact:
        contact = ClientContact(telefone=telefone, nome=nome)
        db_session.add(contact)
        db_session.commit()
        return contact

    return _add
