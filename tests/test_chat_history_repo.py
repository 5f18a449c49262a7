# tests/test_chat_history_repo.py
"""Tests for the SQLAlchemy row store."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from chat_insights.core.errors import CollaboratorError
from chat_insights.db.time import coerce_instant
from chat_insights.repositories import ChatHistoryRepository, ContactRepository
from tests.factories import FROZEN_NOW


def test_range_query_returns_rows_newest_first(db_session, add_history) -> None:
    add_history("A", FROZEN_NOW - timedelta(days=2), content="older")
    add_history("A", FROZEN_NOW - timedelta(hours=1), kind="ai", content="newer")
    add_history("B", FROZEN_NOW - timedelta(days=10), content="too old")

    repo = ChatHistoryRepository(db_session)
    rows = repo.query_rows(start=FROZEN_NOW - timedelta(days=7), end=FROZEN_NOW)

    assert [row.text for row in rows] == ["newer", "older"]
    assert rows[0].kind == "ai"
    assert coerce_instant(rows[0].created_at) == FROZEN_NOW - timedelta(hours=1)


def test_range_query_accepts_local_bounds(db_session, add_history) -> None:
    """Bounds in another zone are compared as the same instants."""
    sao_paulo = timezone(timedelta(hours=-3))
    add_history("A", datetime(2026, 10, 19, 2, 0, tzinfo=UTC))

    repo = ChatHistoryRepository(db_session)
    # 22:30 local is 01:30 UTC, so the 02:00 UTC row is inside.
    inside = repo.query_rows(start=datetime(2026, 10, 18, 22, 30, tzinfo=sao_paulo), end=FROZEN_NOW)
    # 23:30 local is 02:30 UTC, so it is not.
    outside = repo.query_rows(start=datetime(2026, 10, 18, 23, 30, tzinfo=sao_paulo), end=FROZEN_NOW)

    assert len(inside) == 1
    assert outside == []


def test_range_query_skips_rows_without_timestamp(db_session, add_history) -> None:
    add_history("A", None)
    add_history("A", FROZEN_NOW)

    rows = ChatHistoryRepository(db_session).query_rows(start=FROZEN_NOW - timedelta(days=1), end=FROZEN_NOW)

    assert len(rows) == 1


def test_session_query_ignores_time_range(db_session, add_history) -> None:
    add_history("A", FROZEN_NOW - timedelta(days=400), content="first")
    add_history("A", None, content="undated")
    add_history("A", FROZEN_NOW, kind="ai", content="last")
    add_history("B", FROZEN_NOW, content="other")

    rows = ChatHistoryRepository(db_session).query_rows(session_id="A")

    assert {row.text for row in rows} == {"first", "undated", "last"}
    assert all(row.session_id == "A" for row in rows)
    assert all(row.row_id is not None for row in rows)


def test_add_turn_persists_message_payload(db_session) -> None:
    repo = ChatHistoryRepository(db_session)

    row = repo.add_turn(session_id="A", kind="human", content="oi", created_at=FROZEN_NOW)

    assert row.id is not None
    assert row.message == {"type": "human", "content": "oi"}


def test_add_turn_stores_local_timestamps_as_utc(db_session) -> None:
    """A -03:00 timestamp is stored as the same instant in UTC."""
    repo = ChatHistoryRepository(db_session)
    local = datetime(2026, 10, 18, 23, 30, tzinfo=timezone(timedelta(hours=-3)))

    repo.add_turn(session_id="A", kind="ai", content="late", created_at=local)
    db_session.commit()

    rows = repo.query_rows(
        start=datetime(2026, 10, 19, 2, 0, tzinfo=UTC),
        end=datetime(2026, 10, 19, 3, 0, tzinfo=UTC),
    )
    assert len(rows) == 1
    assert coerce_instant(rows[0].created_at) == datetime(2026, 10, 19, 2, 30, tzinfo=UTC)


def test_add_turn_keeps_missing_timestamp(db_session) -> None:
    row = ChatHistoryRepository(db_session).add_turn(
        session_id="A", kind="human", content="undated", created_at=None
    )

    assert row.created_at is None


def test_query_failure_raises_collaborator_error(mocker) -> None:
    session = mocker.Mock()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    with pytest.raises(CollaboratorError):
        ChatHistoryRepository(session).query_rows(session_id="A")
    with pytest.raises(CollaboratorError):
        ContactRepository(session).find_name_by_phone("5511999990000")


def test_contact_lookup(db_session, add_contact) -> None:
    add_contact("5511999990000", "Maria")
    add_contact("5521999990000", "")

    repo = ContactRepository(db_session)

    assert repo.find_name_by_phone("5511999990000") == "Maria"
    assert repo.find_name_by_phone("5521999990000") is None
    assert repo.find_name_by_phone("5500000000000") is None
