# tests/test_sessions.py
"""Tests for grouping chat turns into ordered sessions."""

import itertools
from datetime import UTC, datetime

import pytest

from chat_insights.core.errors import MalformedRowError
from chat_insights.services.sessions import (
    Message,
    RawTurn,
    SessionReconstructor,
    most_recent,
    role_for_kind,
    validate_turn,
)
from tests.factories import make_turn


def _at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=UTC)


@pytest.fixture()
def reconstructor() -> SessionReconstructor:
    return SessionReconstructor()


def test_two_turns_become_one_ordered_session(reconstructor: SessionReconstructor) -> None:
    rows = [
        make_turn("A", _at(10, 0), kind="human", text="hi"),
        make_turn("A", _at(10, 5), kind="ai", text="hello"),
    ]

    sessions = reconstructor.reconstruct(rows)

    assert list(sessions) == ["A"]
    session = sessions["A"]
    assert session.messages == (
        Message(role="user", content="hi"),
        Message(role="assistant", content="hello"),
    )
    assert session.last_message == Message(role="assistant", content="hello")
    assert session.last_message_time == _at(10, 5)
    assert session.all_timestamps == (_at(10, 0), _at(10, 5))


def test_descending_input_yields_same_sessions(reconstructor: SessionReconstructor) -> None:
    """The row store returns newest first; the last message is still the latest one."""
    rows = [
        make_turn("A", _at(10, 5), kind="ai", text="hello"),
        make_turn("A", _at(10, 0), kind="human", text="hi"),
    ]

    session = reconstructor.reconstruct(rows)["A"]

    assert session.last_message.content == "hello"
    assert session.last_message_time == _at(10, 5)
    assert [m.content for m in session.messages] == ["hi", "hello"]


def test_input_order_does_not_change_sessions(reconstructor: SessionReconstructor) -> None:
    rows = [
        make_turn("A", _at(9, 0), text="a1"),
        make_turn("B", _at(9, 30), kind="ai", text="b1"),
        make_turn("A", _at(11, 0), kind="ai", text="a2"),
        make_turn("B", "2026-10-19T08:15:00Z", text="b0"),
    ]
    expected = reconstructor.reconstruct(rows)

    for permutation in itertools.permutations(rows):
        assert reconstructor.reconstruct(permutation) == expected


def test_every_row_is_placed_exactly_once(reconstructor: SessionReconstructor) -> None:
    rows = [make_turn(f"55119{index % 3}", _at(index % 24), text=str(index)) for index in range(30)]

    sessions = reconstructor.reconstruct(rows)

    assert sum(len(session) for session in sessions.values()) == len(rows)
    for session in sessions.values():
        assert list(session.all_timestamps) == sorted(session.all_timestamps)
        assert session.last_message_time == max(session.all_timestamps)


def test_equal_timestamps_keep_source_order(reconstructor: SessionReconstructor) -> None:
    rows = [
        make_turn("A", _at(10), text="first"),
        make_turn("A", _at(10), kind="ai", text="second"),
    ]

    session = reconstructor.reconstruct(rows)["A"]

    assert [m.content for m in session.messages] == ["first", "second"]
    assert session.last_message.content == "second"


def test_malformed_rows_are_skipped_and_counted(reconstructor: SessionReconstructor) -> None:
    rows = [
        make_turn("A", _at(10), text="ok"),
        make_turn("A", None, text="no timestamp", row_id=2),
        make_turn("B", "yesterday", text="bad timestamp", row_id=3),
        RawTurn(session_id="C", created_at=_at(10), payload=["not", "a", "dict"], row_id=4),
        RawTurn(session_id="", created_at=_at(10), payload={"type": "human"}, row_id=5),
    ]

    result = reconstructor.build(rows)

    assert result.skipped == 4
    assert list(result.sessions) == ["A"]
    assert len(result.sessions["A"]) == 1


def test_session_without_valid_rows_is_absent(reconstructor: SessionReconstructor) -> None:
    rows = [make_turn("ghost", None)]

    assert reconstructor.reconstruct(rows) == {}
    assert reconstructor.reconstruct_one("ghost", rows) is None


def test_reconstruct_one_ignores_other_sessions(reconstructor: SessionReconstructor) -> None:
    rows = [
        make_turn("A", _at(10), text="mine"),
        make_turn("B", _at(11), text="not mine"),
    ]

    session = reconstructor.reconstruct_one("A", rows)

    assert session is not None
    assert session.id == "A"
    assert [m.content for m in session.messages] == ["mine"]


def test_missing_text_and_kind_default_sensibly(reconstructor: SessionReconstructor) -> None:
    rows = [
        RawTurn(session_id="A", created_at=_at(10), payload=None),
        make_turn("A", _at(11), kind=None, text="no type"),
    ]

    session = reconstructor.reconstruct(rows)["A"]

    assert session.messages[0] == Message(role="assistant", content="")
    assert session.messages[1] == Message(role="assistant", content="no type")


@pytest.mark.parametrize(
    ("kind", "role"),
    [("human", "user"), ("ai", "assistant"), ("system", "assistant"), (None, "assistant")],
)
def test_role_mapping(kind: str | None, role: str) -> None:
    assert role_for_kind(kind) == role


def test_validate_turn_reports_row_context() -> None:
    with pytest.raises(MalformedRowError) as exc_info:
        validate_turn(make_turn("A", "garbage", row_id=42))

    assert exc_info.value.row_id == 42
    assert exc_info.value.session_id == "A"


def test_most_recent_orders_by_last_message(reconstructor: SessionReconstructor) -> None:
    sessions = reconstructor.reconstruct(
        [
            make_turn("old", _at(8)),
            make_turn("new", _at(12)),
            make_turn("mid", _at(10)),
        ]
    )

    assert [s.id for s in most_recent(sessions.values())] == ["new", "mid", "old"]
    assert [s.id for s in most_recent(sessions.values(), limit=2)] == ["new", "mid"]


def test_out_of_range_timestamp_is_skipped(reconstructor: SessionReconstructor) -> None:
    """A parsable instant outside the datetime range is skipped, not fatal."""
    rows = [
        make_turn("A", _at(10), text="kept"),
        make_turn("A", "9999-12-31T23:00:00-05:00", text="dropped", row_id=7),
    ]

    result = reconstructor.build(rows)

    assert result.skipped == 1
    assert [m.content for m in result.sessions["A"].messages] == ["kept"]
