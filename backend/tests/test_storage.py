"""Storage-level behaviour shared by the database and in-memory backends."""
import time
from datetime import datetime, timedelta

import pytest

from planvault.core.exceptions import DuplicateException
from planvault.db.base import utcnow
from planvault.storage import Storage


def make_user(storage: Storage, username: str = "alice"):
    return storage.create_user(username, "hash", "alpha-bravo", "ab" * 32)


def event_fields(**overrides):
    fields = {
        "title": "Standup",
        "description": None,
        "start_date": datetime(2024, 1, 10, 9, 0),
        "end_date": None,
        "category": "work",
        "is_recurring": False,
        "recurring_pattern": None,
        "recurring_end_date": None,
        "encrypted_data": None,
    }
    fields.update(overrides)
    return fields


def test_duplicate_username_is_rejected(storage: Storage) -> None:
    make_user(storage, "alice")
    with pytest.raises(DuplicateException):
        make_user(storage, "alice")
    assert storage.get_user_by_username("alice") is not None


def test_create_then_get_round_trip(storage: Storage) -> None:
    user = make_user(storage)
    fields = event_fields(
        description="Daily sync",
        end_date=datetime(2024, 1, 10, 9, 15),
        is_recurring=True,
        recurring_pattern="daily",
        recurring_end_date=datetime(2024, 6, 1),
        encrypted_data="U2FsdGVkX1+abc",
    )
    created = storage.create_event(user.id, fields)
    fetched = storage.get_event(created.id, user.id)

    assert fetched is not None
    assert fetched.id == created.id
    for key, value in fields.items():
        assert getattr(fetched, key) == value
    assert fetched.created_at is not None
    assert fetched.updated_at is not None


def test_create_event_defaults(storage: Storage) -> None:
    user = make_user(storage)
    event = storage.create_event(user.id, {"title": "Dentist", "start_date": datetime(2024, 2, 1, 8)})
    assert event.category == "personal"
    assert event.is_recurring is False
    assert event.description is None
    assert event.encrypted_data is None


def test_events_are_invisible_to_other_users(storage: Storage) -> None:
    alice = make_user(storage, "alice")
    bob = make_user(storage, "bob")
    event = storage.create_event(alice.id, event_fields())

    assert storage.list_events(bob.id) == []
    assert storage.get_event(event.id, bob.id) is None
    assert storage.update_event(event.id, bob.id, {"title": "Hijacked"}) is None
    assert storage.delete_event(event.id, bob.id) is False
    assert storage.get_event(event.id, alice.id).title == "Standup"


def test_update_is_idempotent_and_advances_updated_at(storage: Storage) -> None:
    user = make_user(storage)
    event = storage.create_event(user.id, event_fields())
    original_updated_at = event.updated_at

    time.sleep(0.001)
    first = storage.update_event(event.id, user.id, {"title": "Retro"})
    first_updated_at = first.updated_at
    time.sleep(0.001)
    second = storage.update_event(event.id, user.id, {"title": "Retro"})

    assert second.title == "Retro"
    assert second.category == "work"
    assert second.start_date == event_fields()["start_date"]
    assert original_updated_at <= first_updated_at <= second.updated_at


def test_list_events_filters_inclusively_and_orders(storage: Storage) -> None:
    user = make_user(storage)
    for day in (5, 1, 3, 9):
        storage.create_event(user.id, event_fields(title=f"day {day}", start_date=datetime(2024, 1, day, 9)))

    in_range = storage.list_events(user.id, datetime(2024, 1, 3, 9), datetime(2024, 1, 5, 9))
    assert [e.title for e in in_range] == ["day 3", "day 5"]

    everything = storage.list_events(user.id)
    assert [e.title for e in everything] == ["day 1", "day 3", "day 5", "day 9"]


def test_list_events_ignores_a_single_bound(storage: Storage) -> None:
    user = make_user(storage)
    storage.create_event(user.id, event_fields(start_date=datetime(2023, 1, 1)))
    storage.create_event(user.id, event_fields(start_date=datetime(2025, 1, 1)))

    assert len(storage.list_events(user.id, start_date=datetime(2024, 1, 1))) == 2
    assert len(storage.list_events(user.id, end_date=datetime(2024, 1, 1))) == 2


def test_count_by_category(storage: Storage) -> None:
    user = make_user(storage)
    other = make_user(storage, "bob")
    for category in ("work", "work", "health", "personal"):
        storage.create_event(user.id, event_fields(category=category))
    storage.create_event(other.id, event_fields(category="finance"))

    counts = storage.count_by_category(user.id)
    assert counts == {"work": 2, "health": 1, "personal": 1}
    assert "finance" not in counts
    assert sum(counts.values()) == len(storage.list_events(user.id))


def test_session_is_valid_strictly_before_expiry(storage: Storage) -> None:
    user = make_user(storage)
    expires_at = datetime(2024, 1, 10, 12, 0)
    storage.create_session(user.id, "tok", expires_at)

    assert storage.get_session("tok", expires_at - timedelta(seconds=1)).user_id == user.id
    assert storage.get_session("tok", expires_at) is None
    assert storage.get_session("tok", expires_at + timedelta(days=1)) is None


def test_deleted_session_never_resolves(storage: Storage) -> None:
    user = make_user(storage)
    storage.create_session(user.id, "tok", utcnow() + timedelta(days=7))
    storage.delete_session("tok")
    assert storage.get_session("tok", utcnow()) is None
    # Deleting again is a no-op.
    storage.delete_session("tok")
    storage.delete_session("never-existed")


def test_reminders(storage: Storage) -> None:
    user = make_user(storage)
    event = storage.create_event(user.id, event_fields())
    first = storage.create_reminder(event.id, 15)
    second = storage.create_reminder(event.id, 15)

    assert first.is_triggered is False
    assert first.id != second.id
    assert {r.id for r in storage.list_reminders(event.id)} == {first.id, second.id}
    assert storage.get_reminder(first.id).minutes_before == 15

    assert storage.delete_reminder(first.id) is True
    assert storage.delete_reminder(first.id) is False
    assert [r.id for r in storage.list_reminders(event.id)] == [second.id]


def test_deleting_an_event_drops_its_reminders(storage: Storage) -> None:
    user = make_user(storage)
    event = storage.create_event(user.id, event_fields())
    reminder = storage.create_reminder(event.id, 30)

    assert storage.delete_event(event.id, user.id) is True
    assert storage.get_event(event.id, user.id) is None
    assert storage.list_reminders(event.id) == []
    assert storage.get_reminder(reminder.id) is None


def test_update_password(storage: Storage) -> None:
    user = make_user(storage)
    assert storage.update_password(user.id, "new-hash") is True
    assert storage.get_user(user.id).password_hash == "new-hash"
    assert storage.update_password("missing", "x") is False
