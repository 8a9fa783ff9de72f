"""JSON export and deduplicating import."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from planvault.core.exceptions import ValidationException
from planvault.services.transfer import UNTITLED, dedupe_key, normalize_record, parse_import_payload


def test_export_backup(client: TestClient, alice, make_event) -> None:
    make_event(alice, title="B", startDate="2024-02-01T10:00:00Z")
    make_event(alice, title="A", startDate="2024-01-01T10:00:00Z")

    response = client.get("/api/events/export", headers=alice)
    assert response.status_code == 200
    backup = response.json()
    assert backup["version"] == "1.0"
    assert backup["exportedAt"].endswith("Z")
    assert [e["title"] for e in backup["events"]] == ["A", "B"]


def test_backup_round_trip_into_another_account(client: TestClient, alice, bob, make_event) -> None:
    make_event(alice, title="Standup", category="work", encryptedData="ciphertext")
    make_event(alice, title="Doctor", startDate="2024-05-02T08:30:00Z", category="health")
    backup = client.get("/api/events/export", headers=alice).json()

    response = client.post("/api/events/import", json=backup, headers=bob)
    assert response.status_code == 201
    result = response.json()
    assert result["imported"] == 2
    assert result["skipped"] == 0

    imported = client.get("/api/events", headers=bob).json()
    assert [(e["title"], e["startDate"], e["category"]) for e in imported] == [
        ("Standup", "2024-01-10T09:00:00Z", "work"),
        ("Doctor", "2024-05-02T08:30:00Z", "health"),
    ]
    # Ciphertext belongs to the exporting account's key.
    assert all(e["encryptedData"] is None for e in imported)


def test_reimport_skips_duplicates(client: TestClient, alice, make_event) -> None:
    make_event(alice, title="Standup", category="work")
    records = [
        {"title": "STANDUP", "startDate": "2024-01-10T09:00:00Z", "category": "work"},
        {"title": "Standup", "startDate": "2024-01-10T09:00:00Z", "category": "personal"},
        {"title": "Lunch", "startDate": "2024-01-10T12:00:00Z"},
        {"title": "lunch", "startDate": "2024-01-10T12:00:00Z"},
    ]

    result = client.post("/api/events/import", json=records, headers=alice).json()
    assert result["imported"] == 2
    assert result["skipped"] == 2
    assert sorted(e["title"] for e in result["events"]) == ["Lunch", "Standup"]
    assert len(client.get("/api/events", headers=alice).json()) == 3


def test_import_rejects_bad_payloads(client: TestClient, alice) -> None:
    no_date = client.post("/api/events/import", json=[{"title": "Undated"}], headers=alice)
    assert no_date.status_code == 400
    assert no_date.json()["errors"][0]["field"] == "startDate"

    assert client.post("/api/events/import", json=[], headers=alice).status_code == 400
    assert client.post("/api/events/import", json={"items": []}, headers=alice).status_code == 400
    assert client.post("/api/events/import", json=[{"startDate": "not a date"}], headers=alice).status_code == 400
    assert client.get("/api/events", headers=alice).json() == []


def test_import_requires_auth(client: TestClient) -> None:
    assert client.post("/api/events/import", json=[]).status_code == 401
    assert client.get("/api/events/export").status_code == 401


def test_normalize_list_record_aliases() -> None:
    event = normalize_record(
        {"name": "Call mom", "date": "2024-03-03T17:00:00", "details": "Sunday", "recurring": True,
         "pattern": "Weekly", "category": "family"},
        0,
        from_backup=False,
    )
    assert event.title == "Call mom"
    assert event.description == "Sunday"
    assert event.start_date == datetime(2024, 3, 3, 17, 0)
    assert event.category == "personal"
    assert event.is_recurring is True
    assert event.recurring_pattern == "weekly"
    assert event.encrypted_data is None


def test_normalize_backup_record_ignores_aliases() -> None:
    event = normalize_record({"name": "ignored", "startDate": "2024-03-03T17:00:00Z"}, 0, from_backup=True)
    assert event.title == UNTITLED


def test_parse_import_payload_requires_a_list() -> None:
    with pytest.raises(ValidationException):
        parse_import_payload({"events": "nope"})
    with pytest.raises(ValidationException):
        parse_import_payload(["not an object"])


def test_dedupe_key_is_case_insensitive() -> None:
    start = datetime(2024, 1, 1, 9)
    assert dedupe_key(" Standup ", start, "work") == dedupe_key("standup", start, "work")
    assert dedupe_key("Standup", start, "work") != dedupe_key("Standup", start, "health")


def test_import_with_non_string_category_falls_back_to_personal(client: TestClient, alice) -> None:
    records = [
        {"title": "List", "startDate": "2024-01-01T00:00:00Z", "category": ["work"]},
        {"title": "Dict", "startDate": "2024-01-02T00:00:00Z", "category": {"name": "work"}},
    ]
    response = client.post("/api/events/import", json=records, headers=alice)

    assert response.status_code == 201
    assert [e["category"] for e in response.json()["events"]] == ["personal", "personal"]


def test_import_reads_string_booleans(client: TestClient, alice) -> None:
    records = [
        {"title": "No", "startDate": "2024-01-01T09:00:00Z", "isRecurring": "false"},
        {"title": "Yes", "startDate": "2024-01-02T09:00:00Z", "recurring": "true", "pattern": "daily"},
    ]
    response = client.post("/api/events/import", json=records, headers=alice)

    assert response.status_code == 201
    assert [(e["title"], e["isRecurring"]) for e in response.json()["events"]] == [("No", False), ("Yes", True)]

    bad = client.post(
        "/api/events/import",
        json=[{"title": "Maybe", "startDate": "2024-01-03T09:00:00Z", "isRecurring": "sometimes"}],
        headers=alice,
    )
    assert bad.status_code == 400
    assert bad.json()["errors"][0]["field"] == "isRecurring"


def test_normalize_backup_record_string_boolean() -> None:
    event = normalize_record({"startDate": "2024-03-03T17:00:00Z", "isRecurring": "false"}, 0, from_backup=True)
    assert event.is_recurring is False
