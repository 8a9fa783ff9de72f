"""
JSON import and export of a user's events.

Export produces a versioned backup document. Import accepts that backup
document or a bare list of loosely shaped event objects, normalises each
record and skips anything that duplicates an existing event (or an earlier
record in the same batch). Two events are duplicates when their lower-cased
titles, UTC start instants and categories match.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from planvault.core.exceptions import ValidationException
from planvault.db.base import utcnow
from planvault.models import Event, EventCategory
from planvault.schemas.common import InputDateTime
from planvault.schemas.event import EventCreate, EventResponse
from planvault.schemas.transfer import EventBackup, ImportResult
from planvault.storage import Storage

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Event"
_CATEGORIES = {c.value for c in EventCategory}
_datetime_adapter = TypeAdapter(InputDateTime)
_bool_adapter = TypeAdapter(bool)

DedupeKey = Tuple[str, datetime, str]


def dedupe_key(title: str, start_date: datetime, category: str) -> DedupeKey:
    return (title.strip().lower(), start_date, category)


def _parse_datetime(value: Any, field: str, index: int) -> datetime:
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        raise ValidationException(
            f"Invalid date in record {index}",
            {"record": index, "field": field, "value": value},
        )


def _parse_bool(value: Any, field: str, index: int) -> bool:
    """Read JSON booleans and their string forms ("false", "yes", "0", ...)."""
    if value is None:
        return False
    try:
        return _bool_adapter.validate_python(value)
    except ValidationError:
        raise ValidationException(
            f"Invalid boolean in record {index}",
            {"record": index, "field": field, "value": value},
        )


def _optional_datetime(value: Any, field: str, index: int) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return _parse_datetime(value, field, index)


def normalize_record(raw: Dict[str, Any], index: int, from_backup: bool) -> EventCreate:
    """
    Turn one imported object into an ``EventCreate``.

    Backup records are trusted to use the exported field names. Bare-list
    records also accept the common aliases ``name``, ``date``, ``details``,
    ``recurring`` and ``pattern``. Encrypted payloads are never imported
    because they belong to the exporting account's key.
    """
    if not isinstance(raw, dict):
        raise ValidationException(f"Record {index} is not an object", {"record": index})

    def pick(*keys):
        for key in keys:
            value = raw.get(key)
            if value not in (None, ""):
                return value
        return None

    if from_backup:
        title = pick("title")
        description = pick("description")
        start = pick("startDate")
        is_recurring = raw.get("isRecurring")
        pattern = pick("recurringPattern")
        recurring_end = _optional_datetime(raw.get("recurringEndDate"), "recurringEndDate", index)
    else:
        title = pick("title", "name")
        description = pick("description", "details")
        start = pick("startDate", "date")
        is_recurring = pick("isRecurring", "recurring")
        pattern = pick("recurringPattern", "pattern")
        recurring_end = None

    if start is None:
        raise ValidationException(f"Record {index} has no start date", {"record": index, "field": "startDate"})

    category = raw.get("category")
    if not isinstance(category, str) or category not in _CATEGORIES:
        category = EventCategory.PERSONAL.value

    try:
        return EventCreate(
            title=str(title).strip() if title and str(title).strip() else UNTITLED,
            description=description,
            start_date=_parse_datetime(start, "startDate", index),
            end_date=_optional_datetime(raw.get("endDate"), "endDate", index),
            category=category,
            is_recurring=_parse_bool(is_recurring, "isRecurring", index),
            recurring_pattern=pattern.lower() if isinstance(pattern, str) else None,
            recurring_end_date=recurring_end,
        )
    except ValidationError as e:
        raise ValidationException(
            f"Record {index} is invalid",
            {"record": index, "errors": [err["msg"] for err in e.errors()]},
        )


def parse_import_payload(payload: Union[Dict[str, Any], List[Any]]) -> List[EventCreate]:
    if isinstance(payload, dict):
        records = payload.get("events")
        if not isinstance(records, list):
            raise ValidationException("Backup document has no events list")
        from_backup = True
    elif isinstance(payload, list):
        records = payload
        from_backup = False
    else:
        raise ValidationException("Import payload must be a backup object or a list of events")

    events = [normalize_record(raw, i, from_backup) for i, raw in enumerate(records)]
    if not events:
        raise ValidationException("No valid events found in the import")
    return events


def import_events(storage: Storage, user_id: str, payload: Union[Dict[str, Any], List[Any]]) -> ImportResult:
    candidates = parse_import_payload(payload)
    seen = {dedupe_key(e.title, e.start_date, e.category) for e in storage.list_events(user_id)}

    created: List[Event] = []
    skipped = 0
    for candidate in candidates:
        key = dedupe_key(candidate.title, candidate.start_date, candidate.category)
        if key in seen:
            skipped += 1
            continue
        seen.add(key)
        created.append(storage.create_event(user_id, candidate.model_dump()))

    logger.info("Imported %d events for user %s, skipped %d duplicates", len(created), user_id, skipped)
    return ImportResult(
        imported=len(created),
        skipped=skipped,
        events=[EventResponse.model_validate(e) for e in created],
    )


def export_events(storage: Storage, user_id: str) -> EventBackup:
    events = storage.list_events(user_id)
    return EventBackup(
        exported_at=utcnow(),
        events=[EventResponse.model_validate(e) for e in events],
    )
