from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, status

from planvault.api.deps import get_current_user_id, get_storage
from planvault.schemas.common import MessageResponse, to_naive_utc
from planvault.schemas.event import EventCreate, EventResponse, EventUpdate
from planvault.schemas.reminder import ReminderResponse
from planvault.schemas.transfer import EventBackup, ImportResult
from planvault.services.transfer import export_events, import_events
from planvault.storage import Storage

router = APIRouter()


@router.get("", response_model=List[EventResponse])
def list_events(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    """Events ordered by start date; ``start``/``end`` only filter when both are given."""
    start_date = to_naive_utc(start) if start else None
    end_date = to_naive_utc(end) if end else None
    return storage.list_events(user_id, start_date, end_date)


@router.post("", response_model=EventResponse, status_code=201)
def create_event(
    event_data: EventCreate,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return storage.create_event(user_id, event_data.model_dump())


@router.get("/export", response_model=EventBackup)
def export_backup(user_id: str = Depends(get_current_user_id), storage: Storage = Depends(get_storage)):
    return export_events(storage, user_id)


@router.post("/import", response_model=ImportResult, status_code=201)
def import_backup(
    payload: Union[Dict[str, Any], List[Any]] = Body(...),
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    return import_events(storage, user_id, payload)


@router.get("/{event_id}", response_model=EventResponse)
def get_event(event_id: str, user_id: str = Depends(get_current_user_id), storage: Storage = Depends(get_storage)):
    event = storage.get_event(event_id, user_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.put("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: str,
    event_data: EventUpdate,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    updates = event_data.model_dump(exclude_unset=True)
    event = storage.update_event(event_id, user_id, updates)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(event_id: str, user_id: str = Depends(get_current_user_id), storage: Storage = Depends(get_storage)):
    if not storage.delete_event(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return MessageResponse(message="Event deleted successfully")


@router.get("/{event_id}/reminders", response_model=List[ReminderResponse])
def list_event_reminders(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    # The reminder store is unscoped, so ownership is checked through the event.
    if not storage.get_event(event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return storage.list_reminders(event_id)
