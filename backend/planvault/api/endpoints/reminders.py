from fastapi import APIRouter, Depends, HTTPException, status

from planvault.api.deps import get_current_user_id, get_storage
from planvault.schemas.common import MessageResponse
from planvault.schemas.reminder import ReminderCreate, ReminderResponse
from planvault.storage import Storage

router = APIRouter()


@router.post("", response_model=ReminderResponse, status_code=201)
def create_reminder(
    reminder_data: ReminderCreate,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    if not storage.get_event(reminder_data.event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return storage.create_reminder(reminder_data.event_id, reminder_data.minutes_before)


@router.delete("/{reminder_id}", response_model=MessageResponse)
def delete_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    reminder = storage.get_reminder(reminder_id)
    if not reminder or not storage.get_event(reminder.event_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    storage.delete_reminder(reminder_id)
    return MessageResponse(message="Reminder deleted successfully")
