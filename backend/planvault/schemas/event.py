from typing import Optional
from pydantic import Field, field_validator
from planvault.models.event import EventCategory, RecurringPattern
from planvault.schemas.common import CamelModel, InputDateTime, OutputDateTime


class EventCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: InputDateTime
    end_date: Optional[InputDateTime] = None
    category: EventCategory = Field(default=EventCategory.PERSONAL, validate_default=True)
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[InputDateTime] = None
    encrypted_data: Optional[str] = None   # client-side ciphertext, stored as-is


class EventUpdate(CamelModel):
    """Partial update: only the fields present in the request are applied."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[InputDateTime] = None
    end_date: Optional[InputDateTime] = None
    category: Optional[EventCategory] = None
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[InputDateTime] = None
    encrypted_data: Optional[str] = None

    @field_validator("title", "start_date", "category", "is_recurring")
    @classmethod
    def not_null(cls, value):
        # Only runs for values the client actually sent.
        if value is None:
            raise ValueError("may not be null")
        return value


class EventResponse(CamelModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    start_date: OutputDateTime
    end_date: Optional[OutputDateTime] = None
    category: str
    is_recurring: bool
    recurring_pattern: Optional[str] = None
    recurring_end_date: Optional[OutputDateTime] = None
    encrypted_data: Optional[str] = None
    created_at: OutputDateTime
    updated_at: OutputDateTime


class CategoryCount(CamelModel):
    category: str
    count: int
