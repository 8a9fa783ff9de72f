from pydantic import Field
from planvault.schemas.common import CamelModel, OutputDateTime


class ReminderCreate(CamelModel):
    event_id: str = Field(min_length=1)
    minutes_before: int = Field(ge=0)   # 15, 30, 60, 1440 ...


class ReminderResponse(CamelModel):
    id: str
    event_id: str
    minutes_before: int
    is_triggered: bool
    created_at: OutputDateTime
