from typing import List
from planvault.schemas.common import CamelModel, OutputDateTime
from planvault.schemas.event import EventResponse

BACKUP_VERSION = "1.0"


class EventBackup(CamelModel):
    exported_at: OutputDateTime
    version: str = BACKUP_VERSION
    events: List[EventResponse]


class ImportResult(CamelModel):
    imported: int
    skipped: int
    events: List[EventResponse]
