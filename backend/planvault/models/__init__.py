from planvault.models.user import User, UserSession
from planvault.models.event import Event, EventCategory, RecurringPattern, Reminder

__all__ = [
    "User",
    "UserSession",
    "Event",
    "EventCategory",
    "RecurringPattern",
    "Reminder",
]
