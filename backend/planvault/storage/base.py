"""
Storage interface shared by the database and in-memory backends.

Event operations take the owning user id and never return rows owned by
anyone else. Reminder operations are keyed by event id only: callers verify
event ownership before touching reminders.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from planvault.models import Event, Reminder, User, UserSession


def session_is_live(session: UserSession, now: datetime) -> bool:
    """A session is valid strictly before its expiry instant."""
    return now < session.expires_at


class Storage(ABC):

    def init(self) -> None:
        """Prepare the backend (create tables, etc.)."""

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, username: str, password_hash: str, recovery_key: str, encryption_key: str) -> User:
        """Insert a user. Raises ``DuplicateException`` if the username is taken."""

    @abstractmethod
    def update_password(self, user_id: str, password_hash: str) -> bool: ...

    # Sessions

    @abstractmethod
    def create_session(self, user_id: str, session_token: str, expires_at: datetime) -> UserSession: ...

    @abstractmethod
    def get_session(self, session_token: str, now: datetime) -> Optional[UserSession]:
        """Return the session for ``session_token`` only if it is live at ``now``."""

    @abstractmethod
    def delete_session(self, session_token: str) -> None: ...

    # Events

    @abstractmethod
    def list_events(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Event]:
        """
        Return the user's events ordered by ``start_date``.

        The inclusive range filter only applies when both bounds are given;
        a single bound is ignored.
        """

    @abstractmethod
    def get_event(self, event_id: str, user_id: str) -> Optional[Event]: ...

    @abstractmethod
    def create_event(self, user_id: str, fields: Dict[str, Any]) -> Event: ...

    @abstractmethod
    def update_event(self, event_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Event]: ...

    @abstractmethod
    def delete_event(self, event_id: str, user_id: str) -> bool: ...

    @abstractmethod
    def count_by_category(self, user_id: str) -> Dict[str, int]: ...

    # Reminders

    @abstractmethod
    def list_reminders(self, event_id: str) -> List[Reminder]: ...

    @abstractmethod
    def get_reminder(self, reminder_id: str) -> Optional[Reminder]: ...

    @abstractmethod
    def create_reminder(self, event_id: str, minutes_before: int) -> Reminder: ...

    @abstractmethod
    def delete_reminder(self, reminder_id: str) -> bool: ...
