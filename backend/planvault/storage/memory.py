"""
In-process storage for development and tests.

Rows are ORM instances that never touch a session, kept in dicts keyed by
id. A single lock serialises mutations so the username check and insert
happen as one step. Deleting an event drops its reminders the way the
foreign key cascade does in the database backend.
"""

import threading
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from planvault.core.exceptions import DuplicateException
from planvault.db.base import new_id, utcnow
from planvault.models import Event, EventCategory, Reminder, User, UserSession
from planvault.storage.base import Storage, session_is_live


class MemStorage(Storage):

    def __init__(self):
        self._lock = threading.Lock()
        self.users: Dict[str, User] = {}
        self.sessions: Dict[str, UserSession] = {}
        self.events: Dict[str, Event] = {}
        self.reminders: Dict[str, Reminder] = {}

    # Users

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    def create_user(self, username: str, password_hash: str, recovery_key: str, encryption_key: str) -> User:
        with self._lock:
            if self.get_user_by_username(username) is not None:
                raise DuplicateException("User", "username", username)
            user = User(
                id=new_id(),
                username=username,
                password_hash=password_hash,
                recovery_key=recovery_key,
                encryption_key=encryption_key,
                created_at=utcnow(),
            )
            self.users[user.id] = user
            return user

    def update_password(self, user_id: str, password_hash: str) -> bool:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                return False
            user.password_hash = password_hash
            return True

    # Sessions

    def create_session(self, user_id: str, session_token: str, expires_at: datetime) -> UserSession:
        session = UserSession(
            id=new_id(),
            user_id=user_id,
            session_token=session_token,
            expires_at=expires_at,
            created_at=utcnow(),
        )
        with self._lock:
            self.sessions[session_token] = session
        return session

    def get_session(self, session_token: str, now: datetime) -> Optional[UserSession]:
        session = self.sessions.get(session_token)
        if session is not None and session_is_live(session, now):
            return session
        return None

    def delete_session(self, session_token: str) -> None:
        with self._lock:
            self.sessions.pop(session_token, None)

    # Events

    def list_events(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Event]:
        events = [e for e in self.events.values() if e.user_id == user_id]
        if start_date is not None and end_date is not None:
            events = [e for e in events if start_date <= e.start_date <= end_date]
        return sorted(events, key=lambda e: e.start_date)

    def get_event(self, event_id: str, user_id: str) -> Optional[Event]:
        event = self.events.get(event_id)
        return event if event is not None and event.user_id == user_id else None

    def create_event(self, user_id: str, fields: Dict[str, Any]) -> Event:
        now = utcnow()
        event = Event(
            id=new_id(),
            user_id=user_id,
            title=fields["title"],
            description=fields.get("description"),
            start_date=fields["start_date"],
            end_date=fields.get("end_date"),
            category=fields.get("category") or EventCategory.PERSONAL.value,
            is_recurring=bool(fields.get("is_recurring", False)),
            recurring_pattern=fields.get("recurring_pattern"),
            recurring_end_date=fields.get("recurring_end_date"),
            encrypted_data=fields.get("encrypted_data"),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.events[event.id] = event
        return event

    def update_event(self, event_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Event]:
        with self._lock:
            event = self.get_event(event_id, user_id)
            if event is None:
                return None
            for key, value in fields.items():
                setattr(event, key, value)
            event.updated_at = utcnow()
            return event

    def delete_event(self, event_id: str, user_id: str) -> bool:
        with self._lock:
            if self.get_event(event_id, user_id) is None:
                return False
            del self.events[event_id]
            for reminder_id in [r.id for r in self.reminders.values() if r.event_id == event_id]:
                del self.reminders[reminder_id]
            return True

    def count_by_category(self, user_id: str) -> Dict[str, int]:
        return dict(Counter(e.category for e in self.events.values() if e.user_id == user_id))

    # Reminders

    def list_reminders(self, event_id: str) -> List[Reminder]:
        return [r for r in self.reminders.values() if r.event_id == event_id]

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        return self.reminders.get(reminder_id)

    def create_reminder(self, event_id: str, minutes_before: int) -> Reminder:
        reminder = Reminder(
            id=new_id(),
            event_id=event_id,
            minutes_before=minutes_before,
            is_triggered=False,
            created_at=utcnow(),
        )
        with self._lock:
            self.reminders[reminder.id] = reminder
        return reminder

    def delete_reminder(self, reminder_id: str) -> bool:
        with self._lock:
            return self.reminders.pop(reminder_id, None) is not None
