"""
SQLAlchemy-backed storage.

Every method opens its own short-lived session and performs one logical
statement; there is no cross-call transaction.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from planvault.core.exceptions import DatabaseException, DuplicateException
from planvault.db.base import Base, make_engine, make_session_factory, utcnow
from planvault.models import Event, Reminder, User, UserSession
from planvault.storage.base import Storage

logger = logging.getLogger(__name__)


class DatabaseStorage(Storage):

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = make_session_factory(engine)

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "DatabaseStorage":
        return cls(make_engine(url, echo=echo))

    def init(self) -> None:
        """Create all database tables"""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise DatabaseException("Failed to create database tables") from e
        logger.info("Database tables ready on %s", self.engine.url.render_as_string(hide_password=True))

    # Users

    def get_user(self, user_id: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.query(User).filter(User.username == username).first()

    def create_user(self, username: str, password_hash: str, recovery_key: str, encryption_key: str) -> User:
        with self.session_factory() as db:
            db_user = User(
                username=username,
                password_hash=password_hash,
                recovery_key=recovery_key,
                encryption_key=encryption_key,
            )
            db.add(db_user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateException("User", "username", username)
            db.refresh(db_user)
            return db_user

    def update_password(self, user_id: str, password_hash: str) -> bool:
        with self.session_factory() as db:
            updated = (
                db.query(User)
                .filter(User.id == user_id)
                .update({User.password_hash: password_hash}, synchronize_session=False)
            )
            db.commit()
            return updated > 0

    # Sessions

    def create_session(self, user_id: str, session_token: str, expires_at: datetime) -> UserSession:
        with self.session_factory() as db:
            session = UserSession(user_id=user_id, session_token=session_token, expires_at=expires_at)
            db.add(session)
            db.commit()
            db.refresh(session)
            return session

    def get_session(self, session_token: str, now: datetime) -> Optional[UserSession]:
        with self.session_factory() as db:
            return (
                db.query(UserSession)
                .filter(UserSession.session_token == session_token, UserSession.expires_at > now)
                .first()
            )

    def delete_session(self, session_token: str) -> None:
        with self.session_factory() as db:
            db.query(UserSession).filter(UserSession.session_token == session_token).delete(synchronize_session=False)
            db.commit()

    # Events

    def list_events(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Event]:
        with self.session_factory() as db:
            query = db.query(Event).filter(Event.user_id == user_id)
            if start_date is not None and end_date is not None:
                query = query.filter(Event.start_date >= start_date, Event.start_date <= end_date)
            return query.order_by(Event.start_date.asc()).all()

    def get_event(self, event_id: str, user_id: str) -> Optional[Event]:
        with self.session_factory() as db:
            return db.query(Event).filter(Event.id == event_id, Event.user_id == user_id).first()

    def create_event(self, user_id: str, fields: Dict[str, Any]) -> Event:
        with self.session_factory() as db:
            event = Event(user_id=user_id, **fields)
            db.add(event)
            db.commit()
            db.refresh(event)
            return event

    def update_event(self, event_id: str, user_id: str, fields: Dict[str, Any]) -> Optional[Event]:
        with self.session_factory() as db:
            event = db.query(Event).filter(Event.id == event_id, Event.user_id == user_id).first()
            if not event:
                return None
            for key, value in fields.items():
                setattr(event, key, value)
            event.updated_at = utcnow()
            db.commit()
            db.refresh(event)
            return event

    def delete_event(self, event_id: str, user_id: str) -> bool:
        # Reminders go with the event through the foreign key cascade.
        with self.session_factory() as db:
            deleted = (
                db.query(Event)
                .filter(Event.id == event_id, Event.user_id == user_id)
                .delete(synchronize_session=False)
            )
            db.commit()
            return deleted > 0

    def count_by_category(self, user_id: str) -> Dict[str, int]:
        with self.session_factory() as db:
            rows = (
                db.query(Event.category, func.count(Event.id))
                .filter(Event.user_id == user_id)
                .group_by(Event.category)
                .all()
            )
            return {category: count for category, count in rows}

    # Reminders

    def list_reminders(self, event_id: str) -> List[Reminder]:
        with self.session_factory() as db:
            return (
                db.query(Reminder)
                .filter(Reminder.event_id == event_id)
                .order_by(Reminder.created_at.asc())
                .all()
            )

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        with self.session_factory() as db:
            return db.get(Reminder, reminder_id)

    def create_reminder(self, event_id: str, minutes_before: int) -> Reminder:
        with self.session_factory() as db:
            reminder = Reminder(event_id=event_id, minutes_before=minutes_before, is_triggered=False)
            db.add(reminder)
            db.commit()
            db.refresh(reminder)
            return reminder

    def delete_reminder(self, reminder_id: str) -> bool:
        with self.session_factory() as db:
            deleted = db.query(Reminder).filter(Reminder.id == reminder_id).delete(synchronize_session=False)
            db.commit()
            return deleted > 0
