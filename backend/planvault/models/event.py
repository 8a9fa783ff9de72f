import enum
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from planvault.db.base import Base, new_id, utcnow


class EventCategory(str, enum.Enum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    FINANCE = "finance"


class RecurringPattern(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    category = Column(String(20), nullable=False, default=EventCategory.PERSONAL.value)
    # Recurrence is stored as metadata only, instances are never expanded.
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_pattern = Column(String(20), nullable=True)
    recurring_end_date = Column(DateTime, nullable=True)
    encrypted_data = Column(Text, nullable=True)  # opaque client-side ciphertext
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="events")
    reminders = relationship("Reminder", back_populates="event", cascade="all, delete-orphan", passive_deletes=True)


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(String(36), primary_key=True, default=new_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    minutes_before = Column(Integer, nullable=False)
    is_triggered = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    event = relationship("Event", back_populates="reminders")
