"""Event ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, CheckConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class EventStatus(str, enum.Enum):
    pending = "pending"
    scheduled = "scheduled"
    completed = "completed"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("available_tickets >= 0", name="ck_events_available_tickets_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    venue = Column(String(255), nullable=False)
    when = Column(DateTime(timezone=True), nullable=False)  # start, stored as UTC
    available_tickets = Column(Integer, nullable=False, default=0)
    event_status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.pending)
    category = Column(String(100), nullable=False)
    organizer_id = Column(String(36), ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organizer = relationship("Organizer", back_populates="events")
    enrollments = relationship("Enrollment", back_populates="event", cascade="all, delete-orphan")
