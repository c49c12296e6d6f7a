"""Pydantic schemas for Events."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from app.models.event import EventStatus


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    venue: str = Field(min_length=1, max_length=255)
    when: datetime
    available_tickets: int = Field(ge=0)
    event_status: EventStatus = EventStatus.pending
    category: str = Field(min_length=1, max_length=100)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class EventUpdate(BaseModel):
    """Partial update; ticket count and organizer are not accepted."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    venue: Optional[str] = Field(None, min_length=1, max_length=255)
    when: Optional[datetime] = None
    event_status: Optional[EventStatus] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "forbid"}


class EventOut(BaseModel):
    id: str
    title: str
    description: str
    venue: str
    when: datetime
    available_tickets: int
    event_status: EventStatus
    category: str
    organizer_id: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class EnrollRequest(BaseModel):
    when_to_remind: str = Field(
        alias="whenToRemind",
        description='Offset before the event start, e.g. "2 hours" or "1 week"',
    )

    model_config = {"populate_by_name": True}


class MessageOut(BaseModel):
    message: str
