"""Event service — organizer-owned event lifecycle.

Responsibilities:
- Only organizers create events; only the owning organizer updates or cancels one
- Ticket inventory starts at the organizer-supplied count and is then
  owned by the enrollment engine
- Cancelling an event removes its enrollments with it
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.auth import Caller
from app.errors import BadRequest, Forbidden, NotFound, UnprocessableEntity
from app.models.event import Event, EventStatus
from app.models.organizer import Organizer
from app.services.authorization import is_organizer, owns_event, require
from app.services.clock import as_utc

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"title", "description", "venue", "when", "event_status", "category"}


def create_event(
    db: Session,
    caller: Caller,
    title: str,
    description: str,
    venue: str,
    when: datetime,
    available_tickets: int,
    category: str,
    event_status: str = EventStatus.pending.value,
) -> Event:
    """Create an event owned by the calling organizer."""
    require(is_organizer(caller), Forbidden("Unauthorized to create events"))

    organizer = db.get(Organizer, caller.id)
    if not organizer:
        raise UnprocessableEntity("Invalid Organizer")

    event = Event(
        title=title,
        description=description,
        venue=venue,
        when=as_utc(when),
        available_tickets=available_tickets,
        event_status=EventStatus(event_status),
        category=category,
        organizer_id=organizer.id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by organizer %s", title, event.id, organizer.id)
    return event


def list_events(db: Session, category: Optional[str] = None) -> list[Event]:
    query = db.query(Event)
    if category:
        query = query.filter(Event.category == category)
    return query.order_by(Event.when).all()


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFound("Event does not exist")
    return event


def update_event(db: Session, caller: Caller, event_id: str, changes: dict[str, Any]) -> Event:
    """Apply a partial update to an event. Owning organizer only.

    Ticket inventory belongs to the enrollment engine and the owner is fixed
    at creation, so ``available_tickets`` and ``organizer_id`` are refused.
    """
    event = get_event(db, event_id)
    require(owns_event(caller, event), Forbidden("Unauthorized to make this change"))

    for field in changes:
        if field not in UPDATABLE_FIELDS:
            raise BadRequest(f"Field cannot be changed: {field}")
    for field, value in changes.items():
        if value is None:
            raise BadRequest(f"Field cannot be empty: {field}")
        if field == "when":
            value = as_utc(value)
        elif field == "event_status":
            value = EventStatus(value)
        setattr(event, field, value)

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(changes)) or "no changes")
    return event


def cancel_event(db: Session, caller: Caller, event_id: str) -> None:
    """Delete an event and, through the ORM cascade, its enrollments."""
    event = get_event(db, event_id)
    require(owns_event(caller, event), Forbidden("Unauthorized to make this change"))

    enrolled = len(event.enrollments)
    db.delete(event)
    db.commit()
    logger.info("Cancelled event %s (%d enrollments removed)", event_id, enrolled)
