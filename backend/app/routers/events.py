"""Event API routes — delegates to the event, enrollment and check-in services."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import Caller, get_current_caller
from app.database import get_db
from app.schemas.event import EnrollRequest, EventCreate, EventOut, EventUpdate, MessageOut
from app.services import checkin_service, enrollment_service, event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Create an event owned by the calling organizer."""
    return event_service.create_event(
        db=db,
        caller=caller,
        title=payload.title,
        description=payload.description,
        venue=payload.venue,
        when=payload.when,
        available_tickets=payload.available_tickets,
        category=payload.category,
        event_status=payload.event_status.value,
    )


@router.get("", response_model=list[EventOut])
def list_events(category: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """List events, soonest first."""
    return event_service.list_events(db, category=category)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Partially update an event. Owning organizer only."""
    return event_service.update_event(db, caller, event_id, payload.model_dump(exclude_unset=True))


@router.delete("/{event_id}", response_model=MessageOut)
def cancel_event(
    event_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Cancel (delete) an event. Owning organizer only."""
    event_service.cancel_event(db, caller, event_id)
    return {"message": "Event cancelled successfully"}


@router.post("/{event_id}/enroll", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def enroll(
    event_id: str,
    payload: EnrollRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Enroll the calling attendee and schedule their reminder."""
    enrollment_service.enroll(db, caller, event_id, payload.when_to_remind)
    return {"message": "User enrolled successfully in event"}


@router.delete("/enrollment/{enrollment_id}", response_model=MessageOut)
def cancel_enrollment(
    enrollment_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Cancel the caller's enrollment and release its ticket."""
    enrollment_service.cancel_enrollment(db, caller, enrollment_id)
    return {"message": "Enrollment cancelled successfully"}


@router.patch("/checkin/{event_id}/{user_id}/{enrollment_id}", response_model=MessageOut)
def check_in(event_id: str, user_id: str, enrollment_id: str, db: Session = Depends(get_db)):
    """QR-code check-in, hit by the venue scanner on the day of the event."""
    checkin_service.check_in(db, event_id, user_id, enrollment_id)
    return {"message": "User checked in successfully to event"}
