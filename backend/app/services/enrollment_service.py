"""Enrollment engine — enroll, cancel and read enrollments.

Ticket inventory lives in ``events.available_tickets``. It is never written
with a read-then-write: enrolling runs a conditional decrement
(``... WHERE available_tickets > 0``) and checks the affected-row count,
and cancelling deletes the row first and only refunds when the delete hit
it. Both mutations commit together with the enrollment insert/delete, so the
store guarantees no oversell across any number of app instances.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.auth import Caller
from app.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized, UnprocessableEntity
from app.models.enrollment import Enrollment
from app.models.event import Event
from app.models.user import User
from app.services.authorization import is_attendee, owns_enrollment, require
from app.services.clock import as_utc, utcnow
from app.services.reminder_service import compute_reminder_time

logger = logging.getLogger(__name__)


def enroll(
    db: Session,
    caller: Caller,
    event_id: str,
    reminder_offset: str,
    now: Optional[datetime] = None,
) -> Enrollment:
    """Enroll the calling attendee in an event and take one ticket."""
    require(is_attendee(caller), Forbidden("Unauthorized to enroll"))
    now = as_utc(now or utcnow())

    event = db.get(Event, event_id)
    user = db.get(User, caller.id)
    if not event or not user:
        raise UnprocessableEntity("Invalid Event/User")

    if event.available_tickets <= 0:
        raise UnprocessableEntity("Event sold out")

    already_enrolled = (
        db.query(Enrollment.id)
        .filter(Enrollment.user_id == user.id, Enrollment.event_id == event.id)
        .first()
    )
    if already_enrolled:
        raise Conflict("User already enrolled in this event")

    when_to_remind = compute_reminder_time(as_utc(event.when), reminder_offset)
    if when_to_remind <= now:
        raise BadRequest("Reminder time must be in the future")

    try:
        taken = db.execute(
            update(Event)
            .where(Event.id == event.id, Event.available_tickets > 0)
            .values(available_tickets=Event.available_tickets - 1)
        )
        if taken.rowcount != 1:
            db.rollback()
            raise UnprocessableEntity("Event sold out")

        enrollment = Enrollment(
            user_id=user.id,
            event_id=event.id,
            enrollment_date=now,
            when_to_remind=when_to_remind,
            qr_code_scanned=False,
        )
        db.add(enrollment)
        db.flush()
    except IntegrityError:
        # A concurrent request for the same (user, event) won the unique index.
        db.rollback()
        raise Conflict("User already enrolled in this event")

    db.commit()
    db.refresh(enrollment)
    logger.info(
        "User %s enrolled in event %s (enrollment %s, remind at %s)",
        user.id, event.id, enrollment.id, when_to_remind.isoformat(),
    )
    return enrollment


def cancel_enrollment(db: Session, caller: Caller, enrollment_id: str) -> None:
    """Delete the caller's enrollment and refund its ticket."""
    require(is_attendee(caller), Forbidden("Unauthorized to cancel enrollments"))

    enrollment = db.get(Enrollment, enrollment_id)
    if not enrollment:
        raise NotFound("Enrollment does not exist")
    require(owns_enrollment(caller, enrollment), Unauthorized("Unauthorized to cancel this enrollment"))

    event_id = enrollment.event_id
    removed = db.execute(delete(Enrollment).where(Enrollment.id == enrollment_id))
    if removed.rowcount != 1:
        db.rollback()
        raise NotFound("Enrollment does not exist")

    db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(available_tickets=Event.available_tickets + 1)
    )
    db.commit()
    logger.info("User %s cancelled enrollment %s for event %s", caller.id, enrollment_id, event_id)


def list_user_enrollments(db: Session, caller: Caller) -> list[Enrollment]:
    return (
        db.query(Enrollment)
        .options(joinedload(Enrollment.event))
        .filter(Enrollment.user_id == caller.id)
        .order_by(Enrollment.enrollment_date.desc())
        .all()
    )


def get_user_enrollment(db: Session, caller: Caller, enrollment_id: str) -> Enrollment:
    enrollment = (
        db.query(Enrollment)
        .options(joinedload(Enrollment.event))
        .filter(Enrollment.id == enrollment_id)
        .first()
    )
    if not enrollment:
        raise NotFound("Enrollment does not exist")
    require(owns_enrollment(caller, enrollment), Unauthorized("Unauthorized to view this enrollment"))
    return enrollment
