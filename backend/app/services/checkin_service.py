"""QR-code check-in.

The QR code printed for an enrollment encodes
``/events/checkin/{eventId}/{userId}/{enrollmentId}``; scanning it at the
venue hits the check-in route with those three ids. No caller token is
needed, the kiosk is trusted.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.errors import BadRequest, Conflict, NotFound, Unauthorized
from app.models.enrollment import Enrollment
from app.services.clock import as_utc, local_date, utcnow

logger = logging.getLogger(__name__)

CHECKIN_PATH = "/events/checkin/{event_id}/{user_id}/{enrollment_id}"


def build_checkin_path(event_id: str, user_id: str, enrollment_id: str) -> str:
    return CHECKIN_PATH.format(event_id=event_id, user_id=user_id, enrollment_id=enrollment_id)


def build_checkin_url(enrollment: Enrollment) -> str:
    """Absolute URL to encode in the enrollment's QR code."""
    path = build_checkin_path(enrollment.event_id, enrollment.user_id, enrollment.id)
    return settings.PUBLIC_BASE_URL.rstrip("/") + path


def check_in(
    db: Session,
    event_id: str,
    user_id: str,
    enrollment_id: str,
    now: Optional[datetime] = None,
    allow_repeat: Optional[bool] = None,
) -> Enrollment:
    """Mark an enrollment as attended on the calendar day of its event."""
    enrollment = (
        db.query(Enrollment)
        .options(joinedload(Enrollment.event))
        .filter(Enrollment.id == enrollment_id)
        .first()
    )
    if not enrollment:
        raise NotFound("Invalid enrollment")

    if enrollment.event_id != event_id or enrollment.user_id != user_id:
        raise Unauthorized("Invalid enrollment")

    now = as_utc(now or utcnow())
    tz_name = settings.EVENT_TIMEZONE
    if local_date(now, tz_name) != local_date(enrollment.event.when, tz_name):
        raise BadRequest("Cannot check in before/after event date")

    if allow_repeat is None:
        allow_repeat = settings.ALLOW_REPEAT_CHECKIN

    stmt = (
        update(Enrollment)
        .where(Enrollment.id == enrollment_id)
        .values(qr_code_scanned=True, checked_in_at=now)
    )
    if not allow_repeat:
        stmt = stmt.where(Enrollment.qr_code_scanned.is_(False))
    if db.execute(stmt).rowcount != 1:
        db.rollback()
        if allow_repeat:
            # Only a concurrent cancel can leave nothing to update.
            raise NotFound("Invalid enrollment")
        raise Conflict("Enrollment already checked in")

    db.commit()
    db.refresh(enrollment)
    logger.info("User %s checked in to event %s (enrollment %s)", user_id, event_id, enrollment_id)
    return enrollment
