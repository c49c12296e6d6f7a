"""Organizer analytics — enrollment and attendance figures per event."""
import logging
from typing import Any

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.auth import Caller
from app.errors import Forbidden, NotFound
from app.models.enrollment import Enrollment
from app.models.event import Event
from app.models.organizer import Organizer
from app.services.authorization import is_organizer, is_self, require

logger = logging.getLogger(__name__)


def get_organizer_analytics(db: Session, caller: Caller, organizer_id: str) -> dict[str, Any]:
    """Totals across all of an organizer's events plus a per-event breakdown.

    ``individualEventsStats`` is keyed by event title, as the dashboard
    renders it; ``scannedIn`` counts enrollments whose QR code was scanned.
    """
    require(
        is_organizer(caller) and is_self(caller, organizer_id),
        Forbidden("Not authorized to access this route"),
    )
    if not db.get(Organizer, organizer_id):
        raise NotFound("Organizer does not exist")

    rows = (
        db.query(
            Event.title,
            func.count(Enrollment.id),
            func.coalesce(func.sum(case((Enrollment.qr_code_scanned.is_(True), 1), else_=0)), 0),
        )
        .outerjoin(Enrollment, Enrollment.event_id == Event.id)
        .filter(Event.organizer_id == organizer_id)
        .group_by(Event.id, Event.title)
        .all()
    )

    individual: dict[str, dict[str, int]] = {}
    all_time = 0
    for title, total, scanned in rows:
        individual[title] = {"totalEnrollment": int(total), "scannedIn": int(scanned)}
        all_time += int(total)

    logger.info("Analytics computed for organizer %s (%d events)", organizer_id, len(rows))
    return {
        "organizerAnalytics": {
            "totalEventsOrganized": len(rows),
            "allTimeEnrollments": all_time,
            "individualEventsStats": individual,
        }
    }
