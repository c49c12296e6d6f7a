"""User API routes — the caller's own enrollments."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import Caller, get_current_caller
from app.database import get_db
from app.models.enrollment import Enrollment
from app.schemas.user import EnrolledEventOut, EnrollmentOut
from app.services import enrollment_service
from app.services.checkin_service import build_checkin_url

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_out(enrollment: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        id=enrollment.id,
        user_id=enrollment.user_id,
        event_id=enrollment.event_id,
        enrollment_date=enrollment.enrollment_date,
        when_to_remind=enrollment.when_to_remind,
        reminder_sent_at=enrollment.reminder_sent_at,
        qr_code_scanned=enrollment.qr_code_scanned,
        checked_in_at=enrollment.checked_in_at,
        check_in_url=build_checkin_url(enrollment),
        event=EnrolledEventOut.model_validate(enrollment.event),
    )


@router.get("/enrollments")
def list_enrollments(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    """List the caller's enrollments, newest first."""
    enrollments = enrollment_service.list_user_enrollments(db, caller)
    if not enrollments:
        return {"msg": "You are currently not enrolled for any event"}
    return [_to_out(e).model_dump(by_alias=True) for e in enrollments]


@router.get("/enrollments/{enrollment_id}", response_model=EnrollmentOut)
def get_enrollment(
    enrollment_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Fetch one of the caller's enrollments, with its QR check-in URL."""
    return _to_out(enrollment_service.get_user_enrollment(db, caller, enrollment_id))
