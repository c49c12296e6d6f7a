"""Organizer API routes."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth import Caller, get_current_caller
from app.database import get_db
from app.services import organizer_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{organizer_id}/analytics")
def get_analytics(
    organizer_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Enrollment and check-in totals for the calling organizer's events."""
    return organizer_service.get_organizer_analytics(db, caller, organizer_id)
