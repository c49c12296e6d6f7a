"""Pydantic schemas for a user's enrollments."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class EnrolledEventOut(BaseModel):
    id: str
    title: str
    venue: str
    when: datetime

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class EnrollmentOut(BaseModel):
    id: str
    user_id: str
    event_id: str
    enrollment_date: Optional[datetime] = None
    when_to_remind: Optional[datetime] = None
    reminder_sent_at: Optional[datetime] = None
    qr_code_scanned: bool
    checked_in_at: Optional[datetime] = None
    check_in_url: str
    event: EnrolledEventOut

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}
