"""Reminder scheduling — offset parsing, due-reminder selection and the sweep.

A reminder is due when ``when_to_remind <= now`` and ``reminder_sent_at`` is
still NULL. The sweep claims each reminder with a conditional UPDATE before
sending, so two overlapping sweeps never mail the same enrollment twice; a
failed delivery releases the claim and is retried on the next sweep.
"""
import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional

import pytz
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import BadRequest
from app.models.enrollment import Enrollment
from app.models.event import Event
from app.models.user import User
from app.services.clock import as_utc, utcnow
from app.services.mailer import MailMessage

logger = logging.getLogger(__name__)

_UNITS = {
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
}
_OFFSET_RE = re.compile(r"^\s*(\d+)\s+([A-Za-z]+)\s*$")


@dataclass(frozen=True)
class DueReminder:
    enrollment_id: str
    email: str
    event_title: str
    event_when: datetime
    when_to_remind: datetime


@dataclass
class SweepResult:
    sent: int = 0
    failed: int = 0
    skipped: int = 0


def compute_reminder_time(event_start: datetime, offset_expression: str) -> datetime:
    """Return ``event_start`` minus an offset such as ``"2 hours"`` or ``"1 week"``."""
    match = _OFFSET_RE.match(offset_expression or "")
    if not match:
        raise BadRequest("Invalid reminder offset")

    amount, unit = int(match.group(1)), match.group(2).lower()
    if unit.endswith("s"):
        unit = unit[:-1]
    if unit not in _UNITS:
        raise BadRequest("Invalid reminder unit")

    try:
        return event_start - amount * _UNITS[unit]
    except OverflowError:
        # Offset outside the datetime range.
        raise BadRequest("Invalid reminder offset")


def select_due_reminders(
    db: Session,
    now: datetime,
    after: Optional[DueReminder] = None,
    limit: Optional[int] = None,
) -> Iterator[DueReminder]:
    """Yield unsent reminders due at ``now`` with the data needed to mail them.

    Rows come in ``(when_to_remind, enrollment id)`` order. ``after`` resumes
    strictly past a reminder already seen and ``limit`` bounds the page.
    """
    stmt = (
        select(Enrollment.id, User.email, Event.title, Event.when, Enrollment.when_to_remind)
        .join(User, Enrollment.user_id == User.id)
        .join(Event, Enrollment.event_id == Event.id)
        .where(
            Enrollment.when_to_remind.is_not(None),
            Enrollment.when_to_remind <= as_utc(now),
            Enrollment.reminder_sent_at.is_(None),
        )
        .order_by(Enrollment.when_to_remind, Enrollment.id)
        .execution_options(yield_per=100)
    )
    if after is not None:
        stmt = stmt.where(
            or_(
                Enrollment.when_to_remind > after.when_to_remind,
                and_(
                    Enrollment.when_to_remind == after.when_to_remind,
                    Enrollment.id > after.enrollment_id,
                ),
            )
        )
    if limit is not None:
        stmt = stmt.limit(limit)
    for row in db.execute(stmt):
        yield DueReminder(
            enrollment_id=row.id,
            email=row.email,
            event_title=row.title,
            event_when=as_utc(row.when),
            when_to_remind=as_utc(row.when_to_remind),
        )


def compose_reminder(reminder: DueReminder) -> MailMessage:
    local_start = reminder.event_when.astimezone(pytz.timezone(settings.EVENT_TIMEZONE))
    starts = local_start.strftime("%A %d %B %Y at %H:%M %Z")
    return MailMessage(
        to=reminder.email,
        subject=f"Reminder: {reminder.event_title}",
        text=(
            f"Hello,\n\n"
            f"This is a reminder that \"{reminder.event_title}\" starts on {starts}.\n"
            f"Bring the QR code from your enrollment to check in.\n\n"
            f"See you there!"
        ),
    )


def _claim(db: Session, enrollment_id: str, now: datetime) -> bool:
    result = db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment_id, Enrollment.reminder_sent_at.is_(None))
        .values(reminder_sent_at=now)
    )
    db.commit()
    return result.rowcount == 1


def _release(db: Session, enrollment_id: str) -> None:
    db.execute(update(Enrollment).where(Enrollment.id == enrollment_id).values(reminder_sent_at=None))
    db.commit()


def _dispatch(db: Session, mailer, reminder: DueReminder, now: datetime, result: SweepResult) -> None:
    try:
        claimed = _claim(db, reminder.enrollment_id, now)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not claim reminder for enrollment %s", reminder.enrollment_id)
        result.skipped += 1
        return
    if not claimed:
        result.skipped += 1
        return

    try:
        mailer.send(compose_reminder(reminder))
    except Exception:
        logger.exception("Failed to send reminder for enrollment %s to %s", reminder.enrollment_id, reminder.email)
        result.failed += 1
        try:
            _release(db, reminder.enrollment_id)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Could not release reminder claim for enrollment %s", reminder.enrollment_id)
        return

    result.sent += 1


def sweep(
    db: Session,
    mailer,
    now: Optional[datetime] = None,
    stop: Optional[threading.Event] = None,
    batch_size: Optional[int] = None,
) -> SweepResult:
    """Send every due reminder once; one failed delivery never aborts the batch.

    Due reminders are read in pages of ``batch_size`` (default
    ``REMINDER_SWEEP_BATCH_SIZE``), each page resuming after the last
    reminder of the previous one, so released failures are not retried
    within the same sweep. ``stop`` is checked between items: the current
    delivery finishes and the sweep returns before starting the next one.
    """
    now = as_utc(now or utcnow())
    batch_size = batch_size or settings.REMINDER_SWEEP_BATCH_SIZE
    result = SweepResult()
    last = None
    stopped = False

    while not stopped:
        # Claims commit per item, which would close a streaming cursor.
        page = list(select_due_reminders(db, now, after=last, limit=batch_size))
        for reminder in page:
            if stop is not None and stop.is_set():
                logger.info("Reminder sweep stopped after %d reminders", result.sent + result.failed + result.skipped)
                stopped = True
                break
            _dispatch(db, mailer, reminder, now, result)
        if len(page) < batch_size:
            break
        last = page[-1]

    logger.info("Reminder sweep done: %d sent, %d failed, %d skipped", result.sent, result.failed, result.skipped)
    return result
