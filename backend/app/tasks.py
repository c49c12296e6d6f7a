import logging
import threading

import redis
from celery.signals import worker_ready, worker_shutting_down

from app.celery_app import celery_app
from app.config import settings
from app.database import SessionLocal
from app.services.mailer import SMTPMailer
from app.services.reminder_service import sweep

logger = logging.getLogger(__name__)

SWEEP_LOCK_KEY = "reminder_sweep_lock"

# Set on worker shutdown; the running sweep stops before its next reminder.
shutdown_requested = threading.Event()


def get_redis_client():
    """Get Redis client for the sweep lock."""
    return redis.from_url(settings.REDIS_URL, decode_responses=True)


@celery_app.task(bind=True)
def sweep_reminders_task(self) -> dict:
    """Send due reminders unless another sweep is still running."""
    redis_client = get_redis_client()
    lock = redis_client.lock(SWEEP_LOCK_KEY, timeout=settings.REMINDER_SWEEP_LOCK_TIMEOUT_SECONDS)

    if not lock.acquire(blocking=False):
        logger.warning("Reminder sweep already running, skipping this tick")
        return {"skipped": True}

    try:
        db = SessionLocal()
        try:
            result = sweep(db, SMTPMailer(), stop=shutdown_requested)
        finally:
            db.close()
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Lock expired mid-sweep; the claims still keep reminders single-sent.
            logger.warning("Reminder sweep lock expired before release")

    return {"skipped": False, "sent": result.sent, "failed": result.failed, "claimed_elsewhere": result.skipped}


@worker_ready.connect
def sweep_on_startup(sender=None, **kwargs):
    """Run one sweep as soon as a worker comes up, before the first beat tick."""
    logger.info("Worker ready, queueing initial reminder sweep")
    sweep_reminders_task.delay()


@worker_shutting_down.connect
def stop_sweep(sig=None, how=None, exitcode=None, **kwargs):
    shutdown_requested.set()
