from celery import Celery

from app.config import settings


def make_celery(app_name: str = "eventful") -> Celery:
    celery = Celery(app_name, broker=settings.REDIS_URL, backend=settings.REDIS_URL, include=["app.tasks"])
    celery.conf.task_serializer = "json"
    celery.conf.result_serializer = "json"
    celery.conf.accept_content = ["json"]
    celery.conf.result_persistent = False
    celery.conf.task_track_started = True
    celery.conf.timezone = "UTC"
    celery.conf.beat_schedule = {
        "sweep-reminders": {
            "task": "app.tasks.sweep_reminders_task",
            "schedule": float(settings.REMINDER_SWEEP_INTERVAL_SECONDS),
            # A tick older than one interval is superseded by the next one.
            "options": {"expires": float(settings.REMINDER_SWEEP_INTERVAL_SECONDS)},
        },
    }
    return celery


celery_app = make_celery()
