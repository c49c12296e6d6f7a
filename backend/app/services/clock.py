"""UTC helpers shared by the services."""
from datetime import date, datetime, timezone

import pytz


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite hands back naive datetimes; everything we store is UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime, tz_name: str) -> date:
    """Calendar day of ``value`` in the IANA timezone ``tz_name``."""
    return as_utc(value).astimezone(pytz.timezone(tz_name)).date()
