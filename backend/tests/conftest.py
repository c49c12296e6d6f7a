"""Pytest fixtures — SQLite database for fast, isolated tests."""
import os

SQLITE_URL = "sqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", SQLITE_URL)
os.environ.setdefault("JWT_SECRET", "test-secret-used-only-by-the-test-suite")

from datetime import datetime, timedelta, timezone  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.config import settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402

# Import all models so they register with Base.metadata
from app.models.organizer import Organizer    # noqa: E402
from app.models.user import User              # noqa: E402
from app.models.event import Event            # noqa: E402
from app.models.enrollment import Enrollment  # noqa: E402


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Sessionmaker for code that opens its own sessions (threads, tasks)."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def concurrent_session_factory(db_engine):
    """Sessionmaker whose transactions start with ``BEGIN IMMEDIATE``.

    SQLite only has a database-wide write lock; taking it up front makes
    concurrent units of work queue on the busy timeout instead of failing
    with "database is locked" when two readers try to upgrade at once.
    """
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

    @event.listens_for(engine, "connect")
    def _disable_implicit_begin(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: rows are inserted directly, identity comes from signed tokens
# ---------------------------------------------------------------------------
def make_token(subject_id: str, email: str, role: str) -> str:
    """Sign a token the way the identity service does."""
    return jwt.encode(
        {"id": subject_id, "email": email, "role": role},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def auth_headers(subject, role: str = "attendee") -> dict:
    return {"Authorization": f"Bearer {make_token(subject.id, subject.email, role)}"}


def create_test_organizer(db, name: str = "Acme Events", email: str = "org@acme.test") -> Organizer:
    organizer = Organizer(organization_name=name, email=email)
    db.add(organizer)
    db.commit()
    db.refresh(organizer)
    return organizer


def create_test_user(db, first_name: str = "Ada", email: str = "ada@example.test") -> User:
    user = User(first_name=first_name, last_name="Tester", email=email)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_test_event(db, organizer: Organizer, title: str = "Launch Party",
                      tickets: int = 10, starts_in: timedelta = timedelta(days=3),
                      when: datetime = None) -> Event:
    event_obj = Event(
        title=title,
        description="An evening of demos",
        venue="Main Hall",
        when=when or datetime.now(timezone.utc) + starts_in,
        available_tickets=tickets,
        category="tech",
        organizer_id=organizer.id,
    )
    db.add(event_obj)
    db.commit()
    db.refresh(event_obj)
    return event_obj


def create_test_enrollment(db, user: User, event_obj: Event, when_to_remind: datetime = None,
                           scanned: bool = False) -> Enrollment:
    enrollment = Enrollment(
        user_id=user.id,
        event_id=event_obj.id,
        when_to_remind=when_to_remind,
        qr_code_scanned=scanned,
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment
