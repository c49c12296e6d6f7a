"""Concurrent enroll/cancel against one event.

Each worker opens its own session from ``concurrent_session_factory`` so the
store, not the Python process, arbitrates the ticket counter.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from app.auth import Caller, Role
from app.database import get_db
from app.errors import AppError, NotFound, UnprocessableEntity
from app.main import app
from app.models.enrollment import Enrollment
from app.models.event import Event
from app.services.enrollment_service import cancel_enrollment, enroll
from tests.conftest import auth_headers, create_test_event, create_test_organizer, create_test_user


def _users(db, count):
    return [
        create_test_user(db, first_name=f"User{i}", email=f"user{i}@example.test")
        for i in range(count)
    ]


def _enroll_as(factory, user, event_id):
    caller = Caller(id=user.id, email=user.email, role=Role.attendee)
    with factory() as session:
        try:
            enroll(session, caller, event_id, "1 hour")
            return "ok"
        except AppError as exc:
            return exc


def _cancel_as(factory, user, enrollment_id):
    caller = Caller(id=user.id, email=user.email, role=Role.attendee)
    with factory() as session:
        try:
            cancel_enrollment(session, caller, enrollment_id)
            return "ok"
        except AppError as exc:
            return exc


def _tickets(db, event_id):
    db.expire_all()
    return db.get(Event, event_id).available_tickets


class TestConcurrentEnroll:

    def test_more_requests_than_tickets(self, db, concurrent_session_factory):
        organizer = create_test_organizer(db)
        event = create_test_event(db, organizer, tickets=3, starts_in=timedelta(days=2))
        users = _users(db, 8)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda u: _enroll_as(concurrent_session_factory, u, event.id), users))

        successes = [r for r in results if r == "ok"]
        failures = [r for r in results if r != "ok"]
        assert len(successes) == 3
        assert all(isinstance(r, UnprocessableEntity) for r in failures)
        assert all(r.msg == "Event sold out" for r in failures)
        assert _tickets(db, event.id) == 0
        assert db.query(Enrollment).filter(Enrollment.event_id == event.id).count() == 3

    def test_fewer_requests_than_tickets(self, db, concurrent_session_factory):
        organizer = create_test_organizer(db)
        event = create_test_event(db, organizer, tickets=10, starts_in=timedelta(days=2))
        users = _users(db, 5)

        with ThreadPoolExecutor(max_workers=5) as pool:
            results = list(pool.map(lambda u: _enroll_as(concurrent_session_factory, u, event.id), users))

        assert results == ["ok"] * 5
        assert _tickets(db, event.id) == 5

    def test_same_user_twice(self, db, concurrent_session_factory):
        organizer = create_test_organizer(db)
        event = create_test_event(db, organizer, tickets=5, starts_in=timedelta(days=2))
        user = create_test_user(db)

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda _: _enroll_as(concurrent_session_factory, user, event.id), range(2)))

        assert results.count("ok") == 1
        assert _tickets(db, event.id) == 4


class TestConcurrentCancel:

    def test_double_cancel_refunds_once(self, db, concurrent_session_factory):
        organizer = create_test_organizer(db)
        event = create_test_event(db, organizer, tickets=2, starts_in=timedelta(days=2))
        user = create_test_user(db)
        caller = Caller(id=user.id, email=user.email, role=Role.attendee)
        enrollment = enroll(db, caller, event.id, "1 hour")
        assert _tickets(db, event.id) == 1

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(
                lambda _: _cancel_as(concurrent_session_factory, user, enrollment.id), range(2)
            ))

        assert results.count("ok") == 1
        assert any(isinstance(r, NotFound) for r in results)
        assert _tickets(db, event.id) == 2


class TestConcurrentEnrollEndpoint:

    def test_last_ticket_two_users(self, client, db, concurrent_session_factory):
        organizer = create_test_organizer(db)
        event = create_test_event(db, organizer, tickets=1, starts_in=timedelta(days=2))
        alice, bob = _users(db, 2)

        def _override_get_db():
            with concurrent_session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = _override_get_db

        def _post(user):
            return client.post(
                f"/events/{event.id}/enroll",
                json={"whenToRemind": "2 hours"},
                headers=auth_headers(user),
            )

        with ThreadPoolExecutor(max_workers=2) as pool:
            responses = list(pool.map(_post, [alice, bob]))

        bodies = sorted((r.status_code, r.json().get("msg") or r.json().get("message")) for r in responses)
        assert bodies == [
            (201, "User enrolled successfully in event"),
            (422, "Event sold out"),
        ]
        assert _tickets(db, event.id) == 0
