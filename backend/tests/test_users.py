"""Tests for the caller's enrollment listing."""
from datetime import datetime, timedelta, timezone

from tests.conftest import (
    auth_headers,
    create_test_enrollment,
    create_test_event,
    create_test_organizer,
    create_test_user,
)


class TestListEnrollments:

    def test_not_enrolled(self, client, db):
        user = create_test_user(db)
        resp = client.get("/users/enrollments", headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json() == {"msg": "You are currently not enrolled for any event"}

    def test_lists_only_own_enrollments(self, client, db):
        organizer = create_test_organizer(db)
        user = create_test_user(db)
        other = create_test_user(db, first_name="Eve", email="eve@example.test")
        first = create_test_event(db, organizer, title="First")
        second = create_test_event(db, organizer, title="Second")
        create_test_enrollment(db, user, first)
        create_test_enrollment(db, user, second)
        create_test_enrollment(db, other, first)

        resp = client.get("/users/enrollments", headers=auth_headers(user))

        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 2
        assert {e["event"]["title"] for e in data} == {"First", "Second"}
        assert all(e["userId"] == user.id for e in data)

    def test_requires_token(self, client):
        assert client.get("/users/enrollments").status_code == 401


class TestGetEnrollment:

    def test_get_with_checkin_url(self, client, db):
        organizer = create_test_organizer(db)
        user = create_test_user(db)
        event = create_test_event(db, organizer)
        remind = datetime.now(timezone.utc) + timedelta(days=1)
        enrollment = create_test_enrollment(db, user, event, when_to_remind=remind)

        resp = client.get(f"/users/enrollments/{enrollment.id}", headers=auth_headers(user))

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == enrollment.id
        assert data["qrCodeScanned"] is False
        assert data["whenToRemind"] is not None
        assert data["checkInUrl"].endswith(f"/events/checkin/{event.id}/{user.id}/{enrollment.id}")
        assert data["event"]["venue"] == "Main Hall"

    def test_missing(self, client, db):
        user = create_test_user(db)
        resp = client.get("/users/enrollments/nope", headers=auth_headers(user))
        assert resp.status_code == 404

    def test_someone_elses(self, client, db):
        organizer = create_test_organizer(db)
        user = create_test_user(db)
        other = create_test_user(db, first_name="Eve", email="eve@example.test")
        enrollment = create_test_enrollment(db, user, create_test_event(db, organizer))

        resp = client.get(f"/users/enrollments/{enrollment.id}", headers=auth_headers(other))

        assert resp.status_code == 401
        assert resp.json()["msg"] == "Unauthorized to view this enrollment"
