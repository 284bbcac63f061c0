"""Tests for the RSVP admission workflow.

Covers:
- Successful anonymous RSVP creates a guest account and exactly one RSVP
- Repeated submissions → 409, RSVP count stays at 1
- Past events → 400, nothing written
- Field validation → 400 with field-keyed errors, nothing written
- Session identity takes precedence over the submitted email
- Constraint violation at insert time → same 409 as the pre-check
"""
from datetime import timedelta

from app.models.rsvp import RSVP
from app.models.user import User, UserRole
from app.services import persistence, rsvp_service
from tests.conftest import auth_headers, create_test_event, create_test_user

ALICE = {"name": "Alice", "email": "alice@x.com"}


def _rsvp(client, event_id: str, payload: dict, headers: dict = None):
    return client.post(f"/api/events/{event_id}/rsvp", json=payload, headers=headers or {})


def _setup_event(db, starts_in: timedelta = timedelta(hours=1)):
    owner = create_test_user(db, email="owner@example.com", role=UserRole.event_owner)
    return create_test_event(db, owner, title="Launch Party", starts_in=starts_in)


def _rsvp_count(db, event_id: str) -> int:
    return db.query(RSVP).filter(RSVP.event_id == event_id).count()


class TestAnonymousRSVP:
    """Anonymous callers RSVP with name and email."""

    def test_rsvp_creates_guest_and_rsvp(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, ALICE)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"].startswith("RSVP submitted successfully")
        assert data["rsvp"]["eventTitle"] == "Launch Party"
        assert data["rsvp"]["attendeeName"] == "Alice"
        assert data["rsvp"]["attendeeEmail"] == "alice@x.com"
        assert data["rsvp"]["id"]
        assert data["rsvp"]["createdAt"]
        assert set(data["rsvp"]) == {"id", "eventTitle", "attendeeName", "attendeeEmail", "createdAt"}

        assert _rsvp_count(db, event.event_id) == 1
        guest = db.query(User).filter(User.email == "alice@x.com").one()
        assert guest.password_hash == ""
        assert guest.role == UserRole.attendee

    def test_repeat_submission_conflicts(self, client, db):
        """Alice scenario: 201 then 409, count stays 1."""
        event = _setup_event(db)
        assert _rsvp(client, event.event_id, ALICE).status_code == 201

        resp = _rsvp(client, event.event_id, ALICE)
        assert resp.status_code == 409
        assert resp.json()["message"] == "This email address has already been used to RSVP to this event"
        assert _rsvp_count(db, event.event_id) == 1

    def test_email_is_case_and_whitespace_normalized(self, client, db):
        event = _setup_event(db)
        assert _rsvp(client, event.event_id, ALICE).status_code == 201

        resp = _rsvp(client, event.event_id, {"name": "Alice", "email": "  ALICE@X.com "})
        assert resp.status_code == 409
        assert db.query(User).filter(User.email == "alice@x.com").count() == 1

    def test_existing_account_is_reused(self, client, db):
        event = _setup_event(db)
        registered = create_test_user(db, email="alice@x.com", name="Alice Registered")

        resp = _rsvp(client, event.event_id, {"name": "Someone Else", "email": "alice@x.com"})
        assert resp.status_code == 201
        assert resp.json()["rsvp"]["attendeeName"] == "Alice Registered"
        rsvp = db.query(RSVP).filter(RSVP.event_id == event.event_id).one()
        assert rsvp.user_id == registered.user_id

    def test_guest_can_rsvp_to_several_events(self, client, db):
        first = _setup_event(db)
        second = create_test_event(db, first.owner, title="Second Event")
        assert _rsvp(client, first.event_id, ALICE).status_code == 201
        assert _rsvp(client, second.event_id, ALICE).status_code == 201
        assert db.query(User).filter(User.email == "alice@x.com").count() == 1


class TestRSVPRejections:
    """Validation and state errors never write anything."""

    def test_unknown_event(self, client, db):
        resp = _rsvp(client, "00000000-0000-0000-0000-000000000000", ALICE)
        assert resp.status_code == 404
        assert resp.json()["message"] == "Event not found"
        assert db.query(User).count() == 0

    def test_past_event(self, client, db):
        event = _setup_event(db, starts_in=timedelta(days=-1))
        resp = _rsvp(client, event.event_id, ALICE)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Cannot RSVP to past events"
        assert _rsvp_count(db, event.event_id) == 0
        assert db.query(User).filter(User.email == "alice@x.com").count() == 0

    def test_past_event_with_invalid_payload(self, client, db):
        event = _setup_event(db, starts_in=timedelta(days=-1))
        resp = _rsvp(client, event.event_id, {"name": "", "email": "nope"})
        assert resp.status_code == 400
        assert _rsvp_count(db, event.event_id) == 0

    def test_empty_name(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {"name": "", "email": "alice@x.com"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Please fix the following errors:"
        assert body["errors"]["name"] == "Full name is required"
        assert "email" not in body["errors"]

    def test_single_character_name(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {"name": " A ", "email": "alice@x.com"})
        assert resp.status_code == 400
        assert resp.json()["errors"]["name"] == "Name must be at least 2 characters long"
        assert _rsvp_count(db, event.event_id) == 0
        assert db.query(User).filter(User.email == "alice@x.com").count() == 0

    def test_name_too_long(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {"name": "x" * 101, "email": "alice@x.com"})
        assert resp.status_code == 400
        assert resp.json()["errors"]["name"] == "Name must be less than 100 characters"

    def test_invalid_email(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {"name": "Alice", "email": "not-an-email"})
        assert resp.status_code == 400
        assert resp.json()["errors"]["email"] == "Please enter a valid email address"
        assert _rsvp_count(db, event.event_id) == 0
        assert db.query(User).filter(User.role == UserRole.attendee).count() == 0

    def test_missing_fields(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {})
        assert resp.status_code == 400
        errors = resp.json()["errors"]
        assert errors == {"name": "Full name is required", "email": "Email address is required"}

    def test_non_string_fields(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, {"name": 42, "email": ["a@b.co"]})
        assert resp.status_code == 400
        assert set(resp.json()["errors"]) == {"name", "email"}

    def test_malformed_body(self, client, db):
        event = _setup_event(db)
        resp = client.post(
            f"/api/events/{event.event_id}/rsvp",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid request data. Please check your input."}

    def test_body_not_an_object(self, client, db):
        event = _setup_event(db)
        resp = client.post(f"/api/events/{event.event_id}/rsvp", json=["Alice", "alice@x.com"])
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request data. Please check your input."


class TestAuthenticatedRSVP:
    """Signed-in callers RSVP as themselves."""

    def test_session_identity_wins_over_submitted_email(self, client, db):
        event = _setup_event(db)
        bob = create_test_user(db, email="bob@example.com", name="Bob")

        resp = _rsvp(client, event.event_id, {"name": "Mallory", "email": "mallory@example.com"},
                     headers=auth_headers(bob))
        assert resp.status_code == 201
        assert resp.json()["rsvp"]["attendeeEmail"] == "bob@example.com"
        assert db.query(User).filter(User.email == "mallory@example.com").count() == 0
        assert db.query(User).count() == 2  # owner + bob
        rsvp = db.query(RSVP).filter(RSVP.event_id == event.event_id).one()
        assert rsvp.user_id == bob.user_id

    def test_session_duplicate_message(self, client, db):
        event = _setup_event(db)
        bob = create_test_user(db, email="bob@example.com", name="Bob")
        headers = auth_headers(bob)
        assert _rsvp(client, event.event_id, {"name": "Bob", "email": "bob@example.com"}, headers).status_code == 201

        resp = _rsvp(client, event.event_id, {"name": "Bob", "email": "other@example.com"}, headers)
        assert resp.status_code == 409
        assert resp.json()["message"] == "You have already RSVPed to this event"
        assert _rsvp_count(db, event.event_id) == 1

    def test_invalid_token_is_treated_as_anonymous(self, client, db):
        event = _setup_event(db)
        resp = _rsvp(client, event.event_id, ALICE, headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 201
        assert resp.json()["rsvp"]["attendeeEmail"] == "alice@x.com"


class TestDuplicateRace:
    """Duplicates caught by the unique constraint look like pre-check duplicates."""

    def test_constraint_violation_maps_to_conflict(self, client, db, monkeypatch):
        event = _setup_event(db)
        assert _rsvp(client, event.event_id, ALICE).status_code == 201

        # Simulate a racing request whose pre-check ran before the first insert committed
        original_find = persistence.find_rsvp
        calls = {"n": 0}

        def _stale_find(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return original_find(*args, **kwargs)

        monkeypatch.setattr(persistence, "find_rsvp", _stale_find)

        resp = _rsvp(client, event.event_id, ALICE)
        assert resp.status_code == 409
        assert resp.json()["message"] == "This email address has already been used to RSVP to this event"
        assert _rsvp_count(db, event.event_id) == 1

    def test_guest_creation_race_maps_to_conflict(self, client, db, monkeypatch):
        event = _setup_event(db)
        assert _rsvp(client, event.event_id, ALICE).status_code == 201

        # The racing request looked the email up before the first guest was committed
        original_find = persistence.find_user_by_email
        calls = {"n": 0}

        def _stale_find(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return original_find(*args, **kwargs)

        monkeypatch.setattr(persistence, "find_user_by_email", _stale_find)

        resp = _rsvp(client, event.event_id, ALICE)
        assert resp.status_code == 409
        assert resp.json()["message"] == "This email address has already been used to RSVP to this event"
        assert _rsvp_count(db, event.event_id) == 1
        assert db.query(User).filter(User.email == "alice@x.com").count() == 1

    def test_create_guest_if_absent_returns_existing_account(self, db):
        existing = create_test_user(db, email="dana@example.com", name="Dana")

        user, created = persistence.create_guest_if_absent(db, "Other Dana", "Dana@Example.com", UserRole.attendee)

        assert created is False
        assert user.user_id == existing.user_id
        assert db.query(User).filter(User.email == "dana@example.com").count() == 1

    def test_insert_if_absent_reports_existing_row(self, db):
        event = _setup_event(db)
        user = create_test_user(db, email="carol@example.com")

        first = persistence.insert_rsvp_if_absent(db, event.event_id, user.user_id)
        second = persistence.insert_rsvp_if_absent(db, event.event_id, user.user_id)

        assert isinstance(first, persistence.Inserted)
        assert isinstance(second, persistence.AlreadyExists)
        assert _rsvp_count(db, event.event_id) == 1


class TestResolveIdentity:
    """Identity resolution reports whether an account was created."""

    def test_creates_guest(self, db):
        identity = rsvp_service.resolve_identity(db, None, "Dana", "Dana@Example.com")
        assert identity.kind == "created"
        assert identity.user.email == "dana@example.com"
        assert identity.user.is_guest

    def test_reuses_existing(self, db):
        existing = create_test_user(db, email="dana@example.com")
        identity = rsvp_service.resolve_identity(db, None, "Dana", "dana@example.com")
        assert identity.kind == "existing"
        assert identity.user_id == existing.user_id

    def test_unknown_session_email_falls_back_to_payload(self, db):
        from app.services.auth_service import SessionIdentity

        session = SessionIdentity(email="ghost@example.com", role=UserRole.attendee)
        identity = rsvp_service.resolve_identity(db, session, "Dana", "dana@example.com")
        assert identity.kind == "created"
        assert identity.user.email == "dana@example.com"
