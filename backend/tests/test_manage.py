"""Tests for the management commands."""
import pytest

from app import manage
from app.models.event import Event
from app.models.rsvp import RSVP
from app.models.user import User, UserRole
from tests.conftest import create_test_user


def test_promote_user(db):
    create_test_user(db, email="henry@example.com")
    user = manage.promote_user(db, "HENRY@example.com", UserRole.staff)
    assert user.role == UserRole.staff


def test_promote_unknown_user(db):
    assert manage.promote_user(db, "nobody@example.com", UserRole.admin) is None


def test_seed_is_idempotent(db):
    manage.seed(db)
    manage.seed(db)
    assert db.query(User).count() == len(manage.SEED_USERS)
    assert db.query(Event).count() == len(manage.SEED_EVENTS)
    assert db.query(RSVP).count() == 2 * len(manage.SEED_EVENTS)
    admin = db.query(User).filter(User.email == "admin@eventease.com").one()
    assert admin.role == UserRole.admin


def test_list_users(db, capsys):
    create_test_user(db, email="ivy@example.com", name="Ivy", role=UserRole.event_owner)
    manage.list_users(db)
    out = capsys.readouterr().out
    assert "ivy@example.com" in out
    assert "Event Owner" in out


def test_parser_accepts_role_choice():
    args = manage.build_parser().parse_args(["promote-user", "a@b.co", "--role", "STAFF"])
    assert args.role == "STAFF"


def test_parser_rejects_unknown_role():
    with pytest.raises(SystemExit):
        manage.build_parser().parse_args(["promote-user", "a@b.co", "--role", "OVERLORD"])
