"""Management commands.

Usage:
    python -m app.manage seed
    python -m app.manage promote-user <email> [--role STAFF]
    python -m app.manage list-users
"""
import argparse
import logging
import sys
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, engine
from app.models.event import Event
from app.models.rsvp import RSVP  # noqa: F401
from app.models.user import User, UserRole
from app.services import persistence
from app.services.auth_service import ROLE_DISPLAY_NAMES, hash_password
from app.utils import utcnow

logger = logging.getLogger(__name__)

SEED_USERS = [
    ("Admin User", "admin@eventease.com", "Admin123", UserRole.admin),
    ("John Staff", "john@test.com", "aA12345", UserRole.staff),
    ("Olivia Owner", "owner@test.com", "Owner123", UserRole.event_owner),
    ("Alice Attendee", "attendee1@test.com", "Password123", UserRole.attendee),
    ("Bob Attendee", "attendee2@test.com", "Password123", UserRole.attendee),
]

SEED_EVENTS = [
    ("Community Meetup", "Monthly meetup for local members.", "Town Hall", 7),
    ("Python Workshop", "Hands-on introduction to FastAPI.", "Library, Room 2", 14),
]


def _upsert_user(db: Session, name: str, email: str, password: str, role: UserRole) -> User:
    user = persistence.find_user_by_email(db, email)
    if user is None:
        return persistence.create_user(db, name=name, email=email, password_hash=hash_password(password), role=role)
    user.role = role
    db.commit()
    return user


def seed(db: Session) -> None:
    """Create demo users and, for the event owner, a couple of upcoming events."""
    users = {email: _upsert_user(db, name, email, password, role) for name, email, password, role in SEED_USERS}
    owner = users["owner@test.com"]

    for title, description, location, days_ahead in SEED_EVENTS:
        exists = db.query(Event).filter(Event.title == title, Event.owner_id == owner.user_id).first()
        if exists:
            continue
        event = Event(
            title=title,
            description=description,
            location=location,
            date=utcnow() + timedelta(days=days_ahead),
            owner_id=owner.user_id,
        )
        db.add(event)
        db.commit()
        for attendee in (users["attendee1@test.com"], users["attendee2@test.com"]):
            persistence.insert_rsvp_if_absent(db, event.event_id, attendee.user_id)
    print(f"Seeded {len(SEED_USERS)} users and {len(SEED_EVENTS)} events")


def promote_user(db: Session, email: str, role: UserRole) -> Optional[User]:
    user = persistence.find_user_by_email(db, email)
    if user is None:
        return None
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("Promoted %s to %s", user.email, role.value)
    return user


def list_users(db: Session) -> None:
    users = db.query(User).order_by(User.created_at.asc()).all()
    if not users:
        print("No users found. Register an account first.")
        return
    for user in users:
        print(
            f"{user.email:<35} {user.name or '-':<25} {ROLE_DISPLAY_NAMES[user.role]:<15} "
            f"events={user.event_count} rsvps={user.rsvp_count}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m app.manage", description="EventEase management commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("seed", help="Create demo users and events")

    promote = sub.add_parser("promote-user", help="Change a user's role")
    promote.add_argument("email")
    promote.add_argument("--role", default=UserRole.admin.value, choices=[r.value for r in UserRole])

    sub.add_parser("list-users", help="List all users with their roles")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    db = SessionLocal()
    try:
        if args.command == "seed":
            Base.metadata.create_all(bind=engine)
            seed(db)
        elif args.command == "promote-user":
            user = promote_user(db, args.email, UserRole(args.role))
            if user is None:
                print(f"User with email {args.email} not found", file=sys.stderr)
                return 1
            print(f"{user.email} is now {ROLE_DISPLAY_NAMES[user.role]}")
        elif args.command == "list-users":
            list_users(db)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
