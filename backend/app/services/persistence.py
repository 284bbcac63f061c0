"""Persistence operations used by the RSVP and management workflows.

Every function takes the request-scoped ``Session`` and commits its own
write; no function here spans more than one logical write.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.rsvp import RSVP
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inserted:
    rsvp: RSVP


@dataclass(frozen=True)
class AlreadyExists:
    event_id: str
    user_id: str


InsertResult = Union[Inserted, AlreadyExists]


def find_event_by_id(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.event_id == event_id).first()


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def find_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id).first()


def create_user(db: Session, name: Optional[str], email: str, password_hash: str, role: UserRole) -> User:
    """Insert a user; the email is normalized to lowercase before the write."""
    user = User(
        name=name.strip() if name else None,
        email=email.strip().lower(),
        password_hash=password_hash,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s, role=%s)", user.user_id, user.email, user.role.value)
    return user


def create_guest_if_absent(db: Session, name: Optional[str], email: str, role: UserRole) -> tuple[User, bool]:
    """Create a password-less guest account unless one with ``email`` exists.

    Returns ``(user, created)``. When a concurrent request commits the same
    email first, the unique constraint rejects this insert and the winner's
    row is returned with ``created=False``.
    """
    try:
        return create_user(db, name=name, email=email, password_hash="", role=role), True
    except IntegrityError:
        db.rollback()
        user = find_user_by_email(db, email)
        if user is None:
            raise
        logger.warning("Guest creation for %s hit the unique email constraint", user.email)
        return user, False


def find_rsvp(db: Session, event_id: str, user_id: str) -> Optional[RSVP]:
    return (
        db.query(RSVP)
        .filter(RSVP.event_id == event_id, RSVP.user_id == user_id)
        .first()
    )


def insert_rsvp_if_absent(db: Session, event_id: str, user_id: str) -> InsertResult:
    """Insert an RSVP row, relying on the (event_id, user_id) unique constraint.

    Returns ``AlreadyExists`` when the constraint rejects the row, whether the
    duplicate was committed earlier or by a concurrent request. Any other
    integrity failure is re-raised.
    """
    rsvp = RSVP(event_id=event_id, user_id=user_id)
    db.add(rsvp)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if find_rsvp(db, event_id, user_id) is not None:
            logger.warning("RSVP insert for event %s / user %s hit the unique constraint", event_id, user_id)
            return AlreadyExists(event_id=event_id, user_id=user_id)
        raise
    db.refresh(rsvp)
    return Inserted(rsvp=rsvp)


def list_rsvps_for_event(db: Session, event_id: str) -> list[RSVP]:
    """RSVPs for an event, oldest first."""
    return (
        db.query(RSVP)
        .filter(RSVP.event_id == event_id)
        .order_by(RSVP.created_at.asc())
        .all()
    )


def delete_rsvps_by_event(db: Session, event_id: str) -> int:
    """Delete all RSVPs of an event without committing; returns the row count."""
    return db.query(RSVP).filter(RSVP.event_id == event_id).delete(synchronize_session=False)


def delete_event(db: Session, event: Event) -> int:
    """Delete an event's RSVPs, then the event, in one commit."""
    deleted = delete_rsvps_by_event(db, event.event_id)
    db.expire(event, ["rsvps"])
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s and %d RSVPs", event.event_id, deleted)
    return deleted
