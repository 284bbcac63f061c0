"""Core event service: creation, listing and owner/staff-gated operations.

Responsibilities:
- Authorization hook: only the owner, staff or admins may manage an event
- Event creation restricted to EVENT_OWNER and above
- Deletion removes RSVPs before the event itself
"""
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from app.models.event import Event
from app.models.rsvp import RSVP
from app.models.user import User, UserRole
from app.services import persistence
from app.services.auth_service import can_manage_event, has_role

logger = logging.getLogger(__name__)


def _check_authorization(user: User, event: Event, detail: str) -> None:
    if not can_manage_event(user, event):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_event_or_404(db: Session, event_id: str) -> Event:
    event = persistence.find_event_by_id(db, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def get_managed_event(db: Session, user: User, event_id: str, detail: str) -> Event:
    """Fetch an event the caller is allowed to manage (404 before 403)."""
    event = get_event_or_404(db, event_id)
    _check_authorization(user, event, detail)
    return event


def create_event(
    db: Session,
    owner: User,
    title: str,
    date,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Event:
    """Create an event owned by ``owner``; attendees may not create events."""
    if not has_role(owner.role, UserRole.event_owner):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=(
                "Access denied. Attendees can only monitor events and view the home page. "
                "Event creation is restricted to Event Owners, Staff, and Administrators."
            ),
        )

    event = Event(
        title=title,
        description=description,
        location=location,
        date=date,
        owner_id=owner.user_id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by owner %s", title, event.event_id, owner.user_id)
    return event


def list_events(db: Session) -> list[Event]:
    """All events, soonest first."""
    return db.query(Event).options(joinedload(Event.owner)).order_by(Event.date.asc()).all()


def list_managed_events(db: Session, user: User) -> list[Event]:
    """Events the user can manage, latest date first."""
    query = db.query(Event).options(joinedload(Event.owner))
    if not has_role(user.role, UserRole.staff):
        query = query.filter(Event.owner_id == user.user_id)
    return query.order_by(Event.date.desc()).all()


def list_all_events_newest_first(db: Session) -> list[Event]:
    return db.query(Event).options(joinedload(Event.owner)).order_by(Event.created_at.desc()).all()


def list_attendees(db: Session, event: Event) -> list[RSVP]:
    return persistence.list_rsvps_for_event(db, event.event_id)


def delete_event(db: Session, user: User, event_id: str) -> dict:
    """Delete an event and its RSVPs (owner, staff or admin only)."""
    event = get_managed_event(
        db, user, event_id,
        detail="Unauthorized. You can only delete events you own or have admin/staff permissions.",
    )
    summary = {"id": event.event_id, "title": event.title}
    summary["rsvps_deleted"] = persistence.delete_event(db, event)
    logger.info("User %s deleted event %s", user.user_id, event_id)
    return summary
