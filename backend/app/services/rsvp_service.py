"""RSVP admission workflow.

Steps, in order:
- event must exist and still be in the future (checked against wall clock)
- identity: the session's user when signed in, otherwise the account owning
  the submitted email, created on the fly as a guest if none exists
- duplicate pre-check on (event, user)
- insert guarded by the (event_id, user_id) unique constraint

The pre-check and the insert are not atomic. Two racing requests can both
pass the pre-check; the constraint lets only one insert through and the loser
gets the same 409 as a request caught by the pre-check. Guest creation
races the same way on the unique email; the loser reuses the winner's
account and then meets the RSVP constraint. A guest account
created in the identity step is committed on its own and survives a failed
insert.
"""
import logging
from dataclasses import dataclass
from typing import Literal, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.user import User, UserRole
from app.schemas.rsvp import RSVPConfirmation
from app.services import persistence
from app.services.auth_service import SessionIdentity
from app.utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

GUEST_ROLE = UserRole.attendee

SESSION_DUPLICATE_MESSAGE = "You have already RSVPed to this event"
GUEST_DUPLICATE_MESSAGE = "This email address has already been used to RSVP to this event"


@dataclass(frozen=True)
class ResolvedIdentity:
    kind: Literal["existing", "created"]
    user: User

    @property
    def user_id(self) -> str:
        return self.user.user_id


def resolve_identity(
    db: Session,
    session: Optional[SessionIdentity],
    name: str,
    email: str,
) -> ResolvedIdentity:
    """Pick the user an RSVP belongs to, creating a guest account if needed.

    A signed-in caller whose account exists always wins over the submitted
    email. A session whose email has no account is treated as anonymous.
    """
    if session is not None:
        user = persistence.find_user_by_email(db, session.email)
        if user is not None:
            return ResolvedIdentity(kind="existing", user=user)
        logger.warning("Session email %s has no account; resolving RSVP identity from payload", session.email)

    user = persistence.find_user_by_email(db, email)
    if user is not None:
        return ResolvedIdentity(kind="existing", user=user)

    user, created = persistence.create_guest_if_absent(db, name=name, email=email, role=GUEST_ROLE)
    if not created:
        return ResolvedIdentity(kind="existing", user=user)
    logger.info("Created guest account %s for RSVP", user.email)
    return ResolvedIdentity(kind="created", user=user)


def admit_rsvp(
    db: Session,
    event_id: str,
    name: str,
    email: str,
    session: Optional[SessionIdentity] = None,
) -> RSVPConfirmation:
    """Admit one RSVP for ``event_id``; ``name``/``email`` are already validated."""
    event = persistence.find_event_by_id(db, event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    if ensure_utc(event.date) <= utcnow():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot RSVP to past events")

    identity = resolve_identity(db, session, name, email)
    duplicate_message = SESSION_DUPLICATE_MESSAGE if session is not None else GUEST_DUPLICATE_MESSAGE

    if persistence.find_rsvp(db, event_id, identity.user_id) is not None:
        logger.info("Duplicate RSVP rejected for event %s / user %s", event_id, identity.user_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=duplicate_message)

    result = persistence.insert_rsvp_if_absent(db, event_id, identity.user_id)
    if isinstance(result, persistence.AlreadyExists):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=duplicate_message)

    rsvp = result.rsvp
    logger.info("RSVP %s created for event %s by %s", rsvp.rsvp_id, event_id, identity.user.email)
    return RSVPConfirmation(
        id=rsvp.rsvp_id,
        event_title=event.title,
        attendee_name=identity.user.name,
        attendee_email=identity.user.email,
        created_at=rsvp.created_at,
    )
