"""Attendee / RSVP API routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.rsvp import AttendeeOut, RSVPCreate, RSVPResponse
from app.services import event_service, export_service, rsvp_service
from app.services.auth_service import SessionIdentity, get_current_session, require_user

logger = logging.getLogger(__name__)
router = APIRouter()

ATTENDEE_ACCESS_DENIED = (
    "Unauthorized. You can only export attendees for events you own or have admin/staff permissions."
)


@router.post("/{event_id}/rsvp", response_model=RSVPResponse, status_code=status.HTTP_201_CREATED)
def submit_rsvp(
    event_id: str,
    payload: RSVPCreate,
    session: Optional[SessionIdentity] = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """RSVP to an event. Signing in is optional; anonymous callers get a guest account."""
    confirmation = rsvp_service.admit_rsvp(
        db=db,
        event_id=event_id,
        name=payload.name,
        email=payload.email,
        session=session,
    )
    return {"message": "RSVP submitted successfully! Thank you for registering.", "rsvp": confirmation}


@router.get("/{event_id}/attendees", response_model=list[AttendeeOut])
def list_attendees(event_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """List an event's attendees in RSVP order (owner, staff or admin)."""
    event = event_service.get_managed_event(db, user, event_id, detail=ATTENDEE_ACCESS_DENIED)
    return [
        AttendeeOut(
            rsvp_id=rsvp.rsvp_id,
            user_id=rsvp.user_id,
            name=rsvp.user.name,
            email=rsvp.user.email,
            created_at=rsvp.created_at,
        )
        for rsvp in event_service.list_attendees(db, event)
    ]


@router.get("/{event_id}/attendees/export")
def export_attendees(event_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Download an event's attendees as CSV (owner, staff or admin)."""
    event = event_service.get_managed_event(db, user, event_id, detail=ATTENDEE_ACCESS_DENIED)
    rsvps = event_service.list_attendees(db, event)
    content = export_service.build_attendees_csv(rsvps)
    logger.info("User %s exported %d attendees for event %s", user.user_id, len(rsvps), event_id)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{export_service.export_filename(event)}"',
            "Cache-Control": "no-cache",
        },
    )
