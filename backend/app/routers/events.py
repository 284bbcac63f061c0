"""Event API routes: delegates to event_service for authorization checks."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.event import EventCreate, EventCreateResponse, EventDeleteResponse, EventOut
from app.services import event_service
from app.services.auth_service import require_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    """List all events, soonest first, with owner and RSVP count."""
    return event_service.list_events(db)


@router.post("/", response_model=EventCreateResponse, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Create an event owned by the signed-in user (EVENT_OWNER and above)."""
    event = event_service.create_event(
        db=db,
        owner=user,
        title=payload.title,
        date=payload.date,
        description=payload.description,
        location=payload.location,
    )
    return {"message": "Event created successfully!", "event": event}


@router.get("/managed", response_model=list[EventOut])
def list_managed_events(user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Events the caller can manage: all for admin/staff, own events otherwise."""
    return event_service.list_managed_events(db, user)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Fetch a single event by ID."""
    return event_service.get_event_or_404(db, event_id)


@router.delete("/{event_id}", response_model=EventDeleteResponse)
def delete_event(event_id: str, user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Delete an event and all of its RSVPs (owner, staff or admin)."""
    deleted = event_service.delete_event(db, user, event_id)
    return {"message": "Event deleted successfully", "deleted_event": deleted}
