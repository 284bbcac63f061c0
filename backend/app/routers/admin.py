"""Admin dashboard routes: user management, all events and cached stats."""
import logging
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.admin import StatsOut
from app.schemas.event import EventOut
from app.schemas.user import AdminUserOut, RoleUpdate, RoleUpdateResponse
from app.services import event_service, stats_service, user_service
from app.services.auth_service import require_role
from app.services.stats_cache import TTLCache

logger = logging.getLogger(__name__)
router = APIRouter()

require_admin = require_role(UserRole.admin, "Unauthorized. Admin access required.")
require_staff = require_role(UserRole.staff, "Unauthorized. Admin or Staff access required.")


@router.get("/users", response_model=list[AdminUserOut])
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """All users, newest first, with event and RSVP counts."""
    return user_service.list_users_newest_first(db)


@router.post("/users/role", response_model=RoleUpdateResponse)
def update_user_role(payload: RoleUpdate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Change a user's role (ADMIN only)."""
    user = user_service.change_role(db, actor=admin, user_id=payload.user_id, role=payload.role)
    return {"message": "User role updated successfully", "user": user}


@router.get("/events", response_model=list[EventOut])
def list_all_events(staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    """All events, newest first (ADMIN or STAFF)."""
    return event_service.list_all_events_newest_first(db)


@router.get("/stats", response_model=StatsOut)
def dashboard_stats(
    response: Response,
    staff: User = Depends(require_staff),
    cache: TTLCache = Depends(stats_service.get_stats_cache),
    db: Session = Depends(get_db),
):
    """Dashboard counters, served from a short-lived cache."""
    response.headers["Cache-Control"] = f"private, max-age={int(cache.ttl_seconds)}"
    return stats_service.get_dashboard_stats(db, cache)
