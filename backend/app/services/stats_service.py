"""Dashboard statistics for the admin area."""
import logging

from fastapi import Request
from sqlalchemy.orm import Session

from app.models.event import Event
from app.models.rsvp import RSVP
from app.models.user import User
from app.schemas.admin import StatsOut
from app.services.stats_cache import TTLCache
from app.utils import utcnow

logger = logging.getLogger(__name__)

DASHBOARD_STATS_KEY = "dashboard_stats"


def get_stats_cache(request: Request) -> TTLCache:
    """FastAPI dependency: the app-wide stats cache lives on ``app.state``."""
    return request.app.state.stats_cache


def compute_dashboard_stats(db: Session) -> StatsOut:
    now = utcnow()
    stats = StatsOut(
        total_events=db.query(Event).count(),
        total_users=db.query(User).count(),
        total_rsvps=db.query(RSVP).count(),
        active_events=db.query(Event).filter(Event.date >= now).count(),
        last_updated=now,
    )
    logger.info("Recomputed dashboard stats: %d events, %d users, %d RSVPs",
                stats.total_events, stats.total_users, stats.total_rsvps)
    return stats


def get_dashboard_stats(db: Session, cache: TTLCache) -> StatsOut:
    return cache.get_or_compute(DASHBOARD_STATS_KEY, lambda: compute_dashboard_stats(db))
