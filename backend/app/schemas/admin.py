"""Pydantic schemas for the admin dashboard."""
from pydantic import BaseModel

from app.schemas.fields import UtcDatetime


class StatsOut(BaseModel):
    total_events: int
    total_users: int
    total_rsvps: int
    active_events: int
    last_updated: UtcDatetime
