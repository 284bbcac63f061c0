"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

from app.schemas.fields import UtcDatetime, check_length, optional_text, required_text
from app.utils import ensure_utc, utcnow

MAX_EVENT_HORIZON = timedelta(days=2 * 365)


class EventCreate(BaseModel):
    title: str = Field(default=None, validate_default=True)
    description: Optional[str] = None
    location: Optional[str] = None
    date: datetime = Field(default=None, validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value):
        title = required_text(value, "Title is required and must be a string")
        return check_length(title, "Title", 3, 100)

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, value):
        return optional_text(value, "Description", 1000)

    @field_validator("location", mode="before")
    @classmethod
    def _check_location(cls, value):
        return optional_text(value, "Location", 200)

    @field_validator("date", mode="before")
    @classmethod
    def _check_date(cls, value):
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str) and value:
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                raise PydanticCustomError("date_format", "Date must be a valid date") from None
        else:
            raise PydanticCustomError("required", "Date is required and must be a valid date string")

        parsed = ensure_utc(parsed)
        now = utcnow()
        if parsed <= now:
            raise PydanticCustomError("date_past", "Event date must be in the future")
        if parsed > now + MAX_EVENT_HORIZON:
            raise PydanticCustomError("date_horizon", "Event date cannot be more than 2 years in the future")
        return parsed


class OwnerOut(BaseModel):
    name: Optional[str] = None
    email: str

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    date: UtcDatetime
    owner_id: str
    owner: Optional[OwnerOut] = None
    rsvp_count: int = 0
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class EventCreateResponse(BaseModel):
    message: str
    event: EventOut


class DeletedEventOut(BaseModel):
    id: str
    title: str
    rsvps_deleted: int


class EventDeleteResponse(BaseModel):
    message: str
    deleted_event: DeletedEventOut
