"""Pydantic schemas for RSVPs and attendee listings."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.fields import UtcDatetime, email_address, person_name


class RSVPCreate(BaseModel):
    """Attendee-supplied contact info for an RSVP."""

    name: str = Field(default=None, validate_default=True)
    email: str = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value):
        return person_name(value, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value):
        return email_address(value)


class RSVPConfirmation(BaseModel):
    """RSVP receipt; serialized with camelCase keys (``eventTitle``, ``createdAt``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    event_title: str
    attendee_name: Optional[str] = None
    attendee_email: str
    created_at: UtcDatetime


class RSVPResponse(BaseModel):
    message: str
    rsvp: RSVPConfirmation


class AttendeeOut(BaseModel):
    rsvp_id: str
    user_id: str
    name: Optional[str] = None
    email: str
    created_at: UtcDatetime
