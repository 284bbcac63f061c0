"""User ORM model and role enum."""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class UserRole(str, enum.Enum):
    admin = "ADMIN"
    staff = "STAFF"
    event_owner = "EVENT_OWNER"
    attendee = "ATTENDEE"


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True, index=True)  # stored lowercase
    name = Column(String(100), nullable=True)
    password_hash = Column(String(255), nullable=False, default="")  # "" for guest accounts
    role = Column(
        SAEnum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.attendee,
    )
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    events = relationship("Event", back_populates="owner")
    rsvps = relationship("RSVP", back_populates="user")

    @property
    def is_guest(self) -> bool:
        return not self.password_hash

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def rsvp_count(self) -> int:
        return len(self.rsvps)
