"""User registration, guest claiming and role administration."""
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.user import User, UserRole
from app.services import persistence
from app.services.auth_service import hash_password

logger = logging.getLogger(__name__)

DEFAULT_ROLE = UserRole.attendee


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """Create an account, or claim the guest account created by an earlier RSVP.

    Claiming sets the password and name on the guest row and keeps its role
    and RSVPs.
    """
    existing = persistence.find_user_by_email(db, email)
    if existing is not None:
        if not existing.is_guest:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email address already exists. Please use a different email or sign in.",
            )
        existing.name = name
        existing.password_hash = hash_password(password)
        db.commit()
        db.refresh(existing)
        logger.info("Guest account %s claimed by registration", existing.email)
        return existing

    return persistence.create_user(
        db, name=name, email=email, password_hash=hash_password(password), role=DEFAULT_ROLE
    )


def change_role(db: Session, actor: User, user_id: str, role: str) -> User:
    """Set another user's role. Any defined role is accepted, including self-demotion."""
    try:
        new_role = UserRole(role)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role specified.")

    user = persistence.find_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    previous = user.role
    user.role = new_role
    db.commit()
    db.refresh(user)
    logger.info("User %s changed role of %s from %s to %s", actor.user_id, user.email, previous.value, new_role.value)
    return user


def list_users_newest_first(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()
