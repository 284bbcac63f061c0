"""Authentication and role checks.

Sessions are bearer JWTs carrying the user's email and role. The role in the
token is informational only: every permission check re-reads the user from
the database, so role changes take effect on the next request.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.event import Event
from app.models.user import User, UserRole
from app.services import persistence
from app.utils import utcnow

logger = logging.getLogger(__name__)

ROLE_RANK: dict[UserRole, int] = {
    UserRole.admin: 4,
    UserRole.staff: 3,
    UserRole.event_owner: 2,
    UserRole.attendee: 1,
}

ROLE_DISPLAY_NAMES: dict[UserRole, str] = {
    UserRole.admin: "Administrator",
    UserRole.staff: "Staff Member",
    UserRole.event_owner: "Event Owner",
    UserRole.attendee: "Attendee",
}

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class SessionIdentity:
    email: str
    role: UserRole


def has_role(role: UserRole, required: UserRole) -> bool:
    """True when ``role`` ranks at or above ``required``."""
    return ROLE_RANK[role] >= ROLE_RANK[required]


def can_manage_event(user: User, event: Event) -> bool:
    """Admins and staff manage every event; anyone else only their own."""
    return has_role(user.role, UserRole.staff) or event.owner_id == user.user_id


# ── Passwords ──────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials. Guest accounts never authenticate."""
    user = persistence.find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


# ── Tokens ─────────────────────────────────────────────────────────

def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    issued_at = utcnow()
    expires_at = issued_at + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": user.email,
        "role": user.role.value,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[SessionIdentity]:
    """Decode a session token; invalid or expired tokens yield ``None``."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return SessionIdentity(email=payload["sub"], role=UserRole(payload["role"]))
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired session token")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        logger.warning("Rejected malformed session token")
    return None


# ── FastAPI dependencies ───────────────────────────────────────────

def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[SessionIdentity]:
    """The caller's session, or ``None`` for anonymous requests."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


def get_current_user(
    session: Optional[SessionIdentity] = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the session's email to a stored user, if any."""
    if session is None:
        return None
    return persistence.find_user_by_email(db, session.email)


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized. Please sign in.")
    return user


def require_role(required: UserRole, detail: str):
    """Dependency factory: 403 unless the caller ranks at or above ``required``."""

    def _dependency(user: Optional[User] = Depends(get_current_user)) -> User:
        if user is None or not has_role(user.role, required):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return _dependency
