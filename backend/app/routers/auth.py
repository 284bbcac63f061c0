"""Registration, login and current-user routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import LoginRequest, RegisterRequest, RegisterResponse, TokenOut, UserOut
from app.services import user_service
from app.services.auth_service import authenticate, create_access_token, require_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account (new accounts start as ATTENDEE)."""
    user = user_service.register_user(db, name=payload.name, email=payload.email, password=payload.password)
    return {"message": "Account created successfully! Welcome to EventEase.", "user": user}


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer session token."""
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return TokenOut(access_token=create_access_token(user), user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(require_user)):
    """Return the signed-in user."""
    return user
