"""Pytest fixtures: per-test SQLite database for fast, isolated tests."""
import os

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import timedelta  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services.auth_service import create_access_token, hash_password  # noqa: E402
from app.utils import utcnow  # noqa: E402

# Import all models so they register with Base.metadata
from app.models.user import User, UserRole  # noqa: E402
from app.models.event import Event  # noqa: E402
from app.models.rsvp import RSVP  # noqa: E402, F401

SQLITE_URL = "sqlite:///./test.db"
DEFAULT_PASSWORD = "Password123"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session sharing the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.state.stats_cache.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.stats_cache.clear()


# ---------------------------------------------------------------------------
# Helpers: create rows directly and mint session headers
# ---------------------------------------------------------------------------
def create_test_user(
    db,
    email: str = "user@example.com",
    role: UserRole = UserRole.attendee,
    name: Optional[str] = "Test User",
    password: str = DEFAULT_PASSWORD,
) -> User:
    """Insert a registered (non-guest) user."""
    user = User(name=name, email=email.lower(), password_hash=hash_password(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_test_event(
    db,
    owner: User,
    title: str = "Launch Party",
    starts_in: timedelta = timedelta(hours=1),
) -> Event:
    """Insert an event dated ``starts_in`` from now (negative for past events)."""
    event = Event(title=title, date=utcnow() + starts_in, owner_id=owner.user_id, location="Main Hall")
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def auth_headers(user: User) -> dict:
    """Bearer headers carrying a session for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}
