"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import Base, engine
from app.exception_handlers import handle_general_exception, handle_http_exception, handle_validation_error
from app.services.stats_cache import TTLCache

# Import routers
from app.routers import auth, events, attendees, admin

# Import all models so Base.metadata knows about them
from app.models.user import User    # noqa: F401
from app.models.event import Event  # noqa: F401
from app.models.rsvp import RSVP    # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="EventEase",
    description="EventEase: create events, collect RSVPs and manage attendees",
    version="0.1.0",
)

app.state.stats_cache = TTLCache(ttl_seconds=settings.STATS_CACHE_TTL_SECONDS)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error responses
app.add_exception_handler(StarletteHTTPException, handle_http_exception)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(SQLAlchemyError, handle_general_exception)
app.add_exception_handler(Exception, handle_general_exception)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(attendees.router, prefix="/api/events", tags=["Attendees"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    logger.info("EventEase started (environment=%s)", settings.ENVIRONMENT)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
