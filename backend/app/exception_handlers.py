"""Exception handlers that turn every failure into a JSON ``{"message": ...}`` body."""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "Invalid request data. Please check your input."
FIELD_ERRORS_MESSAGE = "Please fix the following errors:"
INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again."


def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 with a field-keyed error map, or a generic message when the body itself is unusable."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        if error.get("type") == "json_invalid" or (loc[:1] == ("body",) and len(loc) < 2):
            return JSONResponse(status_code=400, content={"message": INVALID_REQUEST_MESSAGE})
        field = str(loc[1] if len(loc) > 1 else loc[0]) if loc else "__all__"
        errors.setdefault(field, error.get("msg", "Invalid value"))

    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"message": FIELD_ERRORS_MESSAGE, "errors": errors})


def handle_general_exception(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure; include the error text only in development."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"message": INTERNAL_ERROR_MESSAGE}
    if settings.is_development:
        content["error"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content=content)
