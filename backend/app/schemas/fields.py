"""Reusable field checks shared by request schemas.

Each check raises ``PydanticCustomError`` so the message reaches the client
verbatim in the field-keyed error map.
"""
import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

from app.utils import ensure_utc

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


def required_text(value: Any, required_message: str) -> str:
    """Return the trimmed string or fail with ``required_message``."""
    if not isinstance(value, str) or not value:
        raise PydanticCustomError("required", required_message)
    return value.strip()


def check_length(value: str, label: str, min_length: int, max_length: int) -> str:
    if len(value) < min_length:
        raise PydanticCustomError(
            "too_short", "{label} must be at least {n} characters long", {"label": label, "n": min_length}
        )
    if len(value) > max_length:
        raise PydanticCustomError(
            "too_long", "{label} must be less than {n} characters", {"label": label, "n": max_length}
        )
    return value


def person_name(value: Any, max_length: int) -> str:
    name = required_text(value, "Full name is required")
    return check_length(name, "Name", 2, max_length)


def email_address(value: Any) -> str:
    """Trim, shape-check and lowercase an email address."""
    email = required_text(value, "Email address is required")
    if not EMAIL_RE.match(email):
        raise PydanticCustomError("email_format", "Please enter a valid email address")
    return email.lower()


def optional_text(value: Any, label: str, max_length: int):
    """Trim an optional string; blank values become ``None``."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", "{label} must be a string", {"label": label})
    if len(value) > max_length:
        raise PydanticCustomError(
            "too_long", "{label} must be less than {n} characters", {"label": label, "n": max_length}
        )
    return value.strip() or None
