"""
Shared utility functions.
"""

import logging
import uuid as uuid_mod
from datetime import datetime, timezone

from iqol.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)


def parse_uuid(value: str, field_name: str = "id") -> uuid_mod.UUID:
    """
    Parse a string as UUID, raising a ValidationError (400) on invalid input
    instead of letting a bare ValueError bubble up as a 500.
    """
    try:
        return uuid_mod.UUID(str(value))
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid UUID for '{field_name}': {value!r}")


def parse_subject(value) -> uuid_mod.UUID:
    """Token subjects that are not UUIDs are treated as bad credentials, not bad input."""
    try:
        return uuid_mod.UUID(str(value))
    except (ValueError, AttributeError):
        raise AuthError.invalid()


def safe_error_detail(exc: Exception, fallback: str = "An internal error occurred. Please try again later.") -> str:
    """
    Return a sanitized error message safe for client consumption.
    Logs the real exception detail server-side.
    """
    logger.error(f"Operation failed: {exc}", exc_info=exc)
    return fallback


def utcnow() -> datetime:
    """
    Return the current UTC time as a naive datetime (no tzinfo).
    Naive datetimes are used because our DB columns are TIMESTAMP WITHOUT TIME ZONE.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def require_text(value: str | None, message: str) -> str:
    """Strip a required text field, raising ValidationError when it ends up empty."""
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text
