"""Input validation helpers for provisioning records and settings."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from s1provision.core.timestamps import parse_duration, parse_timestamp
from s1provision.errors import ExpirationParseError


def resolve_expiration(expires: str, now: Optional[datetime] = None) -> datetime:
    """Resolve an account expiration setting into an absolute timestamp.

    A duration is interpreted relative to ``now``; anything else must be an
    RFC 3339 timestamp and is taken literally.

    Args:
        expires: Duration (``8760h``) or timestamp (``2026-01-01T00:00:00Z``)
        now: Reference time (defaults to the current UTC time)

    Returns:
        Timezone-aware expiration timestamp

    Raises:
        ExpirationParseError: If the value matches neither form
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if expires is None:
        raise ExpirationParseError("")
    try:
        return now + parse_duration(expires)
    except (ValueError, OverflowError):
        pass
    try:
        return parse_timestamp(expires)
    except ValueError:
        raise ExpirationParseError(expires) from None


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address (case is preserved for exact-match lookups)

    Raises:
        ValueError: If email is invalid
    """
    email = (email or "").strip()
    if not email or "@" not in email:
        raise ValueError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email format")
    if len(email) > 254:
        raise ValueError("Email exceeds maximum length")
    if any(char.isspace() for char in email):
        raise ValueError("Invalid email format")

    return email


def validate_name(name: str, field: str) -> str:
    """Validate first/last name fields.

    Args:
        name: Name to validate
        field: Field name for error messages (e.g., "First name")

    Returns:
        Trimmed name

    Raises:
        ValueError: If name is invalid
    """
    name = (name or "").strip()
    if not name:
        raise ValueError(f"{field} is required")
    if len(name) > 128:
        raise ValueError(f"{field} exceeds maximum length")

    if any(char in name for char in "<>\"`;&|$"):
        raise ValueError(f"{field} contains invalid characters")

    return name


def validate_csv_separator(separator: Optional[str]) -> str:
    """Validate a CSV separator; it must be exactly one character.

    Raises:
        ValueError: If the separator is empty or longer than one character
    """
    if not separator:
        raise ValueError("CSV separator cannot be empty")
    if len(separator) != 1:
        raise ValueError("CSV separator must be a single character")
    return separator
