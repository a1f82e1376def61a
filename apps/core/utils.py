"""Helpers for values crossing the service boundary."""
from datetime import datetime, timezone as dt_timezone
from typing import Optional
from uuid import UUID

from django.utils import timezone


def parse_id(value) -> Optional[UUID]:
    """
    Parse an opaque document id.
    Returns None for anything that is not a valid UUID string or UUID.
    """
    if isinstance(value, UUID):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return UUID(value.strip())
    except ValueError:
        return None


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 text for a datetime, None passes through."""
    if value is None:
        return None
    return value.isoformat()


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes from clients as UTC."""
    if value is None or timezone.is_aware(value):
        return value
    return timezone.make_aware(value, dt_timezone.utc)
