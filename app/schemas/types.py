# app/schemas/types.py
"""Shared field types for API schemas."""

from datetime import datetime, timezone
from typing import Annotated
from pydantic import PlainSerializer


def to_utc_iso(value: datetime) -> str:
    """
    ISO 8601 in UTC with millisecond precision and a Z suffix,
    e.g. 2026-03-14T09:30:00.000Z. Naive values are stored as UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


# DB columns hold naive UTC (datetime.utcnow); clients get an explicit Z
UTCDateTime = Annotated[datetime, PlainSerializer(to_utc_iso, return_type=str, when_used="json")]
