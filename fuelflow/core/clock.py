from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

# Anything returning the current instant as an aware datetime.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: datetime | str) -> datetime:
    """Coerce an ISO-8601 string or naive datetime into an aware UTC datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
