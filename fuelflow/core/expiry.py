"""
Expiry arithmetic for fuel tokens.

Expiry is decided once, when the token is minted, and stored as an absolute
timestamp. Everything else here is a pure function of that timestamp and the
current instant, recomputed on every call.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from .clock import as_aware, utc_now

DEFAULT_VALIDITY_MINUTES = 60
EXPIRED_LABEL = "Expired"


def get_expiry_time(minutes: int = DEFAULT_VALIDITY_MINUTES, now: Optional[datetime] = None) -> datetime:
    """Absolute expiry instant ``minutes`` from now."""
    now = as_aware(now or utc_now())
    return now + timedelta(minutes=minutes)


def is_expired(expires_at: datetime | str, now: Optional[datetime] = None) -> bool:
    now = as_aware(now or utc_now())
    return now >= as_aware(expires_at)


def get_time_remaining(expires_at: datetime | str, now: Optional[datetime] = None) -> str:
    """
    Human countdown string.

    Partial minutes are dropped, so a token with 59 seconds left reads
    "0 min left" until the instant it passes.
    """
    now = as_aware(now or utc_now())
    diff = as_aware(expires_at) - now
    if diff <= timedelta(0):
        return EXPIRED_LABEL

    minutes = int(diff.total_seconds() // 60)
    if minutes < 60:
        return f"{minutes} min left"

    hours, remaining_mins = divmod(minutes, 60)
    return f"{hours}h {remaining_mins}m left"
