"""
Human-readable identifiers for orders and tokens.

Both codes carry the UTC purchase date followed by a zero-padded random
suffix drawn from independent numbering spaces:

- order numbers: ``ORD-YYYYMMDD-NNNN``
- token codes:   ``TKN-YYYYMMDD-NNNNN``

Uniqueness rests on the random suffix only; nothing here checks the store.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional

from .clock import utc_now

ORDER_PREFIX = "ORD"
TOKEN_PREFIX = "TKN"


def _date_stamp(now: Optional[datetime]) -> str:
    now = now or utc_now()
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y%m%d")


def _make_code(prefix: str, digits: int, now: Optional[datetime], rng: Optional[random.Random]) -> str:
    rng = rng or random
    suffix = rng.randrange(10 ** digits)
    return f"{prefix}-{_date_stamp(now)}-{suffix:0{digits}d}"


def generate_order_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    return _make_code(ORDER_PREFIX, 4, now, rng)


def generate_token_code(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    return _make_code(TOKEN_PREFIX, 5, now, rng)
