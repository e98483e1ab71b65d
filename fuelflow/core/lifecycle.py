"""
Token lifecycle rules.

A token is minted ``paid`` and stays redeemable until something external marks
it ``used`` (or ``cancelled``) or its expiry passes. Expiry is never written by
the request path: it is derived here, at read time, from the stored timestamp.
The stored status may therefore still read ``paid`` for a token that must be
shown as expired.

    (none) --purchase--> paid --pump (external)--> used
                          |---now >= expires_at--> expired (derived)
                          |---void (external)----> cancelled
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from fuelflow.data.models import Token, TokenStatus

from .expiry import is_expired

TERMINAL_STATUSES = frozenset({TokenStatus.USED, TokenStatus.EXPIRED, TokenStatus.CANCELLED})


@dataclass(frozen=True)
class StatusDisplay:
    label: str
    tone: str  # success | info | error
    show_qr: bool
    message: str


STATUS_DISPLAY: Dict[TokenStatus, StatusDisplay] = {
    TokenStatus.PAID: StatusDisplay("✅ Ready to Use", "success", True, "Show this QR at the pump"),
    TokenStatus.USED: StatusDisplay("✓ Fuel Dispensed", "info", False, "Fuel has been dispensed"),
    TokenStatus.EXPIRED: StatusDisplay("✗ Expired", "error", False, "QR code not available"),
    TokenStatus.CANCELLED: StatusDisplay("✗ Cancelled", "error", False, "QR code not available"),
}


def effective_status(token: Token, now: Optional[datetime] = None) -> TokenStatus:
    """Status to present: a stored ``paid`` past its expiry reads as ``expired``."""
    if token.status is TokenStatus.PAID and is_expired(token.expires_at, now):
        return TokenStatus.EXPIRED
    return token.status


def is_redeemable(token: Token, now: Optional[datetime] = None) -> bool:
    return effective_status(token, now) is TokenStatus.PAID


def status_display(status: TokenStatus) -> StatusDisplay:
    return STATUS_DISPLAY[status]
