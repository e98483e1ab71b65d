"""Token display flow: look a token up by code and keep its view current."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from fuelflow.core.clock import Clock, utc_now
from fuelflow.core.expiry import get_time_remaining, is_expired
from fuelflow.core.lifecycle import (
    TERMINAL_STATUSES,
    StatusDisplay,
    effective_status,
    is_redeemable,
    status_display,
)
from fuelflow.data.exceptions import PersistenceError, TokenNotFoundError
from fuelflow.data.interface import TokenStore
from fuelflow.data.models import Token, TokenStatus
from fuelflow.logging import get_logger

logger = get_logger(__name__)


class LookupOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class TokenLookup:
    code: str
    outcome: LookupOutcome
    token: Optional[Token] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.outcome is LookupOutcome.FOUND


@dataclass(frozen=True)
class CountdownTick:
    remaining: str
    refetch: bool


class TokenCountdown:
    """
    Once-per-second countdown for an active token.

    The first tick that reads "Expired" asks for one re-fetch so that a
    status written externally (e.g. used at the pump) is picked up; later
    ticks never ask again.
    """

    def __init__(self, expires_at: datetime, clock: Clock = utc_now) -> None:
        self.expires_at = expires_at
        self.clock = clock
        self.exhausted = False

    def tick(self) -> CountdownTick:
        now = self.clock()
        remaining = get_time_remaining(self.expires_at, now)
        refetch = False
        if not self.exhausted and is_expired(self.expires_at, now):
            self.exhausted = True
            refetch = True
        return CountdownTick(remaining=remaining, refetch=refetch)


class RedemptionService:
    def __init__(self, store: TokenStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def lookup(self, code: str) -> TokenLookup:
        """Fetch a token by code. Never raises for missing tokens or store failures."""
        code = (code or "").strip()
        if not code:
            return TokenLookup(code=code, outcome=LookupOutcome.NOT_FOUND)
        try:
            token = self.store.get_token_by_code(code)
        except TokenNotFoundError:
            logger.info(f"Token {code} not found")
            return TokenLookup(code=code, outcome=LookupOutcome.NOT_FOUND)
        except PersistenceError as e:
            logger.error(f"Token {code} lookup failed: {e} ({e.detail})")
            return TokenLookup(code=code, outcome=LookupOutcome.FAILED, error=str(e))
        return TokenLookup(code=code, outcome=LookupOutcome.FOUND, token=token)


class TokenDisplay:
    """
    State behind one token page.

    Holds the latest lookup and, while the stored status is ``paid``, the
    countdown driving the one-shot re-fetch at expiry.
    """

    def __init__(self, service: RedemptionService, code: str) -> None:
        self.service = service
        self.code = code
        self.refetches = 0
        self.lookup = service.lookup(code)
        self.countdown = self._new_countdown()

    def _new_countdown(self) -> Optional[TokenCountdown]:
        token = self.lookup.token
        if token is not None and token.status not in TERMINAL_STATUSES:
            return TokenCountdown(token.expires_at, self.service.clock)
        return None

    @property
    def token(self) -> Optional[Token]:
        return self.lookup.token

    @property
    def status(self) -> Optional[TokenStatus]:
        if self.token is None:
            return None
        return effective_status(self.token, self.service.clock())

    @property
    def display(self) -> Optional[StatusDisplay]:
        status = self.status
        return status_display(status) if status is not None else None

    @property
    def is_active(self) -> bool:
        return self.token is not None and is_redeemable(self.token, self.service.clock())

    def refresh(self) -> None:
        """Manual reload: new lookup and a fresh countdown."""
        self.lookup = self.service.lookup(self.code)
        self.countdown = self._new_countdown()

    def tick(self) -> Optional[str]:
        """Advance the countdown; re-fetch once when it runs out."""
        if self.countdown is None:
            return None
        result = self.countdown.tick()
        if result.refetch:
            self.refetches += 1
            logger.info(f"Token {self.code} countdown ran out; re-fetching")
            self.lookup = self.service.lookup(self.code)
            if self.token is None or self.token.status in TERMINAL_STATUSES:
                self.countdown = None
                return None
        return result.remaining
