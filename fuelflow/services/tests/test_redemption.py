from datetime import timedelta

import pytest

from fuelflow.data.backends.memory_backend import MemoryTokenStore
from fuelflow.data.exceptions import PersistenceError
from fuelflow.data.models import TokenStatus
from fuelflow.services.redemption import (
    LookupOutcome,
    RedemptionService,
    TokenCountdown,
    TokenDisplay,
)
from fuelflow.tests.factories import CNG, DIESEL, NOW, PETROL, new_order, new_token

CODE = "TKN-20251019-00001"


class CountingStore(MemoryTokenStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lookups = 0

    def get_token_by_code(self, token_code):
        self.lookups += 1
        return super().get_token_by_code(token_code)


class FailingStore(MemoryTokenStore):
    def get_token_by_code(self, token_code):
        raise PersistenceError("token lookup failed: timeout", detail="ReadTimeout")


@pytest.fixture
def counting_store(clock):
    return CountingStore(fuel_types=[PETROL, DIESEL, CNG], clock=clock)


def mint(store, expires_at):
    store.create_order_with_token(new_order(), new_token(CODE, expires_at=expires_at))


def test_lookup_found(store, clock):
    mint(store, NOW + timedelta(minutes=60))
    lookup = RedemptionService(store, clock).lookup(CODE)
    assert lookup.found
    assert lookup.token.token_code == CODE


def test_lookup_nonexistent_is_not_found(store, clock):
    """Unknown codes come back as a result, never as an exception."""
    lookup = RedemptionService(store, clock).lookup("TKN-20251019-77777")
    assert lookup.outcome is LookupOutcome.NOT_FOUND
    assert not lookup.found
    assert lookup.token is None


def test_lookup_blank_code_is_not_found(store, clock):
    assert RedemptionService(store, clock).lookup("  ").outcome is LookupOutcome.NOT_FOUND


def test_lookup_store_failure(clock):
    lookup = RedemptionService(FailingStore(clock=clock), clock).lookup(CODE)
    assert lookup.outcome is LookupOutcome.FAILED
    assert "timeout" in lookup.error


def test_countdown_requests_one_refetch(clock):
    countdown = TokenCountdown(NOW + timedelta(seconds=90), clock)

    first = countdown.tick()
    assert first.remaining == "1 min left"
    assert not first.refetch

    clock.advance(seconds=90)
    expired = countdown.tick()
    assert expired.remaining == "Expired"
    assert expired.refetch

    clock.advance(seconds=1)
    assert not countdown.tick().refetch


def test_active_token_display(counting_store, clock):
    mint(counting_store, NOW + timedelta(minutes=90))
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)

    assert display.status is TokenStatus.PAID
    assert display.is_active
    assert display.display.show_qr
    assert display.tick() == "1h 30m left"

    clock.advance(minutes=46)
    assert display.tick() == "44 min left"
    assert counting_store.lookups == 1


def test_stale_paid_token_shows_expired_and_refetches_once(counting_store, clock):
    """Stored as paid with a past expiry: displayed expired, re-fetched exactly once."""
    mint(counting_store, NOW - timedelta(minutes=5))
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)

    assert display.token.status is TokenStatus.PAID
    assert display.status is TokenStatus.EXPIRED
    assert not display.display.show_qr

    assert display.tick() == "Expired"
    for _ in range(5):
        clock.advance(seconds=1)
        display.tick()

    assert counting_store.lookups == 2
    assert display.refetches == 1
    assert display.status is TokenStatus.EXPIRED


def test_refetch_picks_up_external_redemption(counting_store, clock):
    mint(counting_store, NOW + timedelta(minutes=1))
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)

    counting_store.set_token_status(CODE, TokenStatus.USED, used_at=NOW + timedelta(seconds=30))
    clock.advance(minutes=1)

    assert display.tick() is None
    assert display.status is TokenStatus.USED
    assert display.countdown is None
    assert display.token.used_at == NOW + timedelta(seconds=30)
    assert not display.display.show_qr


def test_terminal_token_has_no_countdown(counting_store, clock):
    mint(counting_store, NOW + timedelta(minutes=60))
    counting_store.set_token_status(CODE, TokenStatus.CANCELLED)
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)

    assert display.status is TokenStatus.CANCELLED
    assert display.tick() is None
    assert display.display.label == "✗ Cancelled"


def test_not_found_display(counting_store, clock):
    display = TokenDisplay(RedemptionService(counting_store, clock), "TKN-20251019-00404")
    assert display.lookup.outcome is LookupOutcome.NOT_FOUND
    assert display.status is None
    assert display.display is None
    assert display.tick() is None


def test_manual_refresh_restarts_countdown(counting_store, clock):
    mint(counting_store, NOW + timedelta(minutes=1))
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)

    clock.advance(minutes=2)
    display.tick()
    assert display.countdown.exhausted

    display.refresh()
    assert counting_store.lookups == 3
    assert not display.countdown.exhausted


def test_display_goes_inactive_at_expiry_without_a_tick(counting_store, clock):
    mint(counting_store, NOW + timedelta(minutes=1))
    display = TokenDisplay(RedemptionService(counting_store, clock), CODE)
    assert display.is_active

    clock.advance(minutes=1)
    assert not display.is_active
    assert counting_store.lookups == 1
