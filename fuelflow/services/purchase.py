"""Purchase flow: validate the form, then mint an order and its token together."""

from __future__ import annotations

import math
import random
import re
from dataclasses import dataclass
from typing import List, Optional

from fuelflow.core.clock import Clock, utc_now
from fuelflow.core.codes import generate_order_number, generate_token_code
from fuelflow.core.expiry import DEFAULT_VALIDITY_MINUTES, get_expiry_time
from fuelflow.core.formatting import calculate_quantity, format_currency, format_quantity
from fuelflow.data.interface import TokenStore
from fuelflow.data.models import PAYMENT_SUCCESS, FuelType, NewOrder, NewToken, Order, Token, TokenStatus
from fuelflow.logging import get_logger

logger = get_logger(__name__)

PHONE_DIGITS = 10

MSG_REQUIRED = "Please fill all required fields"
MSG_PHONE = "Please enter valid 10-digit phone number"
MSG_AMOUNT = "Please enter a valid amount"

_NON_DIGITS = re.compile(r"\D")


class PurchaseValidationError(Exception):
    """Raised when the purchase form fails validation; nothing has been written."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def sanitize_phone(raw: str) -> str:
    """Keep digits only, capped at 10, the way the phone field filters keystrokes."""
    return _NON_DIGITS.sub("", raw or "")[:PHONE_DIGITS]


def is_valid_phone(raw: str) -> bool:
    return len(_NON_DIGITS.sub("", raw or "")) == PHONE_DIGITS


def parse_amount(raw) -> Optional[float]:
    """Positive finite amount, or None."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


@dataclass
class PurchaseForm:
    """Raw values as typed into the purchase form."""
    fuel_type: Optional[FuelType]
    amount: object
    customer_name: str
    phone: str
    vehicle_number: str = ""


@dataclass(frozen=True)
class ValidPurchase:
    fuel_type: FuelType
    amount: float
    customer_name: str
    phone: str
    vehicle_number: Optional[str]


@dataclass(frozen=True)
class PurchaseResult:
    order: Order
    token: Token


def validate_purchase(form: PurchaseForm) -> ValidPurchase:
    """Check the form before any write. Raises PurchaseValidationError."""
    name = (form.customer_name or "").strip()
    phone = form.phone or ""

    if form.fuel_type is None:
        raise PurchaseValidationError("fuel_type", MSG_REQUIRED)
    if not name:
        raise PurchaseValidationError("customer_name", MSG_REQUIRED)
    if not phone:
        raise PurchaseValidationError("phone", MSG_REQUIRED)
    if not is_valid_phone(phone):
        raise PurchaseValidationError("phone", MSG_PHONE)

    amount = parse_amount(form.amount)
    if amount is None:
        raise PurchaseValidationError("amount", MSG_AMOUNT)

    vehicle = (form.vehicle_number or "").strip().upper() or None
    return ValidPurchase(
        fuel_type=form.fuel_type,
        amount=amount,
        customer_name=name,
        phone=_NON_DIGITS.sub("", phone),
        vehicle_number=vehicle,
    )


class PurchaseService:
    """Turns a paid purchase into an order and a redeemable token."""

    def __init__(
        self,
        store: TokenStore,
        clock: Clock = utc_now,
        rng: Optional[random.Random] = None,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
    ) -> None:
        self.store = store
        self.clock = clock
        self.rng = rng
        self.validity_minutes = validity_minutes

    def available_fuel_types(self) -> List[FuelType]:
        return self.store.list_active_fuel_types()

    def purchase(self, form: PurchaseForm) -> PurchaseResult:
        """
        Validate, then persist the order and its token as one unit.

        Payment is simulated: the order is stored as already successful.
        Raises PurchaseValidationError or PersistenceError.
        """
        valid = validate_purchase(form)
        now = self.clock()
        quantity = calculate_quantity(valid.amount, valid.fuel_type.price)

        new_order = NewOrder(
            order_number=generate_order_number(now, self.rng),
            customer_name=valid.customer_name,
            customer_phone=valid.phone,
            vehicle_number=valid.vehicle_number,
            fuel_type_id=valid.fuel_type.id,
            quantity_liters=quantity,
            amount=valid.amount,
            payment_status=PAYMENT_SUCCESS,
        )
        new_token = NewToken(
            token_code=generate_token_code(now, self.rng),
            fuel_type_id=valid.fuel_type.id,
            quantity=quantity,
            amount=valid.amount,
            status=TokenStatus.PAID,
            expires_at=get_expiry_time(self.validity_minutes, now),
        )

        order, token = self.store.create_order_with_token(new_order, new_token)
        logger.info(
            f"Order {order.order_number} paid {format_currency(order.amount)} for "
            f"{format_quantity(token.quantity)} {valid.fuel_type.name}; token {token.token_code}"
        )
        return PurchaseResult(order=order, token=token)
