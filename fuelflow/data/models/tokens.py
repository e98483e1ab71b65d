from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .fuel_types import FuelType
from .orders import Order


class TokenStatus(str, Enum):
    """Persisted token status. PAID means active and redeemable."""
    PAID = "paid"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class NewToken(BaseModel):
    """Insert payload for the fuel_tokens table."""
    order_id: Optional[int] = Field(default=None, description="Originating order; filled in by the store when minted with its order")
    token_code: str = Field(description="Human-readable token code, TKN-YYYYMMDD-NNNNN")
    fuel_type_id: int = Field(description="Fuel type to dispense")
    quantity: float = Field(description="Liters to dispense")
    amount: float = Field(gt=0, description="Amount paid in rupees")
    status: TokenStatus = Field(default=TokenStatus.PAID, description="Status at insertion")
    expires_at: datetime = Field(description="Absolute expiry timestamp")


class Token(NewToken):
    """Row from the fuel_tokens table, optionally with its joined fuel type and order."""
    id: int = Field(description="Unique token identifier")
    order_id: int = Field(description="Originating order")
    used_at: Optional[datetime] = Field(default=None, description="When the fuel was dispensed")
    created_at: datetime = Field(description="Token creation timestamp")
    fuel_types: Optional[FuelType] = Field(default=None, description="Joined fuel type")
    token_orders: Optional[Order] = Field(default=None, description="Joined order")
