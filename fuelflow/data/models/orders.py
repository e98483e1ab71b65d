from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Payment is simulated; every stored order carries this sentinel.
PAYMENT_SUCCESS = "success"


class NewOrder(BaseModel):
    """Insert payload for the token_orders table."""
    order_number: str = Field(description="Human-readable order number, ORD-YYYYMMDD-NNNN")
    customer_name: str = Field(description="Customer full name")
    customer_phone: str = Field(pattern=r"^\d{10}$", description="10-digit mobile number")
    vehicle_number: Optional[str] = Field(default=None, description="Optional vehicle registration, uppercased")
    fuel_type_id: int = Field(description="Purchased fuel type")
    quantity_liters: float = Field(description="Liters computed at purchase time")
    amount: float = Field(gt=0, description="Amount paid in rupees")
    payment_status: str = Field(default=PAYMENT_SUCCESS, description="Payment outcome")


class Order(NewOrder):
    """Row from the token_orders table."""
    id: int = Field(description="Unique order identifier")
    created_at: datetime = Field(description="Order creation timestamp")
