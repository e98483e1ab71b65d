from .fuel_types import FuelType
from .orders import NewOrder, Order, PAYMENT_SUCCESS
from .tokens import NewToken, Token, TokenStatus

__all__ = [
    # Catalog
    "FuelType",
    # Orders
    "NewOrder",
    "Order",
    "PAYMENT_SUCCESS",
    # Tokens
    "NewToken",
    "Token",
    "TokenStatus",
]
