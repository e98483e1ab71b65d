# fuelflow/data/interface.py
from __future__ import annotations

from datetime import datetime
from typing import List, Protocol, Tuple

from .models import FuelType, NewOrder, NewToken, Order, Token


# ---- Token store protocol ----

class TokenStore(Protocol):
    """
    Backend-agnostic contract for the purchase and token pages.

    - Implementations MUST NOT cache token reads: status can be changed
      externally (pump-side redemption), so every lookup hits the store.
    - Transport and constraint failures raise PersistenceError.
    """

    # Catalog

    def list_active_fuel_types(self) -> List[FuelType]:
        """List fuel types currently offered for sale."""
        ...

    # Writes

    def insert_order(self, order: NewOrder) -> Order:
        """Insert an order row and return it as stored."""
        ...

    def insert_token(self, token: NewToken) -> Token:
        """Insert a token row (order_id required) and return it as stored."""
        ...

    def create_order_with_token(self, order: NewOrder, token: NewToken) -> Tuple[Order, Token]:
        """Insert an order and its token as one unit: both rows exist afterwards or neither does."""
        ...

    # Reads

    def get_token_by_code(self, token_code: str) -> Token:
        """Get a token with its fuel type and order joined. Raises TokenNotFoundError."""
        ...

    # Maintenance

    def expire_stale_tokens(self, now: datetime) -> int:
        """Persist status 'expired' on paid tokens whose expiry has passed; return how many."""
        ...
