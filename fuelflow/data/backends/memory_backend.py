from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import PersistenceError, TokenNotFoundError
from ..interface import TokenStore
from ..models import FuelType, NewOrder, NewToken, Order, Token, TokenStatus
from ...core.clock import Clock, as_aware, utc_now
from ...logging import get_logger

logger = get_logger(__name__)

# Catalog used when nothing else is supplied (local demo station).
DEFAULT_FUEL_TYPES: Tuple[FuelType, ...] = (
    FuelType(id=1, code="PET", name="Petrol", price=94.72),
    FuelType(id=2, code="DSL", name="Diesel", price=87.62),
)


@dataclass
class _Tables:
    fuel_types: Dict[int, FuelType] = field(default_factory=dict)
    token_orders: Dict[int, Order] = field(default_factory=dict)
    fuel_tokens: Dict[int, Token] = field(default_factory=dict)


class MemoryTokenStore(TokenStore):
    """
    In-process implementation for local development and tests.
    - Enforces the same constraints the hosted tables do (foreign keys,
      unique order numbers and token codes) and reports them as PersistenceError.
    - create_order_with_token commits both rows or neither.
    """

    def __init__(self, fuel_types: Optional[Iterable[FuelType]] = None, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._tables = _Tables()
        self._order_ids = itertools.count(1)
        self._token_ids = itertools.count(1)
        for fuel in (DEFAULT_FUEL_TYPES if fuel_types is None else fuel_types):
            self._tables.fuel_types[fuel.id] = fuel

    # ---------- row builders (validate, never write) ----------

    def _build_order(self, order: NewOrder) -> Order:
        if order.fuel_type_id not in self._tables.fuel_types:
            raise PersistenceError(
                "insert on token_orders violates foreign key fuel_type_id",
                detail={"fuel_type_id": order.fuel_type_id},
            )
        if any(o.order_number == order.order_number for o in self._tables.token_orders.values()):
            raise PersistenceError(
                "duplicate key value violates unique constraint on order_number",
                detail={"order_number": order.order_number},
            )
        return Order(id=next(self._order_ids), created_at=self._clock(), **order.model_dump())

    def _build_token(self, token: NewToken, pending_order: Optional[Order] = None) -> Token:
        order_ids = set(self._tables.token_orders)
        if pending_order is not None:
            order_ids.add(pending_order.id)
        if token.order_id not in order_ids:
            raise PersistenceError(
                "insert on fuel_tokens violates foreign key order_id",
                detail={"order_id": token.order_id},
            )
        if token.fuel_type_id not in self._tables.fuel_types:
            raise PersistenceError(
                "insert on fuel_tokens violates foreign key fuel_type_id",
                detail={"fuel_type_id": token.fuel_type_id},
            )
        if any(t.token_code == token.token_code for t in self._tables.fuel_tokens.values()):
            raise PersistenceError(
                "duplicate key value violates unique constraint on token_code",
                detail={"token_code": token.token_code},
            )
        data = token.model_dump()
        data["expires_at"] = as_aware(data["expires_at"])
        return Token(id=next(self._token_ids), created_at=self._clock(), **data)

    # ---------- interface implementation ----------

    def list_active_fuel_types(self) -> List[FuelType]:
        with self._lock:
            return [f for f in sorted(self._tables.fuel_types.values(), key=lambda f: f.id) if f.is_active]

    def insert_order(self, order: NewOrder) -> Order:
        with self._lock:
            row = self._build_order(order)
            self._tables.token_orders[row.id] = row
        return row

    def insert_token(self, token: NewToken) -> Token:
        with self._lock:
            row = self._build_token(token)
            self._tables.fuel_tokens[row.id] = row
        return row

    def create_order_with_token(self, order: NewOrder, token: NewToken) -> Tuple[Order, Token]:
        with self._lock:
            order_row = self._build_order(order)
            token_row = self._build_token(token.model_copy(update={"order_id": order_row.id}), pending_order=order_row)
            self._tables.token_orders[order_row.id] = order_row
            self._tables.fuel_tokens[token_row.id] = token_row
        return order_row, token_row

    def get_token_by_code(self, token_code: str) -> Token:
        with self._lock:
            row = next((t for t in self._tables.fuel_tokens.values() if t.token_code == token_code), None)
            if row is None:
                raise TokenNotFoundError(token_code)
            fuel = self._tables.fuel_types.get(row.fuel_type_id)
            order = self._tables.token_orders.get(row.order_id)
        if fuel is None or order is None:
            logger.warning(f"Token {token_code} is missing its joined fuel type or order")
            raise TokenNotFoundError(token_code)
        return row.model_copy(update={"fuel_types": fuel, "token_orders": order})

    def expire_stale_tokens(self, now: datetime) -> int:
        now = as_aware(now)
        count = 0
        with self._lock:
            for token_id, row in list(self._tables.fuel_tokens.items()):
                if row.status is TokenStatus.PAID and now >= row.expires_at:
                    self._tables.fuel_tokens[token_id] = row.model_copy(update={"status": TokenStatus.EXPIRED})
                    count += 1
        return count

    # ---------- external actor hooks (pump side, admin) ----------

    def set_token_status(self, token_code: str, status: TokenStatus, used_at: Optional[datetime] = None) -> Token:
        """Stand-in for the pump or an operator updating a token directly in the table."""
        with self._lock:
            for token_id, row in self._tables.fuel_tokens.items():
                if row.token_code == token_code:
                    updated = row.model_copy(update={"status": status, "used_at": used_at})
                    self._tables.fuel_tokens[token_id] = updated
                    return updated
        raise TokenNotFoundError(token_code)
