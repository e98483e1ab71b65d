from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Tuple

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError

from ..exceptions import PersistenceError, TokenNotFoundError
from ..interface import TokenStore
from ..models import FuelType, NewOrder, NewToken, Order, Token, TokenStatus
from ...core.clock import as_aware
from ...logging import get_logger
from ...supabase.client import get_supabase_connection

logger = get_logger(__name__)

FUEL_TYPES_TABLE = "fuel_types"
ORDERS_TABLE = "token_orders"
TOKENS_TABLE = "fuel_tokens"

# Embedded join: the token row plus its fuel type and order as nested objects.
TOKEN_WITH_JOINS = f"*, {FUEL_TYPES_TABLE} (*), {ORDERS_TABLE} (*)"


class SupabaseTokenStore(TokenStore):
    """
    Supabase (PostgREST) implementation.
    - Every method issues a fresh request; nothing is cached.
    - PostgREST has no multi-request transactions, so create_order_with_token
      deletes the order again when the token insert fails.
    """

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client = client if client is not None else get_supabase_connection().get_client()

    # ---------- request helpers ----------

    def _execute(self, action: str, query) -> Any:
        try:
            return query.execute()
        except APIError as e:
            detail = {"code": e.code, "message": e.message, "details": e.details, "hint": e.hint}
            logger.error(f"Supabase {action} failed: {detail}")
            raise PersistenceError(f"{action} failed: {e.message}", detail=detail) from e
        except httpx.HTTPError as e:
            logger.error(f"Supabase {action} failed in transport: {e!r}")
            raise PersistenceError(f"{action} failed: {e}", detail=repr(e)) from e

    @staticmethod
    def _single_row(action: str, response) -> dict:
        rows = response.data or []
        if not rows:
            raise PersistenceError(f"{action} returned no row", detail=response.data)
        return rows[0]

    @staticmethod
    def _parse(action: str, model, row: dict):
        try:
            return model.model_validate(row)
        except ValidationError as e:
            logger.error(f"Supabase {action} returned a malformed row: {e}")
            raise PersistenceError(f"{action} returned a malformed row", detail=str(e)) from e

    # ---------- interface implementation ----------

    def list_active_fuel_types(self) -> List[FuelType]:
        response = self._execute(
            "fuel type listing",
            self._client.table(FUEL_TYPES_TABLE).select("*").eq("is_active", True).order("id"),
        )
        return [self._parse("fuel type listing", FuelType, row) for row in response.data or []]

    def insert_order(self, order: NewOrder) -> Order:
        response = self._execute(
            "order insert",
            self._client.table(ORDERS_TABLE).insert(order.model_dump(mode="json")),
        )
        return self._parse("order insert", Order, self._single_row("order insert", response))

    def insert_token(self, token: NewToken) -> Token:
        if token.order_id is None:
            raise PersistenceError("token insert requires an order_id", detail=token.token_code)
        response = self._execute(
            "token insert",
            self._client.table(TOKENS_TABLE).insert(token.model_dump(mode="json")),
        )
        return self._parse("token insert", Token, self._single_row("token insert", response))

    def create_order_with_token(self, order: NewOrder, token: NewToken) -> Tuple[Order, Token]:
        order_row = self.insert_order(order)
        try:
            token_row = self.insert_token(token.model_copy(update={"order_id": order_row.id}))
        except PersistenceError:
            logger.warning(f"Token insert failed; deleting order {order_row.order_number}")
            try:
                self._execute(
                    "order rollback",
                    self._client.table(ORDERS_TABLE).delete().eq("id", order_row.id),
                )
            except PersistenceError:
                logger.error(f"Rollback failed; order {order_row.order_number} is orphaned")
            raise
        return order_row, token_row

    def get_token_by_code(self, token_code: str) -> Token:
        response = self._execute(
            "token lookup",
            self._client.table(TOKENS_TABLE).select(TOKEN_WITH_JOINS).eq("token_code", token_code).limit(1),
        )
        rows = response.data or []
        if not rows:
            raise TokenNotFoundError(token_code)

        row = rows[0]
        if not row.get(FUEL_TYPES_TABLE) or not row.get(ORDERS_TABLE):
            logger.warning(f"Token {token_code} is missing its joined fuel type or order")
            raise TokenNotFoundError(token_code)
        return self._parse("token lookup", Token, row)

    def expire_stale_tokens(self, now: datetime) -> int:
        response = self._execute(
            "expiry sweep",
            self._client.table(TOKENS_TABLE)
                .update({"status": TokenStatus.EXPIRED.value})
                .eq("status", TokenStatus.PAID.value)
                .lte("expires_at", as_aware(now).isoformat()),
        )
        return len(response.data or [])
