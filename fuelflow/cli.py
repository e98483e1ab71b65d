#!/usr/bin/env python3
"""
cli.py

Operator commands for a FuelFlow station.

Commands:
- lookup <code>   print a token with its effective (display) status
- expire-stale    write status 'expired' on paid tokens past their expiry

The web app never needs expire-stale: it derives expiry when a token is
read. The sweep only keeps the stored status honest for reporting.

Run:
  fuelflow-admin lookup TKN-20251019-04217
  fuelflow-admin --backend memory expire-stale
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from fuelflow.config import get_config
from fuelflow.core.clock import utc_now
from fuelflow.core.expiry import get_time_remaining
from fuelflow.core.formatting import format_currency, format_datetime, format_quantity
from fuelflow.core.lifecycle import effective_status
from fuelflow.data.exceptions import PersistenceError, TokenNotFoundError
from fuelflow.data.interface import TokenStore
from fuelflow.data.util import get_token_store
from fuelflow.logging import get_logger

logger = get_logger(__name__)


# -----------------------------
# Commands
# -----------------------------

def cmd_lookup(store: TokenStore, code: str) -> int:
    try:
        token = store.get_token_by_code(code)
    except TokenNotFoundError:
        print(f"Token not found: {code}", file=sys.stderr)
        return 1

    tz = get_config().display_timezone
    now = utc_now()
    print(f"{token.token_code}  [{effective_status(token, now).value}]  stored: {token.status.value}")
    print(f" fuel: {token.fuel_types.name} | quantity: {format_quantity(token.quantity)} | amount: {format_currency(token.amount)}")
    print(f" order: {token.token_orders.order_number} | customer: {token.token_orders.customer_name}")
    print(f" purchased: {format_datetime(token.created_at, tz)} | expires: {format_datetime(token.expires_at, tz)} ({get_time_remaining(token.expires_at, now)})")
    if token.used_at:
        print(f" dispensed: {format_datetime(token.used_at, tz)}")
    return 0


def cmd_expire_stale(store: TokenStore) -> int:
    count = store.expire_stale_tokens(utc_now())
    logger.info(f"Expiry sweep marked {count} token(s) expired")
    print(f"Marked {count} token(s) expired")
    return 0


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="FuelFlow operator commands.")
    parser.add_argument("--backend", choices=["supabase", "memory"], default=None,
                        help="Token store to use (defaults to BACKEND from the environment).")
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", help="Show a token and its effective status.")
    lookup.add_argument("code", help="Token code, e.g. TKN-20251019-04217")

    sub.add_parser("expire-stale", help="Persist 'expired' on paid tokens past their expiry.")
    args = parser.parse_args(argv)

    store = get_token_store(args.backend)
    try:
        if args.command == "lookup":
            return cmd_lookup(store, args.code)
        return cmd_expire_stale(store)
    except PersistenceError as e:
        print(f"Store error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
