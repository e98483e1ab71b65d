from datetime import timedelta

import pytest

from fuelflow import cli
from fuelflow.data.models import TokenStatus
from fuelflow.tests.factories import new_order, new_token


@pytest.fixture
def cli_store(store, monkeypatch):
    monkeypatch.setattr(cli, "get_token_store", lambda kind=None: store)
    return store


def test_lookup_prints_effective_status(cli_store, capsys):
    # Created relative to the wall clock: still active
    cli_store.create_order_with_token(new_order(), new_token(expires_at=cli.utc_now() + timedelta(minutes=30)))

    assert cli.main(["lookup", "TKN-20251019-00001"]) == 0
    out = capsys.readouterr().out
    assert "TKN-20251019-00001  [paid]  stored: paid" in out
    assert "Petrol" in out
    assert "ORD-20251019-0001" in out


def test_lookup_shows_derived_expiry(cli_store, capsys):
    cli_store.create_order_with_token(new_order(), new_token(expires_at=cli.utc_now() - timedelta(minutes=1)))

    assert cli.main(["lookup", "TKN-20251019-00001"]) == 0
    assert "[expired]  stored: paid" in capsys.readouterr().out


def test_lookup_unknown_code(cli_store, capsys):
    assert cli.main(["lookup", "TKN-20251019-00404"]) == 1
    assert "Token not found" in capsys.readouterr().err


def test_expire_stale(cli_store, capsys):
    cli_store.create_order_with_token(new_order(), new_token(expires_at=cli.utc_now() - timedelta(minutes=1)))

    assert cli.main(["expire-stale"]) == 0
    assert "Marked 1 token(s) expired" in capsys.readouterr().out
    assert cli_store.get_token_by_code("TKN-20251019-00001").status is TokenStatus.EXPIRED
