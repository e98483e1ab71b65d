from streamlit.testing.v1 import AppTest

from fuelflow.pages import token as token_page

CODE = "TKN-20251019-00001"


def token_page_app(expires_in_minutes: int = 60):
    """Token page over an in-memory store pinned to a fixed clock."""
    from datetime import timedelta

    import streamlit as st

    from fuelflow.config import get_config
    from fuelflow.data.backends.memory_backend import MemoryTokenStore
    from fuelflow.pages.token import render_token_page
    from fuelflow.services.redemption import RedemptionService
    from fuelflow.tests.factories import NOW, PETROL, FakeClock, new_order, new_token

    class CountingStore(MemoryTokenStore):
        lookups = 0

        def get_token_by_code(self, token_code):
            self.lookups += 1
            return super().get_token_by_code(token_code)

    if "store" not in st.session_state:
        clock = FakeClock()
        store = CountingStore(fuel_types=[PETROL], clock=clock)
        store.create_order_with_token(
            new_order(),
            new_token("TKN-20251019-00001", expires_at=NOW + timedelta(minutes=expires_in_minutes)),
        )
        st.session_state["store"] = store
        st.session_state["clock"] = clock

    service = RedemptionService(st.session_state["store"], st.session_state["clock"])
    render_token_page(service, "TKN-20251019-00001", get_config())


def run_page(expires_in_minutes: int) -> AppTest:
    at = AppTest.from_function(token_page_app, kwargs={"expires_in_minutes": expires_in_minutes}, default_timeout=30)
    at.run()
    assert not at.exception
    return at


def texts(elements):
    return [e.value for e in elements]


def test_active_token_shows_countdown_and_qr():
    at = run_page(expires_in_minutes=60)

    assert texts(at.success) == ["**✅ Ready to Use**"]
    assert "⏱️ 1h 0m left" in texts(at.caption)
    assert "Show this QR at the pump" in texts(at.markdown)
    assert at.session_state["store"].lookups == 1


def test_stale_paid_token_renders_expired_after_one_refetch():
    """Stored as paid but past expiry: shown expired, no QR, looked up twice."""
    at = run_page(expires_in_minutes=-5)

    assert texts(at.error) == ["**✗ Expired**"]
    assert "QR code not available" in texts(at.markdown)
    assert "Show this QR at the pump" not in texts(at.markdown)
    assert at.session_state["store"].lookups == 2

    at.run()
    assert at.session_state["store"].lookups == 2


def test_failed_qr_render_is_retried(monkeypatch):
    token_page._cached_qr_png.clear()
    results = iter([None, b"\x89PNG fake"])
    monkeypatch.setattr(token_page, "render_qr_png", lambda *args, **kwargs: next(results))

    assert token_page._qr_png(CODE, 280, 2, "#000000", "#ffffff") is None
    assert token_page._qr_png(CODE, 280, 2, "#000000", "#ffffff") == b"\x89PNG fake"
    # Cached from here on
    assert token_page._qr_png(CODE, 280, 2, "#000000", "#ffffff") == b"\x89PNG fake"
