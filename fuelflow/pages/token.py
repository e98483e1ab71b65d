from typing import Optional

import streamlit as st

from fuelflow.config import AppConfig
from fuelflow.core.formatting import format_currency, format_datetime, format_quantity
from fuelflow.data.models import TokenStatus
from fuelflow.qr import render_qr_png
from fuelflow.services.redemption import LookupOutcome, RedemptionService, TokenDisplay

# Session key holding the TokenDisplay for the code in the URL
TOKEN_DISPLAY = "token_display"

_TONES = {"success": st.success, "info": st.info, "error": st.error}


class QRUnavailable(Exception):
    """Raised inside the cached renderer so a failed render is never cached."""


@st.cache_data(show_spinner=False)
def _cached_qr_png(code: str, width: int, margin: int, dark: str, light: str) -> bytes:
    png = render_qr_png(code, width=width, margin=margin, dark=dark, light=light)
    if png is None:
        raise QRUnavailable(code)
    return png


def _qr_png(code: str, width: int, margin: int, dark: str, light: str) -> Optional[bytes]:
    try:
        return _cached_qr_png(code, width, margin, dark, light)
    except QRUnavailable:
        return None


def _go_home() -> None:
    st.query_params.clear()
    st.session_state.pop(TOKEN_DISPLAY, None)


def _refresh() -> None:
    display = st.session_state.get(TOKEN_DISPLAY)
    if display is not None:
        display.refresh()


def _detail_row(label: str, value: str) -> None:
    left, right = st.columns(2)
    left.caption(label)
    right.markdown(f"**{value}**")


def _get_display(service: RedemptionService, code: str) -> TokenDisplay:
    display = st.session_state.get(TOKEN_DISPLAY)
    if display is None or display.code != code:
        display = TokenDisplay(service, code)
        st.session_state[TOKEN_DISPLAY] = display
    return display


@st.fragment(run_every="1s")
def _countdown(display: TokenDisplay) -> None:
    remaining = display.tick()
    if not display.is_active:
        # Countdown ran out (or the re-fetch changed the status): redraw the whole page
        st.rerun()
    st.caption(f"⏱️ {remaining}")


def render_token_page(service: RedemptionService, code: str, config: AppConfig) -> None:
    display = _get_display(service, code)

    nav_left, nav_right = st.columns([4, 1])
    nav_left.button("← Back", on_click=_go_home)
    nav_right.button("🔄", help="Refresh", on_click=_refresh)

    if display.lookup.outcome is LookupOutcome.NOT_FOUND:
        st.error("### Token Not Found\nThis token doesn't exist or has been removed.")
        return
    if display.lookup.outcome is LookupOutcome.FAILED:
        st.error("### Something went wrong\nWe could not load this token. Please refresh.")
        return

    # Catch an expiry that happened while nobody was watching
    display.tick()

    token = display.token
    status = display.status
    shown = display.display

    # Status banner
    _TONES[shown.tone](f"**{shown.label}**")
    if status is TokenStatus.PAID:
        _countdown(display)
    elif status is TokenStatus.USED and token.used_at:
        st.caption(f"Dispensed at {format_datetime(token.used_at, config.display_timezone)}")

    # QR code card
    with st.container(border=True):
        png = None
        if shown.show_qr:
            png = _qr_png(token.token_code, config.qr_width, config.qr_margin, config.qr_dark, config.qr_light)
        if png:
            st.write(shown.message)
            st.image(png, width=config.qr_width)
            st.download_button(
                "⬇ Download QR Code",
                data=png,
                file_name=f"fuelflow-{token.token_code}.png",
                mime="image/png",
            )
        else:
            st.write("✅" if status is TokenStatus.USED else "❌")
            st.write(shown.message)

    # Token details
    st.markdown("#### Token Details")
    fuel = token.fuel_types
    order = token.token_orders
    _detail_row("Token Code", token.token_code)
    _detail_row("Fuel Type", fuel.name if fuel else "")
    _detail_row("Quantity", format_quantity(token.quantity))
    _detail_row("Amount Paid", format_currency(token.amount))
    if order is not None:
        _detail_row("Customer", order.customer_name)
        if order.vehicle_number:
            _detail_row("Vehicle", order.vehicle_number)
    _detail_row("Purchased", format_datetime(token.created_at, config.display_timezone))

    st.button("⛽ Buy Another Token", type="primary", on_click=_go_home)
