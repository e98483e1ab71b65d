import streamlit as st

from fuelflow.config import AppConfig
from fuelflow.core.formatting import calculate_quantity, format_currency
from fuelflow.data.exceptions import PersistenceError
from fuelflow.logging import get_logger
from fuelflow.services.purchase import (
    PurchaseForm,
    PurchaseService,
    PurchaseValidationError,
    parse_amount,
    sanitize_phone,
)

logger = get_logger(__name__)

# Session keys
ISSUED_CODE = "issued_token_code"
PURCHASE_ERROR = "purchase_error"
AMOUNT = "amount"
CUSTOMER_NAME = "customer_name"
PHONE = "phone"
VEHICLE = "vehicle_number"


# -----------------------------------------------------------------------------
# Widget callbacks (session state may only be rewritten before widgets render)
# -----------------------------------------------------------------------------

def _set_amount(value: int) -> None:
    st.session_state[AMOUNT] = str(value)


def _clean_phone() -> None:
    st.session_state[PHONE] = sanitize_phone(st.session_state.get(PHONE, ""))


def _upper_vehicle() -> None:
    st.session_state[VEHICLE] = st.session_state.get(VEHICLE, "").upper()


def _reset_form(default_amount: int) -> None:
    st.session_state[ISSUED_CODE] = None
    st.session_state[PURCHASE_ERROR] = ""
    st.session_state[CUSTOMER_NAME] = ""
    st.session_state[PHONE] = ""
    st.session_state[VEHICLE] = ""
    st.session_state[AMOUNT] = str(default_amount)


def _open_token(code: str) -> None:
    st.session_state[ISSUED_CODE] = None
    st.query_params["code"] = code


# -----------------------------------------------------------------------------
# Success view
# -----------------------------------------------------------------------------

def _render_success(code: str, config: AppConfig) -> None:
    st.success("### Payment Successful!\nYour fuel token is ready")
    st.caption("Token Code")
    st.code(code, language=None)
    st.button("View QR Code →", type="primary", width="stretch", on_click=_open_token, args=(code,))
    st.button("Buy Another Token", on_click=_reset_form, args=(config.default_amount,))


# -----------------------------------------------------------------------------
# Purchase form
# -----------------------------------------------------------------------------

def render_purchase_page(service: PurchaseService, config: AppConfig) -> None:
    st.session_state.setdefault(ISSUED_CODE, None)
    st.session_state.setdefault(PURCHASE_ERROR, "")
    st.session_state.setdefault(AMOUNT, str(config.default_amount))

    st.title("⛽ FuelFlow")
    st.caption(config.station_name)

    if st.session_state[ISSUED_CODE]:
        _render_success(st.session_state[ISSUED_CODE], config)
        return

    st.success("⚡ Skip the Queue!")
    st.subheader("Buy Fuel Token Online")
    st.write("Pay digitally, get QR code, no waiting at counter")

    try:
        fuel_types = service.available_fuel_types()
    except PersistenceError as e:
        logger.error(f"Could not load fuel types: {e} ({e.detail})")
        st.error("Could not load fuel prices. Please reload the page.")
        return

    # Fuel selection
    st.markdown("#### Select Fuel Type")
    fuels_by_id = {f.id: f for f in fuel_types}
    selected_id = st.radio(
        "Fuel",
        list(fuels_by_id),
        format_func=lambda fid: f"{fuels_by_id[fid].name} · ₹{fuels_by_id[fid].price:g}/L",
        horizontal=True,
        label_visibility="collapsed",
    ) if fuel_types else None
    selected_fuel = fuels_by_id.get(selected_id)
    if not fuel_types:
        st.warning("No fuel is on sale right now.")

    # Amount
    st.markdown("#### Enter Amount")
    for col, amt in zip(st.columns(len(config.quick_amounts)), config.quick_amounts):
        col.button(
            f"₹{amt}",
            key=f"quick_{amt}",
            width="stretch",
            type="primary" if st.session_state[AMOUNT] == str(amt) else "secondary",
            on_click=_set_amount,
            args=(amt,),
        )
    st.text_input("Amount (₹)", key=AMOUNT, placeholder="Enter amount")

    amount = parse_amount(st.session_state[AMOUNT])
    if selected_fuel is not None and amount is not None:
        liters = calculate_quantity(amount, selected_fuel.price)
        st.info(f"You will get: **{liters:g} Liters** of {selected_fuel.name}")

    # Customer details
    st.markdown("#### Your Details")
    st.text_input("Full Name *", key=CUSTOMER_NAME, placeholder="Enter your name")
    st.text_input("Mobile Number *", key=PHONE, placeholder="10-digit mobile number", on_change=_clean_phone)
    st.text_input("Vehicle Number (Optional)", key=VEHICLE, placeholder="UP81AB1234", on_change=_upper_vehicle)

    if st.session_state[PURCHASE_ERROR]:
        st.error(st.session_state[PURCHASE_ERROR])

    ready = bool(selected_fuel and st.session_state[AMOUNT] and st.session_state.get(CUSTOMER_NAME) and st.session_state.get(PHONE))
    if st.button(f"💳 Pay {format_currency(amount or 0)}", type="primary", width="stretch", disabled=not ready):
        form = PurchaseForm(
            fuel_type=selected_fuel,
            amount=st.session_state[AMOUNT],
            customer_name=st.session_state.get(CUSTOMER_NAME, ""),
            phone=st.session_state.get(PHONE, ""),
            vehicle_number=st.session_state.get(VEHICLE, ""),
        )
        try:
            with st.spinner("Processing..."):
                result = service.purchase(form)
        except PurchaseValidationError as e:
            st.session_state[PURCHASE_ERROR] = e.message
        except PersistenceError as e:
            logger.error(f"Purchase failed: {e} ({e.detail})")
            st.session_state[PURCHASE_ERROR] = "Something went wrong. Please try again."
        else:
            st.session_state[PURCHASE_ERROR] = ""
            st.session_state[ISSUED_CODE] = result.token.token_code
        st.rerun()

    st.caption(f"⏱️ Token valid for {config.token_validity_minutes} minutes after purchase")
