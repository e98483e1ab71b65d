import streamlit as st

# Configuration
from fuelflow.config import get_config
from fuelflow.logging import get_logger

# TokenStore interface + backend factory
from fuelflow.data.interface import TokenStore
from fuelflow.data.util import get_token_store

from fuelflow.pages.purchase import render_purchase_page
from fuelflow.pages.token import render_token_page
from fuelflow.services.purchase import PurchaseService
from fuelflow.services.redemption import RedemptionService


@st.cache_resource
def _token_store(kind: str) -> TokenStore:
    # One store per process so the in-memory backend is shared by every session
    get_logger(__name__).info(f"Opening {kind} token store")
    return get_token_store(kind)


def main() -> None:
    st.set_page_config(page_title="FuelFlow · Buy Fuel Token Online", page_icon="⛽", layout="centered")

    config = get_config()
    # Missing Supabase credentials fail here, before any page renders
    store = _token_store(config.backend)

    # -------------------------------------------------------------------------
    # Routing: /?code=TKN-... shows a token, anything else the purchase form
    # -------------------------------------------------------------------------
    code = st.query_params.get("code")
    if code:
        render_token_page(RedemptionService(store), code, config)
    else:
        render_purchase_page(
            PurchaseService(store, validity_minutes=config.token_validity_minutes),
            config,
        )
