from streamlit.testing.v1 import AppTest


def purchase_page_app():
    import streamlit as st

    from fuelflow.config import get_config
    from fuelflow.data.backends.memory_backend import MemoryTokenStore
    from fuelflow.pages.purchase import render_purchase_page
    from fuelflow.services.purchase import PurchaseService
    from fuelflow.tests.factories import DIESEL, PETROL

    if "store" not in st.session_state:
        st.session_state["store"] = MemoryTokenStore(fuel_types=[PETROL, DIESEL])
    render_purchase_page(PurchaseService(st.session_state["store"]), get_config())


def test_quick_amount_fills_amount_and_preview():
    at = AppTest.from_function(purchase_page_app, default_timeout=30)
    at.run()
    assert not at.exception
    assert not at.warning
    assert [b.key for b in at.button if b.key and b.key.startswith("quick_")] == [
        "quick_200", "quick_500", "quick_1000", "quick_2000",
    ]
    assert at.text_input(key="amount").value == "500"

    at.button(key="quick_1000").click().run()
    assert not at.exception
    assert at.text_input(key="amount").value == "1000"
    assert [i.value for i in at.info] == ["You will get: **10 Liters** of Petrol"]
