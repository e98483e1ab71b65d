# Entry point: streamlit run streamlit_app.py
from fuelflow.app import main

main()
