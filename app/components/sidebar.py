"""Sidebar component for global settings."""

from datetime import date

import streamlit as st

from app.config import get_config
from app.utils import CURRENCIES


class SidebarComponent:
    """Component for handling sidebar settings shared by all views."""

    def __init__(self):
        self.config = get_config()

    def render(self) -> dict:
        """Render the sidebar and return the selected settings."""
        st.sidebar.header("Settings")

        codes = [currency["code"] for currency in CURRENCIES]
        default_index = codes.index(self.config.default_currency) if self.config.default_currency in codes else 0
        currency = st.sidebar.selectbox(
            "Currency",
            codes,
            index=default_index,
            format_func=lambda code: f"{code} ({next(c['symbol'] for c in CURRENCIES if c['code'] == code)})",
            help="Display currency. Calculations are currency independent.",
        )

        inflation = st.sidebar.number_input(
            "Inflation Rate (%)",
            min_value=0.0,
            max_value=20.0,
            value=float(self.config.default_inflation),
            step=0.1,
            help="Annual inflation used for inflation-adjusted values and expenses",
        )

        start_year = st.sidebar.number_input(
            "Start Year",
            min_value=1900,
            max_value=2200,
            value=int(self.config.start_year or date.today().year),
            step=1,
            help="Calendar year the projections start from",
        )

        st.sidebar.markdown("---")
        st.sidebar.caption(f"Saved calculations: `{self.config.storage_path}`")

        return {
            "currency": currency,
            "inflation": float(inflation),
            "start_year": int(start_year),
        }
