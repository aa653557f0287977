"""Main application for the FIRE & compound growth planner.

This module orchestrates the planner UI:
- Sidebar settings (currency, inflation, start year)
- Compound interest calculator with mixed allocation and after-tax values
- FIRE calculator with withdrawal strategy simulation
- Scenario analysis and withdrawal sustainability
- Saved calculations with JSON export/import
"""

import logging
import os
import sys

# Add project root to Python path before imports
# This ensures 'app' package can be found when Streamlit Cloud runs this file directly
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import streamlit as st

from app.components import (
    CompoundInterestComponent,
    FireComponent,
    SavedCalculationsComponent,
    ScenarioComponent,
    SidebarComponent,
)
from app.config import get_config


def main():
    """Main application entry point.

    Sets up the Streamlit interface:
    1. Configure logging and the page layout
    2. Render sidebar settings
    3. Render one tab per calculator plus saved calculations
    """
    logging.basicConfig(
        level=getattr(logging, get_config().log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    st.set_page_config(page_title="FIRE & Compound Growth Planner", layout="wide", initial_sidebar_state="expanded")
    st.title("FIRE & Compound Growth Planner")

    settings = SidebarComponent().render()

    compound_tab, fire_tab, scenario_tab, saved_tab = st.tabs(
        ["Compound Interest", "FIRE", "Scenario Analysis", "Saved Calculations"]
    )
    with compound_tab:
        CompoundInterestComponent(settings).render()
    with fire_tab:
        FireComponent(settings).render()
    with scenario_tab:
        ScenarioComponent(settings).render()
    with saved_tab:
        SavedCalculationsComponent().render()


if __name__ == "__main__":
    main()
