# -*- coding: utf-8 -*-
"""
This module contains the UI components for the Streamlit application.
"""
import streamlit as st
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from premium import LivestockCounts, calculate_for_insurers
from seasons import current_season


def setup_page_config():
    """Sets the Streamlit page configuration."""
    st.set_page_config(
        page_title="Index-Based Livestock Insurance Map",
        page_icon="🐪",
        layout="wide",
    )


def display_header_and_about():
    """Displays the main title and the 'About' expander."""
    st.title("Index-Based Livestock Insurance Map")
    st.markdown(
        "Explore the forage index of every insurance division in northern Kenya and southern Ethiopia, "
        "look up premium rates and estimate the premium for your herd."
    )
    with st.expander("About the Index"):
        st.markdown(
            """
            - **Index:** Cumulative NDVI percentile of each division for a season. Higher values fall in more severe bands.
            - **Long season (LRLD):** Long rains / long dry season, March to September. Cover is sold in Aug/Sep.
            - **Short season (SRSD):** Short rains / short dry season, October to February. Cover is sold in Jan/Feb.
            """
        )


def display_sidebar(period_options: List[Dict[str, str]], active_period: Optional[str]) -> Optional[str]:
    """
    Renders the sidebar controls.

    Args:
        period_options (list): Period catalog entries with 'value' and 'label'.
        active_period (str): Value of the period currently shown on the map.

    Returns:
        str: Value of the selected period, or None if no periods are available.
    """
    with st.sidebar:
        st.header("Map Controls")
        st.info(
            f"Current season: {current_season().value}. "
            f"Last refresh: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
        )

        if not period_options:
            st.warning("No periods are available yet.")
            return None

        values = [option["value"] for option in period_options]
        labels = {option["value"]: option["label"] for option in period_options}
        index = values.index(active_period) if active_period in values else 0

        return st.selectbox(
            "Select Period:",
            options=values,
            index=index,
            format_func=lambda value: labels.get(value, value),
            key="period_selectbox",
        )


def display_popup(popup: Dict[str, Any]):
    """Renders the details of the clicked division."""
    st.subheader(popup["name"])
    if popup["period_label"]:
        st.caption(popup["period_label"])
    if popup["premium_rate"] is not None:
        st.markdown(f"Premium Rate: **{popup['premium_rate']}%**")
    if popup["show_insurer"]:
        st.markdown(f"**Insurer:** {popup['insurer_text']}")


def display_payouts(windows: Dict[str, str]):
    """Renders the next sales window and potential payouts."""
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(label="Next Sales Window", value=windows["sales_date"])
    with col2:
        st.metric(label="Next Potential Payout", value=windows["cur_payout"])
    with col3:
        st.metric(label="Following Payout", value=windows["new_payout"])


def display_rate_calculator(popup: Dict[str, Any]):
    """
    Renders the premium calculator for the clicked division.
    Blank animal counts count as zero.
    """
    if not popup["calculator_enabled"]:
        return

    with st.form(key=f"rate_calculator_{popup['division_id']}"):
        st.markdown("**Premium Calculator**")
        cows = st.number_input("Cows", min_value=0, step=1, value=None)
        camels = st.number_input("Camels", min_value=0, step=1, value=None)
        goats = st.number_input("Sheep / Goats", min_value=0, step=1, value=None)
        submitted = st.form_submit_button("Calculate")

    if submitted:
        counts = LivestockCounts.from_form(cows=cows, camels=camels, goats=goats)
        premiums = calculate_for_insurers(counts, popup["rate_percent"], popup["insurers"])
        for insurer, amount in premiums.items():
            st.metric(label=f"{insurer} premium (KSh)", value=f"{amount:,.2f}")


def display_download_button(table: pd.DataFrame, period: str):
    """
    Renders the download button in the sidebar.

    Args:
        table (pd.DataFrame): The division index of the active period.
        period (str): Value of the active period.
    """
    if not table.empty:
        st.sidebar.download_button(
            label="Download Period Data (CSV)",
            data=table.to_csv(index=False).encode("utf-8"),
            file_name=f"ibli_index_{period}.csv",
            mime="text/csv",
            key="download_button",
        )
