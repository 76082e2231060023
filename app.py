# -*- coding: utf-8 -*-
import streamlit as st

# --- Custom Modules ---
from data_loader import create_store, division_id_of, get_geojson
from index_store import DivisionIndexStore, StoreStatus
from map_view import build_popup, create_interactive_map, division_table
from plotting import plot_division_history
from ui import (
    setup_page_config,
    display_header_and_about,
    display_sidebar,
    display_popup,
    display_payouts,
    display_rate_calculator,
    display_download_button,
)


def get_store() -> DivisionIndexStore:
    """The division index store of this browser session, created on first use."""
    if "division_store" not in st.session_state:
        st.session_state["division_store"] = create_store()
    return st.session_state["division_store"]


def main() -> None:
    """Main function to run the Streamlit application."""
    setup_page_config()
    display_header_and_about()

    store = get_store()
    store.load_rates()

    # The index has to be resolved before the geometry is rendered,
    # since every feature's colour depends on it.
    selected_period = st.session_state.get("period_selectbox")
    with st.spinner("Loading index data..."):
        store.resolve(selected_period)

    if store.status is StoreStatus.ERROR:
        if store.snapshot is None:
            st.error(f"Index data unavailable: {store.error}")
            st.stop()
        requested = store.requested_period or "the latest period"
        st.warning(
            f"Could not load the index for {requested}, showing {store.snapshot.period.label}. Error: {store.error}"
        )

    snapshot = store.snapshot
    display_sidebar(store.period_options(), snapshot.period.value)

    gdf = get_geojson()
    if gdf is None:
        st.error("Could not load geospatial data for the map.")
        st.stop()

    st.header(snapshot.period.label)
    clicked = create_interactive_map(gdf, store)

    if not store.rates_loaded:
        if store.rates_error is not None:
            st.warning("Premium rates are unavailable at the moment.")
        else:
            st.info("Premium rates are still loading.")

    if clicked:
        popup = build_popup(clicked, store)
        display_popup(popup)
        display_payouts(popup["windows"])
        display_rate_calculator(popup)
        division_id = division_id_of(clicked)
        if division_id is not None:
            fig = plot_division_history(store.history_for(division_id), popup["name"])
            st.plotly_chart(fig, use_container_width=True)
    else:
        st.markdown("**Click a division on the map to see its premium rate, insurer and index history.**")

    display_download_button(division_table(store), snapshot.period.value)
    st.markdown("---")
    st.markdown("Data Source: International Livestock Research Institute (ILRI), Index-Based Livestock Insurance")


if __name__ == "__main__":
    main()
