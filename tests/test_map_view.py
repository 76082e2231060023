from datetime import date

import branca.colormap as cm
import plotly.graph_objects as go

from color_bands import ColorBand
from config import BAND_COLORS, FEATURE_STYLE, NO_DATA_COLOR
from data_loader import load_divisions
from index_store import DivisionIndexStore
from map_view import attach_index, build_popup, division_table, feature_style, get_legend, hover_style
from plotting import plot_division_history
from conftest import GEOJSON

LAISAMIS = {"IBLI_ID": 1, "IBLI_UNIT": "Laisamis", "DISTRICT": "MARSABIT", "COUNTRY": "KENYA"}


def test_feature_style_uses_the_division_band(ready_store):
    style = feature_style({"properties": {"IBLI_ID": 1}}, ready_store)
    # 0.12 in 2013L
    assert style["fillColor"] == ColorBand.HIGH.color
    for key, value in FEATURE_STYLE.items():
        assert style[key] == value


def test_feature_style_without_data(ready_store):
    assert feature_style({"properties": {"IBLI_ID": 42}}, ready_store)["fillColor"] == NO_DATA_COLOR
    assert feature_style({"properties": {}}, ready_store)["fillColor"] == NO_DATA_COLOR


def test_hover_style():
    assert hover_style({}) == {"weight": 2, "fillOpacity": 0.2}


def test_attach_index(ready_store):
    merged = attach_index(load_divisions(GEOJSON), ready_store)
    assert list(merged["index_label"]) == ["0.12", "0.16"]
    assert list(merged["band"]) == ["high", "extreme"]
    assert list(merged["fill_color"]) == [BAND_COLORS[3], BAND_COLORS[4]]


def test_division_table(ready_store):
    table = division_table(ready_store)
    assert list(table["division_id"]) == [1, 2, 3]
    assert set(table["period"]) == {"2013L"}
    assert list(table["band"]) == ["high", "extreme", "extreme"]


def test_popup_for_current_period(ready_store):
    popup = build_popup(LAISAMIS, ready_store, today=date(2013, 5, 1))
    assert popup["name"] == "Laisamis"
    assert popup["period_label"] == "2013, Long season"
    assert popup["premium_rate"] == "5.25"
    assert popup["show_insurer"]
    assert popup["insurers"] == ["APA"]
    assert popup["calculator_enabled"]
    assert popup["windows"] == {"new_payout": "March 2014", "cur_payout": "October 2013", "sales_date": "Aug/Sep 2013"}


def test_popup_hides_insurer_for_past_periods(ready_store):
    popup = build_popup(LAISAMIS, ready_store, today=date(2016, 1, 10))
    assert not popup["show_insurer"]
    assert popup["premium_rate"] == "5.25"


def test_popup_without_rate_omits_rate_and_calculator(ready_store):
    popup = build_popup({"IBLI_ID": 2, "IBLI_UNIT": "North Horr", "DISTRICT": "MARSABIT"}, ready_store)
    assert popup["premium_rate"] is None
    assert popup["rate_percent"] is None
    assert not popup["calculator_enabled"]


def test_popup_without_insurer_has_no_calculator(ready_store):
    popup = build_popup({"IBLI_ID": 3, "IBLI_UNIT": "Loiyangalani", "DISTRICT": "TURKANA"}, ready_store)
    assert popup["premium_rate"] == "8.00"
    assert popup["insurer_text"] == "TBD"
    assert not popup["calculator_enabled"]


def test_get_legend():
    legend = get_legend()
    assert isinstance(legend, cm.StepColormap)
    assert legend.vmin == 0


def test_plot_division_history_skips_missing_periods(ready_store):
    fig = plot_division_history(ready_store.history_for(2), "North Horr")
    assert isinstance(fig, go.Figure)
    assert list(fig.data[0].x) == ["2012, Long season", "2013, Long season"]
    assert list(fig.data[0].y) == [0.09, 0.2]


def test_division_table_before_any_snapshot(manual_executor):
    store = DivisionIndexStore(fetch_index=lambda: "", executor=manual_executor)
    assert list(division_table(store).columns) == ["division_id", "period", "value", "band"]
    assert division_table(store).empty
