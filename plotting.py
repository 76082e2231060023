import plotly.graph_objects as go
from typing import List, Optional, Sequence, Tuple

from color_bands import ColorBand, classify
from config import BAND_THRESHOLDS
from index_parser import Period


def plot_division_history(
    history: List[Tuple[Period, Optional[float]]],
    division_name: str,
    thresholds: Sequence[float] = BAND_THRESHOLDS,
) -> go.Figure:
    """
    Bar chart of a division's index value in every period, coloured by band,
    with the band thresholds drawn as reference lines.
    """
    observed = [(period, value) for period, value in history if value is not None]
    labels = [period.label for period, _ in observed]
    values = [value for _, value in observed]
    colors = [classify(value, thresholds).color for value in values]

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=labels,
            y=values,
            marker=dict(color=colors, line=dict(color="black", width=0.5)),
            name="Index value",
        )
    )
    for band, threshold in zip(list(ColorBand)[2:], thresholds):
        fig.add_hline(
            y=threshold,
            line=dict(color="gray", dash="dash", width=1),
            annotation_text=f"{band.name.lower()} from {threshold:g}",
            annotation_position="top left",
        )
    fig.update_layout(
        title=f"Index History: {division_name}",
        xaxis_title="Period",
        yaxis_title="Index Value",
        template="plotly_white",
        font=dict(size=14),
        height=450,
        showlegend=False,
    )
    return fig
