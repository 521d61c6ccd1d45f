import typing as tp

import plotly.graph_objects as go

from src.trace.calculations import jitter_series
from src.trace.records import JitterStat

COLOR_JITTER = "#E63946"
ZOOM_RANGE: tp.Tuple[float, float] = (-0.5, 0.5)


def plot_jitter(
    stat: JitterStat,
    zoom: bool = False,
    fig: go.Figure | None = None,
    title: str | None = None,
) -> go.Figure:
    """
    Plots a flow's jitter series against sequence number using Plotly.

    Args:
        stat: Jitter stat of the flow.
        zoom: Clamp the y-axis to ZOOM_RANGE.
        fig: Existing Plotly figure to add to.
        title: Plot title. Defaults to the flow key.
    """
    if fig is None:
        fig = go.Figure()

    seqs, values = jitter_series(stat)

    fig.add_trace(
        go.Scatter(
            x=seqs,
            y=values,
            mode="lines",
            name=f"{stat.from_node}->{stat.to_node} {stat.packet_type}",
            line=dict(color=COLOR_JITTER, width=1.5),
        )
    )

    if title is None:
        title = f"Jitter {stat.from_node} -> {stat.to_node} ({stat.packet_type})"

    fig.update_layout(
        title=title,
        xaxis_title="Sequence",
        yaxis_title="Jitter",
        template="plotly_white",
        showlegend=False,
    )

    if zoom:
        fig.update_yaxes(range=list(ZOOM_RANGE))

    return fig


def save_jitter_chart(stat: JitterStat, path: str, zoom: bool = False) -> None:
    """Write a standalone HTML chart of a flow's jitter series."""
    fig = plot_jitter(stat, zoom=zoom)
    fig.write_html(path, include_plotlyjs="cdn")
