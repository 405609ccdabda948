"""
Plotly chart factory functions with consistent styling for the dashboard.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st


DEFAULT_TEMPLATE = "plotly_white"
DEFAULT_COLOR_SEQUENCE = [
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",  # over capacity
    "#9467bd",
    "#8c564b",
]
OVER_CAPACITY_COLOR = "#d62728"
UNDER_CAPACITY_COLOR = "#1f77b4"


def _configure_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
) -> go.Figure:
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        colorway=DEFAULT_COLOR_SEQUENCE,
        title=title,
        hovermode="x unified",
        margin=dict(l=40, r=20, t=60, b=40),
        showlegend=False,
    )
    if yaxis_title:
        fig.update_yaxes(title=yaxis_title)
    if yaxis_tickformat:
        fig.update_yaxes(tickformat=yaxis_tickformat)
    fig.update_xaxes(showgrid=False)
    fig.update_yaxes(showgrid=True, zeroline=True)
    return fig


def render_plotly(fig: go.Figure) -> None:
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    category_orders: Optional[Dict[str, List[str]]] = None,
    color_discrete_map: Optional[Dict[str, str]] = None,
    text_auto: bool = False,
) -> go.Figure:
    fig = px.bar(
        df,
        x=x,
        y=y,
        color=color,
        category_orders=category_orders,
        color_discrete_map=color_discrete_map,
        text_auto=text_auto,
    )
    fig = _configure_layout(fig, title, yaxis_title)
    if text_auto:
        fig.update_traces(textposition="outside", cliponaxis=False)
    return fig


def utilization_chart(people: pd.DataFrame, name_col: str, title: Optional[str] = None) -> go.Figure:
    """Per-person utilization bars with a 100% capacity reference line."""
    working = people[[name_col, "utilization"]].copy()
    working["band"] = working["utilization"].map(lambda v: "over" if v > 100 else "within")
    fig = bar_chart(
        working,
        x=name_col,
        y="utilization",
        color="band",
        title=title,
        yaxis_title="Utilization (%)",
        color_discrete_map={"over": OVER_CAPACITY_COLOR, "within": UNDER_CAPACITY_COLOR},
        text_auto=True,
    )
    fig.add_hline(y=100, line_dash="dash", line_color="#888888")
    return fig
