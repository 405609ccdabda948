from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import streamlit as st

from ops_dashboard.data.metrics import DashboardMetrics
from ops_dashboard.ui.components.formatting import format_number


@dataclass
class KpiCard:
    key: str
    label: str
    value: Optional[float] = None
    value_display: Optional[str] = None
    decimals: int = 0
    help_text: Optional[str] = None


def _format_value(card: KpiCard) -> str:
    if card.value_display is not None:
        return card.value_display
    return format_number(card.value, decimals=card.decimals)


def cards_from_metrics(metrics: DashboardMetrics, order: Optional[Sequence[str]] = None) -> list:
    cards = []
    for key, title, value in metrics.cards(order):
        if isinstance(value, str):
            cards.append(KpiCard(key=key, label=title, value_display=value))
        else:
            cards.append(KpiCard(key=key, label=title, value=value))
    return cards


def render_kpi_cards(cards: Sequence[KpiCard], columns: int = 4) -> None:
    """
    Render KPI cards in a responsive grid using Streamlit columns.
    """
    cards = list(cards)
    if not cards:
        st.info("No metrics available for the current selection.")
        return

    columns = max(columns, 1)
    for idx in range(0, len(cards), columns):
        row_cards = cards[idx: idx + columns]
        cols = st.columns(len(row_cards))
        for col, card in zip(cols, row_cards):
            with col:
                st.metric(label=card.label, value=_format_value(card))
                if card.help_text:
                    st.caption(card.help_text)
