from __future__ import annotations

from typing import Dict, Optional

import pandas as pd
import streamlit as st

from ops_dashboard.data.cascade import NO_FILTER, ActiveFilter
from ops_dashboard.data.fields import FIELD_CANDIDATES, id_series, resolve_column, text_series
from ops_dashboard.data.hydration import display_value

ACTIVE_FILTER_KEY = "ops_active_filter"


def get_active_filter() -> ActiveFilter:
    value = st.session_state.get(ACTIVE_FILTER_KEY)
    return value if isinstance(value, ActiveFilter) else NO_FILTER


def set_active_filter(value: ActiveFilter) -> None:
    st.session_state[ACTIVE_FILTER_KEY] = value


def entity_options(df: pd.DataFrame, id_field: str, name_field: str) -> Dict[str, str]:
    """id -> display name for a selectbox, skipping rows without an id."""
    ids = id_series(df, id_field)
    names = text_series(df, name_field)
    options: Dict[str, str] = {}
    for entity_id, name in zip(ids, names):
        if entity_id and entity_id not in options:
            options[entity_id] = name or entity_id
    return options


def highlight_position(df: pd.DataFrame, id_field: str, entity_id: Optional[str]) -> Optional[int]:
    """Index label of the first row whose id equals ``entity_id``."""
    if not entity_id or df.empty:
        return None
    hits = df.index[id_series(df, id_field) == entity_id]
    return hits[0] if len(hits) else None


def record_display(record: pd.Series, field: str) -> str:
    """Resolved name for a reference field on one row, falling back to its raw id."""
    column = resolve_column(record.index, FIELD_CANDIDATES.get(field, ()))
    if column is None:
        return "–"
    return display_value(record, column) or "–"
