"""
Reusable helpers for rendering entity tables with consistent configuration.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from ops_dashboard.data.fields import FIELD_CANDIDATES, field_column
from ops_dashboard.data.hydration import RESOLVED_SUFFIX
from ops_dashboard.ui.components.formatting import format_hours, format_number, format_percent


def _source_column(df: pd.DataFrame, key: str) -> Optional[str]:
    if key in FIELD_CANDIDATES:
        return field_column(df, key)
    return key if key in df.columns else None


def display_frame(df: pd.DataFrame, columns: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Swap id columns for their resolved names and drop relation pointers.

    ``columns`` maps a field key (``"project.name"``) or a literal column name
    to its header; fields with no matching column are skipped.
    A resolved name wins over the raw id, which is kept when nothing resolved.
    """
    working = df.copy()
    for col in [c for c in working.columns if str(c).endswith(RESOLVED_SUFFIX)]:
        base = str(col)[: -len(RESOLVED_SUFFIX)]
        if base in working.columns:
            working[base] = working[col].where(working[col].notna(), working[base])
        working = working.drop(columns=[col])
    relation_cols = [
        c for c in working.columns
        if working[c].map(lambda v: isinstance(v, (dict, MappingProxyType))).any()
    ]
    working = working.drop(columns=relation_cols)
    if columns:
        sources = {key: _source_column(working, key) for key in columns}
        picked = [(sources[key], header) for key, header in columns.items() if sources[key] is not None]
        working = working[[src for src, _ in picked]]
        working.columns = [header for _, header in picked]
    return working


def render_table(
    df: pd.DataFrame,
    column_config: Optional[Dict[str, Dict[str, str]]] = None,
    height: int = 320,
    empty_message: str = "Nothing to show for the current selection.",
    highlight_row: Optional[int] = None,
    export_file_name: Optional[str] = None,
) -> None:
    if df.empty:
        st.info(empty_message)
        return

    formatted_df = df.copy()
    if column_config:
        for column, config in column_config.items():
            if column not in formatted_df.columns:
                continue
            fmt_type = config.get("type")
            if fmt_type == "hours":
                formatted_df[column] = pd.to_numeric(formatted_df[column], errors="coerce").apply(
                    lambda v: format_hours(None if pd.isna(v) else v)
                )
            elif fmt_type == "percent":
                formatted_df[column] = formatted_df[column].apply(format_percent)
            elif fmt_type == "number":
                decimals = int(config.get("decimals", 0))
                formatted_df[column] = formatted_df[column].apply(
                    lambda v: format_number(v, decimals=decimals)
                )

    dataframe_obj = formatted_df
    if highlight_row is not None and highlight_row in formatted_df.index:
        def _style_row(row: pd.Series) -> List[str]:
            style = "background-color: #fff3cd;" if row.name == highlight_row else ""
            return [style] * len(row)

        dataframe_obj = formatted_df.style.apply(_style_row, axis=1)

    st.dataframe(
        dataframe_obj,
        use_container_width=True,
        height=height,
        hide_index=True,
    )

    if export_file_name:
        st.download_button(
            "Download CSV",
            data=df.to_csv(index=False).encode("utf-8"),
            file_name=export_file_name,
            mime="text/csv",
            key=f"download_{export_file_name}",
        )
