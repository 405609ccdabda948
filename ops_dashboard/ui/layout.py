"""
Layout helpers for the Streamlit application (page config, sidebar, footer).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from ops_dashboard.config import VIEWS
from ops_dashboard.data.cascade import VIEW_FOUNDER, VIEW_MODES, VIEW_TEAM
from ops_dashboard.data.loader import SOURCE_SAMPLE
from ops_dashboard.data.snapshot import Snapshot

VIEW_MODE_LABELS = {
    VIEW_FOUNDER: "Founder (everything)",
    VIEW_TEAM: "Team (my work)",
}


@dataclass
class SidebarState:
    view: str
    view_mode: str
    refresh_requested: bool


def setup_page() -> None:
    """Set Streamlit page configuration."""
    st.set_page_config(
        page_title="Operations Dashboard",
        layout="wide",
        page_icon=":bar_chart:",
    )


def render_sidebar(view_mode: str, snapshot: Optional[Snapshot]) -> SidebarState:
    """Navigation, view-mode toggle and the refresh button."""
    st.sidebar.header("Operations")
    labels = {view.key: view.label for view in VIEWS}
    view = st.sidebar.radio(
        "View",
        options=list(labels.keys()),
        format_func=lambda key: labels[key],
        key="ops_view",
    )

    mode = st.sidebar.radio(
        "Home view mode",
        options=list(VIEW_MODES),
        index=list(VIEW_MODES).index(view_mode) if view_mode in VIEW_MODES else 0,
        format_func=lambda key: VIEW_MODE_LABELS.get(key, key),
        help="Founder shows every project; Team narrows the home view to your own projects and tasks.",
    )

    st.sidebar.divider()
    refresh = st.sidebar.button("🔄 Refresh Data", use_container_width=True)
    if snapshot is not None:
        loaded = snapshot.loaded_at.strftime("%Y-%m-%d %H:%M UTC")
        st.sidebar.caption(f"Data loaded {loaded}")
        if snapshot.source == SOURCE_SAMPLE:
            st.sidebar.caption("Showing built-in sample data (no spreadsheet configured).")

    return SidebarState(view=view, view_mode=mode, refresh_requested=refresh)
