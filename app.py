import os
from datetime import datetime, timezone
from typing import Optional

import streamlit as st

import ops_dashboard.bootstrap_env as bootstrap_env
from ops_dashboard.data.cascade import filter_for_view, find_current_person_id
from ops_dashboard.data.loader import clear_cache
from ops_dashboard.data.preferences import Preferences, load_preferences, save_preferences
from ops_dashboard.data.schema import PEOPLE
from ops_dashboard.data.snapshot import Snapshot, refresh_due, refresh_snapshot
from ops_dashboard.ui.layout import render_sidebar, setup_page
from ops_dashboard.ui.pages import home, people, projects, tasks
from ops_dashboard.ui.pages.context import PageContext
from ops_dashboard.ui.pages.helpers import get_active_filter, set_active_filter


PAGE_RENDERERS = {
    "home": home.render,
    "projects": projects.render,
    "tasks": tasks.render,
    "people": people.render,
}

SNAPSHOT_KEY = "ops_snapshot"
PREFS_KEY = "ops_preferences"
ATTEMPT_KEY = "ops_last_refresh_attempt"
ERROR_KEY = "ops_last_refresh_error"


def _preferences() -> Preferences:
    if PREFS_KEY not in st.session_state:
        st.session_state[PREFS_KEY] = load_preferences()
    return st.session_state[PREFS_KEY]


def _refresh(force: bool) -> Optional[Snapshot]:
    previous = st.session_state.get(SNAPSHOT_KEY)
    if not force and not refresh_due(previous, st.session_state.get(ATTEMPT_KEY)):
        error = st.session_state.get(ERROR_KEY)
        if error:
            st.error(f"Data refresh failed: {error}")
        return previous
    if force:
        clear_cache()
    with st.spinner("Loading data…"):
        outcome = refresh_snapshot(previous)
    st.session_state[ATTEMPT_KEY] = datetime.now(timezone.utc)
    st.session_state[ERROR_KEY] = outcome.error
    if not outcome.ok:
        st.error(f"Data refresh failed: {outcome.error}")
        if outcome.snapshot is not None:
            st.toast("Showing the last loaded data", icon="⚠️")
    elif force:
        st.toast("Data refreshed", icon="✅")
    st.session_state[SNAPSHOT_KEY] = outcome.snapshot
    return outcome.snapshot


def _current_person(snapshot: Snapshot) -> Optional[str]:
    email = os.getenv("DASHBOARD_USER_EMAIL")
    # without a signed-in user the first person stands in, as in the sample workspace
    return find_current_person_id(snapshot.table(PEOPLE), email, fallback_first=not email)


def main() -> None:
    bootstrap_env.ensure_env()
    setup_page()
    st.title("Operations Dashboard")

    prefs = _preferences()
    sidebar = render_sidebar(prefs.view_mode, st.session_state.get(SNAPSHOT_KEY))

    if sidebar.view_mode != prefs.view_mode:
        prefs.view_mode = sidebar.view_mode
        save_preferences(prefs)

    snapshot = _refresh(force=sidebar.refresh_requested)
    if snapshot is None:
        st.warning("No data loaded yet. Check the spreadsheet configuration and credentials, then refresh.")
        return

    active_filter = filter_for_view(get_active_filter(), sidebar.view)
    set_active_filter(active_filter)

    context = PageContext(
        snapshot=snapshot,
        preferences=prefs,
        active_filter=active_filter,
        current_person_id=_current_person(snapshot),
    )

    renderer = PAGE_RENDERERS.get(sidebar.view, home.render)
    renderer(context)


if __name__ == "__main__":
    main()
