from __future__ import annotations

import pandas as pd
import streamlit as st

from ops_dashboard.data.cascade import open_task_mask
from ops_dashboard.data.fields import as_id, id_series, number_series, resolve_field, text_series
from ops_dashboard.data.metrics import AT_RISK_STATUS
from ops_dashboard.data.schema import PROJECTS, TASKS
from ops_dashboard.ui.components.formatting import format_hours
from ops_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from ops_dashboard.ui.components.tables import display_frame, render_table
from ops_dashboard.ui.pages.context import PageContext
from ops_dashboard.ui.pages.helpers import entity_options, record_display
from ops_dashboard.ui.pages.home import PROJECT_COLUMNS, TASK_COLUMNS


def _status_filter(projects: pd.DataFrame) -> pd.DataFrame:
    statuses = sorted({s for s in text_series(projects, "project.status") if s})
    if not statuses:
        return projects
    chosen = st.multiselect("Status", options=statuses, default=statuses, key="ops_projects_status")
    return projects[text_series(projects, "project.status").isin(chosen)]


def _project_detail(record: pd.Series, tasks: pd.DataFrame) -> None:
    project_id = as_id(resolve_field(record, "project.id"))
    st.markdown(f"### {resolve_field(record, 'project.name') or project_id}")
    col_owner, col_unit, col_status = st.columns(3)
    with col_owner:
        st.caption("Owner")
        st.write(record_display(record, "project.owner_id"))
    with col_unit:
        st.caption("Business Unit")
        st.write(record_display(record, "project.unit_id"))
    with col_status:
        st.caption("Status")
        st.write(str(resolve_field(record, "project.status") or "–"))

    project_tasks = tasks[id_series(tasks, "task.project_id") == project_id]
    st.markdown("**Tasks**")
    render_table(
        display_frame(project_tasks, TASK_COLUMNS),
        column_config={"Estimate": {"type": "hours"}},
        height=240,
        empty_message="No tasks for this project.",
    )


def render(context: PageContext) -> None:
    projects = context.snapshot.table(PROJECTS)
    tasks = context.snapshot.table(TASKS)
    st.header("Projects")

    at_risk = int((text_series(projects, "project.status").str.lower() == AT_RISK_STATUS).sum())
    open_hours = float(number_series(tasks[open_task_mask(tasks)], "task.estimate_hours").sum())
    render_kpi_cards([
        KpiCard(key="projects", label="Projects", value=len(projects)),
        KpiCard(key="risk", label="At Risk", value=at_risk),
        KpiCard(key="hours", label="Open Estimate", value_display=format_hours(open_hours)),
    ], columns=3)

    visible = _status_filter(projects)
    render_table(display_frame(visible, PROJECT_COLUMNS), export_file_name="projects.csv")

    options = entity_options(visible, "project.id", "project.name")
    picked = st.selectbox(
        "Project details",
        options=list(options.keys()),
        index=None,
        format_func=lambda key: options.get(key, key),
        placeholder="Select a project…",
        key="ops_projects_detail",
    )
    if picked:
        match = visible[id_series(visible, "project.id") == picked]
        if not match.empty:
            _project_detail(match.iloc[0], tasks)
