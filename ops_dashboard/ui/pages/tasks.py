from __future__ import annotations

import streamlit as st

from ops_dashboard.data.cascade import open_task_mask
from ops_dashboard.data.fields import id_series, text_series
from ops_dashboard.data.schema import PROJECTS, TASKS
from ops_dashboard.ui.components.tables import display_frame, render_table
from ops_dashboard.ui.pages.context import PageContext
from ops_dashboard.ui.pages.helpers import entity_options
from ops_dashboard.ui.pages.home import TASK_COLUMNS


def render(context: PageContext) -> None:
    tasks = context.snapshot.table(TASKS)
    projects = context.snapshot.table(PROJECTS)
    st.header("Tasks")

    col_scope, col_project, col_mine = st.columns([2, 3, 2])
    with col_scope:
        scope = st.radio("Show", ["Open", "All"], horizontal=True, key="ops_tasks_scope")
    with col_project:
        project_options = entity_options(projects, "project.id", "project.name")
        project_id = st.selectbox(
            "Project",
            options=list(project_options.keys()),
            index=None,
            format_func=lambda key: project_options.get(key, key),
            placeholder="All projects",
            key="ops_tasks_project",
        )
    with col_mine:
        mine_only = st.toggle(
            "Assigned to me",
            value=False,
            disabled=context.current_person_id is None,
            key="ops_tasks_mine",
        )

    visible = tasks
    if scope == "Open":
        visible = visible[open_task_mask(visible)]
    if project_id:
        visible = visible[id_series(visible, "task.project_id") == project_id]
    if mine_only and context.current_person_id:
        visible = visible[id_series(visible, "task.assignee_id") == context.current_person_id]

    statuses = text_series(visible, "task.status").str.lower().value_counts()
    if not statuses.empty:
        st.caption(" · ".join(f"{status or 'no status'}: {count}" for status, count in statuses.items()))

    render_table(
        display_frame(visible, TASK_COLUMNS),
        column_config={"Estimate": {"type": "hours"}},
        height=480,
        empty_message="No tasks match these filters.",
        export_file_name="tasks.csv",
    )
