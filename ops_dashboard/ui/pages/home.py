from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st

from ops_dashboard.config import DEFAULT_CARD_ORDER
from ops_dashboard.data.cascade import (
    FILTER_PERSON,
    FILTER_PROJECT,
    FILTER_TASK,
    FILTER_UNIT,
    CascadeResult,
    clear_filter,
    compute_cascade,
    select_filter,
)
from ops_dashboard.data.fields import text_series
from ops_dashboard.data.metrics import compute_metrics, people_with_utilization
from ops_dashboard.data.preferences import resolve_card_order, save_preferences
from ops_dashboard.data.schema import BUSINESS_UNITS
from ops_dashboard.ui.components.charts import render_plotly, utilization_chart
from ops_dashboard.ui.components.kpi import cards_from_metrics, render_kpi_cards
from ops_dashboard.ui.components.tables import display_frame, render_table
from ops_dashboard.ui.pages.context import PageContext
from ops_dashboard.ui.pages.helpers import (
    entity_options,
    get_active_filter,
    highlight_position,
    set_active_filter,
)

CARD_LABELS = {
    "tasks": "Open tasks",
    "risk": "Projects at risk",
    "active": "Active projects",
    "utilization": "Utilization",
}

PROJECT_COLUMNS = {
    "project.name": "Project",
    "project.unit_id": "Unit",
    "project.owner_id": "Owner",
    "project.status": "Status",
    "priority": "Priority",
    "target_end_date": "Target End",
}
TASK_COLUMNS = {
    "task.title": "Task",
    "task.project_id": "Project",
    "task.assignee_id": "Assignee",
    "task.status": "Status",
    "priority": "Priority",
    "task.estimate_hours": "Estimate",
    "due_date": "Due",
}
PEOPLE_COLUMNS = {
    "person.name": "Name",
    "person.role": "Role",
    "person.capacity": "Capacity",
    "utilization": "Utilization",
}

_PICK_KEYS = {
    FILTER_PROJECT: "ops_pick_project",
    FILTER_TASK: "ops_pick_task",
    FILTER_PERSON: "ops_pick_person",
}


def _apply_pick(kind: str) -> None:
    picked = st.session_state.get(_PICK_KEYS[kind])
    if not picked:
        return
    set_active_filter(select_filter(get_active_filter(), kind, picked))
    for key in _PICK_KEYS.values():
        st.session_state[key] = None


def _toggle_unit(unit_id: str) -> None:
    set_active_filter(select_filter(get_active_filter(), FILTER_UNIT, unit_id))


def _clear() -> None:
    set_active_filter(clear_filter())


def _filter_banner(result: CascadeResult) -> None:
    if result.filter_description is None:
        return
    col_label, col_clear = st.columns([5, 1])
    with col_label:
        st.info(result.filter_description.label)
    with col_clear:
        st.button("Clear filter", on_click=_clear, use_container_width=True)


def _card_order_editor(context: PageContext) -> List[str]:
    with st.expander("Customize KPI cards", expanded=False):
        chosen = st.multiselect(
            "Card order",
            options=DEFAULT_CARD_ORDER,
            default=context.preferences.card_order,
            format_func=lambda key: CARD_LABELS.get(key, key),
            help="Pick every card in the order you want them shown.",
        )
        order = resolve_card_order(chosen)
        if chosen and order == chosen and order != context.preferences.card_order:
            context.preferences.card_order = order
            if save_preferences(context.preferences):
                st.toast("Card order saved", icon="💾")
        elif chosen and order != chosen:
            st.caption("Select all four cards to change the order.")
    return context.preferences.card_order


def _unit_buttons(context: PageContext, result: CascadeResult) -> None:
    units = context.tables.get(BUSINESS_UNITS, pd.DataFrame())
    options = entity_options(units, "unit.id", "unit.name")
    if not options:
        return
    st.subheader("Business Units")
    cols = st.columns(min(len(options), 6))
    for idx, (unit_id, name) in enumerate(options.items()):
        selected = result.highlights.unit_id == unit_id
        with cols[idx % len(cols)]:
            st.button(
                f"✓ {name}" if selected else name,
                key=f"ops_unit_{unit_id}",
                on_click=_toggle_unit,
                args=(unit_id,),
                type="primary" if selected else "secondary",
                use_container_width=True,
            )


def _pickers(result: CascadeResult) -> None:
    display = result.display
    pickers = [
        (FILTER_PROJECT, "Focus on a project", entity_options(display.projects, "project.id", "project.name")),
        (FILTER_TASK, "Focus on a task", entity_options(display.tasks, "task.id", "task.title")),
        (FILTER_PERSON, "Focus on a person", entity_options(display.people, "person.id", "person.name")),
    ]
    for col, (kind, label, options) in zip(st.columns(len(pickers)), pickers):
        with col:
            st.selectbox(
                label,
                options=list(options.keys()),
                index=None,
                format_func=lambda key, opts=options: opts.get(key, key),
                placeholder="Select…",
                key=_PICK_KEYS[kind],
                on_change=_apply_pick,
                args=(kind,),
            )


def _team_capacity(result: CascadeResult) -> None:
    people = people_with_utilization(result.display)
    st.subheader("Team Capacity")
    if people.empty:
        st.info("No people in the current selection.")
        return
    people = people.assign(person=text_series(people, "person.name"))
    render_plotly(utilization_chart(people, "person"))
    render_table(
        display_frame(people, PEOPLE_COLUMNS),
        column_config={"Capacity": {"type": "hours"}, "Utilization": {"type": "percent"}},
        height=240,
    )


def render(context: PageContext) -> None:
    result = compute_cascade(
        context.tables,
        context.active_filter,
        view_mode=context.preferences.view_mode,
        current_person_id=context.current_person_id,
    )
    if result.applied_filter != context.active_filter:
        # dangling selection: forget it so the banner and pickers agree with the view
        set_active_filter(result.applied_filter)

    _filter_banner(result)

    metrics = compute_metrics(context.tables, result, context.current_person_id)
    order = _card_order_editor(context)
    render_kpi_cards(cards_from_metrics(metrics, order))

    _unit_buttons(context, result)
    _pickers(result)

    display = result.display
    highlights = result.highlights

    st.subheader("Projects")
    render_table(
        display_frame(display.projects, PROJECT_COLUMNS),
        highlight_row=highlight_position(display.projects, "project.id", highlights.project_id),
    )

    st.subheader(result.tasks_title)
    render_table(
        display_frame(display.tasks, TASK_COLUMNS),
        column_config={"Estimate": {"type": "hours"}},
        highlight_row=highlight_position(display.tasks, "task.id", highlights.task_id),
        empty_message="No open tasks.",
    )

    _team_capacity(result)

