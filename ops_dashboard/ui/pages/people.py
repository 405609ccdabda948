from __future__ import annotations

from typing import Any, List, Mapping, Optional

import pandas as pd
import streamlit as st

from ops_dashboard.data.cascade import DisplaySet, open_task_mask
from ops_dashboard.data.fields import as_id, id_series, resolve_field, text_series
from ops_dashboard.data.metrics import people_with_utilization
from ops_dashboard.data.schema import BUSINESS_UNITS, PEOPLE, PROJECTS, TASKS
from ops_dashboard.ui.components.charts import render_plotly, utilization_chart
from ops_dashboard.ui.components.tables import display_frame, render_table
from ops_dashboard.ui.pages.context import PageContext
from ops_dashboard.ui.pages.helpers import entity_options
from ops_dashboard.ui.pages.home import PEOPLE_COLUMNS, TASK_COLUMNS

DIRECTORY_COLUMNS = {
    "person.name": "Name",
    "person.role": "Role",
    "person.email": "Email",
    "person.manager_id": "Manager",
    "person.capacity": "Capacity",
}


def _relation(record: pd.Series, name: str) -> Optional[Mapping[str, Any]]:
    value = record.get(name)
    return value if isinstance(value, Mapping) else None


def _units_led_by(units: pd.DataFrame, person_id: str) -> List[str]:
    """Unit names whose lead relation points at ``person_id``."""
    names: List[str] = []
    if units.empty or "lead" not in units.columns:
        return names
    for _, unit in units.iterrows():
        lead = _relation(unit, "lead")
        if lead is not None and as_id(resolve_field(lead, "person.id")) == person_id:
            names.append(str(resolve_field(unit, "unit.name") or resolve_field(unit, "unit.id")))
    return names


def _person_detail(record: pd.Series, context: PageContext) -> None:
    person_id = as_id(resolve_field(record, "person.id"))
    st.markdown(f"### {resolve_field(record, 'person.name') or person_id}")
    st.caption(str(resolve_field(record, "person.role") or ""))

    manager = _relation(record, "manager")
    col_manager, col_units = st.columns(2)
    with col_manager:
        st.caption("Reports to")
        if manager is None:
            st.write("–")
        else:
            role = resolve_field(manager, "person.role")
            name = resolve_field(manager, "person.name")
            st.write(f"{name} ({role})" if role else str(name))
    with col_units:
        st.caption("Leads")
        led = _units_led_by(context.snapshot.table(BUSINESS_UNITS), person_id)
        st.write(", ".join(led) if led else "–")

    tasks = context.snapshot.table(TASKS)
    mine = tasks[(id_series(tasks, "task.assignee_id") == person_id) & open_task_mask(tasks)]
    st.markdown("**Open tasks**")
    render_table(
        display_frame(mine, TASK_COLUMNS),
        column_config={"Estimate": {"type": "hours"}},
        height=240,
        empty_message="No open tasks assigned.",
    )


def render(context: PageContext) -> None:
    people = context.snapshot.table(PEOPLE)
    st.header("People")

    render_table(
        display_frame(people, DIRECTORY_COLUMNS),
        column_config={"Capacity": {"type": "hours"}},
        export_file_name="people.csv",
    )

    everyone = DisplaySet(
        projects=context.snapshot.table(PROJECTS),
        tasks=context.snapshot.table(TASKS),
        people=people,
        business_units=context.snapshot.table(BUSINESS_UNITS),
    )
    loaded = people_with_utilization(everyone)
    if not loaded.empty:
        st.subheader("Utilization")
        loaded = loaded.assign(person=text_series(loaded, "person.name"))
        render_plotly(utilization_chart(loaded, "person"))
        with st.expander("Utilization table"):
            render_table(
                display_frame(loaded, PEOPLE_COLUMNS),
                column_config={"Capacity": {"type": "hours"}, "Utilization": {"type": "percent"}},
                height=240,
            )

    options = entity_options(people, "person.id", "person.name")
    picked = st.selectbox(
        "Person details",
        options=list(options.keys()),
        index=None,
        format_func=lambda key: options.get(key, key),
        placeholder="Select a person…",
        key="ops_people_detail",
    )
    if picked:
        match = people[id_series(people, "person.id") == picked]
        if not match.empty:
            _person_detail(match.iloc[0], context)
