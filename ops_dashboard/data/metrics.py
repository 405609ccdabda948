"""
KPI aggregation for the dashboard home view.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ops_dashboard.config import DEFAULT_CAPACITY_HOURS, DEFAULT_CARD_ORDER
from ops_dashboard.data.cascade import (
    SCOPE_FILTERED,
    SCOPE_PERSONAL,
    CascadeResult,
    DisplaySet,
    open_task_mask,
)
from ops_dashboard.data.fields import id_series, number_series, text_series
from ops_dashboard.data.schema import PEOPLE, PROJECTS, TASKS

AT_RISK_STATUS = "at risk"

_TITLES = {
    "active": ("My Active Projects", "Active Projects (Filtered)", "Active Projects"),
    "risk": ("My Projects at Risk", "Projects at Risk (Filtered)", "Projects at Risk"),
    "tasks": ("My Open Tasks", "Open Tasks (Filtered)", "Open Tasks"),
    "utilization": ("My Utilization", "Utilization (Filtered)", "Team Utilization"),
}


@dataclass(frozen=True)
class DashboardMetrics:
    total_projects: int
    active_projects_title: str
    projects_at_risk: int
    projects_at_risk_title: str
    open_tasks_count: int
    open_tasks_title: str
    team_utilization: str
    utilization_title: str

    def cards(self, order: Optional[Sequence[str]] = None) -> List[Tuple[str, str, object]]:
        """(key, title, value) per KPI card in display order."""
        by_key = {
            "tasks": (self.open_tasks_title, self.open_tasks_count),
            "risk": (self.projects_at_risk_title, self.projects_at_risk),
            "active": (self.active_projects_title, self.total_projects),
            "utilization": (self.utilization_title, self.team_utilization),
        }
        keys = [k for k in (order or DEFAULT_CARD_ORDER) if k in by_key]
        return [(key, by_key[key][0], by_key[key][1]) for key in keys]


def round_half_up(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def utilization_label(logged_hours: float, capacity_hours: float) -> str:
    if not capacity_hours or not math.isfinite(capacity_hours):
        return "0%"
    return f"{round_half_up(logged_hours / capacity_hours * 100)}%"


def _title(key: str, scope: str) -> str:
    personal, filtered, default = _TITLES[key]
    if scope == SCOPE_PERSONAL:
        return personal
    if scope == SCOPE_FILTERED:
        return filtered
    return default


def _table(tables: Mapping[str, pd.DataFrame], kind: str) -> pd.DataFrame:
    df = tables.get(kind)
    return df if df is not None else pd.DataFrame()


def compute_metrics(
    tables: Mapping[str, pd.DataFrame],
    cascade: CascadeResult,
    current_person_id: Optional[str] = None,
) -> DashboardMetrics:
    """
    Aggregate KPI values for the current cascade.

    The personal view measures the signed-in person's own unfiltered projects
    and tasks rather than the trimmed display set; a filtered view measures
    the display set as shown (its tasks are not re-filtered by status).
    """
    scope = cascade.scope
    display = cascade.display

    if scope == SCOPE_PERSONAL and current_person_id:
        person_id = str(current_person_id)
        projects = _table(tables, PROJECTS)
        tasks = _table(tables, TASKS)
        projects = projects[id_series(projects, "project.owner_id") == person_id]
        tasks = tasks[id_series(tasks, "task.assignee_id") == person_id]
        people = display.people
    elif scope == SCOPE_FILTERED:
        projects, tasks, people = display.projects, display.tasks, display.people
    else:
        projects = _table(tables, PROJECTS)
        tasks = _table(tables, TASKS)
        people = _table(tables, PEOPLE)

    status = text_series(projects, "project.status").str.lower()
    projects_at_risk = int((status == AT_RISK_STATUS).sum())

    if scope == SCOPE_FILTERED:
        open_tasks_count = int(len(tasks))
    else:
        open_tasks_count = int(open_task_mask(tasks).sum())

    total_capacity = float(number_series(people, "person.capacity").sum())
    total_logged = float(number_series(tasks, "task.estimate_hours").sum())

    return DashboardMetrics(
        total_projects=int(len(projects)),
        active_projects_title=_title("active", scope),
        projects_at_risk=projects_at_risk,
        projects_at_risk_title=_title("risk", scope),
        open_tasks_count=open_tasks_count,
        open_tasks_title=_title("tasks", scope),
        team_utilization=utilization_label(total_logged, total_capacity),
        utilization_title=_title("utilization", scope),
    )


def people_with_utilization(display: DisplaySet) -> pd.DataFrame:
    """Display-set people with a ``utilization`` percentage from their display tasks."""
    people = display.people.copy()
    if people.empty:
        people["utilization"] = pd.Series(dtype=int)
        return people

    tasks = display.tasks
    hours = pd.DataFrame(
        {
            "assignee": id_series(tasks, "task.assignee_id"),
            "hours": number_series(tasks, "task.estimate_hours"),
        }
    )
    hours = hours[hours["assignee"] != ""]
    hours_by_person = hours.groupby("assignee")["hours"].sum()

    person_ids = id_series(people, "person.id")
    logged = person_ids.map(hours_by_person).fillna(0.0).astype(float)
    capacity = number_series(people, "person.capacity")
    capacity = capacity.where(capacity > 0, float(DEFAULT_CAPACITY_HOURS))

    ratio = np.where(capacity > 0, logged / capacity * 100, 0.0)
    people["utilization"] = [round_half_up(float(v)) for v in ratio]
    return people
