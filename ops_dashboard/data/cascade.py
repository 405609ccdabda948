"""
Cascading filter engine for the dashboard home view.

One active selection (a business unit, project, task or person) or, with no
selection, the view mode decides which projects, tasks, people and units are
shown together. Every branch below is a pure function of its inputs; a branch
returns ``None`` when the selection points at nothing, and the engine then
shows the unfiltered founder view instead of an empty page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

import pandas as pd

from ops_dashboard.data.fields import as_id, id_series, resolve_field, text_series
from ops_dashboard.data.schema import BUSINESS_UNITS, PEOPLE, PROJECTS, TASKS

logger = logging.getLogger(__name__)

FILTER_NONE = "none"
FILTER_UNIT = "unit"
FILTER_PROJECT = "project"
FILTER_TASK = "task"
FILTER_PERSON = "person"
FILTER_KINDS = (FILTER_NONE, FILTER_UNIT, FILTER_PROJECT, FILTER_TASK, FILTER_PERSON)

VIEW_FOUNDER = "founder"
VIEW_TEAM = "team"
VIEW_MODES = (VIEW_FOUNDER, VIEW_TEAM)

HOME_VIEW = "home"

SCOPE_PERSONAL = "personal"
SCOPE_FILTERED = "filtered"
SCOPE_ALL = "all"

CLOSED_STATUSES = {"done", "completed"}

TITLE_MY_OPEN = "My Open Tasks"
TITLE_ALL_OPEN = "All Open Tasks"
TITLE_UNIT_OPEN = "Open Tasks in Unit"


@dataclass(frozen=True)
class ActiveFilter:
    kind: str = FILTER_NONE
    id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.kind != FILTER_NONE


NO_FILTER = ActiveFilter()


@dataclass(frozen=True)
class DisplaySet:
    projects: pd.DataFrame
    tasks: pd.DataFrame
    people: pd.DataFrame
    business_units: pd.DataFrame


@dataclass(frozen=True)
class HighlightMap:
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    person_id: Optional[str] = None
    unit_id: Optional[str] = None


@dataclass(frozen=True)
class FilterDescription:
    type_label: str
    name: str

    @property
    def label(self) -> str:
        return f"Filtering by {self.type_label}: {self.name}"


@dataclass(frozen=True)
class CascadeResult:
    display: DisplaySet
    tasks_title: str
    highlights: HighlightMap = field(default_factory=HighlightMap)
    filter_description: Optional[FilterDescription] = None
    applied_filter: ActiveFilter = NO_FILTER
    scope: str = SCOPE_ALL


@dataclass(frozen=True)
class CascadeInputs:
    projects: pd.DataFrame
    tasks: pd.DataFrame
    people: pd.DataFrame
    business_units: pd.DataFrame
    view_mode: str
    current_person_id: Optional[str]

    @classmethod
    def from_tables(
        cls,
        tables: Mapping[str, pd.DataFrame],
        view_mode: str,
        current_person_id: Optional[str],
    ) -> "CascadeInputs":
        def _table(kind: str) -> pd.DataFrame:
            df = tables.get(kind)
            return df if df is not None else pd.DataFrame()

        return cls(
            projects=_table(PROJECTS),
            tasks=_table(TASKS),
            people=_table(PEOPLE),
            business_units=_table(BUSINESS_UNITS),
            view_mode=view_mode if view_mode in VIEW_MODES else VIEW_FOUNDER,
            current_person_id=(str(current_person_id).strip() or None) if current_person_id is not None else None,
        )


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def clear_filter() -> ActiveFilter:
    return NO_FILTER


def select_filter(current: Optional[ActiveFilter], kind: str, entity_id) -> ActiveFilter:
    """
    Next filter state after the user picks ``kind``/``entity_id``.

    Picking the unit that is already the active unit filter clears it; any
    other pick replaces the current filter.
    """
    if kind not in FILTER_KINDS or kind == FILTER_NONE:
        return NO_FILTER
    text = as_id(entity_id)
    if not text:
        return NO_FILTER
    if kind == FILTER_UNIT and current is not None and current.kind == FILTER_UNIT and current.id == text:
        return NO_FILTER
    return ActiveFilter(kind, text)


def filter_for_view(current: Optional[ActiveFilter], view: str) -> ActiveFilter:
    """Filters only live on the home view; navigating elsewhere drops them."""
    if view != HOME_VIEW or current is None:
        return NO_FILTER
    return current


def find_current_person_id(
    people: pd.DataFrame,
    email: Optional[str],
    fallback_first: bool = False,
) -> Optional[str]:
    if people is None or people.empty:
        return None
    ids = id_series(people, "person.id")
    if email:
        emails = text_series(people, "person.email").str.lower()
        matches = ids[emails == email.strip().lower()]
        if not matches.empty and matches.iloc[0]:
            return matches.iloc[0]
        return None
    if fallback_first and ids.iloc[0]:
        return ids.iloc[0]
    return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def open_task_mask(tasks: pd.DataFrame) -> pd.Series:
    status = text_series(tasks, "task.status").str.lower()
    return ~status.isin(CLOSED_STATUSES)


def _first_match(df: pd.DataFrame, field_name: str, entity_id: str) -> Optional[pd.Series]:
    if df.empty:
        return None
    matches = df[id_series(df, field_name) == entity_id]
    if matches.empty:
        return None
    return matches.iloc[0]


def _name(record: pd.Series, field_name: str, fallback: str) -> str:
    value = resolve_field(record, field_name)
    return fallback if value is None else str(value)


def _row_id(record: pd.Series, field_name: str) -> Optional[str]:
    return as_id(resolve_field(record, field_name)) or None


def _base_result(inputs: CascadeInputs, view_mode: str) -> CascadeResult:
    """The no-selection result for ``view_mode``."""
    if view_mode == VIEW_TEAM and inputs.current_person_id:
        person_id = inputs.current_person_id
        people_ids = id_series(inputs.people, "person.id")
        me = inputs.people[people_ids == person_id]
        if not me.empty:
            projects = inputs.projects[id_series(inputs.projects, "project.owner_id") == person_id]
            tasks = inputs.tasks[
                (id_series(inputs.tasks, "task.assignee_id") == person_id) & open_task_mask(inputs.tasks)
            ]
            unit_ids = set(id_series(projects, "project.unit_id"))
            unit_ids.discard("")
            units = inputs.business_units[id_series(inputs.business_units, "unit.id").isin(sorted(unit_ids))]
            return CascadeResult(
                display=DisplaySet(projects, tasks, me.iloc[:1], units),
                tasks_title=TITLE_MY_OPEN,
                scope=SCOPE_PERSONAL,
            )
        logger.debug("Current person %s not in people table; using founder view", person_id)

    return CascadeResult(
        display=DisplaySet(
            inputs.projects,
            inputs.tasks[open_task_mask(inputs.tasks)],
            inputs.people,
            inputs.business_units,
        ),
        tasks_title=TITLE_ALL_OPEN,
        scope=SCOPE_ALL,
    )


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def _unit_branch(inputs: CascadeInputs, unit_id: str) -> Optional[CascadeResult]:
    unit = _first_match(inputs.business_units, "unit.id", unit_id)
    project_units = id_series(inputs.projects, "project.unit_id")
    if unit is None and not (project_units == unit_id).any():
        return None

    projects = inputs.projects[project_units == unit_id]
    project_ids = set(id_series(projects, "project.id"))
    unit_tasks = inputs.tasks[id_series(inputs.tasks, "task.project_id").isin(sorted(project_ids))]
    person_ids = set(id_series(projects, "project.owner_id")) | set(id_series(unit_tasks, "task.assignee_id"))
    person_ids.discard("")
    people = inputs.people[id_series(inputs.people, "person.id").isin(sorted(person_ids))]

    unit_name = _name(unit, "unit.name", unit_id) if unit is not None else unit_id
    return CascadeResult(
        display=DisplaySet(projects, unit_tasks[open_task_mask(unit_tasks)], people, inputs.business_units),
        tasks_title=TITLE_UNIT_OPEN,
        highlights=HighlightMap(unit_id=unit_id),
        filter_description=FilterDescription("Business Unit", unit_name),
    )


def _project_branch(inputs: CascadeInputs, project_id: str) -> Optional[CascadeResult]:
    project = _first_match(inputs.projects, "project.id", project_id)
    if project is None:
        return None

    project_name = _name(project, "project.name", project_id)
    owner_id = _row_id(project, "project.owner_id")
    tasks = inputs.tasks[id_series(inputs.tasks, "task.project_id") == project_id]
    person_ids = set(id_series(tasks, "task.assignee_id"))
    if owner_id:
        person_ids.add(owner_id)
    person_ids.discard("")
    people = inputs.people[id_series(inputs.people, "person.id").isin(sorted(person_ids))]

    return CascadeResult(
        display=DisplaySet(inputs.projects, tasks, people, inputs.business_units),
        tasks_title=f"Tasks in {project_name}",
        highlights=HighlightMap(
            project_id=project_id,
            person_id=owner_id,
            unit_id=_row_id(project, "project.unit_id"),
        ),
        filter_description=FilterDescription("Project", project_name),
    )


def _task_branch(inputs: CascadeInputs, task_id: str) -> Optional[CascadeResult]:
    task = _first_match(inputs.tasks, "task.id", task_id)
    if task is None:
        return None

    project_id = _row_id(task, "task.project_id")
    unit_id = None
    if project_id:
        parent = _first_match(inputs.projects, "project.id", project_id)
        if parent is not None:
            unit_id = _row_id(parent, "project.unit_id")

    # Only highlights move; the task list is whatever the mode shows unfiltered.
    base = _base_result(inputs, inputs.view_mode)
    return CascadeResult(
        display=DisplaySet(inputs.projects, base.display.tasks, inputs.people, inputs.business_units),
        tasks_title=base.tasks_title,
        highlights=HighlightMap(
            project_id=project_id,
            task_id=task_id,
            person_id=_row_id(task, "task.assignee_id"),
            unit_id=unit_id,
        ),
        filter_description=FilterDescription("Task", _name(task, "task.title", task_id)),
    )


def _person_branch(inputs: CascadeInputs, person_id: str) -> Optional[CascadeResult]:
    person = _first_match(inputs.people, "person.id", person_id)
    if person is None:
        return None

    person_name = _name(person, "person.name", person_id)
    projects = inputs.projects[id_series(inputs.projects, "project.owner_id") == person_id]
    tasks = inputs.tasks[id_series(inputs.tasks, "task.assignee_id") == person_id]
    return CascadeResult(
        display=DisplaySet(projects, tasks, inputs.people, inputs.business_units),
        tasks_title=f"Tasks for {person_name}",
        highlights=HighlightMap(person_id=person_id),
        filter_description=FilterDescription("Person", person_name),
    )


BRANCHES: Dict[str, Callable[[CascadeInputs, str], Optional[CascadeResult]]] = {
    FILTER_UNIT: _unit_branch,
    FILTER_PROJECT: _project_branch,
    FILTER_TASK: _task_branch,
    FILTER_PERSON: _person_branch,
}


def compute_cascade(
    tables: Mapping[str, pd.DataFrame],
    active_filter: Optional[ActiveFilter],
    view_mode: str = VIEW_FOUNDER,
    current_person_id: Optional[str] = None,
) -> CascadeResult:
    """
    Derive the home-view display set for the current selection.

    ``tables`` holds the hydrated tables keyed by entity kind. The view mode
    only matters when no filter is active (and for the task list under a task
    filter). A filter whose target does not exist falls back to the founder
    view with nothing highlighted.
    """
    inputs = CascadeInputs.from_tables(tables, view_mode, current_person_id)
    active_filter = active_filter or NO_FILTER

    branch = BRANCHES.get(active_filter.kind)
    if branch is None or not active_filter.id:
        return _base_result(inputs, inputs.view_mode)

    result = branch(inputs, str(active_filter.id))
    if result is None:
        logger.info(
            "Filter %s=%s matches no record; showing unfiltered view",
            active_filter.kind,
            active_filter.id,
        )
        return _base_result(inputs, VIEW_FOUNDER)

    return CascadeResult(
        display=result.display,
        tasks_title=result.tasks_title,
        highlights=result.highlights,
        filter_description=result.filter_description,
        applied_filter=active_filter,
        scope=SCOPE_FILTERED,
    )
