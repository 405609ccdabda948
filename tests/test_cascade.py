"""
Tests for the cascading filter engine and its filter transitions.
"""

import pandas as pd
import pytest

from ops_dashboard.data.cascade import (
    FILTER_PERSON,
    FILTER_PROJECT,
    FILTER_TASK,
    FILTER_UNIT,
    NO_FILTER,
    SCOPE_ALL,
    SCOPE_FILTERED,
    SCOPE_PERSONAL,
    ActiveFilter,
    HighlightMap,
    clear_filter,
    compute_cascade,
    filter_for_view,
    find_current_person_id,
    select_filter,
)
from ops_dashboard.data.hydration import hydrate_all
from ops_dashboard.data.schema import PEOPLE


def _ids(df, column):
    return list(df[column])


class TestScenarios:
    def test_unit_selection(self, scenario_tables):
        result = compute_cascade(scenario_tables, ActiveFilter(FILTER_UNIT, "U1"))
        assert _ids(result.display.projects, "project_id") == ["P1"]
        assert _ids(result.display.tasks, "task_id") == ["T1"]
        assert result.highlights.unit_id == "U1"
        assert result.tasks_title == "Open Tasks in Unit"
        assert result.filter_description.label == "Filtering by Business Unit: Unit One"

    def test_team_mode_without_filter(self, scenario_tables):
        result = compute_cascade(scenario_tables, NO_FILTER, view_mode="team", current_person_id="X1")
        assert _ids(result.display.projects, "project_id") == ["P1"]
        assert result.tasks_title == "My Open Tasks"
        assert result.scope == SCOPE_PERSONAL
        assert result.highlights == HighlightMap()


class TestNoFilter:
    def test_founder_mode_shows_everything_open(self, org_tables):
        result = compute_cascade(org_tables, None)
        assert len(result.display.projects) == 3
        assert _ids(result.display.tasks, "task_id") == ["T1", "T3"]
        assert len(result.display.people) == 4
        assert len(result.display.business_units) == 2
        assert result.tasks_title == "All Open Tasks"
        assert result.scope == SCOPE_ALL
        assert result.filter_description is None

    def test_team_mode_narrows_to_current_person(self, org_tables):
        result = compute_cascade(org_tables, NO_FILTER, view_mode="team", current_person_id="A")
        assert _ids(result.display.projects, "project_id") == ["P1", "P3"]
        # T4 is assigned to A but completed
        assert result.display.tasks.empty
        assert _ids(result.display.people, "User_id") == ["A"]
        assert _ids(result.display.business_units, "bu_id") == ["U1", "U2"]

    def test_team_mode_with_unknown_person_falls_back_to_founder(self, org_tables):
        result = compute_cascade(org_tables, NO_FILTER, view_mode="team", current_person_id="nobody")
        assert result.tasks_title == "All Open Tasks"
        assert len(result.display.projects) == 3

    def test_unknown_view_mode_is_founder(self, org_tables):
        result = compute_cascade(org_tables, NO_FILTER, view_mode="owner")
        assert result.scope == SCOPE_ALL

    def test_empty_tables(self):
        result = compute_cascade({}, ActiveFilter(FILTER_UNIT, "U1"))
        assert result.display.projects.empty
        assert result.applied_filter == NO_FILTER


class TestUnitBranch:
    def test_projects_tasks_and_people(self, org_tables):
        result = compute_cascade(org_tables, ActiveFilter(FILTER_UNIT, "U1"))
        assert _ids(result.display.projects, "project_id") == ["P1", "P2"]
        # T2 is done and filtered out
        assert _ids(result.display.tasks, "task_id") == ["T1", "T3"]
        assert _ids(result.display.people, "User_id") == ["A", "B", "C"]
        assert len(result.display.business_units) == 2
        assert result.scope == SCOPE_FILTERED
        assert result.applied_filter == ActiveFilter(FILTER_UNIT, "U1")

    def test_every_project_belongs_to_highlighted_unit(self, org_tables):
        for unit_id in ("U1", "U2"):
            result = compute_cascade(org_tables, ActiveFilter(FILTER_UNIT, unit_id))
            assert result.highlights.unit_id == unit_id
            assert set(result.display.projects["business_unit_id"]) == {unit_id}

    def test_unit_known_only_from_projects(self, org_tables):
        tables = dict(org_tables)
        tables.pop("business_units")
        result = compute_cascade(tables, ActiveFilter(FILTER_UNIT, "U2"))
        assert _ids(result.display.projects, "project_id") == ["P3"]
        assert result.filter_description.name == "U2"

    def test_unit_without_projects_shows_empty_lists(self, org_tables):
        units = pd.concat(
            [org_tables["business_units"], pd.DataFrame([{"rowIndex": 4, "bu_id": "U3", "bu_name": "Empty"}])],
            ignore_index=True,
        )
        tables = dict(org_tables, business_units=units)
        result = compute_cascade(tables, ActiveFilter(FILTER_UNIT, "U3"))
        assert result.display.projects.empty
        assert result.display.tasks.empty
        assert result.highlights.unit_id == "U3"


class TestProjectBranch:
    def test_keeps_full_project_list_and_all_statuses(self, org_tables):
        result = compute_cascade(org_tables, ActiveFilter(FILTER_PROJECT, "P1"))
        assert len(result.display.projects) == 3
        assert _ids(result.display.tasks, "task_id") == ["T1", "T2"]
        assert _ids(result.display.people, "User_id") == ["A", "C"]
        assert result.highlights == HighlightMap(project_id="P1", person_id="A", unit_id="U1")
        assert result.tasks_title == "Tasks in Alpha"
        assert result.filter_description.label == "Filtering by Project: Alpha"


class TestTaskBranch:
    def test_highlights_only(self, org_tables):
        result = compute_cascade(org_tables, ActiveFilter(FILTER_TASK, "T3"))
        assert len(result.display.projects) == 3
        assert len(result.display.people) == 4
        assert _ids(result.display.tasks, "task_id") == ["T1", "T3"]
        assert result.highlights == HighlightMap(project_id="P2", task_id="T3", person_id="B", unit_id="U1")
        assert result.tasks_title == "All Open Tasks"

    def test_team_mode_reuses_personal_task_list(self, org_tables):
        result = compute_cascade(
            org_tables, ActiveFilter(FILTER_TASK, "T3"), view_mode="team", current_person_id="B"
        )
        assert result.tasks_title == "My Open Tasks"
        assert _ids(result.display.tasks, "task_id") == ["T3"]
        assert result.scope == SCOPE_FILTERED

    def test_orphan_task_has_no_unit(self, org_tables):
        tasks = org_tables["tasks"].copy()
        tasks.loc[0, "Project id"] = "P404"
        result = compute_cascade(dict(org_tables, tasks=tasks), ActiveFilter(FILTER_TASK, "T1"))
        assert result.highlights.project_id == "P404"
        assert result.highlights.unit_id is None


class TestPersonBranch:
    def test_owned_projects_and_all_assigned_tasks(self, org_tables):
        result = compute_cascade(org_tables, ActiveFilter(FILTER_PERSON, "A"))
        assert _ids(result.display.projects, "project_id") == ["P1", "P3"]
        # assigned tasks are not status-filtered in this branch
        assert _ids(result.display.tasks, "task_id") == ["T4"]
        assert len(result.display.people) == 4
        assert result.highlights == HighlightMap(person_id="A")
        assert result.tasks_title == "Tasks for Ada"


class TestFailOpen:
    @pytest.mark.parametrize("kind", [FILTER_UNIT, FILTER_PROJECT, FILTER_TASK, FILTER_PERSON])
    def test_dangling_reference_yields_founder_view(self, org_tables, kind):
        baseline = compute_cascade(org_tables, NO_FILTER)
        result = compute_cascade(
            org_tables, ActiveFilter(kind, "does-not-exist"), view_mode="team", current_person_id="A"
        )
        pd.testing.assert_frame_equal(result.display.projects, baseline.display.projects)
        pd.testing.assert_frame_equal(result.display.tasks, baseline.display.tasks)
        pd.testing.assert_frame_equal(result.display.people, baseline.display.people)
        assert result.highlights == HighlightMap()
        assert result.applied_filter == NO_FILTER
        assert result.filter_description is None

    def test_unknown_kind(self, org_tables):
        result = compute_cascade(org_tables, ActiveFilter("flywheel", "F1"))
        assert result.tasks_title == "All Open Tasks"


class TestPurity:
    def test_inputs_not_mutated_and_repeatable(self, org_tables):
        hydrated = hydrate_all(org_tables)
        snapshot = {k: v.copy() for k, v in hydrated.items()}
        first = compute_cascade(hydrated, ActiveFilter(FILTER_UNIT, "U1"))
        second = compute_cascade(hydrated, ActiveFilter(FILTER_UNIT, "U1"))
        for kind, df in snapshot.items():
            pd.testing.assert_frame_equal(hydrated[kind], df)
        pd.testing.assert_frame_equal(first.display.tasks, second.display.tasks)

    def test_numeric_ids_compare_as_strings(self, org_tables):
        projects = org_tables["projects"].copy()
        projects["business_unit_id"] = [1.0, 1.0, 2.0]
        units = pd.DataFrame({"rowIndex": [2, 3], "bu_id": ["1", "2"], "bu_name": ["One", "Two"]})
        tables = dict(org_tables, projects=projects, business_units=units)
        result = compute_cascade(tables, ActiveFilter(FILTER_UNIT, "1"))
        assert _ids(result.display.projects, "project_id") == ["P1", "P2"]


class TestTransitions:
    def test_toggle_same_unit_clears(self):
        first = select_filter(NO_FILTER, FILTER_UNIT, "X")
        assert first == ActiveFilter(FILTER_UNIT, "X")
        assert select_filter(first, FILTER_UNIT, "X") == NO_FILTER

    def test_different_unit_replaces(self):
        first = select_filter(NO_FILTER, FILTER_UNIT, "X")
        assert select_filter(first, FILTER_UNIT, "Y") == ActiveFilter(FILTER_UNIT, "Y")

    def test_numeric_unit_id_toggles(self):
        first = select_filter(NO_FILTER, FILTER_UNIT, 1.0)
        assert first == ActiveFilter(FILTER_UNIT, "1")
        assert select_filter(first, FILTER_UNIT, 1.0) == NO_FILTER
        assert select_filter(ActiveFilter(FILTER_UNIT, "1"), FILTER_UNIT, 1) == NO_FILTER

    def test_numeric_unit_pick_applies(self, org_tables):
        projects = org_tables["projects"].copy()
        projects["business_unit_id"] = [1.0, 1.0, 2.0]
        units = pd.DataFrame({"rowIndex": [2, 3], "bu_id": [1.0, 2.0], "bu_name": ["One", "Two"]})
        tables = dict(org_tables, projects=projects, business_units=units)
        result = compute_cascade(tables, select_filter(NO_FILTER, FILTER_UNIT, 1.0))
        assert result.applied_filter == ActiveFilter(FILTER_UNIT, "1")
        assert _ids(result.display.projects, "project_id") == ["P1", "P2"]

    def test_reselecting_project_keeps_it(self):
        current = ActiveFilter(FILTER_PROJECT, "P1")
        assert select_filter(current, FILTER_PROJECT, "P1") == current

    def test_other_kind_replaces_unit(self):
        current = ActiveFilter(FILTER_UNIT, "U1")
        assert select_filter(current, FILTER_PERSON, "A") == ActiveFilter(FILTER_PERSON, "A")

    def test_invalid_selection(self):
        assert select_filter(None, "flywheel", "F1") == NO_FILTER
        assert select_filter(None, FILTER_UNIT, "  ") == NO_FILTER
        assert select_filter(None, FILTER_UNIT, None) == NO_FILTER

    def test_clear(self):
        assert clear_filter() == NO_FILTER
        assert not clear_filter().is_active

    def test_navigation_resets_filter(self):
        current = ActiveFilter(FILTER_UNIT, "U1")
        assert filter_for_view(current, "home") == current
        assert filter_for_view(current, "projects") == NO_FILTER


class TestCurrentPerson:
    def test_by_email_case_insensitive(self, org_tables):
        assert find_current_person_id(org_tables[PEOPLE], " BO@example.com") == "B"

    def test_unknown_email(self, org_tables):
        assert find_current_person_id(org_tables[PEOPLE], "nobody@example.com") is None

    def test_first_person_fallback(self, org_tables):
        assert find_current_person_id(org_tables[PEOPLE], None, fallback_first=True) == "A"
        assert find_current_person_id(org_tables[PEOPLE], None) is None

    def test_empty_people(self):
        assert find_current_person_id(pd.DataFrame(), "a@example.com") is None
