"""
Tests for the table preparation used by every page.
"""

import pandas as pd

from ops_dashboard.data.hydration import hydrate_all
from ops_dashboard.data.sample_data import sample_tables
from ops_dashboard.data.schema import DASHBOARD_KINDS, PEOPLE, PROJECTS, TASKS
from ops_dashboard.ui.components.tables import display_frame
from ops_dashboard.ui.pages.home import PROJECT_COLUMNS


class TestDisplayFrame:
    def test_resolved_names_replace_ids(self):
        tables = hydrate_all(sample_tables(DASHBOARD_KINDS))
        frame = display_frame(tables[TASKS], {"title": "Task", "assignee_User_id": "Assignee"})
        assert list(frame.columns) == ["Task", "Assignee"]
        assert list(frame["Assignee"]) == ["Arun Nair", "Arun Nair", "Emily White"]

    def test_relation_columns_dropped(self):
        tables = hydrate_all(sample_tables(DASHBOARD_KINDS))
        frame = display_frame(tables[PEOPLE])
        assert "manager" not in frame.columns
        assert "manager_id_resolved" not in frame.columns
        assert list(frame["manager_id"])[:2] == ["", "Danish Hanif"]

    def test_unresolved_keeps_raw_id(self):
        tables = sample_tables(DASHBOARD_KINDS)
        tables[TASKS].loc[0, "assignee_User_id"] = "user_999"
        frame = display_frame(hydrate_all(tables)[TASKS], {"assignee_User_id": "Assignee"})
        assert frame["Assignee"].iloc[0] == "user_999"

    def test_index_preserved_for_highlighting(self):
        tables = hydrate_all(sample_tables(DASHBOARD_KINDS))
        tasks = tables[TASKS].iloc[1:]
        assert list(display_frame(tasks).index) == list(tasks.index)

    def test_field_keys_follow_sheet_column_variants(self):
        projects = pd.DataFrame({
            "rowIndex": [2],
            "project_id": ["P1"],
            "project_name": ["Relaunch"],
            "status": ["active"],
        })
        frame = display_frame(projects, PROJECT_COLUMNS)
        assert list(frame.columns) == ["Project", "Status"]
        assert frame["Project"].iloc[0] == "Relaunch"

    def test_field_keys_use_resolved_names(self):
        tables = hydrate_all(sample_tables(DASHBOARD_KINDS))
        frame = display_frame(tables[PROJECTS], PROJECT_COLUMNS)
        assert list(frame.columns)[:3] == ["Project", "Unit", "Owner"]
        assert frame["Project"].iloc[0] == "Q4 Marketing Campaign"
        assert frame["Owner"].iloc[0] == "Danish Hanif"
