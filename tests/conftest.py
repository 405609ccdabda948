"""
Test configuration: puts the repo root on sys.path and provides small
in-memory tables shaped like the production sheets.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Add repo root to sys.path so tests can import ops_dashboard.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ops_dashboard.data.schema import BUSINESS_UNITS, FLYWHEELS, PEOPLE, PROJECTS, TASKS  # noqa: E402


def _frame(rows):
    df = pd.DataFrame(rows)
    df.insert(0, "rowIndex", range(2, len(df) + 2))
    return df


@pytest.fixture
def scenario_tables():
    """One unit, one project, one task, one person."""
    return {
        PROJECTS: _frame([
            {"project_id": "P1", "Project Name": "Launch", "business_unit_id": "U1",
             "owner_User_id": "X1", "Status": "Active"},
        ]),
        TASKS: _frame([
            {"task_id": "T1", "title": "Draft plan", "Project id": "P1",
             "assignee_User_id": "X1", "status": "To Do", "estimate_hours": 8},
        ]),
        PEOPLE: _frame([
            {"User_id": "X1", "full_name": "Xavier One", "email": "x1@example.com",
             "role_title": "Lead", "manager_id": None, "weekly_hours_capacity": 40},
        ]),
        BUSINESS_UNITS: _frame([
            {"bu_id": "U1", "bu_name": "Unit One", "owner_User_id": "X1", "primary_flywheel_id": None},
        ]),
    }


@pytest.fixture
def org_tables():
    """Two units, three projects, four tasks, four people."""
    return {
        PROJECTS: _frame([
            {"project_id": "P1", "Project Name": "Alpha", "business_unit_id": "U1",
             "owner_User_id": "A", "Status": "in_progress"},
            {"project_id": "P2", "Project Name": "Beta", "business_unit_id": "U1",
             "owner_User_id": "B", "Status": "At Risk"},
            {"project_id": "P3", "Project Name": "Gamma", "business_unit_id": "U2",
             "owner_User_id": "A", "Status": "at risk"},
        ]),
        TASKS: _frame([
            {"task_id": "T1", "title": "Spec", "Project id": "P1",
             "assignee_User_id": "C", "status": "in_progress", "estimate_hours": 10},
            {"task_id": "T2", "title": "Build", "Project id": "P1",
             "assignee_User_id": "C", "status": "Done", "estimate_hours": 30},
            {"task_id": "T3", "title": "Review", "Project id": "P2",
             "assignee_User_id": "B", "status": "to_do", "estimate_hours": 4},
            {"task_id": "T4", "title": "Ship", "Project id": "P3",
             "assignee_User_id": "A", "status": "Completed", "estimate_hours": 6},
        ]),
        PEOPLE: _frame([
            {"User_id": "A", "full_name": "Ada", "email": "ada@example.com", "role_title": "Founder",
             "manager_id": None, "weekly_hours_capacity": 50},
            {"User_id": "B", "full_name": "Bo", "email": "bo@example.com", "role_title": "PM",
             "manager_id": "A", "weekly_hours_capacity": 40},
            {"User_id": "C", "full_name": "Cy", "email": "cy@example.com", "role_title": "Engineer",
             "manager_id": "B", "weekly_hours_capacity": 0},
            {"User_id": "D", "full_name": "Di", "email": "di@example.com", "role_title": "Designer",
             "manager_id": "A", "weekly_hours_capacity": "n/a"},
        ]),
        BUSINESS_UNITS: _frame([
            {"bu_id": "U1", "bu_name": "Core", "owner_User_id": "A", "primary_flywheel_id": "F1"},
            {"bu_id": "U2", "bu_name": "Labs", "owner_User_id": "B", "primary_flywheel_id": None},
        ]),
        FLYWHEELS: _frame([
            {"flywheel_id": "F1", "flywheel_name": "Growth Loop"},
        ]),
    }
