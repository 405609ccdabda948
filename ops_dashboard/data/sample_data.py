"""
Built-in dataset shown when no spreadsheet is configured, so the dashboard is
explorable before Google credentials are set up.
"""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from ops_dashboard.data.schema import (
    BUSINESS_UNITS,
    FLYWHEELS,
    HUBS,
    PEOPLE,
    PROJECTS,
    TASKS,
    TOUCHPOINTS,
)

_PEOPLE = [
    {"User_id": "user_001", "full_name": "Danish Hanif", "email": "danish@example.com", "role_title": "Founder",
     "manager_id": "", "weekly_hours_capacity": 50, "hub_id": "hub_02"},
    {"User_id": "user_002", "full_name": "Jane Smith", "email": "jane@example.com", "role_title": "Project Manager",
     "manager_id": "user_001", "weekly_hours_capacity": 40, "hub_id": "hub_01"},
    {"User_id": "user_003", "full_name": "Arun Nair", "email": "arun@example.com", "role_title": "Lead Developer",
     "manager_id": "user_002", "weekly_hours_capacity": 40, "hub_id": "hub_01"},
    {"User_id": "user_004", "full_name": "Emily White", "email": "emily@example.com", "role_title": "SDR",
     "manager_id": "user_001", "weekly_hours_capacity": 40, "hub_id": "hub_02"},
]

_BUSINESS_UNITS = [
    {"bu_id": "bu_01", "bu_name": "Nexus AI", "bu_type": "SaaS", "owner_User_id": "user_001",
     "primary_flywheel_id": "fw_01", "health_status": "Healthy", "status": "Active"},
    {"bu_id": "bu_02", "bu_name": "Product Lab", "bu_type": "E-commerce", "owner_User_id": "user_001",
     "primary_flywheel_id": "fw_02", "health_status": "At Risk", "status": "Active"},
]

_PROJECTS = [
    {"project_id": "proj_001", "Project Name": "Q4 Marketing Campaign", "business_unit_id": "bu_01",
     "owner_User_id": "user_001", "priority": "High", "Status": "planning", "target_end_date": "2024-12-31"},
    {"project_id": "proj_002", "Project Name": "New Feature Rollout: AI Insights", "business_unit_id": "bu_01",
     "owner_User_id": "user_002", "priority": "High", "Status": "in_progress", "target_end_date": "2024-10-31"},
    {"project_id": "proj_003", "Project Name": "Website Redesign", "business_unit_id": "bu_02",
     "owner_User_id": "user_001", "priority": "Medium", "Status": "at risk", "target_end_date": "2024-11-15"},
]

_TASKS = [
    {"task_id": "task_001", "title": "Design new landing page", "Project id": "proj_003",
     "assignee_User_id": "user_003", "reporter_User_id": "user_002", "status": "in_progress",
     "priority": "High", "estimate_hours": 16, "logged_hours": 4, "due_date": "2024-09-30"},
    {"task_id": "task_002", "title": "Develop AI Insights API", "Project id": "proj_002",
     "assignee_User_id": "user_003", "reporter_User_id": "user_002", "status": "done",
     "priority": "High", "estimate_hours": 40, "logged_hours": 45, "due_date": "2024-09-20"},
    {"task_id": "task_003", "title": "Plan social media posts", "Project id": "proj_001",
     "assignee_User_id": "user_004", "reporter_User_id": "user_002", "status": "to_do",
     "priority": "Medium", "estimate_hours": 8, "logged_hours": 0, "due_date": "2024-10-10"},
]

_FLYWHEELS = [
    {"flywheel_id": "fw_01", "flywheel_name": "B2B SaaS Flywheel"},
    {"flywheel_id": "fw_02", "flywheel_name": "D2C Product Flywheel"},
]

_HUBS = [
    {"function_id": "hub_01", "function_name": "Engineering", "owner": "user_002"},
    {"function_id": "hub_02", "function_name": "Marketing", "owner": "user_001"},
]

_TOUCHPOINTS = [
    {"touchpoint_id": "tp_01", "touchpoint_name": "Website Landing Page", "status": "Live", "bu_id": "bu_01"},
    {"touchpoint_id": "tp_02", "touchpoint_name": "Q4 Ad Campaign", "status": "Planning", "bu_id": "bu_01"},
]

_SAMPLES: Dict[str, List[dict]] = {
    PEOPLE: _PEOPLE,
    BUSINESS_UNITS: _BUSINESS_UNITS,
    PROJECTS: _PROJECTS,
    TASKS: _TASKS,
    FLYWHEELS: _FLYWHEELS,
    HUBS: _HUBS,
    TOUCHPOINTS: _TOUCHPOINTS,
}


def sample_table(kind: str) -> pd.DataFrame:
    """Fresh frame for ``kind`` with sheet-style row numbers (header is row 1)."""
    rows = [dict(r) for r in _SAMPLES.get(kind, [])]
    df = pd.DataFrame(rows)
    df.insert(0, "rowIndex", range(2, len(df) + 2))
    return df


def sample_tables(kinds: List[str]) -> Dict[str, pd.DataFrame]:
    return {kind: sample_table(kind) for kind in kinds}
