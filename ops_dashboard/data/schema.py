"""
Entity registry: which sheet tab holds each entity kind, how its records are
identified and named, and which of its fields reference other kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

# Entity kinds
PROJECTS = "projects"
TASKS = "tasks"
PEOPLE = "people"
BUSINESS_UNITS = "business_units"
FLYWHEELS = "flywheels"
HUBS = "hubs"
TOUCHPOINTS = "touchpoints"
ACCOUNTS = "accounts"
LEADS = "leads"
OPPORTUNITIES = "opportunities"
LEAD_ACTIVITIES = "lead_activities"

EXECUTION = "execution"
STRATEGY = "strategy"


@dataclass(frozen=True)
class EntitySpec:
    kind: str
    id_field: str
    name_field: str
    spreadsheet: Optional[str] = None
    sheet_name: Optional[str] = None


@dataclass(frozen=True)
class HydrationMapping:
    source: str
    field: str
    target: str
    relation: Optional[str] = None


ENTITIES: Dict[str, EntitySpec] = {
    PROJECTS: EntitySpec(PROJECTS, "project.id", "project.name", EXECUTION, "PROJECTS"),
    TASKS: EntitySpec(TASKS, "task.id", "task.title", EXECUTION, "TASKS"),
    PEOPLE: EntitySpec(PEOPLE, "person.id", "person.name", EXECUTION, "PEOPLE & CAPACITY"),
    HUBS: EntitySpec(HUBS, "hub.id", "hub.name", EXECUTION, "Hub"),
    BUSINESS_UNITS: EntitySpec(BUSINESS_UNITS, "unit.id", "unit.name", STRATEGY, "BUSINESS UNITS"),
    FLYWHEELS: EntitySpec(FLYWHEELS, "flywheel.id", "flywheel.name", STRATEGY, "FLYWHEEL"),
    TOUCHPOINTS: EntitySpec(TOUCHPOINTS, "touchpoint.id", "touchpoint.name", STRATEGY, "TOUCHPOINTS"),
    # Leads dashboard tabs are not part of the shipped workbooks; the engine
    # still hydrates them when a caller supplies the tables.
    ACCOUNTS: EntitySpec(ACCOUNTS, "account.id", "account.name"),
    LEADS: EntitySpec(LEADS, "lead.id", "lead.name"),
    OPPORTUNITIES: EntitySpec(OPPORTUNITIES, "opportunity.id", "opportunity.name"),
    LEAD_ACTIVITIES: EntitySpec(LEAD_ACTIVITIES, "activity.id", "activity.id"),
}

HYDRATION_MAP: List[HydrationMapping] = [
    HydrationMapping(PROJECTS, "project.owner_id", PEOPLE),
    HydrationMapping(PROJECTS, "project.unit_id", BUSINESS_UNITS),
    HydrationMapping(TASKS, "task.project_id", PROJECTS),
    HydrationMapping(TASKS, "task.assignee_id", PEOPLE),
    HydrationMapping(TASKS, "task.reporter_id", PEOPLE),
    HydrationMapping(PEOPLE, "person.manager_id", PEOPLE, relation="manager"),
    HydrationMapping(BUSINESS_UNITS, "unit.owner_id", PEOPLE, relation="lead"),
    HydrationMapping(BUSINESS_UNITS, "unit.flywheel_id", FLYWHEELS),
    HydrationMapping(TOUCHPOINTS, "touchpoint.unit_id", BUSINESS_UNITS),
    HydrationMapping(HUBS, "hub.owner_id", PEOPLE),
    HydrationMapping(ACCOUNTS, "account.executive_id", PEOPLE),
    HydrationMapping(LEADS, "lead.sdr_owner_id", PEOPLE),
    HydrationMapping(OPPORTUNITIES, "opportunity.account_id", ACCOUNTS),
    HydrationMapping(OPPORTUNITIES, "opportunity.lead_id", LEADS),
    HydrationMapping(LEAD_ACTIVITIES, "activity.lead_id", LEADS),
    HydrationMapping(LEAD_ACTIVITIES, "activity.logged_by_id", PEOPLE),
]

# Tables fetched on every dashboard refresh.
DASHBOARD_KINDS: List[str] = [PROJECTS, TASKS, PEOPLE, BUSINESS_UNITS, FLYWHEELS]


def mappings_for(kind: str) -> List[HydrationMapping]:
    return [m for m in HYDRATION_MAP if m.source == kind]
