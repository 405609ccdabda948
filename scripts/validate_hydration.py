"""Quick validation script for hydration and cascade outputs.

Run with `python scripts/validate_hydration.py` to check that the built-in
sample data hydrates, cascades and aggregates the way the dashboard expects.
"""

from __future__ import annotations

from ops_dashboard.data.cascade import ActiveFilter, compute_cascade
from ops_dashboard.data.hydration import hydrate_all
from ops_dashboard.data.metrics import compute_metrics
from ops_dashboard.data.sample_data import sample_tables
from ops_dashboard.data.schema import DASHBOARD_KINDS, HUBS, PEOPLE, PROJECTS, TASKS, TOUCHPOINTS


def main() -> None:
    tables = hydrate_all(sample_tables(DASHBOARD_KINDS + [HUBS, TOUCHPOINTS]))

    required_cols = {
        PROJECTS: ["owner_User_id_resolved", "business_unit_id_resolved"],
        TASKS: ["Project id_resolved", "assignee_User_id_resolved"],
        PEOPLE: ["manager_id_resolved", "manager"],
    }
    missing = [
        f"{kind}.{col}"
        for kind, cols in required_cols.items()
        for col in cols
        if col not in tables[kind].columns
    ]
    if missing:
        raise SystemExit(f"Missing hydrated columns: {missing}")

    assert tables[TASKS]["assignee_User_id_resolved"].iloc[0] == "Arun Nair", "Task assignee should resolve"
    assert tables[PEOPLE]["manager"].iloc[0] is None, "Founder has no manager relation"

    result = compute_cascade(tables, ActiveFilter("unit", "bu_02"))
    assert result.highlights.unit_id == "bu_02", "Unit filter should highlight the unit"
    assert list(result.display.projects["project_id"]) == ["proj_003"], "Unit filter should narrow projects"

    metrics = compute_metrics(tables, result)
    print("Hydration validation passed.", dict((k, v) for _, k, v in metrics.cards()))


if __name__ == "__main__":
    main()
