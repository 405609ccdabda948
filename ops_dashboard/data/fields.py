"""
Best-effort field lookup for loosely-typed sheet records.

Sheet tabs are maintained by hand, so the same semantic field shows up as
"Project id", "project_id" or "Project_Id" depending on the dataset. Every
lookup in the engine goes through the candidate table below instead of
indexing records directly.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pandas as pd

# Bump when a candidate list changes meaning (not when one is appended to).
FIELD_CANDIDATES_VERSION = 3

FIELD_CANDIDATES: Dict[str, Tuple[str, ...]] = {
    # Projects
    "project.id": ("project_id",),
    "project.name": ("Project Name", "project_name", "name"),
    "project.unit_id": ("business_unit_id",),
    "project.owner_id": ("owner_User_id",),
    "project.status": ("Status", "status"),
    # Tasks
    "task.id": ("task_id",),
    "task.title": ("title", "task_name"),
    "task.project_id": ("Project id",),
    "task.assignee_id": ("assignee_User_id",),
    "task.reporter_id": ("reporter_User_id",),
    "task.status": ("status", "Status"),
    "task.estimate_hours": ("estimate_hours", "estimated_hours"),
    # People
    "person.id": ("User_id",),
    "person.name": ("full_name", "name"),
    "person.email": ("email",),
    "person.role": ("role_title",),
    "person.capacity": ("weekly_hours_capacity",),
    "person.manager_id": ("manager_id",),
    # Business units
    "unit.id": ("bu_id",),
    "unit.name": ("Unit_Name", "bu_name"),
    "unit.owner_id": ("owner_User_id",),
    "unit.flywheel_id": ("primary_flywheel_id",),
    # Strategy sheets
    "flywheel.id": ("flywheel_id",),
    "flywheel.name": ("flywheel_name",),
    "hub.id": ("function_id",),
    "hub.name": ("function_name",),
    "hub.owner_id": ("owner",),
    "touchpoint.id": ("touchpoint_id",),
    "touchpoint.name": ("touchpoint_name",),
    "touchpoint.unit_id": ("bu_id",),
    # Leads dashboard
    "account.id": ("account_id",),
    "account.name": ("company_name",),
    "account.executive_id": ("account_executive_fk",),
    "lead.id": ("lead_id",),
    "lead.name": ("lead_name",),
    "lead.sdr_owner_id": ("sdr_owner_fk",),
    "opportunity.id": ("opportunity_id",),
    "opportunity.name": ("opportunity_name",),
    "opportunity.account_id": ("account_fk",),
    "opportunity.lead_id": ("lead_fk",),
    "activity.id": ("activity_id",),
    "activity.lead_id": ("lead_fk",),
    "activity.logged_by_id": ("logged_by_fk",),
}


def normalize_field_name(name: Any) -> str:
    return str(name).lower().replace("_", "").replace(" ", "")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-likes and mappings are never blank scalars
        return False


def resolve(record: Mapping[str, Any], candidates: Sequence[str]) -> Optional[Any]:
    """Return the first non-blank value for ``candidates`` on ``record``.

    Exact key matches are tried for every candidate before falling back to a
    case/separator-insensitive match. ``None`` means the field is not present
    in this dataset variant (or is blank), which callers treat as a normal
    outcome.
    """
    try:
        keys = list(record.keys())
    except AttributeError:
        return None

    for candidate in candidates:
        if candidate in keys:
            value = record[candidate]
            if not is_blank(value):
                return value

    normalized_keys: Dict[str, list] = {}
    for key in keys:
        normalized_keys.setdefault(normalize_field_name(key), []).append(key)
    for candidate in candidates:
        for key in normalized_keys.get(normalize_field_name(candidate), []):
            value = record[key]
            if not is_blank(value):
                return value
    return None


def resolve_field(record: Mapping[str, Any], field: str) -> Optional[Any]:
    return resolve(record, FIELD_CANDIDATES.get(field, ()))


def resolve_column(columns: Iterable[Any], candidates: Sequence[str]) -> Optional[str]:
    """Column-level counterpart of :func:`resolve` used for vectorised work."""
    columns = [str(c) for c in columns]
    for candidate in candidates:
        if candidate in columns:
            return candidate
    by_normalized = {}
    for col in columns:
        by_normalized.setdefault(normalize_field_name(col), col)
    for candidate in candidates:
        match = by_normalized.get(normalize_field_name(candidate))
        if match is not None:
            return match
    return None


def field_column(df: pd.DataFrame, field: str) -> Optional[str]:
    return resolve_column(df.columns, FIELD_CANDIDATES.get(field, ()))


def as_id(value: Any) -> str:
    """Coerce an id cell to its comparable string form.

    Sheets hand back ids as text or numbers, and pandas widens integer
    columns with gaps to float, so ``1.0`` must compare equal to ``"1"``.
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def id_series(df: pd.DataFrame, field: str) -> pd.Series:
    """String ids for ``field`` on every row; blank when the column is missing."""
    col = field_column(df, field)
    if col is None:
        return pd.Series("", index=df.index, dtype=object)
    return df[col].map(as_id).astype(object)


def text_series(df: pd.DataFrame, field: str) -> pd.Series:
    col = field_column(df, field)
    if col is None:
        return pd.Series("", index=df.index, dtype=object)
    return df[col].map(lambda v: "" if is_blank(v) else str(v).strip()).astype(object)


def to_number(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").fillna(0.0).astype(float)


def number_series(df: pd.DataFrame, field: str) -> pd.Series:
    col = field_column(df, field)
    if col is None:
        return pd.Series(0.0, index=df.index, dtype=float)
    return to_number(df[col])
