"""
Relational hydration: resolve id references between sheet tables into
display values, and attach read-only pointers for the few relations the UI
walks directly (a person's manager, a unit's lead).
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from ops_dashboard.data.fields import (
    as_id,
    field_column,
    is_blank,
    resolve_field,
)
from ops_dashboard.data.schema import ENTITIES, HydrationMapping, LEADS, OPPORTUNITIES, mappings_for

logger = logging.getLogger(__name__)

RESOLVED_SUFFIX = "_resolved"
_LETTERS = re.compile(r"[A-Za-z]")
_NON_DIGITS = re.compile(r"\D")

# normalized id -> (display name, read-only record)
LookupIndex = Dict[str, Tuple[Optional[str], Mapping[str, Any]]]


def normalize_id(value: Any) -> str:
    """Lookup key for an id: text ids as-is, numeric ids by value ("001" == "1")."""
    text = as_id(value)
    if not text or _LETTERS.search(text):
        return text
    digits = _NON_DIGITS.sub("", text)
    return str(int(digits)) if digits else text


def _build_index(target: Optional[pd.DataFrame], target_kind: str) -> LookupIndex:
    index: LookupIndex = {}
    if target is None or target.empty:
        return index
    entity = ENTITIES[target_kind]
    for record in target.to_dict("records"):
        key = normalize_id(resolve_field(record, entity.id_field))
        if not key:
            continue
        # later rows overwrite earlier ones for duplicated ids
        name = resolve_field(record, entity.name_field)
        display = None if is_blank(name) else str(name)
        index[key] = (display, MappingProxyType(record))
    return index


def _resolve_reference(value: Any, index: LookupIndex) -> Tuple[Optional[str], Optional[Mapping[str, Any]]]:
    text = as_id(value)
    if not text:
        return None, None
    ids = [part.strip() for part in text.split(",") if part.strip()]
    names: List[str] = []
    for ref in ids:
        hit = index.get(normalize_id(ref))
        if hit is not None and hit[0]:
            names.append(hit[0])
    if not names:
        return None, None
    relation = None
    if len(ids) == 1:
        relation = index[normalize_id(ids[0])][1]
    return ", ".join(names), relation


def _apply_mapping(
    hydrated: pd.DataFrame,
    mapping: HydrationMapping,
    all_tables: Mapping[str, pd.DataFrame],
) -> None:
    source_col = field_column(hydrated, mapping.field)
    if source_col is None:
        return
    index = _build_index(all_tables.get(mapping.target), mapping.target)

    resolved: List[Optional[str]] = []
    relations: List[Optional[Mapping[str, Any]]] = []
    for row_pos, value in enumerate(hydrated[source_col].tolist()):
        try:
            name, relation = _resolve_reference(value, index)
        except (TypeError, ValueError, KeyError) as exc:
            logger.debug(
                "Skipping %s.%s at position %s: %s", mapping.source, source_col, row_pos, exc
            )
            name, relation = None, None
        resolved.append(name)
        relations.append(relation)

    hydrated[f"{source_col}{RESOLVED_SUFFIX}"] = pd.Series(resolved, index=hydrated.index, dtype=object)
    if mapping.relation:
        hydrated[mapping.relation] = pd.Series(relations, index=hydrated.index, dtype=object)


def hydrate(
    table: pd.DataFrame,
    kind: str,
    all_tables: Mapping[str, pd.DataFrame],
) -> pd.DataFrame:
    """
    Return a copy of ``table`` with ``<field>_resolved`` columns for every
    reference field of ``kind`` and relation columns where configured.

    Unresolved references stay null so the UI can fall back to the raw id.
    Row order and index are preserved.
    """
    mappings = mappings_for(kind)
    if table is None:
        return pd.DataFrame()
    hydrated = table.copy()
    if hydrated.empty or not mappings:
        return hydrated
    for mapping in mappings:
        _apply_mapping(hydrated, mapping, all_tables)
    return hydrated


def hydrate_all(tables: Mapping[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
    """Hydrate every table against the raw set, so relations never chain."""
    hydrated = {kind: hydrate(df, kind, tables) for kind, df in tables.items()}
    if OPPORTUNITIES in hydrated and LEADS in hydrated:
        hydrated[OPPORTUNITIES] = enrich_opportunities(hydrated[OPPORTUNITIES], hydrated[LEADS])
    return hydrated


def enrich_opportunities(opportunities: pd.DataFrame, leads: pd.DataFrame) -> pd.DataFrame:
    """Copy the SDR owner (and its resolved name) from each opportunity's lead."""
    enriched = opportunities.copy()
    if enriched.empty or leads.empty:
        return enriched
    lead_col = field_column(enriched, "opportunity.lead_id")
    sdr_col = field_column(leads, "lead.sdr_owner_id")
    if lead_col is None or sdr_col is None:
        return enriched

    by_lead: Dict[str, Mapping[str, Any]] = {}
    for record in leads.to_dict("records"):
        key = as_id(resolve_field(record, "lead.id"))
        if key and key not in by_lead:
            by_lead[key] = record

    sdr_ids: List[Any] = []
    sdr_names: List[Any] = []
    existing_ids = enriched[sdr_col] if sdr_col in enriched.columns else None
    existing_names = (
        enriched[f"{sdr_col}{RESOLVED_SUFFIX}"]
        if f"{sdr_col}{RESOLVED_SUFFIX}" in enriched.columns
        else None
    )
    for pos, lead_id in enumerate(enriched[lead_col].tolist()):
        lead = by_lead.get(as_id(lead_id))
        if lead is not None:
            sdr_ids.append(lead.get(sdr_col))
            sdr_names.append(lead.get(f"{sdr_col}{RESOLVED_SUFFIX}"))
        else:
            sdr_ids.append(existing_ids.iloc[pos] if existing_ids is not None else None)
            sdr_names.append(existing_names.iloc[pos] if existing_names is not None else None)
    enriched[sdr_col] = pd.Series(sdr_ids, index=enriched.index, dtype=object)
    enriched[f"{sdr_col}{RESOLVED_SUFFIX}"] = pd.Series(sdr_names, index=enriched.index, dtype=object)
    return enriched


def display_value(record: Mapping[str, Any], column: str) -> str:
    """Resolved name for ``column`` when available, else the raw id."""
    resolved = record.get(f"{column}{RESOLVED_SUFFIX}")
    if not is_blank(resolved):
        return str(resolved)
    raw = record.get(column)
    return "" if is_blank(raw) else as_id(raw)
