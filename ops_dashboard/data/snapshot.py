"""
Refresh orchestration: load -> hydrate, keeping the last good snapshot when a
refresh fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import pandas as pd

from ops_dashboard.config import CACHE_TTL_SECONDS
from ops_dashboard.data.hydration import hydrate_all
from ops_dashboard.data.loader import LoadResult, load_tables

logger = logging.getLogger(__name__)

Loader = Callable[[], LoadResult]


@dataclass(frozen=True)
class Snapshot:
    tables: Dict[str, pd.DataFrame]
    source: str
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def table(self, kind: str) -> pd.DataFrame:
        df = self.tables.get(kind)
        return df if df is not None else pd.DataFrame()


@dataclass(frozen=True)
class RefreshOutcome:
    snapshot: Optional[Snapshot]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_snapshot(result: LoadResult) -> Snapshot:
    return Snapshot(tables=hydrate_all(result.tables), source=result.source)


def refresh_snapshot(previous: Optional[Snapshot], load: Loader = load_tables) -> RefreshOutcome:
    """Load and hydrate a fresh snapshot; on any failure hand back ``previous`` with the error."""
    try:
        result = load()
        snapshot = build_snapshot(result)
    except Exception as exc:  # refresh failures must never blank the dashboard
        logger.error("Data refresh failed: %s", exc)
        return RefreshOutcome(snapshot=previous, error=str(exc) or type(exc).__name__)
    logger.info(
        "Loaded %s snapshot: %s",
        snapshot.source,
        ", ".join(f"{kind}={len(df)}" for kind, df in snapshot.tables.items()),
    )
    return RefreshOutcome(snapshot=snapshot)


def refresh_due(
    snapshot: Optional[Snapshot],
    last_attempt: Optional[datetime],
    now: Optional[datetime] = None,
    ttl_seconds: float = CACHE_TTL_SECONDS,
) -> bool:
    """Whether an automatic refresh should run now.

    Both the snapshot age and the last attempt count, so a failing source is
    retried once per TTL rather than on every rerun.
    """
    now = now or datetime.now(timezone.utc)
    if last_attempt is not None and (now - last_attempt).total_seconds() < ttl_seconds:
        return False
    if snapshot is None:
        return True
    return (now - snapshot.loaded_at).total_seconds() >= ttl_seconds
