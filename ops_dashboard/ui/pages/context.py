from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import pandas as pd

from ops_dashboard.data.cascade import ActiveFilter
from ops_dashboard.data.preferences import Preferences
from ops_dashboard.data.snapshot import Snapshot


@dataclass
class PageContext:
    snapshot: Snapshot
    preferences: Preferences
    active_filter: ActiveFilter
    current_person_id: Optional[str]

    @property
    def tables(self) -> Dict[str, pd.DataFrame]:
        return self.snapshot.tables
