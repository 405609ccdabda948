"""
Application-wide configuration constants and helper utilities.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ViewConfig:
    key: str
    label: str


# Ordered top-level views; the first one is the default and the only one
# where the cascading filter applies.
VIEWS: List[ViewConfig] = [
    ViewConfig("home", "Home"),
    ViewConfig("projects", "Projects"),
    ViewConfig("tasks", "Tasks"),
    ViewConfig("people", "People"),
]

DEFAULT_VIEW_MODE = "founder"
DEFAULT_CARD_ORDER: List[str] = ["tasks", "risk", "active", "utilization"]
DEFAULT_CAPACITY_HOURS = 40

# Sheet payloads are cached for this long before a silent refetch.
CACHE_TTL_SECONDS = 600
FETCH_TIMEOUT_SECONDS = 60
FETCH_MAX_WORKERS = 5

PREFERENCES_PATH_DEFAULT = "~/.ops_dashboard/preferences.json"
