"""
Preferences persisted between sessions: the home view mode and the KPI card
order. Anything missing or unreadable falls back to the defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from ops_dashboard.config import DEFAULT_CARD_ORDER, DEFAULT_VIEW_MODE, PREFERENCES_PATH_DEFAULT

logger = logging.getLogger(__name__)

VALID_VIEW_MODES = ("founder", "team")


@dataclass
class Preferences:
    view_mode: str = DEFAULT_VIEW_MODE
    card_order: List[str] = field(default_factory=lambda: list(DEFAULT_CARD_ORDER))


def resolve_view_mode(raw: Any) -> str:
    return raw if raw in VALID_VIEW_MODES else DEFAULT_VIEW_MODE


def resolve_card_order(raw: Any) -> List[str]:
    """Accept ``raw`` only when it is a permutation of the default card keys."""
    if not isinstance(raw, list):
        return list(DEFAULT_CARD_ORDER)
    if len(raw) != len(DEFAULT_CARD_ORDER) or set(raw) != set(DEFAULT_CARD_ORDER):
        return list(DEFAULT_CARD_ORDER)
    return [str(k) for k in raw]


def preferences_path(path: Optional[str] = None) -> Path:
    raw = path or os.getenv("OPS_DASHBOARD_PREFS") or PREFERENCES_PATH_DEFAULT
    return Path(raw).expanduser()


def load_preferences(path: Optional[str] = None) -> Preferences:
    target = preferences_path(path)
    if not target.exists():
        return Preferences()
    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable preferences at %s: %s", target, exc)
        return Preferences()
    if not isinstance(data, dict):
        return Preferences()
    return Preferences(
        view_mode=resolve_view_mode(data.get("view_mode")),
        card_order=resolve_card_order(data.get("card_order")),
    )


def save_preferences(prefs: Preferences, path: Optional[str] = None) -> bool:
    target = preferences_path(path)
    payload = {
        "view_mode": resolve_view_mode(prefs.view_mode),
        "card_order": resolve_card_order(prefs.card_order),
    }
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
    except OSError as exc:
        logger.warning("Could not save preferences to %s: %s", target, exc)
        return False
    return True
