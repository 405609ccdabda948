"""
Utility helpers for formatting numbers, hours and percentages.
"""

from __future__ import annotations

from typing import Optional


def format_number(value: Optional[float], decimals: int = 0) -> str:
    if value is None:
        return "–"
    try:
        return f"{value:,.{decimals}f}"
    except (TypeError, ValueError):
        return "–"


def format_hours(value: Optional[float]) -> str:
    text = format_number(value, decimals=0)
    return text if text == "–" else f"{text}h"


def format_percent(value: Optional[float], decimals: int = 0) -> str:
    if value is None:
        return "–"
    try:
        return f"{value:.{decimals}f}%"
    except (TypeError, ValueError):
        return "–"
