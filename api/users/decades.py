"""
Fixed decade categories and their counter columns.

Label `1980s` is stored in column `d1980`.
"""

from __future__ import annotations

DECADES: tuple[str, ...] = (
    "1950s",
    "1960s",
    "1970s",
    "1980s",
    "1990s",
    "2000s",
    "2010s",
    "2020s",
)

DECADE_COLUMNS: dict[str, str] = {decade: f"d{decade[:-1]}" for decade in DECADES}


def column_for(decade: str | None) -> str | None:
    """
    Return the counter column for `decade`, or None when it is not a known label.
    """
    if decade is None:
        return None
    return DECADE_COLUMNS.get(decade)
