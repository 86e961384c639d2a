from __future__ import annotations
from typing import Final, Dict

INDEX_NAME: Final[str] = "t_start"
DEFAULT_TZ: Final[str] = "America/Los_Angeles"

WEEKDAY: Final[str] = "weekday"
WEEKEND: Final[str] = "weekend"
DAY_TYPES: Final[tuple[str, str]] = (WEEKDAY, WEEKEND)
WEEKEND_DAYS: Final[frozenset[int]] = frozenset({5, 6})  # Mon=0..Sun=6

# Alignment keys, local calendar fields, seconds dropped
EXACT_KEY_FORMAT: Final[str] = "%Y-%m-%dT%H:%M"
PATTERN_TIME_FORMAT: Final[str] = "%H:%M"

# PG&E interval usage export
CSV_COLUMNS: Final[list[str]] = [
    "TYPE",
    "DATE",
    "START TIME",
    "END TIME",
    "USAGE (kWh)",
    "COST",
    "NOTES",
]
CSV_RENAME: Final[Dict[str, str]] = {
    "TYPE": "type",
    "DATE": "date",
    "START TIME": "start_time",
    "END TIME": "end_time",
    "USAGE (kWh)": "usage_kwh",
    "COST": "cost",
    "NOTES": "notes",
}
COMMON_TIMESTAMP_NAMES: Final[tuple[str, ...]] = (
    "timestamp",
    "t_start",
    "datetime",
    "time",
    "ts",
)
USAGE_KEYS: Final[tuple[str, ...]] = ("usage_kwh", "usage", "kwh", "value")

SAVINGS_COLS: Final[list[str]] = [
    "usage_kwh",
    "tou_rate",
    "dynamic_rate",
    "subscription_quantity",
    "tou_cost",
    "dynamic_cost",
    "savings",
    "cumulative_savings",
    "match_type",
]
