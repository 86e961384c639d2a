"""Subscription baseline construction and lookup.

- averages per (hour, day_type); absent groups are not zero-filled
- weekday/weekend fallback is reported as FallbackUsed
- empty history disables the baseline (every lookup is 0)
"""

import math

import pandas as pd
import pytest

from flexsavings import baseline
from flexsavings.exceptions import ValidationError
from flexsavings.types import FallbackUsed, Found, Missing, UsageRecord


def usage(ts, kwh):
    return UsageRecord(pd.Timestamp(ts), kwh)


def test_weekday_average_at_hour():
    """Two weekday records at 14:00 (3 and 5 kWh) average to 4."""
    table = baseline.build_subscription_table(
        [usage("2023-07-17T14:00", 3.0), usage("2023-07-18T14:00", 5.0)]
    )
    assert baseline.get_subscription_quantity("2024-07-17T14:00", table) == 4.0
    assert baseline.lookup("2024-07-17T14:30", table) == Found(4.0, "weekday")


def test_groups_absent_not_zero_filled():
    table = baseline.build_subscription_table(
        [usage("2023-07-17T14:00", 3.0)]
    )
    assert len(table) == 1
    assert (14, "weekday") in table
    assert (14, "weekend") not in table


def test_full_week_history(history_week):
    table = baseline.build_subscription_table(history_week)
    assert len(table) == 48
    assert baseline.get_subscription_quantity("2024-07-15T08:00", table) == 1.0
    assert baseline.get_subscription_quantity("2024-07-20T08:00", table) == 2.0


def test_fallback_to_other_day_type():
    """Only a weekend entry at 09:00: a weekday lookup borrows it."""
    table = baseline.build_subscription_table([usage("2023-07-22T09:00", 0.8)])
    out = baseline.lookup("2024-07-15T09:00", table)
    assert isinstance(out, FallbackUsed)
    assert out.value == 0.8
    assert out.original_day_type == "weekday"
    assert out.used_day_type == "weekend"


def test_day_types_recorded_in_first_seen_order():
    """Day types per hour keep first-seen order, which fixes the fallback choice."""
    table = baseline.build_subscription_table(
        [
            usage("2023-07-22T09:00", 0.8),  # Saturday
            usage("2023-07-23T10:00", 1.0),  # Sunday
            usage("2023-07-17T10:00", 3.0),  # Monday
        ]
    )
    assert table.day_types_for(10) == ["weekend", "weekday"]
    assert baseline.get_subscription_quantity("2024-07-16T10:00", table) == 3.0


def test_missing_hour_returns_zero():
    table = baseline.build_subscription_table([usage("2023-07-22T09:00", 0.8)])
    out = baseline.lookup("2024-07-15T03:00", table)
    assert isinstance(out, Missing)
    assert out.value == 0.0


def test_empty_history_disables_baseline():
    table = baseline.build_subscription_table([])
    assert table.is_empty()
    for h in (0, 9, 17, 23):
        assert baseline.get_subscription_quantity(f"2024-07-15T{h:02d}:00", table) == 0


def test_history_rejects_nan():
    with pytest.raises(ValidationError):
        baseline.build_subscription_table([usage("2023-07-17T14:00", float("nan"))])


def test_table_is_read_only(history_week):
    table = baseline.build_subscription_table(history_week)
    with pytest.raises(TypeError):
        table.averages[(0, "weekday")] = 99.0  # type: ignore[index]


def test_profile_frame_shape():
    table = baseline.build_subscription_table(
        [usage("2023-07-17T14:00", 3.0), usage("2023-07-22T09:00", 0.8)]
    )
    prof = baseline.profile_frame(table)
    assert list(prof.columns) == ["hour", "weekday", "weekend"]
    assert len(prof) == 24
    assert prof.loc[14, "weekday"] == 3.0
    assert prof.loc[9, "weekend"] == 0.8
    assert math.isnan(prof.loc[0, "weekday"])


def test_tz_aware_history_grouped_by_local_hour():
    """Midnight UTC on Tue Jul 18 is 17:00 Monday in Pacific time."""
    rec = UsageRecord(pd.Timestamp("2023-07-18T00:00:00Z"), 2.0)
    table = baseline.build_subscription_table([rec])
    assert table.get(17, "weekday") == 2.0


def test_nan_history_propagates_when_validation_disabled():
    table = baseline.build_subscription_table(
        [usage("2023-07-17T14:00", 3.0), usage("2023-07-18T14:00", float("nan"))],
        validate_inputs=False,
    )
    assert math.isnan(table.get(14, "weekday"))  # type: ignore[arg-type]


def test_table_hashable(history_week):
    a = baseline.build_subscription_table(history_week)
    b = baseline.build_subscription_table(history_week)
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
