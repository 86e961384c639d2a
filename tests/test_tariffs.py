"""TOU rate resolution against the fixed EV2A schedule.

- season and period boundaries
- every resolved rate is one of the six table constants
- vectorised tou_rates agrees with scalar tou_rate
"""

import pandas as pd
import pytest

from flexsavings import tariffs
from flexsavings.exceptions import ScheduleError

TABLE = {
    0.62277,
    0.51228,
    0.31026,
    0.49566,
    0.47896,
    0.31027,
}


@pytest.mark.parametrize(
    "ts, expected",
    [
        ("2024-05-31T23:00", "winter"),
        ("2024-06-01T00:00", "summer"),
        ("2024-09-30T23:00", "summer"),
        ("2024-10-01T00:00", "winter"),
        ("2024-01-15T12:00", "winter"),
    ],
)
def test_season_boundaries(ts, expected):
    assert tariffs.season(ts) == expected


@pytest.mark.parametrize(
    "hour, expected",
    [
        (0, "off_peak"),
        (14, "off_peak"),
        (15, "partial_peak"),
        (16, "peak"),
        (20, "peak"),
        (21, "partial_peak"),
        (23, "partial_peak"),
    ],
)
def test_period_boundaries(hour, expected):
    assert tariffs.tou_period(hour) == expected


def test_rate_table_values():
    assert tariffs.tou_rate("2024-07-15T17:00") == 0.62277
    assert tariffs.tou_rate("2024-07-15T15:00") == 0.51228
    assert tariffs.tou_rate("2024-07-15T03:00") == 0.31026
    assert tariffs.tou_rate("2024-01-15T17:00") == 0.49566
    assert tariffs.tou_rate("2024-01-15T22:00") == 0.47896
    assert tariffs.tou_rate("2024-01-15T03:00") == 0.31027


def test_every_hour_of_year_maps_to_table_constant():
    idx = pd.date_range("2024-01-01", "2024-12-31 23:00", freq="1h")
    rates = tariffs.tou_rates(idx)
    assert set(rates.unique()) == TABLE


def test_vectorised_matches_scalar():
    idx = pd.date_range("2024-05-30", periods=24 * 5, freq="1h")
    rates = tariffs.tou_rates(idx)
    for t, r in rates.items():
        assert r == tariffs.tou_rate(t)


def test_tz_aware_timestamp_read_in_local_time():
    """01:00 UTC on Jul 16 is 18:00 Pacific on Jul 15: summer peak."""
    assert tariffs.tou_rate("2024-07-16T01:00:00Z") == 0.62277


def test_tou_cost():
    assert tariffs.tou_cost("2024-07-15T17:00", 10.0) == pytest.approx(6.2277)


def test_period_description():
    assert tariffs.period_description("2024-07-15T17:00") == "Summer Peak"
    assert tariffs.period_description("2024-12-01T21:30") == "Winter Partial-Peak"
    assert tariffs.period_description("2024-12-01T08:00") == "Winter Off-Peak"


def test_schedule_rejects_overlapping_hours():
    bad = tariffs.EV2A.model_copy(update={"partial_peak_hours": (15, 16)})
    with pytest.raises(ScheduleError):
        tariffs.validate_schedule(bad)
