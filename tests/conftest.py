import pandas as pd
import pytest

from flexsavings.types import PricingSeries, UsageRecord

@pytest.fixture
def hourly_rng():
    # Mon 2024-07-15 00:00 .. Sun 2024-07-21 23:00
    return pd.date_range("2024-07-15", periods=24 * 7, freq="1h")


@pytest.fixture
def history_week():
    # One year earlier: Mon 2023-07-17 .. Sun 2023-07-23, weekday 1.0 kWh, weekend 2.0 kWh
    idx = pd.date_range("2023-07-17", periods=24 * 7, freq="1h")
    return [UsageRecord(t, 2.0 if t.dayofweek >= 5 else 1.0) for t in idx]


@pytest.fixture
def flat_pricing(hourly_rng):
    # 0.10 $/kWh every hour of the current week
    return PricingSeries(
        tuple(t.strftime("%Y-%m-%dT%H:%M:%S") for t in hourly_rng),
        tuple(0.10 for _ in hourly_rng),
    )


@pytest.fixture
def usage_week(hourly_rng):
    return [UsageRecord(t, 1.5) for t in hourly_rng]


@pytest.fixture
def pge_csv_text():
    return (
        "Name,JANE DOE\n"
        "Address,1 MAIN ST\n"
        "Account Number,1234\n"
        "\n"
        "TYPE,DATE,START TIME,END TIME,USAGE (kWh),COST,NOTES\n"
        "Electric usage,2023-07-17,17:00,17:59,3.10,$1.55,\n"
        "Electric usage,2023-07-17,18:00,18:59,2.40,$1.20,\n"
        "Electric usage,2023-07-22,09:00,09:59,0.80,$0.25,\n"
    )
