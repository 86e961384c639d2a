from __future__ import annotations
from typing import Sequence

import numpy as np
import pandas as pd

from . import exceptions
from .types import PricingSeries, UsageRecord


def assert_usage(records: Sequence[UsageRecord]) -> None:
    """Usage must be finite and non-negative."""
    usage = np.asarray([r.usage_kwh for r in records], dtype=float)
    if len(usage) == 0:
        return
    bad = ~np.isfinite(usage)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise exceptions.ValidationError(
            f"{int(bad.sum())} usage value(s) are NaN or infinite; "
            f"first at {records[first].timestamp}."
        )
    if (usage < 0).any():
        first = int(np.flatnonzero(usage < 0)[0])
        raise exceptions.ValidationError(
            f"Negative kWh values detected (first at {records[first].timestamp}); "
            "usage should be non-negative."
        )


def assert_pricing(series: PricingSeries) -> None:
    """Prices may be negative but must be finite."""
    prices = np.asarray(series.prices, dtype=float)
    bad = ~np.isfinite(prices)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise exceptions.ValidationError(
            f"{int(bad.sum())} price(s) are NaN or infinite; "
            f"first {prices[first]!r} at {series.timestamps[first]!r}."
        )


def is_chronological(index: pd.DatetimeIndex) -> bool:
    return bool(index.is_monotonic_increasing)


def assert_chronological(index: pd.DatetimeIndex) -> None:
    if not is_chronological(index):
        raise exceptions.ValidationError(
            "Usage records must be sorted ascending by timestamp "
            "(or use order='sort')."
        )
