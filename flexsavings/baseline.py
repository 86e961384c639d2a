"""
Subscription baseline: the household's average usage one year prior, per
hour of day and day type (weekday/weekend).

The table acts as a free allotment. Usage above it is charged at the dynamic
rate, usage below it is credited.
"""

from __future__ import annotations
import logging
from typing import Iterable, cast

import numpy as np
import pandas as pd

from . import canon, utils, validate
from .types import (
    BaselineLookup,
    DayType,
    FallbackUsed,
    Found,
    Missing,
    SubscriptionQuantityTable,
    UsageRecord,
)

logger = logging.getLogger(__name__)


def build_subscription_table(
    records: Iterable[UsageRecord],
    *,
    tz: str = canon.DEFAULT_TZ,
    validate_inputs: bool = True,
) -> SubscriptionQuantityTable:
    """
    Mean usage_kwh per (hour, day_type). Groups with no records are absent,
    not zero-filled; empty history gives an empty table.
    """
    records = list(records)
    if not records:
        logger.debug("Empty history; subscription baseline disabled")
        return SubscriptionQuantityTable()
    if validate_inputs:
        validate.assert_usage(records)

    idx = utils.to_local_index((r.timestamp for r in records), tz)
    df = pd.DataFrame(
        {
            "hour": np.asarray(idx.hour, dtype=int),
            "day_type": np.where(
                np.isin(np.asarray(idx.dayofweek), list(canon.WEEKEND_DAYS)),
                canon.WEEKEND,
                canon.WEEKDAY,
            ),
            "usage_kwh": np.asarray([r.usage_kwh for r in records], dtype=float),
        }
    )
    # sort=False keeps first-appearance order, which fixes the lookup fallback
    means = df.groupby(["hour", "day_type"], sort=False)["usage_kwh"].agg(
        lambda s: s.mean(skipna=False)
    )
    averages = {
        (int(hour), cast(DayType, str(day_type))): float(avg)
        for (hour, day_type), avg in means.items()
    }
    logger.debug(
        "Built subscription table: %d groups from %d records",
        len(averages),
        len(records),
    )
    return SubscriptionQuantityTable(averages)


def lookup(
    ts: utils.TimestampLike,
    table: SubscriptionQuantityTable,
    *,
    tz: str = canon.DEFAULT_TZ,
) -> BaselineLookup:
    """
    Resolve the baseline for ts.

    Falls back to the first day type recorded for the same hour when the
    exact (hour, day_type) group is absent. That mixes weekday and weekend
    baselines, so the result says which one was used.
    """
    t = utils.to_local(ts, tz)
    wanted = utils.day_type(t)
    value = table.get(t.hour, wanted)
    if value is not None:
        return Found(value, wanted)

    available = table.day_types_for(t.hour)
    if available:
        used = available[0]
        logger.debug(
            "No %s baseline for hour %d; using %s average", wanted, t.hour, used
        )
        return FallbackUsed(cast(float, table.get(t.hour, used)), wanted, used)
    return Missing()


def get_subscription_quantity(
    ts: utils.TimestampLike,
    table: SubscriptionQuantityTable,
    *,
    tz: str = canon.DEFAULT_TZ,
) -> float:
    return lookup(ts, table, tz=tz).value


def profile_frame(table: SubscriptionQuantityTable) -> pd.DataFrame:
    """24 rows (hour 0..23) with 'weekday' and 'weekend' averages, NaN if absent."""
    out = pd.DataFrame({"hour": range(24)})
    for day_type in canon.DAY_TYPES:
        out[day_type] = [
            table.get(h, cast(DayType, day_type)) for h in range(24)
        ]
        out[day_type] = out[day_type].astype(float)
    return out
