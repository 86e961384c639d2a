# flexsavings/utils.py
from __future__ import annotations
from datetime import datetime
from typing import Iterable
from zoneinfo import ZoneInfo

import pandas as pd

from . import canon
from .exceptions import ValidationError
from .types import DayType

TimestampLike = str | datetime | pd.Timestamp


def _parse(ts: TimestampLike) -> pd.Timestamp:
    try:
        t = pd.Timestamp(ts)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Unparseable timestamp {ts!r}: {e}") from e
    if pd.isna(t):
        raise ValidationError(f"Missing timestamp: {ts!r}")
    return t


def to_local(ts: TimestampLike, tz: str = canon.DEFAULT_TZ) -> pd.Timestamp:
    """
    Return the local wall-clock time of ts as a tz-naive Timestamp.

    Naive inputs are taken to already be local; tz-aware inputs are converted
    to `tz` before the zone is dropped.
    """
    t = _parse(ts)
    if t.tz is not None:
        t = t.tz_convert(ZoneInfo(tz)).tz_localize(None)
    return t


def to_local_index(
    values: Iterable[TimestampLike], tz: str = canon.DEFAULT_TZ
) -> pd.DatetimeIndex:
    """Element-wise to_local; tolerates mixed offsets within one sequence."""
    return pd.DatetimeIndex(
        [to_local(v, tz) for v in values], name=canon.INDEX_NAME
    )


def to_instant(ts: TimestampLike, tz: str = canon.DEFAULT_TZ) -> pd.Timestamp:
    """
    Return ts as a tz-naive UTC instant, for ordering.

    Naive inputs are read as wall time in `tz`; an ambiguous fall-back wall
    time is taken as the first (daylight) occurrence.
    """
    t = _parse(ts)
    if t.tz is None:
        t = t.tz_localize(
            ZoneInfo(tz), ambiguous=True, nonexistent="shift_forward"
        )
    return t.tz_convert("UTC").tz_localize(None)


def to_instant_index(
    values: Iterable[TimestampLike], tz: str = canon.DEFAULT_TZ
) -> pd.DatetimeIndex:
    return pd.DatetimeIndex([to_instant(v, tz) for v in values])


def day_type(ts: pd.Timestamp) -> DayType:
    return canon.WEEKEND if ts.dayofweek in canon.WEEKEND_DAYS else canon.WEEKDAY


def exact_key(ts: pd.Timestamp) -> str:
    """'YYYY-MM-DDTHH:MM' from local calendar fields."""
    return ts.strftime(canon.EXACT_KEY_FORMAT)


def pattern_key(ts: pd.Timestamp) -> str:
    """'<dow>-HH:MM' where dow is Mon=0..Sun=6."""
    return f"{ts.dayofweek}-{ts.strftime(canon.PATTERN_TIME_FORMAT)}"
