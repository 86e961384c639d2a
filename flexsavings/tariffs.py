"""
Fixed time-of-use schedule (EV2A style) and rate resolution.

Season and period are read from the local calendar month and hour only;
there is no year, weekday or holiday dependency.
"""

from __future__ import annotations
from typing import cast

import numpy as np
import pandas as pd
from pydantic import BaseModel

from . import canon, utils
from .exceptions import ScheduleError
from .types import Period, Season

PERIOD_LABELS = {
    "peak": "Peak",
    "partial_peak": "Partial-Peak",
    "off_peak": "Off-Peak",
}
SEASON_LABELS = {"summer": "Summer", "winter": "Winter"}


class TouRates(BaseModel):
    peak: float  # $/kWh
    partial_peak: float
    off_peak: float
    model_config = {"frozen": True}


class TouSchedule(BaseModel):
    name: str
    summer_months: tuple[int, ...]  # 1 = Jan ... 12 = Dec
    peak_hours: tuple[int, ...]  # local hour 0..23
    partial_peak_hours: tuple[int, ...]
    summer: TouRates
    winter: TouRates
    model_config = {"frozen": True}

    def rates_for(self, season: Season) -> TouRates:
        return self.summer if season == "summer" else self.winter


def validate_schedule(schedule: TouSchedule) -> None:
    for m in schedule.summer_months:
        if not 1 <= m <= 12:
            raise ScheduleError(f"Schedule '{schedule.name}': month {m} out of range")
    for h in (*schedule.peak_hours, *schedule.partial_peak_hours):
        if not 0 <= h <= 23:
            raise ScheduleError(f"Schedule '{schedule.name}': hour {h} out of range")
    overlap = set(schedule.peak_hours) & set(schedule.partial_peak_hours)
    if overlap:
        raise ScheduleError(
            f"Schedule '{schedule.name}': hours {sorted(overlap)} are both "
            "peak and partial-peak"
        )


# Peak 16:00-20:59, partial-peak 15:00-15:59 and 21:00-23:59, off-peak otherwise
EV2A = TouSchedule(
    name="EV2A",
    summer_months=(6, 7, 8, 9),
    peak_hours=(16, 17, 18, 19, 20),
    partial_peak_hours=(15, 21, 22, 23),
    summer=TouRates(peak=0.62277, partial_peak=0.51228, off_peak=0.31026),
    winter=TouRates(peak=0.49566, partial_peak=0.47896, off_peak=0.31027),
)
validate_schedule(EV2A)


def season(
    ts: utils.TimestampLike, schedule: TouSchedule = EV2A, tz: str = canon.DEFAULT_TZ
) -> Season:
    month = utils.to_local(ts, tz).month
    return "summer" if month in schedule.summer_months else "winter"


def tou_period(hour: int, schedule: TouSchedule = EV2A) -> Period:
    if hour in schedule.peak_hours:
        return "peak"
    if hour in schedule.partial_peak_hours:
        return "partial_peak"
    return "off_peak"


def tou_rate(
    ts: utils.TimestampLike, schedule: TouSchedule = EV2A, tz: str = canon.DEFAULT_TZ
) -> float:
    """$/kWh under the fixed schedule. Total: every timestamp has a rate."""
    t = utils.to_local(ts, tz)
    rates = schedule.rates_for(season(t, schedule))
    return float(getattr(rates, tou_period(t.hour, schedule)))


def tou_cost(
    ts: utils.TimestampLike,
    usage_kwh: float,
    schedule: TouSchedule = EV2A,
    tz: str = canon.DEFAULT_TZ,
) -> float:
    return usage_kwh * tou_rate(ts, schedule, tz)


def period_description(
    ts: utils.TimestampLike, schedule: TouSchedule = EV2A, tz: str = canon.DEFAULT_TZ
) -> str:
    """Human label such as 'Summer Peak' or 'Winter Off-Peak'."""
    t = utils.to_local(ts, tz)
    return (
        f"{SEASON_LABELS[season(t, schedule)]} "
        f"{PERIOD_LABELS[tou_period(t.hour, schedule)]}"
    )


def tou_rates(
    index: pd.DatetimeIndex, schedule: TouSchedule = EV2A, tz: str = canon.DEFAULT_TZ
) -> pd.Series:
    """Vectorised tou_rate over an index; tz-aware indexes are read in `tz`."""
    idx = pd.DatetimeIndex(index)
    if idx.tz is not None:
        idx = idx.tz_convert(tz).tz_localize(None)

    months = np.asarray(idx.month)
    hours = np.asarray(idx.hour)
    summer = np.isin(months, schedule.summer_months)
    peak = np.isin(hours, schedule.peak_hours)
    partial = np.isin(hours, schedule.partial_peak_hours)

    rates = np.select(
        [summer & peak, summer & partial, summer, peak, partial],
        [
            schedule.summer.peak,
            schedule.summer.partial_peak,
            schedule.summer.off_peak,
            schedule.winter.peak,
            schedule.winter.partial_peak,
        ],
        default=schedule.winter.off_peak,
    )
    return pd.Series(cast(np.ndarray, rates).astype(float), index=index, name="tou_rate")
