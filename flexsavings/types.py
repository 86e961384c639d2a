from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import List, Literal, Mapping, Optional, Tuple, TypedDict, Union

import pandas as pd

from .exceptions import ValidationError, require

DayType = Literal["weekday", "weekend"]
Season = Literal["summer", "winter"]
Period = Literal["peak", "partial_peak", "off_peak"]
MatchType = Literal["exact", "pattern"]
CollisionPolicy = Literal["most_recent_wins", "first_wins"]
SavingsFormula = Literal["credit", "clamped"]
OrderPolicy = Literal["require", "sort"]


## Inputs
@dataclass(frozen=True)
class UsageRecord:
    timestamp: pd.Timestamp  # local wall time, tz-naive
    usage_kwh: float
    cost: Optional[float] = None  # billed $ from the export, informational


@dataclass(frozen=True)
class PricingSeries:
    """
    Parallel arrays of pricing timestamps and $/kWh prices.

    Timestamps may be ISO strings, datetimes or Timestamps (naive or tz-aware)
    and are not required to be sorted. Prices may be negative.
    """

    timestamps: Tuple[str | datetime, ...]
    prices: Tuple[float, ...]

    def __post_init__(self):
        object.__setattr__(self, "timestamps", tuple(self.timestamps))
        try:
            prices = tuple(float(p) for p in self.prices)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Non-numeric price in PricingSeries: {e}") from e
        object.__setattr__(self, "prices", prices)
        require(
            len(self.timestamps) == len(self.prices),
            f"PricingSeries length mismatch: {len(self.timestamps)} timestamps, "
            f"{len(self.prices)} prices",
            ValidationError,
        )

    def __len__(self) -> int:
        return len(self.timestamps)


## Baseline
@dataclass(frozen=True)
class SubscriptionQuantityTable:
    """
    Average kWh keyed by (hour 0..23, day type).

    Key order is the order in which each group first appeared in the
    historical input; the lookup fallback relies on it.
    """

    averages: Mapping[Tuple[int, DayType], float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "averages", MappingProxyType(dict(self.averages)))

    def get(self, hour: int, day_type: DayType) -> Optional[float]:
        return self.averages.get((hour, day_type))

    def day_types_for(self, hour: int) -> List[DayType]:
        return [dt for (h, dt) in self.averages if h == hour]

    def is_empty(self) -> bool:
        return not self.averages

    def __hash__(self) -> int:
        return hash(tuple(self.averages.items()))

    def __len__(self) -> int:
        return len(self.averages)

    def __contains__(self, key: object) -> bool:
        return key in self.averages


@dataclass(frozen=True)
class Found:
    value: float
    day_type: DayType


@dataclass(frozen=True)
class FallbackUsed:
    value: float
    original_day_type: DayType
    used_day_type: DayType


@dataclass(frozen=True)
class Missing:
    @property
    def value(self) -> float:
        return 0.0


BaselineLookup = Union[Found, FallbackUsed, Missing]


## Alignment
@dataclass(frozen=True)
class PriceMatch:
    price: float
    match_type: MatchType
    source_timestamp: str | datetime


@dataclass
class AlignmentStats:
    exact: int = 0
    pattern: int = 0
    unmatched: int = 0

    @property
    def matched(self) -> int:
        return self.exact + self.pattern

    @property
    def total(self) -> int:
        return self.matched + self.unmatched


## Outputs
@dataclass(frozen=True)
class SavingsRecord:
    timestamp: pd.Timestamp
    usage_kwh: float
    tou_rate: float
    dynamic_rate: float
    subscription_quantity: float
    tou_cost: float
    dynamic_cost: float
    savings: float
    cumulative_savings: float
    match_type: MatchType = "exact"


class SavingsSummary(TypedDict):
    start: str
    end: str
    intervals: int
    total_usage_kwh: float
    total_tou_cost: float
    total_dynamic_cost: float
    total_savings: float


@dataclass
class SavingsReport:
    records: List[SavingsRecord]
    stats: AlignmentStats
    summary: SavingsSummary
