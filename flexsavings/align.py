"""
Timestamp alignment between usage records and a pricing series.

Two lookups, tried in order:
  1. exact: 'YYYY-MM-DDTHH:MM' of the local wall time;
  2. pattern: '<day-of-week>-HH:MM', so a usage interval on a date with no
     price reuses the price seen for the same weekday and time elsewhere in
     the series.

Both maps are built over the whole series. When two pricing points share a
key, the collision policy decides which one is kept.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Final, Mapping, Optional, Tuple

from . import canon, utils
from .exceptions import ValidationError, require
from .types import CollisionPolicy, PriceMatch, PricingSeries, UsageRecord

logger = logging.getLogger(__name__)

MOST_RECENT_WINS_ON_COLLISION: Final[CollisionPolicy] = "most_recent_wins"
FIRST_WINS_ON_COLLISION: Final[CollisionPolicy] = "first_wins"

_Entry = Tuple[float, "str | datetime"]


def _insert(
    table: Dict[str, _Entry], key: str, entry: _Entry, collision: CollisionPolicy
) -> None:
    if collision == FIRST_WINS_ON_COLLISION and key in table:
        return
    table[key] = entry


@dataclass(frozen=True)
class PriceIndex:
    exact: Mapping[str, _Entry]
    pattern: Mapping[str, _Entry]
    collision: CollisionPolicy = MOST_RECENT_WINS_ON_COLLISION
    tz: str = canon.DEFAULT_TZ

    @classmethod
    def build(
        cls,
        series: PricingSeries,
        *,
        collision: CollisionPolicy = MOST_RECENT_WINS_ON_COLLISION,
        tz: str = canon.DEFAULT_TZ,
    ) -> "PriceIndex":
        require(
            collision in (MOST_RECENT_WINS_ON_COLLISION, FIRST_WINS_ON_COLLISION),
            f"Unknown collision policy {collision!r}",
            ValidationError,
        )
        exact: Dict[str, _Entry] = {}
        pattern: Dict[str, _Entry] = {}
        for raw_ts, price in zip(series.timestamps, series.prices):
            t = utils.to_local(raw_ts, tz)
            _insert(exact, utils.exact_key(t), (price, raw_ts), collision)
            _insert(pattern, utils.pattern_key(t), (price, raw_ts), collision)

        logger.debug(
            "Price index: %d points -> %d exact keys, %d pattern keys (%s)",
            len(series),
            len(exact),
            len(pattern),
            collision,
        )
        return cls(MappingProxyType(exact), MappingProxyType(pattern), collision, tz)

    def match(self, ts: utils.TimestampLike) -> Optional[PriceMatch]:
        t = utils.to_local(ts, self.tz)
        hit = self.exact.get(utils.exact_key(t))
        if hit is not None:
            return PriceMatch(hit[0], "exact", hit[1])
        hit = self.pattern.get(utils.pattern_key(t))
        if hit is not None:
            return PriceMatch(hit[0], "pattern", hit[1])
        return None

    def __len__(self) -> int:
        return len(self.exact)


def align(
    record: UsageRecord,
    series: PricingSeries,
    *,
    collision: CollisionPolicy = MOST_RECENT_WINS_ON_COLLISION,
    tz: str = canon.DEFAULT_TZ,
) -> Optional[float]:
    """
    Dynamic price for one usage record, or None if neither lookup matches.

    Builds a fresh PriceIndex; for many records build the index once and
    call PriceIndex.match.
    """
    hit = PriceIndex.build(series, collision=collision, tz=tz).match(record.timestamp)
    return None if hit is None else hit.price
