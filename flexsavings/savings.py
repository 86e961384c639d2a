"""
Savings ledger: flex (dynamic) pricing against the fixed TOU tariff.

Per matched usage interval:
    tou_cost     = usage * tou_rate
    dynamic_cost = (usage - subscription) * dynamic_rate     # formula="credit"
    savings      = tou_cost - dynamic_cost
and cumulative_savings is the running total of savings in processing order.

With formula="clamped" the subscription share is billed at the TOU rate and
only the overage at the dynamic rate:
    dynamic_cost = min(usage, sub) * tou_rate + max(0, usage - sub) * dynamic_rate
"""

from __future__ import annotations
import logging
from itertools import accumulate
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from . import baseline, canon, tariffs, utils, validate
from .align import PriceIndex
from .config import SavingsConfig, default_config
from .types import (
    AlignmentStats,
    PricingSeries,
    SavingsFormula,
    SavingsRecord,
    SavingsReport,
    SavingsSummary,
    SubscriptionQuantityTable,
    UsageRecord,
)

logger = logging.getLogger(__name__)


def interval_costs(
    usage_kwh: float,
    tou_rate: float,
    dynamic_rate: float,
    subscription_quantity: float,
    formula: SavingsFormula = "credit",
) -> Tuple[float, float, float]:
    """Return (tou_cost, dynamic_cost, savings) for one interval."""
    tou_cost = usage_kwh * tou_rate
    if formula == "clamped":
        base = min(usage_kwh, subscription_quantity)
        flex = max(0.0, usage_kwh - subscription_quantity)
        dynamic_cost = base * tou_rate + flex * dynamic_rate
    else:
        dynamic_cost = (usage_kwh - subscription_quantity) * dynamic_rate
    return tou_cost, dynamic_cost, tou_cost - dynamic_cost


def _processing_order(instants: pd.DatetimeIndex, config: SavingsConfig) -> List[int]:
    """Order by UTC instant; local wall time repeats at the DST fall-back."""
    positions = list(range(len(instants)))
    if config.order == "sort":
        return sorted(positions, key=lambda i: instants[i])
    validate.assert_chronological(instants)
    return positions


def compute_savings_report(
    usage: Iterable[UsageRecord],
    pricing: PricingSeries,
    table: SubscriptionQuantityTable,
    *,
    config: Optional[SavingsConfig] = None,
) -> SavingsReport:
    """
    Reconcile usage against pricing and the subscription baseline.

    Records with no exact or pattern price are dropped and counted in the
    returned stats. Output order is processing order (input order, or
    chronological when config.order == "sort").
    """
    cfg = config or default_config()
    records = list(usage)
    if cfg.validate_inputs:
        validate.assert_usage(records)
        validate.assert_pricing(pricing)

    stamps = [r.timestamp for r in records]
    local = utils.to_local_index(stamps, cfg.tz)
    order = _processing_order(utils.to_instant_index(stamps, cfg.tz), cfg)
    prices = PriceIndex.build(pricing, collision=cfg.collision, tz=cfg.tz)

    stats = AlignmentStats()
    rows = []
    for i in order:
        t = local[i]
        hit = prices.match(t)
        if hit is None:
            stats.unmatched += 1
            if stats.unmatched <= cfg.log_unmatched_samples:
                logger.debug(
                    "No price for %s or pattern %s",
                    utils.exact_key(t),
                    utils.pattern_key(t),
                )
            continue
        if hit.match_type == "exact":
            stats.exact += 1
        else:
            stats.pattern += 1

        usage_kwh = float(records[i].usage_kwh)
        sub = baseline.get_subscription_quantity(t, table, tz=cfg.tz)
        rate = tariffs.tou_rate(t, tz=cfg.tz)
        tou_cost, dynamic_cost, saved = interval_costs(
            usage_kwh, rate, hit.price, sub, cfg.formula
        )
        rows.append(
            (t, usage_kwh, rate, hit.price, sub, tou_cost, dynamic_cost, saved, hit.match_type)
        )

    # Sequential left fold once every interval's savings is known
    running = accumulate(row[7] for row in rows)
    out = [
        SavingsRecord(
            timestamp=t,
            usage_kwh=usage_kwh,
            tou_rate=rate,
            dynamic_rate=dynamic_rate,
            subscription_quantity=sub,
            tou_cost=tou_cost,
            dynamic_cost=dynamic_cost,
            savings=saved,
            cumulative_savings=cumulative,
            match_type=match_type,
        )
        for (
            t,
            usage_kwh,
            rate,
            dynamic_rate,
            sub,
            tou_cost,
            dynamic_cost,
            saved,
            match_type,
        ), cumulative in zip(rows, running)
    ]

    logger.info(
        "Savings: %d usage records, %d exact, %d pattern, %d unmatched",
        len(records),
        stats.exact,
        stats.pattern,
        stats.unmatched,
    )
    return SavingsReport(records=out, stats=stats, summary=summarise(out))


def compute_savings(
    usage: Iterable[UsageRecord],
    pricing: PricingSeries,
    table: SubscriptionQuantityTable,
    *,
    config: Optional[SavingsConfig] = None,
) -> List[SavingsRecord]:
    return compute_savings_report(usage, pricing, table, config=config).records


def summarise(records: Sequence[SavingsRecord]) -> SavingsSummary:
    if not records:
        return {
            "start": "",
            "end": "",
            "intervals": 0,
            "total_usage_kwh": 0.0,
            "total_tou_cost": 0.0,
            "total_dynamic_cost": 0.0,
            "total_savings": 0.0,
        }
    stamps = [r.timestamp for r in records]
    return {
        "start": min(stamps).isoformat(),
        "end": max(stamps).isoformat(),
        "intervals": len(records),
        "total_usage_kwh": float(sum(r.usage_kwh for r in records)),
        "total_tou_cost": float(sum(r.tou_cost for r in records)),
        "total_dynamic_cost": float(sum(r.dynamic_cost for r in records)),
        "total_savings": float(sum(r.savings for r in records)),
    }


def total_savings(
    records: Iterable[SavingsRecord],
    start: Optional[utils.TimestampLike] = None,
    end: Optional[utils.TimestampLike] = None,
    *,
    tz: str = canon.DEFAULT_TZ,
) -> float:
    """Sum of savings with start <= timestamp <= end (open bounds when None)."""
    lo = utils.to_local(start, tz) if start is not None else None
    hi = utils.to_local(end, tz) if end is not None else None
    total = 0.0
    for r in records:
        if lo is not None and r.timestamp < lo:
            continue
        if hi is not None and r.timestamp > hi:
            continue
        total += r.savings
    return total


def to_frame(records: Sequence[SavingsRecord]) -> pd.DataFrame:
    """One row per record, indexed by t_start, for display collaborators."""
    idx = pd.DatetimeIndex([r.timestamp for r in records], name=canon.INDEX_NAME)
    df = pd.DataFrame(
        {col: [getattr(r, col) for r in records] for col in canon.SAVINGS_COLS},
        index=idx,
    )
    return df
