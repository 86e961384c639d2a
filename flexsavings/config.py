from __future__ import annotations

from dataclasses import dataclass
from typing import get_args

from . import canon
from .exceptions import ValidationError, require
from .types import CollisionPolicy, OrderPolicy, SavingsFormula


@dataclass
class SavingsConfig:
    # "credit": (usage - subscription) * dynamic rate, negative is a credit
    # "clamped": subscription share at TOU, overage at dynamic rate, no credit
    formula: SavingsFormula = "credit"

    # "require" rejects out-of-order usage; "sort" sorts it (stable) first
    order: OrderPolicy = "require"

    # Tie-break when two pricing points share an alignment key
    collision: CollisionPolicy = "most_recent_wins"

    # Zone used to read local calendar fields from tz-aware timestamps
    tz: str = canon.DEFAULT_TZ

    # Reject NaN/inf usage and prices before computing
    validate_inputs: bool = True

    # How many unmatched keys to log at debug level per run
    log_unmatched_samples: int = 3

    def __post_init__(self):
        for name, literal in (
            ("formula", SavingsFormula),
            ("order", OrderPolicy),
            ("collision", CollisionPolicy),
        ):
            allowed = get_args(literal)
            value = getattr(self, name)
            require(
                value in allowed,
                f"{name} must be one of: {', '.join(allowed)} (got {value!r})",
                ValidationError,
            )
        require(
            self.log_unmatched_samples >= 0,
            "log_unmatched_samples must be >= 0",
            ValidationError,
        )


def default_config() -> SavingsConfig:
    return SavingsConfig()
