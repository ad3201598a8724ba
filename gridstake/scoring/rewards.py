"""Deterministic reward split across the verified forecasts of one bucket.

Integer-only pro-rata allocation: every forecast gets
``pool * score // total_score`` and the leftover units go one at a time to
the largest remainders, ties broken by the lower forecast id. The amounts
always sum to exactly ``pool``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from gridstake.ledger.models import Forecast


@dataclass
class RewardResult:
    """Allocation for one (region, cycle) bucket with its audit trail."""

    region_id: int
    cycle: int
    pool: int
    total_score: int = 0
    forecast_ids: list[int] = field(default_factory=list)
    recipients: list[str] = field(default_factory=list)
    amounts: list[int] = field(default_factory=list)

    @property
    def distributed(self) -> int:
        return sum(self.amounts)

    def payouts(self) -> dict[str, int]:
        """Non-zero amounts aggregated per recipient, in forecast-id order."""
        totals: dict[str, int] = {}
        for recipient, amount in zip(self.recipients, self.amounts):
            if amount:
                totals[recipient] = totals.get(recipient, 0) + amount
        return totals

    def as_dict(self) -> dict:
        return {
            "region_id": self.region_id,
            "cycle": self.cycle,
            "pool": self.pool,
            "total_score": self.total_score,
            "forecast_ids": list(self.forecast_ids),
            "recipients": list(self.recipients),
            "amounts": list(self.amounts),
        }


def compute_rewards(
    forecasts: Iterable[Forecast],
    pool: int,
    region_id: int = 0,
    cycle: int = 0,
) -> RewardResult:
    """Split ``pool`` by score over the verified forecasts.

    Unverified forecasts are ignored. With a zero total score nothing is
    allocated and every amount is zero.
    """
    scored = sorted(
        (f for f in forecasts if f.verified and f.score is not None),
        key=lambda f: f.forecast_id,
    )
    result = RewardResult(
        region_id=region_id,
        cycle=cycle,
        pool=pool,
        forecast_ids=[f.forecast_id for f in scored],
        recipients=[f.submitter for f in scored],
    )
    if not scored:
        return result

    # object dtype keeps Python ints: score * pool must never wrap
    scores = np.array([f.score for f in scored], dtype=object)
    total = int(scores.sum())
    result.total_score = total

    if total == 0 or pool <= 0:
        result.amounts = [0] * len(scored)
        return result

    numer = scores * pool
    shares = numer // total
    remainders = numer % total

    leftover = pool - int(shares.sum())
    if leftover:
        ids = result.forecast_ids
        order = sorted(range(len(scored)), key=lambda i: (-remainders[i], ids[i]))
        shares[order[:leftover]] += 1

    result.amounts = [int(a) for a in shares]
    return result


__all__ = ["RewardResult", "compute_rewards"]
