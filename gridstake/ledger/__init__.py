"""Stake custody and forecast registry.

- StakeLedger: collateral per participant, lock windows, slashing
- ForecastRegistry: stake-gated admission, sequential ids, region/cycle buckets
"""

from .models import (
    ActualReading,
    Forecast,
    ForecastScore,
    Stake,
    TransferEvent,
)
from .registry import ForecastRegistry
from .stake import StakeLedger

__all__ = [
    "ActualReading",
    "Forecast",
    "ForecastRegistry",
    "ForecastScore",
    "Stake",
    "StakeLedger",
    "TransferEvent",
]
