"""Staked energy-demand forecasting ledger.

Forecasters stake collateral and submit demand forecasts per region and
cycle; an oracle reports the actual demand; forecasts are scored exactly
once after a lock period and the scores split reward-token pools.
"""

__version__ = "0.1.0"

from .market import ForecastMarket
from .shared.errors import ErrorCode, ErrorKind, Result

__all__ = ["ErrorCode", "ErrorKind", "ForecastMarket", "Result", "__version__"]
