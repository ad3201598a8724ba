from .params import (
    DEFAULT_MARKET_PARAMS,
    ConfidenceTier,
    ForecastParams,
    MarketParams,
    ScoreBand,
    ScoringParams,
    StakeParams,
    TokenParams,
    get_market_params,
    load_market_params,
)

__all__ = [
    "DEFAULT_MARKET_PARAMS",
    "ConfidenceTier",
    "ForecastParams",
    "MarketParams",
    "ScoreBand",
    "ScoringParams",
    "StakeParams",
    "TokenParams",
    "get_market_params",
    "load_market_params",
]
