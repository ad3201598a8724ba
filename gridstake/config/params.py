"""Ledger parameters.

All numeric rules of the market live here so that two deployments with the
same parameters reach identical states from identical call sequences.

IMPORTANT: changing any of these values changes scores and lock windows.
Existing forecasts keep the cycle they were admitted under.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "GRIDSTAKE_"
_ENV_SECTIONS = ("stake", "forecast", "scoring", "token")


class StakeParams(BaseModel):
    """Collateral custody rules."""

    min_stake: int = Field(
        default=1_000_000,
        ge=1,
        description="Smallest accepted stake deposit, and the balance required to submit forecasts.",
    )
    unstake_lock_blocks: int = Field(
        default=2016,
        ge=0,
        description="Blocks a slashed participant must wait before unstaking or submitting again.",
    )


class ForecastParams(BaseModel):
    """Forecast admission rules."""

    cycle_length: int = Field(
        default=144,
        ge=1,
        description="Width of a cycle in blocks. cycle = target_timestamp // cycle_length.",
    )
    min_region_id: int = Field(default=1, ge=0)
    max_region_id: int = Field(default=1000, ge=1)
    max_energy_value: int = Field(
        default=1_000_000,
        ge=0,
        description="Upper bound for predicted and reported energy values (MW).",
    )
    min_confidence: int = Field(default=1, ge=0)
    max_confidence: int = Field(default=100, ge=1)
    max_forecasts_per_bucket: int = Field(
        default=100,
        ge=1,
        description="Capacity of a (region, cycle) bucket. Bounds oracle and verification work per cycle.",
    )


class ScoreBand(BaseModel):
    """One rung of the score ladder: errors of at least ``min_error_bp`` score ``score``."""

    min_error_bp: int = Field(ge=0)
    score: int = Field(ge=0)


class ConfidenceTier(BaseModel):
    """Boost granted when confidence is strictly above ``above``."""

    above: int = Field(ge=0)
    boost: int = Field(ge=0)


class ScoringParams(BaseModel):
    """Accuracy scoring rules. Everything is integer basis points."""

    bp_scale: int = Field(default=10_000, ge=1)
    score_bands: list[ScoreBand] = Field(
        default_factory=lambda: [
            ScoreBand(min_error_bp=5000, score=0),
            ScoreBand(min_error_bp=2500, score=50),
            ScoreBand(min_error_bp=1000, score=75),
            ScoreBand(min_error_bp=500, score=90),
        ],
        description="Ladder evaluated high-to-low on relative error.",
    )
    perfect_score: int = Field(
        default=100,
        ge=0,
        description="Score for errors below the lowest band.",
    )
    confidence_tiers: list[ConfidenceTier] = Field(
        default_factory=lambda: [
            ConfidenceTier(above=70, boost=10),
            ConfidenceTier(above=40, boost=5),
        ],
    )
    verification_delay_blocks: int = Field(
        default=144,
        ge=0,
        description="Blocks after the target timestamp before a forecast can be verified.",
    )

    @field_validator("score_bands")
    @classmethod
    def _bands_descending(cls, bands: list[ScoreBand]) -> list[ScoreBand]:
        thresholds = [b.min_error_bp for b in bands]
        if thresholds != sorted(thresholds, reverse=True) or len(set(thresholds)) != len(thresholds):
            raise ValueError("score_bands must have strictly descending min_error_bp")
        return bands

    @field_validator("confidence_tiers")
    @classmethod
    def _tiers_descending(cls, tiers: list[ConfidenceTier]) -> list[ConfidenceTier]:
        thresholds = [t.above for t in tiers]
        if thresholds != sorted(thresholds, reverse=True) or len(set(thresholds)) != len(thresholds):
            raise ValueError("confidence_tiers must have strictly descending thresholds")
        return tiers


class TokenParams(BaseModel):
    """Reward token rules."""

    name: str = "Renewable Forecast Token"
    symbol: str = "RFT"
    decimals: int = Field(default=6, ge=0, le=18)
    supply_cap: int = Field(default=100_000_000, ge=1)
    initial_supply: int = Field(default=50_000_000, ge=0)
    mint_cooldown_blocks: int = Field(default=144, ge=1)
    zero_address: str = "SP000000000000000000002Q6VF78"


class MarketParams(BaseModel):
    """Master configuration for the whole market."""

    stake: StakeParams = Field(default_factory=StakeParams)
    forecast: ForecastParams = Field(default_factory=ForecastParams)
    scoring: ScoringParams = Field(default_factory=ScoringParams)
    token: TokenParams = Field(default_factory=TokenParams)
    admin: str = Field(
        default="gridstake.admin",
        min_length=1,
        description="Initial verifier identity and reward token mint admin.",
    )
    custody: str = Field(
        default="gridstake.custody",
        min_length=1,
        description="Principal that holds staked collateral in transfer events.",
    )


DEFAULT_MARKET_PARAMS = MarketParams()


def get_market_params() -> MarketParams:
    """Default market parameters."""
    return DEFAULT_MARKET_PARAMS


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``GRIDSTAKE_<SECTION>__<FIELD>`` and ``GRIDSTAKE_<FIELD>`` overrides."""
    overrides: dict[str, Any] = {}
    for key, raw in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = key[len(ENV_PREFIX):].lower().split("__")
        if len(path) == 1 and path[0] in ("admin", "custody"):
            overrides[path[0]] = raw
        elif len(path) == 2 and path[0] in _ENV_SECTIONS:
            overrides.setdefault(path[0], {})[path[1]] = raw
    return overrides


def load_market_params(environ: Mapping[str, str] | None = None) -> MarketParams:
    """Default parameters with environment overrides applied.

    Example: ``GRIDSTAKE_STAKE__MIN_STAKE=5000000``. Unknown sections are
    ignored; bad values raise pydantic's ``ValidationError``.
    """
    env = os.environ if environ is None else environ
    overrides = _env_overrides(env)
    if not overrides:
        return DEFAULT_MARKET_PARAMS

    data = DEFAULT_MARKET_PARAMS.model_dump()
    for section, value in overrides.items():
        if isinstance(value, dict):
            data[section].update(value)
        else:
            data[section] = value
    return MarketParams.model_validate(data)


__all__ = [
    "ConfidenceTier",
    "DEFAULT_MARKET_PARAMS",
    "ENV_PREFIX",
    "ForecastParams",
    "MarketParams",
    "ScoreBand",
    "ScoringParams",
    "StakeParams",
    "TokenParams",
    "get_market_params",
    "load_market_params",
]
