"""Pydantic models for stake custody, forecasts and oracle readings."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Stake custody
# ---------------------------------------------------------------------------


class Stake(BaseModel):
    """Collateral held for one participant.

    ``lock_until`` stays unset until the participant is slashed; from then on
    unstaking and submitting wait ``unstake_lock_blocks`` past it.
    """

    amount: int = Field(default=0, ge=0)
    lock_until: int | None = None


class TransferEvent(BaseModel):
    """Custody movement recorded by the stake ledger."""

    amount: int = Field(ge=0)
    sender: str
    recipient: str
    block_height: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Forecasts
# ---------------------------------------------------------------------------


class Forecast(BaseModel):
    """A submitted forecast plus its verification outcome.

    The outcome fields (``actual_value``, ``error_bp``, ``score``) are set
    together with ``verified`` exactly once.
    """

    forecast_id: int = Field(ge=0)
    region_id: int
    predicted_value: int = Field(ge=0)
    confidence: int
    target_timestamp: int = Field(ge=0)
    submitter: str
    cycle: int = Field(ge=0)
    stake_snapshot: int = Field(ge=0, description="Submitter's stake at admission")
    submitted_at: int = Field(ge=0)

    verified: bool = False
    actual_value: int | None = None
    error_bp: int | None = None
    score: int | None = None

    @property
    def bucket_key(self) -> tuple[int, int]:
        return (self.region_id, self.cycle)


class ForecastScore(BaseModel):
    """Read projection of a forecast's verification result."""

    forecast_id: int
    verified: bool
    score: int | None = None
    error_bp: int | None = None
    actual: int | None = None

    @classmethod
    def from_forecast(cls, forecast: Forecast) -> ForecastScore:
        return cls(
            forecast_id=forecast.forecast_id,
            verified=forecast.verified,
            score=forecast.score,
            error_bp=forecast.error_bp,
            actual=forecast.actual_value,
        )


# ---------------------------------------------------------------------------
# Oracle readings
# ---------------------------------------------------------------------------


class ActualReading(BaseModel):
    """Oracle-reported ground truth for a (region, cycle)."""

    region_id: int
    cycle: int = Field(ge=0)
    value: int = Field(ge=0)
    reported_at: int = Field(ge=0)


__all__ = [
    "ActualReading",
    "Forecast",
    "ForecastScore",
    "Stake",
    "TransferEvent",
]
