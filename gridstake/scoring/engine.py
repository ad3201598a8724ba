"""Oracle actuals, verification locks and exactly-once forecast scoring."""

from __future__ import annotations

from typing import TYPE_CHECKING

import bittensor as bt

from gridstake.config.params import ForecastParams, ScoringParams
from gridstake.ledger.checks import check_energy_value, check_region
from gridstake.ledger.models import ActualReading, Forecast, ForecastScore
from gridstake.shared.clock import BlockClock
from gridstake.shared.errors import ErrorCode, Result

from .accuracy import cycle_of, score_forecast

if TYPE_CHECKING:
    from gridstake.ledger.registry import ForecastRegistry


class AccuracyEngine:
    """Scores registry forecasts against oracle-reported actuals.

    Subscribes to the registry on construction so every admitted forecast
    gets a verification lock at ``target_timestamp + verification_delay``.
    """

    def __init__(
        self,
        clock: BlockClock,
        registry: ForecastRegistry,
        params: ScoringParams | None = None,
        forecast_params: ForecastParams | None = None,
    ):
        self.clock = clock
        self.registry = registry
        self.params = params or ScoringParams()
        self.forecast_params = forecast_params or registry.params

        self._oracle: str | None = None
        self._actuals: dict[tuple[int, int], ActualReading] = {}
        self._locks: dict[int, int] = {}

        registry.subscribe(self._arm_verification_lock)

    # -- reads --

    @property
    def oracle(self) -> str | None:
        return self._oracle

    def get_actual(self, region_id: int, cycle: int) -> ActualReading | None:
        reading = self._actuals.get((region_id, cycle))
        return reading.model_copy() if reading is not None else None

    def verification_unlocks_at(self, forecast_id: int) -> int | None:
        return self._locks.get(forecast_id)

    def get_score(self, forecast_id: int) -> Result[ForecastScore]:
        """Verification projection; ``ForecastNotFound`` for unknown ids."""
        forecast = self.registry.get_forecast(forecast_id)
        if forecast is None:
            return Result.failure(ErrorCode.FORECAST_NOT_FOUND, str(forecast_id))
        return Result.success(ForecastScore.from_forecast(forecast))

    def is_verifiable(self, forecast_id: int) -> Result[bool]:
        """Whether ``verify`` would succeed right now. Never mutates state."""
        forecast = self.registry.get_forecast(forecast_id)
        if forecast is None:
            return Result.failure(ErrorCode.FORECAST_NOT_FOUND, str(forecast_id))
        lock = self._locks.get(forecast_id)
        if lock is None:
            return Result.success(False)
        has_actual = self._actual_key(forecast) in self._actuals
        return Result.success(
            not forecast.verified and self.clock.height >= lock and has_actual
        )

    # -- operations --

    def register_oracle(self, caller: str, principal: str) -> Result[bool]:
        """One-time assignment of the oracle identity."""
        if self._oracle is not None:
            return self._reject("register_oracle", ErrorCode.ORACLE_ALREADY_SET, caller)
        if principal == caller:
            return self._reject("register_oracle", ErrorCode.SELF_ASSIGNMENT, caller)

        self._oracle = principal
        bt.logging.info({"accuracy_engine": {"event": "oracle_registered", "oracle": principal, "by": caller}})
        return Result.success(True)

    def report_actual(self, caller: str, region_id: int, cycle: int, value: int) -> Result[bool]:
        """Store (or overwrite) the actual reading for a region and cycle."""
        if self._oracle is None:
            return self._reject("report_actual", ErrorCode.ORACLE_NOT_SET, caller)
        if caller != self._oracle:
            return self._reject("report_actual", ErrorCode.NOT_AUTHORIZED, caller)
        for code in (
            check_region(region_id, self.forecast_params),
            check_energy_value(value, self.forecast_params),
        ):
            if code is not None:
                return self._reject("report_actual", code, caller, f"region={region_id} value={value}")
        if cycle < 0:
            return self._reject("report_actual", ErrorCode.INVALID_TIMESTAMP, caller, f"cycle={cycle}")

        key = (region_id, cycle)
        previous = self._actuals.get(key)
        self._actuals[key] = ActualReading(
            region_id=region_id,
            cycle=cycle,
            value=value,
            reported_at=self.clock.height,
        )
        bt.logging.info({"accuracy_engine": {
            "event": "actual_reported",
            "region_id": region_id,
            "cycle": cycle,
            "value": value,
            "overwrote": previous.value if previous is not None else None,
        }})
        return Result.success(True)

    def verify(self, forecast_id: int) -> Result[int]:
        """Score a forecast once its lock has elapsed and its actual is known."""
        forecast = self.registry.get_forecast(forecast_id)
        if forecast is None:
            return self._reject("verify", ErrorCode.FORECAST_NOT_FOUND, None, str(forecast_id))
        if forecast.verified:
            return self._reject("verify", ErrorCode.SCORE_ALREADY_COMPUTED, None, str(forecast_id))

        lock = self._locks.get(forecast_id)
        if lock is None or self.clock.height < lock:
            return self._reject(
                "verify", ErrorCode.VERIFICATION_LOCKED, None, f"id={forecast_id} unlocks_at={lock}",
            )

        reading = self._actuals.get(self._actual_key(forecast))
        if reading is None:
            return self._reject("verify", ErrorCode.ACTUAL_NOT_SET, None, f"id={forecast_id}")

        breakdown = score_forecast(
            forecast.predicted_value, reading.value, forecast.confidence, self.params,
        )
        self.registry.record_outcome(
            forecast_id,
            actual_value=reading.value,
            error_bp=breakdown.error_bp,
            score=breakdown.final_score,
        )

        bt.logging.info({"accuracy_engine": {
            "event": "forecast_verified",
            "forecast_id": forecast_id,
            "error_bp": breakdown.error_bp,
            "base_score": breakdown.base_score,
            "confidence_boost": breakdown.confidence_boost,
            "score": breakdown.final_score,
        }})
        return Result.success(breakdown.final_score)

    # -- internals --

    def _arm_verification_lock(self, forecast: Forecast) -> None:
        self._locks[forecast.forecast_id] = forecast.target_timestamp + self.params.verification_delay_blocks

    def _actual_key(self, forecast: Forecast) -> tuple[int, int]:
        return (forecast.region_id, cycle_of(forecast.target_timestamp, self.forecast_params.cycle_length))

    def _reject(self, op: str, code: ErrorCode, caller: str | None, detail: str = "") -> Result:
        bt.logging.debug({"accuracy_engine": {
            "event": f"{op}_rejected", "caller": caller, "reason": code.value, "detail": detail,
        }})
        return Result.failure(code, detail)

    def snapshot(self) -> dict:
        return {
            "oracle": self._oracle,
            "actuals": {key: r.model_dump() for key, r in sorted(self._actuals.items())},
            "verification_locks": dict(sorted(self._locks.items())),
        }


__all__ = ["AccuracyEngine"]
