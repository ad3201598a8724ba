"""Forecast admission, id allocation and region/cycle buckets."""

from __future__ import annotations

from typing import Callable

import bittensor as bt

from gridstake.config.params import ForecastParams
from gridstake.scoring.accuracy import cycle_of
from gridstake.shared.clock import BlockClock
from gridstake.shared.errors import ErrorCode, Result

from .checks import check_confidence, check_energy_value, check_region
from .models import Forecast
from .stake import StakeLedger

SubmissionListener = Callable[[Forecast], None]


class ForecastRegistry:
    """Admits forecasts from staked, unlocked participants.

    Ids are allocated sequentially from 0 and only once every check has
    passed, so a rejected submission never consumes one.
    """

    def __init__(
        self,
        clock: BlockClock,
        ledger: StakeLedger,
        params: ForecastParams | None = None,
    ):
        self.clock = clock
        self.ledger = ledger
        self.params = params or ForecastParams()

        self._next_id = 0
        self._forecasts: dict[int, Forecast] = {}
        self._buckets: dict[tuple[int, int], list[int]] = {}
        self._listeners: list[SubmissionListener] = []

    # -- wiring --

    def subscribe(self, listener: SubmissionListener) -> None:
        """Call ``listener`` with every newly admitted forecast."""
        self._listeners.append(listener)

    def set_verifier(self, caller: str, principal: str) -> Result[bool]:
        return self.ledger.set_verifier(caller, principal)

    # -- reads --

    @property
    def next_forecast_id(self) -> int:
        return self._next_id

    def get_forecast(self, forecast_id: int) -> Forecast | None:
        forecast = self._forecasts.get(forecast_id)
        return forecast.model_copy() if forecast is not None else None

    def bucket(self, region_id: int, cycle: int) -> tuple[int, ...]:
        return tuple(self._buckets.get((region_id, cycle), ()))

    def forecasts_for(self, region_id: int, cycle: int) -> list[Forecast]:
        return [self._forecasts[fid].model_copy() for fid in self._buckets.get((region_id, cycle), ())]

    def __len__(self) -> int:
        return len(self._forecasts)

    # -- operations --

    def submit_forecast(
        self,
        caller: str,
        region_id: int,
        predicted_value: int,
        confidence: int,
        target_timestamp: int,
    ) -> Result[int]:
        """Admit a forecast and return its id."""
        now = self.clock.height

        for code in (
            check_region(region_id, self.params),
            check_energy_value(predicted_value, self.params),
            check_confidence(confidence, self.params),
        ):
            if code is not None:
                return self._reject(code, caller, region_id)
        if target_timestamp <= now:
            return self._reject(ErrorCode.INVALID_TIMESTAMP, caller, region_id, f"{target_timestamp}<={now}")

        stake = self.ledger.stake_of(caller)
        if stake < self.ledger.params.min_stake:
            return self._reject(ErrorCode.STAKE_INSUFFICIENT, caller, region_id, f"stake={stake}")
        if self.ledger.is_locked(caller):
            return self._reject(
                ErrorCode.LOCK_PERIOD, caller, region_id, f"unlocks_at={self.ledger.unlocks_at(caller)}",
            )

        cycle = cycle_of(target_timestamp, self.params.cycle_length)
        key = (region_id, cycle)
        bucket = self._buckets.get(key, [])
        if len(bucket) >= self.params.max_forecasts_per_bucket:
            return self._reject(ErrorCode.BUCKET_FULL, caller, region_id, f"cycle={cycle}")

        forecast_id = self._next_id
        forecast = Forecast(
            forecast_id=forecast_id,
            region_id=region_id,
            predicted_value=predicted_value,
            confidence=confidence,
            target_timestamp=target_timestamp,
            submitter=caller,
            cycle=cycle,
            stake_snapshot=stake,
            submitted_at=now,
        )
        self._forecasts[forecast_id] = forecast
        self._buckets.setdefault(key, bucket).append(forecast_id)
        self._next_id += 1

        bt.logging.info({"forecast_registry": {
            "event": "forecast_submitted",
            "forecast_id": forecast_id,
            "submitter": caller,
            "region_id": region_id,
            "cycle": cycle,
            "bucket_size": len(bucket),
        }})

        self._notify(forecast)
        return Result.success(forecast_id)

    def record_outcome(
        self,
        forecast_id: int,
        actual_value: int,
        error_bp: int,
        score: int,
    ) -> Forecast:
        """Store a verification outcome. Only the accuracy engine calls this.

        Raises:
            KeyError: unknown forecast id.
            ValueError: the forecast already carries an outcome.
        """
        forecast = self._forecasts[forecast_id]
        if forecast.verified:
            raise ValueError(f"forecast {forecast_id} already verified")

        updated = forecast.model_copy(update={
            "verified": True,
            "actual_value": actual_value,
            "error_bp": error_bp,
            "score": score,
        })
        self._forecasts[forecast_id] = updated
        return updated.model_copy()

    # -- internals --

    def _notify(self, forecast: Forecast) -> None:
        """Run every listener on an admitted forecast.

        The admission is already committed, so one failing listener is logged
        and the rest still run.
        """
        for listener in self._listeners:
            try:
                listener(forecast.model_copy())
            except Exception as e:
                bt.logging.warning({"forecast_registry": {
                    "event": "listener_error",
                    "forecast_id": forecast.forecast_id,
                    "listener": getattr(listener, "__qualname__", repr(listener)),
                    "error": str(e),
                }})

    def _reject(self, code: ErrorCode, caller: str, region_id: int, detail: str = "") -> Result[int]:
        bt.logging.debug({"forecast_registry": {
            "event": "submission_rejected",
            "submitter": caller,
            "region_id": region_id,
            "reason": code.value,
            "detail": detail,
        }})
        return Result.failure(code, detail)

    def snapshot(self) -> dict:
        return {
            "next_forecast_id": self._next_id,
            "forecasts": {fid: f.model_dump() for fid, f in sorted(self._forecasts.items())},
            "buckets": {key: list(ids) for key, ids in sorted(self._buckets.items())},
        }


__all__ = ["ForecastRegistry", "SubmissionListener"]
