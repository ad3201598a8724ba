"""Range checks shared by forecast admission and oracle reporting."""

from __future__ import annotations

from gridstake.config.params import ForecastParams
from gridstake.shared.errors import ErrorCode


def check_region(region_id: int, params: ForecastParams) -> ErrorCode | None:
    if region_id < params.min_region_id or region_id > params.max_region_id:
        return ErrorCode.INVALID_REGION
    return None


def check_energy_value(value: int, params: ForecastParams) -> ErrorCode | None:
    if value < 0 or value > params.max_energy_value:
        return ErrorCode.INVALID_ENERGY_VALUE
    return None


def check_confidence(confidence: int, params: ForecastParams) -> ErrorCode | None:
    if confidence < params.min_confidence or confidence > params.max_confidence:
        return ErrorCode.INVALID_CONFIDENCE
    return None
