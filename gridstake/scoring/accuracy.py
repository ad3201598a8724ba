"""Integer scoring math shared by the registry and the accuracy engine.

Everything is exact integer arithmetic in basis points so that any two
implementations agree on every score.
"""

from __future__ import annotations

from dataclasses import dataclass

from gridstake.config.params import ScoringParams

CYCLE_LENGTH = 144
BP_SCALE = 10_000

_DEFAULT_SCORING = ScoringParams()


def cycle_of(target_timestamp: int, cycle_length: int = CYCLE_LENGTH) -> int:
    """Cycle index containing ``target_timestamp``."""
    return target_timestamp // cycle_length


def absolute_error(predicted: int, actual: int) -> int:
    return predicted - actual if predicted > actual else actual - predicted


def relative_error_bp(predicted: int, actual: int, bp_scale: int = BP_SCALE) -> int:
    """floor(bp_scale * |predicted - actual| / actual); zero when actual is zero."""
    if actual == 0:
        return 0
    return (bp_scale * absolute_error(predicted, actual)) // actual


def base_score(error_bp: int, params: ScoringParams | None = None) -> int:
    """Walk the score ladder from the largest error band down."""
    params = params or _DEFAULT_SCORING
    for band in params.score_bands:
        if error_bp >= band.min_error_bp:
            return band.score
    return params.perfect_score


def confidence_boost(confidence: int, params: ScoringParams | None = None) -> int:
    params = params or _DEFAULT_SCORING
    for tier in params.confidence_tiers:
        if confidence > tier.above:
            return tier.boost
    return 0


@dataclass(frozen=True)
class ScoreBreakdown:
    """Every intermediate value of one forecast score."""

    absolute_error: int
    error_bp: int
    base_score: int
    confidence_boost: int

    @property
    def final_score(self) -> int:
        # Not capped: a perfect forecast at high confidence scores above 100.
        return self.base_score + self.confidence_boost


def score_forecast(
    predicted: int,
    actual: int,
    confidence: int,
    params: ScoringParams | None = None,
) -> ScoreBreakdown:
    params = params or _DEFAULT_SCORING
    error_bp = relative_error_bp(predicted, actual, params.bp_scale)
    return ScoreBreakdown(
        absolute_error=absolute_error(predicted, actual),
        error_bp=error_bp,
        base_score=base_score(error_bp, params),
        confidence_boost=confidence_boost(confidence, params),
    )


__all__ = [
    "BP_SCALE",
    "CYCLE_LENGTH",
    "ScoreBreakdown",
    "absolute_error",
    "base_score",
    "confidence_boost",
    "cycle_of",
    "relative_error_bp",
    "score_forecast",
]
