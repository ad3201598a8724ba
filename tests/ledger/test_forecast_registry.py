"""Tests for forecast admission, id allocation and bucket capacity."""

import pytest

from gridstake.ledger.registry import ForecastRegistry
from gridstake.scoring.engine import AccuracyEngine
from gridstake.shared.errors import ErrorCode, ErrorKind

ADMIN = "gridstake.admin"


@pytest.fixture
def staked(ledger):
    ledger.stake("alice", 2_000_000)
    return ledger


class TestSubmitForecast:

    def test_submits_successfully(self, registry, staked):
        result = registry.submit_forecast("alice", 1, 5000, 80, 1500)
        assert result.ok
        assert result.value == 0

        forecast = registry.get_forecast(0)
        assert forecast.region_id == 1
        assert forecast.predicted_value == 5000
        assert forecast.confidence == 80
        assert forecast.target_timestamp == 1500
        assert forecast.submitter == "alice"
        assert forecast.cycle == 10
        assert forecast.stake_snapshot == 2_000_000
        assert forecast.submitted_at == 1000
        assert forecast.verified is False
        assert forecast.score is None

    def test_ids_are_sequential(self, registry, staked):
        ids = [registry.submit_forecast("alice", 1 + i, 5000, 80, 1500).value for i in range(5)]
        assert ids == [0, 1, 2, 3, 4]
        assert registry.next_forecast_id == 5

    def test_rejects_without_stake(self, registry):
        result = registry.submit_forecast("alice", 1, 5000, 80, 1500)
        assert result.error is ErrorCode.STAKE_INSUFFICIENT
        assert registry.next_forecast_id == 0

    @pytest.mark.parametrize("args, code", [
        ((0, 5000, 80, 1500), ErrorCode.INVALID_REGION),
        ((1001, 5000, 80, 1500), ErrorCode.INVALID_REGION),
        ((1, 1_000_001, 80, 1500), ErrorCode.INVALID_ENERGY_VALUE),
        ((1, 5000, 0, 1500), ErrorCode.INVALID_CONFIDENCE),
        ((1, 5000, 101, 1500), ErrorCode.INVALID_CONFIDENCE),
        ((1, 5000, 80, 1000), ErrorCode.INVALID_TIMESTAMP),
        ((1, 5000, 80, 999), ErrorCode.INVALID_TIMESTAMP),
    ])
    def test_rejects_invalid_input(self, registry, staked, args, code):
        result = registry.submit_forecast("alice", *args)
        assert result.error is code
        assert result.kind is ErrorKind.INVALID_INPUT
        assert registry.next_forecast_id == 0
        assert len(registry) == 0

    def test_bounds_are_inclusive(self, registry, staked):
        assert registry.submit_forecast("alice", 1000, 1_000_000, 100, 1001).ok
        assert registry.submit_forecast("alice", 1, 0, 1, 1001).ok

    def test_input_checked_before_stake(self, registry):
        assert registry.submit_forecast("nobody", 0, 5000, 80, 1500).error is ErrorCode.INVALID_REGION

    def test_rejects_past_timestamp(self, clock, registry, staked):
        clock.advance_to(2000)
        result = registry.submit_forecast("alice", 1, 5000, 80, 1999)
        assert result.error is ErrorCode.INVALID_TIMESTAMP

    def test_slashed_forecaster_cannot_submit(self, clock, registry, staked):
        staked.slash(ADMIN, "alice")
        result = registry.submit_forecast("alice", 1, 5000, 80, 5000)
        assert result.error is ErrorCode.LOCK_PERIOD
        assert result.kind is ErrorKind.TIMING_NOT_ELAPSED

        clock.advance_to(1000 + 2016)
        assert registry.submit_forecast("alice", 1, 5000, 80, 5000).ok

    def test_rejected_attempts_do_not_consume_ids(self, registry, staked):
        registry.submit_forecast("alice", 1, 5000, 80, 1500)
        registry.submit_forecast("alice", 0, 5000, 80, 1500)
        registry.submit_forecast("bob", 1, 5000, 80, 1500)
        assert registry.submit_forecast("alice", 2, 5000, 80, 1500).value == 1


class TestBuckets:

    def test_groups_by_region_and_cycle(self, registry, staked):
        registry.submit_forecast("alice", 1, 5000, 80, 1440)
        registry.submit_forecast("alice", 1, 5000, 80, 1583)
        registry.submit_forecast("alice", 1, 5000, 80, 1584)
        registry.submit_forecast("alice", 2, 5000, 80, 1440)
        assert registry.bucket(1, 10) == (0, 1)
        assert registry.bucket(1, 11) == (2,)
        assert registry.bucket(2, 10) == (3,)
        assert registry.bucket(3, 10) == ()

    def test_limits_forecasts_per_region_cycle(self, ledger, registry):
        for i in range(100):
            ledger.stake(f"user{i}", 2_000_000)
            assert registry.submit_forecast(f"user{i}", 1, 5000, 80, 1440).value == i

        ledger.stake("user101", 2_000_000)
        result = registry.submit_forecast("user101", 1, 5000, 80, 1440)
        assert result.error is ErrorCode.BUCKET_FULL
        assert result.kind is ErrorKind.CAPACITY_EXCEEDED
        assert registry.next_forecast_id == 100
        assert len(registry.bucket(1, 10)) == 100

        # a different cycle still has room
        assert registry.submit_forecast("user101", 1, 5000, 80, 1440 + 144).value == 100

    def test_forecasts_for_returns_bucket_order(self, registry, staked):
        registry.submit_forecast("alice", 7, 10, 80, 1440)
        registry.submit_forecast("alice", 7, 20, 80, 1500)
        values = [f.predicted_value for f in registry.forecasts_for(7, 10)]
        assert values == [10, 20]


class TestListenersAndOutcomes:

    def test_listener_receives_admitted_forecast(self, clock, ledger):
        registry = ForecastRegistry(clock, ledger)
        seen = []
        registry.subscribe(seen.append)
        ledger.stake("alice", 2_000_000)
        registry.submit_forecast("alice", 1, 5000, 80, 1500)
        registry.submit_forecast("alice", 0, 5000, 80, 1500)
        assert [f.forecast_id for f in seen] == [0]

    def test_failing_listener_does_not_undo_admission(self, clock, ledger):
        registry = ForecastRegistry(clock, ledger)

        def broken(forecast):
            raise RuntimeError("listener down")

        registry.subscribe(broken)
        engine = AccuracyEngine(clock, registry)
        ledger.stake("alice", 2_000_000)

        result = registry.submit_forecast("alice", 1, 5000, 80, 1500)
        assert result.ok
        assert result.value == 0
        assert registry.next_forecast_id == 1
        assert registry.bucket(1, 10) == (0,)
        assert engine.verification_unlocks_at(0) == 1500 + 144

    def test_record_outcome_once(self, registry, staked):
        registry.submit_forecast("alice", 1, 5000, 80, 1500)
        updated = registry.record_outcome(0, actual_value=5000, error_bp=0, score=110)
        assert updated.verified
        assert registry.get_forecast(0).score == 110
        with pytest.raises(ValueError):
            registry.record_outcome(0, actual_value=1, error_bp=1, score=1)
        assert registry.get_forecast(0).actual_value == 5000

    def test_get_forecast_is_a_copy(self, registry, staked):
        registry.submit_forecast("alice", 1, 5000, 80, 1500)
        registry.get_forecast(0).verified = True
        assert registry.get_forecast(0).verified is False

    def test_unknown_forecast(self, registry):
        assert registry.get_forecast(42) is None

    def test_set_verifier_delegates_to_ledger(self, registry, ledger):
        assert registry.set_verifier(ADMIN, "verifier").ok
        assert ledger.verifier == "verifier"
        assert registry.set_verifier(ADMIN, "other").error is ErrorCode.NOT_AUTHORIZED
