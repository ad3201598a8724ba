"""ForecastMarket: the full call surface over one clock.

Wires the stake ledger, forecast registry, accuracy engine and reward token
together and adds per-bucket reward distribution. Every method takes the
calling principal explicitly; the block height comes from ``clock``.
"""

from __future__ import annotations

from typing import Any

import bittensor as bt

from gridstake.config.params import MarketParams, get_market_params
from gridstake.ledger.checks import check_region
from gridstake.ledger.models import ForecastScore
from gridstake.ledger.registry import ForecastRegistry
from gridstake.ledger.stake import StakeLedger
from gridstake.scoring.engine import AccuracyEngine
from gridstake.scoring.rewards import RewardResult, compute_rewards
from gridstake.shared.clock import BlockClock
from gridstake.shared.determinism import compute_hash
from gridstake.shared.errors import ErrorCode, Result
from gridstake.token.reward_token import RewardToken


class ForecastMarket:
    """Staked forecasting market with oracle-verified, score-weighted rewards."""

    def __init__(
        self,
        params: MarketParams | None = None,
        clock: BlockClock | None = None,
        start_height: int = 0,
    ):
        self.params = params or get_market_params()
        self.clock = clock or BlockClock(start_height)

        zero = self.params.token.zero_address
        self.ledger = StakeLedger(
            self.clock,
            self.params.stake,
            admin=self.params.admin,
            custody=self.params.custody,
            zero_address=zero,
        )
        self.registry = ForecastRegistry(self.clock, self.ledger, self.params.forecast)
        self.engine = AccuracyEngine(
            self.clock, self.registry, self.params.scoring, self.params.forecast,
        )
        self.token = RewardToken(self.clock, self.params.token, admin=self.params.admin)

        self._distributions: dict[tuple[int, int], RewardResult] = {}

    # -- oracle / verifier identities --

    def set_oracle(self, caller: str, principal: str) -> Result[bool]:
        return self.engine.register_oracle(caller, principal)

    def set_verifier(self, caller: str, principal: str) -> Result[bool]:
        return self.registry.set_verifier(caller, principal)

    # -- staking --

    def stake(self, caller: str, amount: int) -> Result[bool]:
        return self.ledger.stake(caller, amount)

    def unstake(self, caller: str, amount: int) -> Result[bool]:
        return self.ledger.unstake(caller, amount)

    def lock_stake_on_slash(self, caller: str, principal: str) -> Result[bool]:
        return self.ledger.slash(caller, principal)

    # -- forecasts --

    def submit_forecast(
        self,
        caller: str,
        region_id: int,
        predicted_mw: int,
        confidence: int,
        target_timestamp: int,
    ) -> Result[int]:
        return self.registry.submit_forecast(caller, region_id, predicted_mw, confidence, target_timestamp)

    def submit_actual(self, caller: str, region_id: int, cycle: int, actual_mw: int) -> Result[bool]:
        return self.engine.report_actual(caller, region_id, cycle, actual_mw)

    def verify_forecast(self, caller: str, forecast_id: int) -> Result[int]:
        """Anyone may trigger verification; ``caller`` is only logged."""
        bt.logging.debug({"forecast_market": {"event": "verify_requested", "caller": caller, "forecast_id": forecast_id}})
        return self.engine.verify(forecast_id)

    def get_forecast_score(self, forecast_id: int) -> Result[ForecastScore]:
        return self.engine.get_score(forecast_id)

    def is_forecast_verifiable(self, forecast_id: int) -> Result[bool]:
        return self.engine.is_verifiable(forecast_id)

    # -- reward token --

    def initialize_token(self, caller: str) -> Result[bool]:
        return self.token.initialize(caller)

    def transfer(self, caller: str, amount: int, sender: str, recipient: str) -> Result[bool]:
        return self.token.transfer(caller, amount, sender, recipient)

    def approve(self, caller: str, spender: str, amount: int) -> Result[bool]:
        return self.token.approve(caller, spender, amount)

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> Result[bool]:
        return self.token.transfer_from(caller, owner, recipient, amount)

    def mint(self, caller: str, amount: int, recipient: str) -> Result[bool]:
        return self.token.mint(caller, amount, recipient)

    def burn(self, caller: str, amount: int) -> Result[bool]:
        return self.token.burn(caller, amount)

    def set_mint_admin(self, caller: str, new_admin: str) -> Result[bool]:
        """Hand over the mint admin role. The new admin also becomes the reward treasury."""
        return self.token.set_mint_admin(caller, new_admin)

    def set_token_uri(self, caller: str, uri: str) -> Result[bool]:
        return self.token.set_token_uri(caller, uri)

    def set_mint_cooldown(self, caller: str, blocks: int) -> Result[bool]:
        return self.token.set_mint_cooldown(caller, blocks)

    def toggle_mint(self, caller: str) -> Result[bool]:
        return self.token.toggle_mint(caller)

    def toggle_burn(self, caller: str) -> Result[bool]:
        return self.token.toggle_burn(caller)

    def toggle_transfer(self, caller: str) -> Result[bool]:
        return self.token.toggle_transfer(caller)

    # -- rewards --

    def get_distribution(self, region_id: int, cycle: int) -> RewardResult | None:
        return self._distributions.get((region_id, cycle))

    def distribute_rewards(self, caller: str, region_id: int, cycle: int, pool: int) -> Result[RewardResult]:
        """Pay ``pool`` reward tokens from the treasury across a verified bucket.

        The treasury is the token's mint admin. Every forecast in the bucket
        must be verified first, and a bucket pays out at most once.
        """
        def _reject(code: ErrorCode, detail: str = "") -> Result[RewardResult]:
            bt.logging.debug({"forecast_market": {
                "event": "distribution_rejected", "region_id": region_id, "cycle": cycle,
                "reason": code.value, "detail": detail,
            }})
            return Result.failure(code, detail)

        treasury = self.token.mint_admin
        if caller != treasury:
            return _reject(ErrorCode.NOT_AUTHORIZED, f"caller={caller}")
        region_error = check_region(region_id, self.params.forecast)
        if region_error is not None:
            return _reject(region_error)
        if pool <= 0:
            return _reject(ErrorCode.INVALID_AMOUNT, str(pool))
        key = (region_id, cycle)
        if key in self._distributions:
            return _reject(ErrorCode.REWARDS_ALREADY_DISTRIBUTED)

        forecasts = self.registry.forecasts_for(region_id, cycle)
        if not forecasts:
            return _reject(ErrorCode.NO_FORECASTS)
        pending = [f.forecast_id for f in forecasts if not f.verified]
        if pending:
            return _reject(ErrorCode.REWARDS_PENDING, f"unverified={pending}")

        result = compute_rewards(forecasts, pool, region_id=region_id, cycle=cycle)
        payouts = [(r, a) for r, a in result.payouts().items() if r != treasury]
        if payouts:
            paid = self.token.transfer_many(treasury, payouts)
            if not paid:
                return _reject(paid.error, paid.detail)

        self._distributions[key] = result
        bt.logging.info({"forecast_market": {
            "event": "rewards_distributed",
            "region_id": region_id,
            "cycle": cycle,
            "pool": pool,
            "total_score": result.total_score,
            "distributed": result.distributed,
            "recipients": len(payouts),
        }})
        return Result.success(result)

    # -- state --

    def snapshot(self) -> dict[str, Any]:
        """Complete state as plain data, suitable for hashing or export."""
        return {
            "block_height": self.clock.height,
            "stake_ledger": self.ledger.snapshot(),
            "forecast_registry": self.registry.snapshot(),
            "accuracy_engine": self.engine.snapshot(),
            "reward_token": self.token.snapshot(),
            "distributions": {key: r.as_dict() for key, r in sorted(self._distributions.items())},
        }

    def state_digest(self) -> str:
        return compute_hash(self.snapshot())


__all__ = ["ForecastMarket"]
