"""Reward token ledger funding forecast payouts."""

from .reward_token import RewardToken

__all__ = ["RewardToken"]
