"""Stake custody: deposits, withdrawals and slash-triggered re-locking."""

from __future__ import annotations

import bittensor as bt

from gridstake.config.params import StakeParams
from gridstake.shared.clock import BlockClock
from gridstake.shared.errors import ErrorCode, Result

from .models import Stake, TransferEvent


class StakeLedger:
    """Per-principal collateral with lock windows.

    The verifier identity is the only principal allowed to slash. It starts
    as ``admin`` and can be handed over by its current holder.
    """

    def __init__(
        self,
        clock: BlockClock,
        params: StakeParams | None = None,
        admin: str = "gridstake.admin",
        custody: str = "gridstake.custody",
        zero_address: str | None = None,
    ):
        self.clock = clock
        self.params = params or StakeParams()
        self.custody = custody
        self.zero_address = zero_address

        self._verifier = admin
        self._stakes: dict[str, Stake] = {}
        self._transfers: list[TransferEvent] = []

    # -- reads --

    @property
    def verifier(self) -> str:
        return self._verifier

    @property
    def transfers(self) -> tuple[TransferEvent, ...]:
        return tuple(self._transfers)

    def get_stake(self, principal: str) -> Stake:
        """Copy of the principal's stake record (zero if never staked)."""
        stake = self._stakes.get(principal)
        return stake.model_copy() if stake is not None else Stake()

    def stake_of(self, principal: str) -> int:
        stake = self._stakes.get(principal)
        return stake.amount if stake is not None else 0

    def is_locked(self, principal: str) -> bool:
        """True while the principal is inside a slash lock window."""
        stake = self._stakes.get(principal)
        if stake is None or stake.lock_until is None:
            return False
        return self.clock.height < stake.lock_until + self.params.unstake_lock_blocks

    def unlocks_at(self, principal: str) -> int | None:
        stake = self._stakes.get(principal)
        if stake is None or stake.lock_until is None:
            return None
        return stake.lock_until + self.params.unstake_lock_blocks

    # -- operations --

    def stake(self, caller: str, amount: int) -> Result[bool]:
        """Deposit ``amount`` into custody for ``caller``."""
        if amount < self.params.min_stake:
            return self._reject(
                "stake", ErrorCode.INVALID_STAKE_AMOUNT, caller,
                f"{amount}<{self.params.min_stake}",
            )

        record = self._stakes.setdefault(caller, Stake())
        record.amount += amount
        self._record_transfer(amount, caller, self.custody)

        bt.logging.info({"stake_ledger": {
            "event": "staked", "principal": caller, "amount": amount, "balance": record.amount,
        }})
        return Result.success(True)

    def unstake(self, caller: str, amount: int) -> Result[bool]:
        """Withdraw ``amount`` from custody back to ``caller``."""
        if amount <= 0:
            return self._reject("unstake", ErrorCode.INVALID_STAKE_AMOUNT, caller, str(amount))

        balance = self.stake_of(caller)
        if amount > balance:
            return self._reject(
                "unstake", ErrorCode.INSUFFICIENT_STAKE, caller, f"{amount}>{balance}",
            )
        if self.is_locked(caller):
            return self._reject(
                "unstake", ErrorCode.LOCK_PERIOD, caller, f"unlocks_at={self.unlocks_at(caller)}",
            )

        record = self._stakes[caller]
        record.amount -= amount
        self._record_transfer(amount, self.custody, caller)

        bt.logging.info({"stake_ledger": {
            "event": "unstaked", "principal": caller, "amount": amount, "balance": record.amount,
        }})
        return Result.success(True)

    def slash(self, caller: str, user: str) -> Result[bool]:
        """Re-arm ``user``'s lock window from the current block.

        The balance is left untouched.
        """
        if caller != self._verifier:
            return self._reject("slash", ErrorCode.NOT_AUTHORIZED, caller, f"user={user}")

        record = self._stakes.setdefault(user, Stake())
        record.lock_until = self.clock.height

        bt.logging.info({"stake_ledger": {
            "event": "slashed", "principal": user, "by": caller,
            "lock_until": record.lock_until, "unlocks_at": self.unlocks_at(user),
        }})
        return Result.success(True)

    def set_verifier(self, caller: str, principal: str) -> Result[bool]:
        """Hand the slashing authority to ``principal``."""
        if caller != self._verifier:
            return self._reject("set_verifier", ErrorCode.NOT_AUTHORIZED, caller)
        if not principal or principal == self.zero_address:
            return self._reject("set_verifier", ErrorCode.ZERO_ADDRESS, caller, principal)

        previous, self._verifier = self._verifier, principal
        bt.logging.info({"stake_ledger": {
            "event": "verifier_changed", "previous": previous, "verifier": principal,
        }})
        return Result.success(True)

    # -- internals --

    def _record_transfer(self, amount: int, sender: str, recipient: str) -> None:
        self._transfers.append(TransferEvent(
            amount=amount,
            sender=sender,
            recipient=recipient,
            block_height=self.clock.height,
        ))

    def _reject(self, op: str, code: ErrorCode, caller: str, detail: str = "") -> Result[bool]:
        bt.logging.debug({"stake_ledger": {
            "event": f"{op}_rejected", "principal": caller, "reason": code.value, "detail": detail,
        }})
        return Result.failure(code, detail)

    def snapshot(self) -> dict:
        return {
            "verifier": self._verifier,
            "stakes": {p: s.model_dump() for p, s in sorted(self._stakes.items())},
            "transfers": [t.model_dump() for t in self._transfers],
        }


__all__ = ["StakeLedger"]
