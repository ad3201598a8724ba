"""Fungible reward token: balances, allowances, capped minting, admin toggles."""

from __future__ import annotations

from typing import Iterable

import bittensor as bt

from gridstake.config.params import TokenParams
from gridstake.shared.clock import BlockClock
from gridstake.shared.errors import ErrorCode, Result


class RewardToken:
    """Reward token ledger.

    ``total_minted`` counts every unit ever minted and is what the supply cap
    bounds; burning lowers ``total_supply`` but does not free cap room.
    """

    def __init__(
        self,
        clock: BlockClock,
        params: TokenParams | None = None,
        admin: str = "gridstake.admin",
    ):
        self.clock = clock
        self.params = params or TokenParams()

        self._mint_admin = admin
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_minted = 0
        self._total_burned = 0
        self._last_mint_block: int | None = None
        self._mint_cooldown = self.params.mint_cooldown_blocks
        self._token_uri = ""

        self.mint_enabled = True
        self.burn_enabled = True
        self.transfer_enabled = True

    # -- metadata and reads --

    @property
    def name(self) -> str:
        return self.params.name

    @property
    def symbol(self) -> str:
        return self.params.symbol

    @property
    def decimals(self) -> int:
        return self.params.decimals

    @property
    def mint_admin(self) -> str:
        return self._mint_admin

    @property
    def mint_cooldown(self) -> int:
        return self._mint_cooldown

    @property
    def token_uri(self) -> str | None:
        return self._token_uri or None

    @property
    def total_minted(self) -> int:
        return self._total_minted

    @property
    def total_supply(self) -> int:
        return self._total_minted - self._total_burned

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    # -- transfers --

    def transfer(self, caller: str, amount: int, sender: str, recipient: str) -> Result[bool]:
        if not self.transfer_enabled:
            return self._reject("transfer", ErrorCode.TRANSFER_NOT_ENABLED, caller)
        if amount <= 0:
            return self._reject("transfer", ErrorCode.INVALID_AMOUNT, caller, str(amount))
        if caller != sender:
            return self._reject("transfer", ErrorCode.NOT_AUTHORIZED, caller, f"sender={sender}")
        if sender == recipient:
            return self._reject("transfer", ErrorCode.SELF_TRANSFER, caller)
        if self._is_zero(recipient):
            return self._reject("transfer", ErrorCode.ZERO_ADDRESS, caller)
        if self.balance_of(sender) < amount:
            return self._reject(
                "transfer", ErrorCode.INSUFFICIENT_BALANCE, caller, f"{self.balance_of(sender)}<{amount}",
            )

        self._move(sender, recipient, amount)
        bt.logging.info({"reward_token": {"event": "transfer", "from": sender, "to": recipient, "amount": amount}})
        return Result.success(True)

    def approve(self, caller: str, spender: str, amount: int) -> Result[bool]:
        """Set (not add to) ``spender``'s allowance over the caller's balance."""
        if amount <= 0:
            return self._reject("approve", ErrorCode.INVALID_AMOUNT, caller, str(amount))
        if spender == caller:
            return self._reject("approve", ErrorCode.SELF_APPROVAL, caller)
        if self._is_zero(spender):
            return self._reject("approve", ErrorCode.ZERO_ADDRESS, caller)

        self._allowances[(caller, spender)] = amount
        bt.logging.info({"reward_token": {"event": "approve", "owner": caller, "spender": spender, "amount": amount}})
        return Result.success(True)

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> Result[bool]:
        if not self.transfer_enabled:
            return self._reject("transfer_from", ErrorCode.TRANSFER_NOT_ENABLED, caller)
        if amount <= 0:
            return self._reject("transfer_from", ErrorCode.INVALID_AMOUNT, caller, str(amount))
        allowance = self.allowance(owner, caller)
        if allowance < amount:
            return self._reject("transfer_from", ErrorCode.INSUFFICIENT_ALLOWANCE, caller, f"{allowance}<{amount}")
        if owner == recipient:
            return self._reject("transfer_from", ErrorCode.SELF_TRANSFER, caller)
        if self._is_zero(recipient):
            return self._reject("transfer_from", ErrorCode.ZERO_ADDRESS, caller)
        if self.balance_of(owner) < amount:
            return self._reject("transfer_from", ErrorCode.INSUFFICIENT_BALANCE, caller)

        self._allowances[(owner, caller)] = allowance - amount
        self._move(owner, recipient, amount)
        bt.logging.info({"reward_token": {
            "event": "transfer_from", "spender": caller, "from": owner, "to": recipient, "amount": amount,
        }})
        return Result.success(True)

    def transfer_many(self, caller: str, payouts: Iterable[tuple[str, int]]) -> Result[int]:
        """Pay several recipients from the caller's balance, all or nothing.

        Returns the total amount moved.
        """
        batch = list(payouts)
        if not self.transfer_enabled:
            return self._reject("transfer_many", ErrorCode.TRANSFER_NOT_ENABLED, caller)
        for recipient, amount in batch:
            if amount <= 0:
                return self._reject("transfer_many", ErrorCode.INVALID_AMOUNT, caller, f"{recipient}:{amount}")
            if recipient == caller:
                return self._reject("transfer_many", ErrorCode.SELF_TRANSFER, caller)
            if self._is_zero(recipient):
                return self._reject("transfer_many", ErrorCode.ZERO_ADDRESS, caller)
        total = sum(amount for _, amount in batch)
        if self.balance_of(caller) < total:
            return self._reject(
                "transfer_many", ErrorCode.INSUFFICIENT_BALANCE, caller, f"{self.balance_of(caller)}<{total}",
            )

        for recipient, amount in batch:
            self._move(caller, recipient, amount)
        bt.logging.info({"reward_token": {
            "event": "transfer_many", "from": caller, "recipients": len(batch), "total": total,
        }})
        return Result.success(total)

    # -- supply --

    def initialize(self, caller: str) -> Result[bool]:
        """Mint the initial supply to the admin. Allowed once."""
        if caller != self._mint_admin:
            return self._reject("initialize", ErrorCode.NOT_AUTHORIZED, caller)
        if self._total_minted != 0:
            return self._reject("initialize", ErrorCode.ALREADY_INITIALIZED, caller)

        initial = self.params.initial_supply
        self._balances[caller] = self.balance_of(caller) + initial
        self._total_minted = initial
        bt.logging.info({"reward_token": {"event": "initialized", "admin": caller, "supply": initial}})
        return Result.success(True)

    def mint(self, caller: str, amount: int, recipient: str) -> Result[bool]:
        if not self.mint_enabled:
            return self._reject("mint", ErrorCode.MINT_NOT_ENABLED, caller)
        if caller != self._mint_admin:
            return self._reject("mint", ErrorCode.NOT_AUTHORIZED, caller)
        if amount <= 0:
            return self._reject("mint", ErrorCode.INVALID_AMOUNT, caller, str(amount))
        now = self.clock.height
        if self._last_mint_block is not None and now < self._last_mint_block + self._mint_cooldown:
            return self._reject(
                "mint", ErrorCode.MINT_COOLDOWN, caller,
                f"next_mint_at={self._last_mint_block + self._mint_cooldown}",
            )
        if recipient == caller:
            return self._reject("mint", ErrorCode.SELF_TRANSFER, caller)
        if self._is_zero(recipient):
            return self._reject("mint", ErrorCode.ZERO_ADDRESS, caller)
        new_total = self._total_minted + amount
        if new_total > self.params.supply_cap:
            return self._reject(
                "mint", ErrorCode.SUPPLY_CAP_EXCEEDED, caller, f"{new_total}>{self.params.supply_cap}",
            )

        self._balances[recipient] = self.balance_of(recipient) + amount
        self._total_minted = new_total
        self._last_mint_block = now
        bt.logging.info({"reward_token": {
            "event": "mint", "to": recipient, "amount": amount, "total_minted": new_total,
        }})
        return Result.success(True)

    def burn(self, caller: str, amount: int) -> Result[bool]:
        if not self.burn_enabled:
            return self._reject("burn", ErrorCode.BURN_NOT_ENABLED, caller)
        if amount <= 0:
            return self._reject("burn", ErrorCode.INVALID_AMOUNT, caller, str(amount))
        balance = self.balance_of(caller)
        if balance < amount:
            return self._reject("burn", ErrorCode.BURN_EXCEEDS_BALANCE, caller, f"{balance}<{amount}")

        self._balances[caller] = balance - amount
        self._total_burned += amount
        bt.logging.info({"reward_token": {"event": "burn", "from": caller, "amount": amount}})
        return Result.success(True)

    # -- admin --

    def set_mint_admin(self, caller: str, new_admin: str) -> Result[bool]:
        if caller != self._mint_admin:
            return self._reject("set_mint_admin", ErrorCode.NOT_AUTHORIZED, caller)
        if new_admin == caller:
            return self._reject("set_mint_admin", ErrorCode.SELF_ASSIGNMENT, caller)
        if self._is_zero(new_admin):
            return self._reject("set_mint_admin", ErrorCode.ZERO_ADDRESS, caller)

        self._mint_admin = new_admin
        bt.logging.info({"reward_token": {"event": "mint_admin_changed", "previous": caller, "admin": new_admin}})
        return Result.success(True)

    def set_token_uri(self, caller: str, uri: str) -> Result[bool]:
        if caller != self._mint_admin:
            return self._reject("set_token_uri", ErrorCode.NOT_AUTHORIZED, caller)
        self._token_uri = uri
        return Result.success(True)

    def set_mint_cooldown(self, caller: str, blocks: int) -> Result[bool]:
        if caller != self._mint_admin:
            return self._reject("set_mint_cooldown", ErrorCode.NOT_AUTHORIZED, caller)
        if blocks < 1:
            return self._reject("set_mint_cooldown", ErrorCode.INVALID_AMOUNT, caller, str(blocks))
        self._mint_cooldown = blocks
        return Result.success(True)

    def toggle_mint(self, caller: str) -> Result[bool]:
        return self._toggle(caller, "mint_enabled")

    def toggle_burn(self, caller: str) -> Result[bool]:
        return self._toggle(caller, "burn_enabled")

    def toggle_transfer(self, caller: str) -> Result[bool]:
        return self._toggle(caller, "transfer_enabled")

    # -- internals --

    def _toggle(self, caller: str, flag: str) -> Result[bool]:
        if caller != self._mint_admin:
            return self._reject(f"toggle_{flag}", ErrorCode.NOT_AUTHORIZED, caller)
        value = not getattr(self, flag)
        setattr(self, flag, value)
        bt.logging.info({"reward_token": {"event": "toggled", "flag": flag, "value": value}})
        return Result.success(value)

    def _is_zero(self, principal: str) -> bool:
        return principal == self.params.zero_address

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

    def _reject(self, op: str, code: ErrorCode, caller: str, detail: str = "") -> Result:
        bt.logging.debug({"reward_token": {
            "event": f"{op}_rejected", "caller": caller, "reason": code.value, "detail": detail,
        }})
        return Result.failure(code, detail)

    def snapshot(self) -> dict:
        return {
            "mint_admin": self._mint_admin,
            "balances": dict(sorted(self._balances.items())),
            "allowances": {key: v for key, v in sorted(self._allowances.items())},
            "total_minted": self._total_minted,
            "total_burned": self._total_burned,
            "last_mint_block": self._last_mint_block,
            "mint_cooldown": self._mint_cooldown,
            "token_uri": self._token_uri,
            "flags": {
                "mint": self.mint_enabled,
                "burn": self.burn_enabled,
                "transfer": self.transfer_enabled,
            },
        }


__all__ = ["RewardToken"]
