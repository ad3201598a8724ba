"""Result type and error taxonomy shared by every ledger component.

Operations never raise on bad input. They return a ``Result`` whose
``error`` is a fine-grained ``ErrorCode``; each code maps onto one stable
``ErrorKind`` so callers can branch on the category without caring which
component produced it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Stable failure categories."""

    NOT_AUTHORIZED = "NotAuthorized"
    NOT_FOUND = "NotFound"
    INVALID_INPUT = "InvalidInput"
    ALREADY_DONE = "AlreadyDone"
    TIMING_NOT_ELAPSED = "TimingNotElapsed"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    STATE_CONFLICT = "StateConflict"


class ErrorCode(str, Enum):
    """Specific failure reasons reported by the components."""

    # identity / permissions
    NOT_AUTHORIZED = "NotAuthorized"
    ORACLE_NOT_SET = "OracleNotSet"
    TRANSFER_NOT_ENABLED = "TransferNotEnabled"
    MINT_NOT_ENABLED = "MintNotEnabled"
    BURN_NOT_ENABLED = "BurnNotEnabled"

    # missing records
    FORECAST_NOT_FOUND = "ForecastNotFound"
    ACTUAL_NOT_SET = "ActualNotSet"
    NO_FORECASTS = "NoForecasts"

    # out-of-range input
    INVALID_REGION = "InvalidRegion"
    INVALID_ENERGY_VALUE = "InvalidEnergyValue"
    INVALID_CONFIDENCE = "InvalidConfidence"
    INVALID_TIMESTAMP = "InvalidTimestamp"
    INVALID_STAKE_AMOUNT = "InvalidStakeAmount"
    INSUFFICIENT_STAKE = "InsufficientStake"
    STAKE_INSUFFICIENT = "StakeInsufficient"
    INVALID_AMOUNT = "InvalidAmount"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    INSUFFICIENT_ALLOWANCE = "InsufficientAllowance"
    BURN_EXCEEDS_BALANCE = "BurnExceedsBalance"
    SUPPLY_CAP_EXCEEDED = "SupplyCapExceeded"

    # exactly-once transitions
    SCORE_ALREADY_COMPUTED = "ScoreAlreadyComputed"
    ORACLE_ALREADY_SET = "OracleAlreadySet"
    ALREADY_INITIALIZED = "AlreadyInitialized"
    REWARDS_ALREADY_DISTRIBUTED = "RewardsAlreadyDistributed"

    # lock windows
    LOCK_PERIOD = "LockPeriod"
    VERIFICATION_LOCKED = "VerificationLocked"
    MINT_COOLDOWN = "MintCooldown"
    REWARDS_PENDING = "RewardsPending"

    # capacity
    BUCKET_FULL = "BucketFull"

    # conflicting parties
    SELF_TRANSFER = "SelfTransfer"
    SELF_APPROVAL = "SelfApproval"
    SELF_ASSIGNMENT = "SelfAssignment"
    ZERO_ADDRESS = "ZeroAddress"

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_CODE[self]


_KIND_BY_CODE: dict[ErrorCode, ErrorKind] = {
    ErrorCode.NOT_AUTHORIZED: ErrorKind.NOT_AUTHORIZED,
    ErrorCode.ORACLE_NOT_SET: ErrorKind.NOT_AUTHORIZED,
    ErrorCode.TRANSFER_NOT_ENABLED: ErrorKind.NOT_AUTHORIZED,
    ErrorCode.MINT_NOT_ENABLED: ErrorKind.NOT_AUTHORIZED,
    ErrorCode.BURN_NOT_ENABLED: ErrorKind.NOT_AUTHORIZED,
    ErrorCode.FORECAST_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.ACTUAL_NOT_SET: ErrorKind.NOT_FOUND,
    ErrorCode.NO_FORECASTS: ErrorKind.NOT_FOUND,
    ErrorCode.INVALID_REGION: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_ENERGY_VALUE: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_CONFIDENCE: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_TIMESTAMP: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_STAKE_AMOUNT: ErrorKind.INVALID_INPUT,
    ErrorCode.INSUFFICIENT_STAKE: ErrorKind.INVALID_INPUT,
    ErrorCode.STAKE_INSUFFICIENT: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_AMOUNT: ErrorKind.INVALID_INPUT,
    ErrorCode.INSUFFICIENT_BALANCE: ErrorKind.INVALID_INPUT,
    ErrorCode.INSUFFICIENT_ALLOWANCE: ErrorKind.INVALID_INPUT,
    ErrorCode.BURN_EXCEEDS_BALANCE: ErrorKind.INVALID_INPUT,
    ErrorCode.SUPPLY_CAP_EXCEEDED: ErrorKind.INVALID_INPUT,
    ErrorCode.SCORE_ALREADY_COMPUTED: ErrorKind.ALREADY_DONE,
    ErrorCode.ORACLE_ALREADY_SET: ErrorKind.ALREADY_DONE,
    ErrorCode.ALREADY_INITIALIZED: ErrorKind.ALREADY_DONE,
    ErrorCode.REWARDS_ALREADY_DISTRIBUTED: ErrorKind.ALREADY_DONE,
    ErrorCode.LOCK_PERIOD: ErrorKind.TIMING_NOT_ELAPSED,
    ErrorCode.VERIFICATION_LOCKED: ErrorKind.TIMING_NOT_ELAPSED,
    ErrorCode.MINT_COOLDOWN: ErrorKind.TIMING_NOT_ELAPSED,
    ErrorCode.REWARDS_PENDING: ErrorKind.TIMING_NOT_ELAPSED,
    ErrorCode.BUCKET_FULL: ErrorKind.CAPACITY_EXCEEDED,
    ErrorCode.SELF_TRANSFER: ErrorKind.STATE_CONFLICT,
    ErrorCode.SELF_APPROVAL: ErrorKind.STATE_CONFLICT,
    ErrorCode.SELF_ASSIGNMENT: ErrorKind.STATE_CONFLICT,
    ErrorCode.ZERO_ADDRESS: ErrorKind.STATE_CONFLICT,
}


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a ledger operation: either a payload or an error code."""

    ok: bool
    value: T | None = None
    error: ErrorCode | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorCode, detail: str = "") -> Result[T]:
        return cls(ok=False, error=error, detail=detail)

    def as_dict(self) -> dict:
        """Flat representation for logs and replay reports."""
        value = self.value
        if hasattr(value, "model_dump"):
            value = value.model_dump(mode="json")
        elif hasattr(value, "as_dict"):
            value = value.as_dict()
        return {
            "ok": self.ok,
            "value": value,
            "error": self.error.value if self.error is not None else None,
            "kind": self.kind.value if self.kind is not None else None,
            "detail": self.detail,
        }


__all__ = ["ErrorCode", "ErrorKind", "Result"]
