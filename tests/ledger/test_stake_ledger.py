"""Tests for stake custody, lock windows and slashing."""

from gridstake.shared.errors import ErrorCode, ErrorKind

ADMIN = "gridstake.admin"
ZERO = "SP000000000000000000002Q6VF78"


class TestStake:

    def test_stakes_successfully(self, ledger):
        result = ledger.stake("alice", 2_000_000)
        assert result.ok
        assert result.value is True
        assert ledger.stake_of("alice") == 2_000_000

    def test_records_transfer_to_custody(self, ledger):
        ledger.stake("alice", 2_000_000)
        (event,) = ledger.transfers
        assert event.sender == "alice"
        assert event.recipient == ledger.custody
        assert event.amount == 2_000_000
        assert event.block_height == 1000

    def test_rejects_stake_below_minimum(self, ledger):
        result = ledger.stake("alice", 500_000)
        assert not result.ok
        assert result.error is ErrorCode.INVALID_STAKE_AMOUNT
        assert result.kind is ErrorKind.INVALID_INPUT
        assert ledger.stake_of("alice") == 0
        assert ledger.transfers == ()

    def test_minimum_is_inclusive(self, ledger):
        assert ledger.stake("alice", 1_000_000).ok

    def test_stakes_accumulate(self, ledger):
        ledger.stake("alice", 1_000_000)
        ledger.stake("alice", 3_000_000)
        assert ledger.stake_of("alice") == 4_000_000
        assert len(ledger.transfers) == 2

    def test_get_stake_is_a_copy(self, ledger):
        ledger.stake("alice", 2_000_000)
        record = ledger.get_stake("alice")
        record.amount = 0
        assert ledger.stake_of("alice") == 2_000_000

    def test_unknown_principal_has_zero_stake(self, ledger):
        record = ledger.get_stake("nobody")
        assert record.amount == 0
        assert record.lock_until is None


class TestUnstake:

    def test_unstakes_without_lock(self, ledger):
        ledger.stake("alice", 2_000_000)
        result = ledger.unstake("alice", 1_000_000)
        assert result.ok
        assert ledger.stake_of("alice") == 1_000_000
        last = ledger.transfers[-1]
        assert (last.sender, last.recipient, last.amount) == (ledger.custody, "alice", 1_000_000)

    def test_unstakes_full_balance(self, ledger):
        ledger.stake("alice", 2_000_000)
        assert ledger.unstake("alice", 2_000_000).ok
        assert ledger.stake_of("alice") == 0

    def test_rejects_more_than_balance(self, ledger):
        ledger.stake("alice", 2_000_000)
        result = ledger.unstake("alice", 2_000_001)
        assert result.error is ErrorCode.INSUFFICIENT_STAKE
        assert ledger.stake_of("alice") == 2_000_000

    def test_rejects_zero_amount(self, ledger):
        ledger.stake("alice", 2_000_000)
        assert ledger.unstake("alice", 0).error is ErrorCode.INVALID_STAKE_AMOUNT

    def test_rejects_unstake_during_lock(self, ledger):
        ledger.stake("alice", 2_000_000)
        ledger.slash(ADMIN, "alice")
        result = ledger.unstake("alice", 1_000_000)
        assert result.error is ErrorCode.LOCK_PERIOD
        assert result.kind is ErrorKind.TIMING_NOT_ELAPSED
        assert ledger.stake_of("alice") == 2_000_000

    def test_unstakes_after_lock_period(self, clock, ledger):
        ledger.stake("alice", 2_000_000)
        ledger.slash(ADMIN, "alice")

        clock.advance_to(1000 + 2015)
        assert ledger.unstake("alice", 1_000_000).error is ErrorCode.LOCK_PERIOD

        clock.advance_to(1000 + 2016)
        assert ledger.unstake("alice", 1_000_000).ok
        assert ledger.stake_of("alice") == 1_000_000

    def test_balance_checked_before_lock(self, ledger):
        ledger.stake("alice", 2_000_000)
        ledger.slash(ADMIN, "alice")
        assert ledger.unstake("alice", 5_000_000).error is ErrorCode.INSUFFICIENT_STAKE


class TestSlash:

    def test_rejects_slash_by_non_verifier(self, ledger):
        ledger.stake("alice", 2_000_000)
        result = ledger.slash("mallory", "alice")
        assert result.error is ErrorCode.NOT_AUTHORIZED
        assert not ledger.is_locked("alice")

    def test_slash_keeps_balance(self, ledger):
        ledger.stake("alice", 2_000_000)
        assert ledger.slash(ADMIN, "alice").ok
        assert ledger.stake_of("alice") == 2_000_000
        assert ledger.get_stake("alice").lock_until == 1000
        assert ledger.unlocks_at("alice") == 1000 + 2016

    def test_reslash_extends_lock(self, clock, ledger):
        ledger.stake("alice", 2_000_000)
        ledger.slash(ADMIN, "alice")
        clock.advance_to(2500)
        ledger.slash(ADMIN, "alice")
        assert ledger.unlocks_at("alice") == 2500 + 2016

    def test_slash_unstaked_principal(self, ledger):
        assert ledger.slash(ADMIN, "ghost").ok
        assert ledger.stake_of("ghost") == 0
        assert ledger.is_locked("ghost")


class TestVerifier:

    def test_initial_verifier_is_admin(self, ledger):
        assert ledger.verifier == ADMIN

    def test_hand_over(self, ledger):
        assert ledger.set_verifier(ADMIN, "verifier").ok
        assert ledger.verifier == "verifier"
        assert ledger.slash(ADMIN, "alice").error is ErrorCode.NOT_AUTHORIZED
        assert ledger.slash("verifier", "alice").ok

    def test_rejects_non_admin_change(self, ledger):
        result = ledger.set_verifier("alice", "alice")
        assert result.error is ErrorCode.NOT_AUTHORIZED
        assert ledger.verifier == ADMIN

    def test_rejects_zero_address(self, ledger):
        assert ledger.set_verifier(ADMIN, ZERO).error is ErrorCode.ZERO_ADDRESS
        assert ledger.set_verifier(ADMIN, "").error is ErrorCode.ZERO_ADDRESS
