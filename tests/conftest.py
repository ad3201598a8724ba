"""Shared fixtures: one clock at block 1000 and the components built on it."""

import pytest

from gridstake.ledger.registry import ForecastRegistry
from gridstake.ledger.stake import StakeLedger
from gridstake.market import ForecastMarket
from gridstake.scoring.engine import AccuracyEngine
from gridstake.shared.clock import BlockClock
from gridstake.token.reward_token import RewardToken

ADMIN = "gridstake.admin"
ZERO = "SP000000000000000000002Q6VF78"


@pytest.fixture
def clock():
    return BlockClock(1000)


@pytest.fixture
def ledger(clock):
    return StakeLedger(clock, admin=ADMIN, zero_address=ZERO)


@pytest.fixture
def registry(clock, ledger):
    return ForecastRegistry(clock, ledger)


@pytest.fixture
def engine(clock, registry):
    return AccuracyEngine(clock, registry)


@pytest.fixture
def token(clock):
    return RewardToken(clock, admin=ADMIN)


@pytest.fixture
def market():
    return ForecastMarket(start_height=1000)
