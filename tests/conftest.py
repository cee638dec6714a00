"""Pytest configuration and fixtures."""

import pytest

from zapper.chain.ledger import TokenLedger
from zapper.chain.state import Chain, ManualClock
from tests.helpers.constants import START_TIME
from tests.helpers.factories import World, build_world, register_tokens


@pytest.fixture
def world() -> World:
    """Funded chain with pools, vault and a sealed router."""
    return build_world()


@pytest.fixture
def unsealed_world() -> World:
    """Same chain, but the router's approvals are not sealed yet."""
    return build_world(seal=False)


@pytest.fixture
def router(world: World):
    return world.router


@pytest.fixture
def ledger() -> TokenLedger:
    """Empty ledger with the test tokens registered."""
    ledger = TokenLedger(chain_id=1)
    register_tokens(ledger)
    return ledger


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START_TIME)


@pytest.fixture
def chain(ledger: TokenLedger, clock: ManualClock) -> Chain:
    return Chain(ledger, clock)
