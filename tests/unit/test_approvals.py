"""Tests for the router's standing approval registry."""

import pytest

from zapper.approvals import ApprovalRegistry
from zapper.chain.ledger import TokenLedger
from zapper.constants import MAX_UINT256
from zapper.errors import ApprovalSetupError, LegExecutionFailed, Unauthorized
from tests.helpers import DAI, ETH_CONSTANT, OTHER, OWNER, ROUTER, THREE_CRV_POOL, USDT


@pytest.fixture
def registry(ledger: TokenLedger) -> ApprovalRegistry:
    return ApprovalRegistry(ledger, ROUTER, OWNER)


class TestSetApprovalsFor:
    def test_owner_sets_allowances(self, registry: ApprovalRegistry, ledger: TokenLedger):
        registry.set_approvals_for(OWNER, [DAI, USDT], [THREE_CRV_POOL, THREE_CRV_POOL], [MAX_UINT256, 5])
        assert ledger.allowance(DAI, ROUTER, THREE_CRV_POOL) == MAX_UINT256
        assert registry.allowance(USDT, THREE_CRV_POOL) == 5

    def test_unauthorized_caller(self, registry: ApprovalRegistry):
        with pytest.raises(Unauthorized):
            registry.set_approvals_for(OTHER, [DAI], [THREE_CRV_POOL], [1])

    def test_authorized_caller(self, registry: ApprovalRegistry):
        registry.authorize(OWNER, OTHER)
        registry.set_approvals_for(OTHER, [DAI], [THREE_CRV_POOL], [1])
        assert registry.allowance(DAI, THREE_CRV_POOL) == 1

    def test_deauthorized_caller(self, registry: ApprovalRegistry):
        registry.authorize(OWNER, OTHER)
        registry.deauthorize(OWNER, OTHER)
        assert not registry.is_authorized(OTHER)

    def test_only_owner_authorizes(self, registry: ApprovalRegistry):
        with pytest.raises(Unauthorized):
            registry.authorize(OTHER, OTHER)

    def test_length_mismatch(self, registry: ApprovalRegistry):
        with pytest.raises(ApprovalSetupError):
            registry.set_approvals_for(OWNER, [DAI, USDT], [THREE_CRV_POOL], [1, 1])

    def test_token_rejection_surfaces(self, registry: ApprovalRegistry):
        registry.set_approvals_for(OWNER, [USDT], [THREE_CRV_POOL], [5])
        with pytest.raises(ApprovalSetupError):
            registry.set_approvals_for(OWNER, [USDT], [THREE_CRV_POOL], [6])

    def test_native_currency_rejected(self, registry: ApprovalRegistry):
        with pytest.raises(ApprovalSetupError):
            registry.set_approvals_for(OWNER, [ETH_CONSTANT], [THREE_CRV_POOL], [1])


class TestSealing:
    def test_sealed_registry_is_read_only(self, registry: ApprovalRegistry):
        registry.seal(OWNER)
        assert registry.is_sealed
        with pytest.raises(ApprovalSetupError):
            registry.set_approvals_for(OWNER, [DAI], [THREE_CRV_POOL], [1])

    def test_only_owner_seals(self, registry: ApprovalRegistry):
        with pytest.raises(Unauthorized):
            registry.seal(OTHER)
        assert not registry.is_sealed

    def test_set_owner(self, registry: ApprovalRegistry):
        registry.set_owner(OWNER, OTHER)
        assert registry.owner == OTHER
        registry.seal(OTHER)
        assert registry.is_sealed


class TestRequire:
    def test_require_passes(self, registry: ApprovalRegistry):
        registry.set_approvals_for(OWNER, [DAI], [THREE_CRV_POOL], [10])
        registry.require(DAI, THREE_CRV_POOL, 10)

    def test_require_fails_below_amount(self, registry: ApprovalRegistry):
        registry.set_approvals_for(OWNER, [DAI], [THREE_CRV_POOL], [10])
        with pytest.raises(LegExecutionFailed):
            registry.require(DAI, THREE_CRV_POOL, 11)
