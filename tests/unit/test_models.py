"""Tests for zap request models."""

import pytest
from pydantic import ValidationError

from zapper.models.zap import PermitAuthorization, PoolLegDescriptor, VaultLegDescriptor, ZapOutRequest
from tests.helpers import DAI, EP_3CRV, ROUTER, THREE_CRV, THREE_CRV_POOL, USDC, USDT, VAULT_POOL_3CRV


def three_pool_leg() -> PoolLegDescriptor:
    return PoolLegDescriptor(pool=THREE_CRV_POOL, basket_assets=(DAI, USDC, USDT), lp_token=THREE_CRV)


class TestPoolLegDescriptor:
    def test_from_aliases(self):
        leg = PoolLegDescriptor.model_validate(
            {
                "poolId": THREE_CRV_POOL.upper().replace("0X", "0x"),
                "basketAssets": [DAI, USDC, USDT],
                "lpToken": THREE_CRV,
            }
        )
        assert leg.pool == THREE_CRV_POOL
        assert leg.basket_assets == (DAI, USDC, USDT)

    def test_index_of(self):
        leg = three_pool_leg()
        assert leg.n_coins == 3
        assert leg.index_of(USDC) == 1
        assert leg.index_of(THREE_CRV) == -1

    @pytest.mark.parametrize("basket", [(DAI,), (DAI, USDC, USDT, THREE_CRV)])
    def test_basket_size(self, basket):
        with pytest.raises(ValidationError):
            PoolLegDescriptor(pool=THREE_CRV_POOL, basket_assets=basket, lp_token=THREE_CRV)

    def test_invalid_address(self):
        with pytest.raises(ValidationError):
            PoolLegDescriptor(pool="0x1234", basket_assets=(DAI, USDC), lp_token=THREE_CRV)

    def test_frozen(self):
        leg = three_pool_leg()
        with pytest.raises(ValidationError):
            leg.pool = DAI


class TestZapOutRequest:
    def _request(self, **overrides) -> dict:
        data = {
            "pool_leg": three_pool_leg(),
            "vault_leg": VaultLegDescriptor(
                vault_pool_id=VAULT_POOL_3CRV, lp_token=THREE_CRV, principal_token=EP_3CRV
            ),
            "principal_amount_in": 10**18,
            "output_asset": DAI,
            "output_asset_index": 0,
            "min_output": 0,
            "deadline": 1,
        }
        data.update(overrides)
        return data

    def test_valid(self):
        request = ZapOutRequest(**self._request())
        assert not request.index_is_uint256

    def test_negative_index(self):
        with pytest.raises(ValidationError):
            ZapOutRequest(**self._request(output_asset_index=-1))

    def test_negative_amount(self):
        with pytest.raises(ValidationError):
            ZapOutRequest(**self._request(principal_amount_in=-1))


class TestPermitAuthorization:
    def _permit(self, **overrides) -> dict:
        data = {
            "asset": USDC,
            "spender": ROUTER,
            "authorizedAmount": 1,
            "expiration": 1,
            "v": 27,
            "r": "0x" + "01" * 32,
            "s": "0x" + "02" * 32,
        }
        data.update(overrides)
        return data

    def test_from_aliases(self):
        permit = PermitAuthorization.model_validate(self._permit())
        assert permit.token == USDC
        assert permit.amount == 1

    def test_v_range(self):
        with pytest.raises(ValidationError):
            PermitAuthorization.model_validate(self._permit(v=256))

    def test_r_length(self):
        with pytest.raises(ValidationError):
            PermitAuthorization.model_validate(self._permit(r="0x01"))
