"""Tests for route planning."""

import pytest

from zapper.errors import InvalidBasket, InvalidRequest
from zapper.routing.plan import (
    plan_swap_3crv_and_zap_in,
    plan_zap_in,
    plan_zap_out,
    plan_zap_out_and_swap_3crv,
)
from zapper.routing.types import DepositLeg, RouteShape, VaultSwapLeg, WithdrawLeg
from tests.helpers import (
    DAI,
    EP_3CRV,
    EP_LUSD3CRV,
    ETH_CONSTANT,
    LUSD,
    LUSD3CRV,
    THREE_CRV,
    USDT,
    World,
    make_zap_in,
    make_zap_out,
    units,
)


class TestPlanZapIn:
    def test_legs(self, world: World):
        request = make_zap_in(world.three_pool_leg, [units(5000, DAI), 0, 0], world.vault_3crv)
        plan = plan_zap_in(request, world.pools)

        assert plan.shape == RouteShape.ZAP_IN
        deposit, swap = plan.legs
        assert isinstance(deposit, DepositLeg)
        assert deposit.amounts == (units(5000, DAI), 0, 0)
        assert isinstance(swap, VaultSwapLeg)
        assert (swap.asset_in, swap.asset_out, swap.amount_in) == (THREE_CRV, EP_3CRV, None)
        assert plan.inputs == ((DAI, units(5000, DAI)),)
        assert plan.output_asset == EP_3CRV
        assert plan.native_value == 0
        assert not plan.intermediate_floor

    def test_all_zero_basket(self, world: World):
        request = make_zap_in(world.three_pool_leg, [0, 0, 0], world.vault_3crv)
        with pytest.raises(InvalidBasket):
            plan_zap_in(request, world.pools)

    def test_empty_basket(self, world: World):
        request = make_zap_in(world.three_pool_leg, [], world.vault_3crv)
        with pytest.raises(InvalidBasket):
            plan_zap_in(request, world.pools)

    def test_basket_length_mismatch(self, world: World):
        request = make_zap_in(world.three_pool_leg, [units(1, DAI), 0], world.vault_3crv)
        with pytest.raises(InvalidBasket):
            plan_zap_in(request, world.pools)

    def test_vault_leg_must_trade_pool_lp(self, world: World):
        request = make_zap_in(world.three_pool_leg, [units(1, DAI), 0, 0], world.vault_lusd)
        with pytest.raises(InvalidRequest):
            plan_zap_in(request, world.pools)

    def test_native_value(self, world: World):
        request = make_zap_in(world.steth_leg, [units(2, ETH_CONSTANT), 0], world.vault_steth)
        plan = plan_zap_in(request, world.pools)
        assert plan.native_value == units(2, ETH_CONSTANT)


class TestPlanZapOut:
    def test_legs(self, world: World):
        request = make_zap_out(world.three_pool_leg, world.vault_3crv, units(100, EP_3CRV), 2)
        plan = plan_zap_out(request, world.pools)

        swap, withdraw = plan.legs
        assert isinstance(swap, VaultSwapLeg)
        assert swap.amount_in == units(100, EP_3CRV)
        assert isinstance(withdraw, WithdrawLeg)
        assert withdraw.output_index == 2
        assert plan.output_asset == USDT
        assert plan.inputs == ((EP_3CRV, units(100, EP_3CRV)),)
        assert plan.intermediate_floor

    def test_output_asset_must_match_index(self, world: World):
        request = make_zap_out(world.three_pool_leg, world.vault_3crv, 1, 0).model_copy(
            update={"output_asset": USDT}
        )
        with pytest.raises(InvalidRequest):
            plan_zap_out(request, world.pools)

    def test_index_outside_basket(self, world: World):
        request = make_zap_out(world.three_pool_leg, world.vault_3crv, 1, 0).model_copy(
            update={"output_asset_index": 3}
        )
        with pytest.raises(InvalidRequest):
            plan_zap_out(request, world.pools)

    def test_zero_principal(self, world: World):
        request = make_zap_out(world.three_pool_leg, world.vault_3crv, 0, 0)
        with pytest.raises(InvalidRequest):
            plan_zap_out(request, world.pools)


class TestPlanSwap3CrvAndZapIn:
    def test_legs(self, world: World):
        request = make_zap_in(world.lusd_leg, [units(100, LUSD), units(50, THREE_CRV)], world.vault_lusd)
        base = [units(1000, DAI), 0, 0]
        plan = plan_swap_3crv_and_zap_in(request, base, world.three_pool_leg, world.pools)

        base_deposit, deposit, swap = plan.legs
        assert base_deposit.pool == world.three_pool_leg
        assert deposit.carry_index == 1
        assert deposit.basket_for(7) == (units(100, LUSD), units(50, THREE_CRV) + 7)
        assert swap.asset_out == EP_LUSD3CRV
        assert dict(plan.inputs) == {
            DAI: units(1000, DAI),
            LUSD: units(100, LUSD),
            THREE_CRV: units(50, THREE_CRV),
        }

    def test_primary_basket_may_be_empty(self, world: World):
        request = make_zap_in(world.lusd_leg, [0, 0], world.vault_lusd)
        plan = plan_swap_3crv_and_zap_in(request, [units(1, DAI), 0, 0], world.three_pool_leg, world.pools)
        assert plan.inputs == ((DAI, units(1, DAI)),)

    def test_base_basket_must_not_be_empty(self, world: World):
        request = make_zap_in(world.lusd_leg, [units(1, LUSD), 0], world.vault_lusd)
        with pytest.raises(InvalidBasket):
            plan_swap_3crv_and_zap_in(request, [0, 0, 0], world.three_pool_leg, world.pools)

    def test_requires_base_pool(self, world: World):
        request = make_zap_in(world.lusd_leg, [0, 0], world.vault_lusd)
        with pytest.raises(InvalidRequest):
            plan_swap_3crv_and_zap_in(request, [units(1, DAI), 0, 0], None, world.pools)

    def test_primary_basket_must_hold_base_lp(self, world: World):
        request = make_zap_in(world.steth_leg, [0, 0], world.vault_steth)
        with pytest.raises(InvalidRequest):
            plan_swap_3crv_and_zap_in(request, [units(1, DAI), 0, 0], world.three_pool_leg, world.pools)


class TestPlanZapOutAndSwap3Crv:
    def test_legs(self, world: World):
        request = make_zap_out(world.lusd_leg, world.vault_lusd, units(100, EP_LUSD3CRV), 1)
        plan = plan_zap_out_and_swap_3crv(request, 0, world.three_pool_leg, world.pools)

        swap, withdraw, base_withdraw = plan.legs
        assert swap.asset_out == LUSD3CRV
        assert withdraw.output_index == 1
        assert base_withdraw.pool == world.three_pool_leg
        assert plan.output_asset == DAI
        assert not plan.intermediate_floor

    def test_output_must_be_base_lp(self, world: World):
        request = make_zap_out(world.lusd_leg, world.vault_lusd, units(100, EP_LUSD3CRV), 0)
        with pytest.raises(InvalidRequest):
            plan_zap_out_and_swap_3crv(request, 0, world.three_pool_leg, world.pools)

    def test_base_index_outside_basket(self, world: World):
        request = make_zap_out(world.lusd_leg, world.vault_lusd, units(100, EP_LUSD3CRV), 1)
        with pytest.raises(InvalidRequest):
            plan_zap_out_and_swap_3crv(request, 3, world.three_pool_leg, world.pools)
